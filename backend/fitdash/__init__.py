"""FitDash: fitness dashboard API with Strava and Garmin connections."""

__version__ = "0.1.0"
