"""
API Router v1

Combines all route modules.
"""

from fastapi import APIRouter

from fitdash.api.v1.routes import auth, strava, garmin

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["Auth"])
api_router.include_router(strava.router, tags=["Strava"])
api_router.include_router(garmin.router, tags=["Garmin"])
