"""
User profile module.

Usage:
    from fitdash.features.users import Profile, ProfileRepository

Models:
- Profile: Dashboard user with linked Strava identity and tokens

Repositories:
- ProfileRepository: Token store access
"""

from .models import Profile
from .schemas import ProfileResponse
from .repository import ProfileRepository

__all__ = [
    "Profile",
    "ProfileResponse",
    "ProfileRepository",
]
