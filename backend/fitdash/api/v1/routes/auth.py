"""
Session Routes

Login itself happens at the identity service; the session context is
opened on the first authenticated request and closed here.
"""

import logging

from fastapi import APIRouter, Depends

from fitdash.features.auth import AuthenticatedUser, get_current_user
from fitdash.features.connections import sessions

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/logout")
async def logout(user: AuthenticatedUser = Depends(get_current_user)):
    """Tear down the caller's session context."""
    closed = sessions.close(user.id)
    return {"status": "logged_out", "had_session": closed}
