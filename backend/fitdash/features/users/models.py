"""
User profile model.

One row per dashboard user. The primary key is the user id issued by the
identity service; the Strava columns form the token store.
"""

from datetime import datetime

from sqlalchemy import Column, String, DateTime, BigInteger, Text

from fitdash.models.base import Base


class Profile(Base):
    """
    Dashboard user profile with the linked Strava identity.

    Strava fields are all NULL while the account is not linked.
    Tokens should be encrypted at rest in production.
    """

    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True)
    email = Column(String(255), nullable=True)

    # Strava athlete info
    strava_athlete_id = Column(BigInteger, nullable=True, index=True)

    # OAuth token triple
    strava_access_token = Column(Text, nullable=True)
    strava_refresh_token = Column(Text, nullable=True)
    strava_token_expires_at = Column(BigInteger, nullable=True)  # Unix timestamp

    # Display identity
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    profile_picture = Column(Text, nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def strava_connected(self) -> bool:
        return self.strava_athlete_id is not None

    @property
    def display_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()

    def __repr__(self):
        return f"<Profile {self.id} athlete_id={self.strava_athlete_id}>"
