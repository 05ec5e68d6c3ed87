"""
Garmin credential model.

Garmin Connect has no OAuth for personal use, so the account email and
an encrypted password are stored. normalized_email is the correlation
key sync requests refer to.
"""

from datetime import datetime

from sqlalchemy import Column, String, DateTime, Integer, Text

from fitdash.models.base import Base


class GarminCredential(Base):
    """Stored Garmin Connect login for one user."""

    __tablename__ = "garmin_credentials"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), unique=True, nullable=False)

    email = Column(String(255), nullable=False)
    password_encrypted = Column(Text, nullable=False)  # Fernet token
    normalized_email = Column(String(255), nullable=False, index=True)

    last_sync_at = Column(DateTime, nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<GarminCredential user_id={self.user_id} email={self.email}>"
