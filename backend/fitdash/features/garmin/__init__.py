"""
Garmin integration module.

Usage:
    from fitdash.features.garmin import GarminCredential, CredentialCipher
    from fitdash.features.garmin.connection import GarminConnection

Models:
- GarminCredential: Stored Garmin Connect login
"""

from .models import GarminCredential
from .schemas import (
    GarminAuthAction,
    GarminConnectRequest,
    GarminCredentialResponse,
    GarminSyncRequest,
)
from .crypto import CredentialCipher, CredentialCipherUnavailable, normalize_email
from .repository import GarminCredentialRepository

__all__ = [
    "GarminCredential",
    "GarminAuthAction",
    "GarminConnectRequest",
    "GarminCredentialResponse",
    "GarminSyncRequest",
    "CredentialCipher",
    "CredentialCipherUnavailable",
    "normalize_email",
    "GarminCredentialRepository",
]
