"""
Credential encryption.

Passwords are encrypted with Fernet (AES-128-CBC + HMAC-SHA256), so a
tampered ciphertext fails to decrypt instead of yielding garbage.
"""

import re
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken

from fitdash.config import settings
from fitdash.shared.exceptions import FitDashError


class CredentialCipherUnavailable(FitDashError):
    """No encryption key configured."""

    status_code = 503


class CredentialCipher:
    """
    Symmetric cipher for stored provider passwords.

    Usage:
        cipher = CredentialCipher.from_settings()
        token = cipher.encrypt("secret")
    """

    def __init__(self, key: str | bytes):
        self._fernet = Fernet(key)

    @classmethod
    def from_settings(cls, key: Optional[str] = None) -> "CredentialCipher":
        key = key or settings.credential_encryption_key
        if not key:
            raise CredentialCipherUnavailable("Credential encryption is not configured")
        return cls(key)

    def encrypt(self, plaintext: str) -> str:
        return self._fernet.encrypt(plaintext.encode("utf-8")).decode("ascii")

    def decrypt(self, token: str) -> str:
        """
        Raises:
            InvalidToken: If the ciphertext was tampered with or the key differs
        """
        return self._fernet.decrypt(token.encode("ascii")).decode("utf-8")


def normalize_email(email: str) -> str:
    """Correlation key: email lower-cased with '@' and '.' removed."""
    return re.sub(r"[@.]", "", email).lower()

