"""
Tests for Garmin credential storage and the Garmin connection.
"""

import pytest
from cryptography.fernet import Fernet, InvalidToken

from fitdash.features.connections import ConnectionState, Provider
from fitdash.features.garmin import (
    CredentialCipher,
    CredentialCipherUnavailable,
    GarminConnectRequest,
    GarminCredentialRepository,
    GarminSyncRequest,
    normalize_email,
)
from fitdash.features.garmin.connection import GarminConnection
from fitdash.shared.exceptions import NotConnectedError, ValidationError


# =============================================================================
# Helpers
# =============================================================================

class TestNormalizeEmail:

    def test_strips_at_and_dots_and_lowercases(self):
        assert normalize_email("Jane.Doe@Example.com") == "janedoeexamplecom"

    def test_plus_and_dash_kept(self):
        assert normalize_email("a-b+c@x.io") == "a-b+cxio"


class TestCredentialCipher:

    def test_round_trip(self, cipher):
        token = cipher.encrypt("hunter2")

        assert token != "hunter2"
        assert cipher.decrypt(token) == "hunter2"

    def test_other_key_cannot_decrypt(self, cipher):
        token = cipher.encrypt("hunter2")
        other = CredentialCipher(Fernet.generate_key())

        with pytest.raises(InvalidToken):
            other.decrypt(token)

    def test_missing_key(self, monkeypatch):
        from fitdash.config import settings

        monkeypatch.setattr(settings, "credential_encryption_key", None)

        with pytest.raises(CredentialCipherUnavailable) as exc_info:
            CredentialCipher.from_settings()

        assert exc_info.value.status_code == 503


# =============================================================================
# Connection
# =============================================================================

class TestGarminConnection:

    @pytest.mark.asyncio
    async def test_connect_stores_encrypted_password(self, db, session, cipher):
        connection = GarminConnection(db, cipher)

        result = await connection.connect(
            session, GarminConnectRequest(email="Jane.Doe@Example.com", password="hunter2")
        )

        assert result.ok is True
        assert result.state == ConnectionState.CONNECTED
        credential = await GarminCredentialRepository(db).get_by_user_id(session.user_id)
        assert credential.email == "Jane.Doe@Example.com"
        assert credential.normalized_email == "janedoeexamplecom"
        assert credential.password_encrypted != "hunter2"
        assert cipher.decrypt(credential.password_encrypted) == "hunter2"
        assert "password" not in result.to_payload()["credential"]

    @pytest.mark.asyncio
    async def test_connect_again_replaces_credential(self, db, session, cipher):
        connection = GarminConnection(db, cipher)
        await connection.connect(session, GarminConnectRequest(email="old@example.com", password="a"))

        await connection.connect(session, GarminConnectRequest(email="new@example.com", password="b"))

        credential = await GarminCredentialRepository(db).get_by_user_id(session.user_id)
        assert credential.email == "new@example.com"
        assert cipher.decrypt(credential.password_encrypted) == "b"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("email,password", [(None, "pw"), ("a@b.c", None), ("", "")])
    async def test_connect_missing_fields(self, db, session, cipher, email, password):
        connection = GarminConnection(db, cipher)

        with pytest.raises(ValidationError) as exc_info:
            await connection.connect(session, GarminConnectRequest(email=email, password=password))

        assert exc_info.value.message == "Missing required parameters"
        assert await GarminCredentialRepository(db).get_by_user_id(session.user_id) is None

    @pytest.mark.asyncio
    async def test_sync_stamps_last_sync(self, db, session, cipher):
        connection = GarminConnection(db, cipher)
        await connection.connect(session, GarminConnectRequest(email="jane@example.com", password="pw"))

        result = await connection.sync(session, GarminSyncRequest(normalized_email="janeexamplecom"))

        assert result.ok is True
        assert result.notice.title == "Sync Started"
        assert result.data["last_sync_at"]
        assert session.state(Provider.GARMIN) == ConnectionState.CONNECTED
        credential = await GarminCredentialRepository(db).get_by_user_id(session.user_id)
        assert credential.last_sync_at is not None

    @pytest.mark.asyncio
    async def test_sync_requires_key(self, db, session, cipher):
        with pytest.raises(ValidationError) as exc_info:
            await GarminConnection(db, cipher).sync(session, GarminSyncRequest())

        assert exc_info.value.message == "Missing normalized_email parameter"

    @pytest.mark.asyncio
    async def test_sync_unknown_key(self, db, session, cipher):
        connection = GarminConnection(db, cipher)
        await connection.connect(session, GarminConnectRequest(email="jane@example.com", password="pw"))

        with pytest.raises(NotConnectedError):
            await connection.sync(session, GarminSyncRequest(normalized_email="someoneelse"))

        credential = await GarminCredentialRepository(db).get_by_user_id(session.user_id)
        assert credential.last_sync_at is None

    @pytest.mark.asyncio
    async def test_disconnect_deletes_credential(self, db, session, cipher):
        connection = GarminConnection(db, cipher)
        await connection.connect(session, GarminConnectRequest(email="jane@example.com", password="pw"))

        result = await connection.disconnect(session)

        assert result.state == ConnectionState.DISCONNECTED
        assert await GarminCredentialRepository(db).get_by_user_id(session.user_id) is None
        assert await connection.status(session) == ConnectionState.DISCONNECTED
