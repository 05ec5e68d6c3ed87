"""
Tests for Strava token freshness and refresh.
"""

import pytest

from fitdash.features.strava import TokenRefresher, TokenSet, is_token_expired
from fitdash.features.users import ProfileRepository
from fitdash.shared.exceptions import TokenRefreshFailed


# =============================================================================
# Expiry check
# =============================================================================

class TestIsTokenExpired:
    """Expiry is compared in milliseconds against the current time."""

    def test_future_expiry_is_fresh(self):
        assert is_token_expired(1_700_000_100, now=1_700_000_000) is False

    def test_past_expiry_is_expired(self):
        assert is_token_expired(1_699_999_999, now=1_700_000_000) is True

    def test_exact_expiry_is_still_fresh(self):
        """Strictly-less comparison: expiring right now is not yet expired."""
        assert is_token_expired(1_700_000_000, now=1_700_000_000) is False

    def test_sub_second_now(self):
        assert is_token_expired(1_700_000_000, now=1_700_000_000.5) is True


class TestTokenSet:

    def test_from_response(self, token_factory):
        tokens = TokenSet.from_response(token_factory())
        assert tokens == TokenSet("new-access", "new-refresh", 1_900_000_000)

    def test_missing_refresh_token_rejected(self, token_factory):
        with pytest.raises(ValueError):
            TokenSet.from_response(token_factory(refresh_token=None))

    def test_missing_expiry_rejected(self, token_factory):
        payload = token_factory()
        del payload["expires_at"]
        with pytest.raises(ValueError):
            TokenSet.from_response(payload)


# =============================================================================
# Refresher
# =============================================================================

async def _connected_profile(db, expires_at=1_000):
    repo = ProfileRepository(db)
    profile = await repo.save_connection(
        "user-1",
        "user@example.com",
        access_token="old-access",
        refresh_token="old-refresh",
        expires_at=expires_at,
        athlete={"id": 77},
    )
    await repo.commit()
    return profile


class TestTokenRefresher:

    @pytest.mark.asyncio
    async def test_fresh_token_used_without_refresh(self, db, strava_oauth, strava_api):
        profile = await _connected_profile(db, expires_at=2_000_000_000)

        token = await TokenRefresher(db, strava_oauth).ensure_fresh(profile, now=1_700_000_000)

        assert token == "old-access"
        assert strava_api.token_requests == []

    @pytest.mark.asyncio
    async def test_expired_token_refreshed_and_triple_replaced(self, db, strava_oauth, strava_api, token_factory):
        strava_api.token_body = token_factory(
            access_token="rotated-access",
            refresh_token="rotated-refresh",
            expires_at=1_700_021_600,
        )
        profile = await _connected_profile(db)

        token = await TokenRefresher(db, strava_oauth).ensure_fresh(profile, now=1_700_000_000)

        assert token == "rotated-access"
        assert len(strava_api.token_requests) == 1
        body = strava_api.token_requests[0].content.decode()
        assert "grant_type=refresh_token" in body
        assert "refresh_token=old-refresh" in body

        stored = await ProfileRepository(db).get_by_user_id("user-1")
        assert stored.strava_access_token == "rotated-access"
        assert stored.strava_refresh_token == "rotated-refresh"
        assert stored.strava_token_expires_at == 1_700_021_600

    @pytest.mark.asyncio
    async def test_missing_expiry_triggers_refresh(self, db, strava_oauth, strava_api):
        profile = await _connected_profile(db, expires_at=None)

        token = await TokenRefresher(db, strava_oauth).ensure_fresh(profile)

        assert token == "new-access"
        assert len(strava_api.token_requests) == 1

    @pytest.mark.asyncio
    async def test_rejected_refresh_leaves_tokens_untouched(self, db, strava_oauth, strava_api):
        strava_api.token_status = 400
        strava_api.token_body = {
            "message": "Bad Request",
            "errors": [{"resource": "RefreshToken", "field": "refresh_token", "code": "invalid"}],
        }
        profile = await _connected_profile(db)

        with pytest.raises(TokenRefreshFailed):
            await TokenRefresher(db, strava_oauth).ensure_fresh(profile, now=1_700_000_000)

        stored = await ProfileRepository(db).get_by_user_id("user-1")
        assert stored.strava_access_token == "old-access"
        assert stored.strava_refresh_token == "old-refresh"
        assert stored.strava_token_expires_at == 1_000

    @pytest.mark.asyncio
    async def test_incomplete_refresh_response_rejected(self, db, strava_oauth, strava_api):
        strava_api.token_body = {"access_token": "only-access"}
        profile = await _connected_profile(db)

        with pytest.raises(TokenRefreshFailed):
            await TokenRefresher(db, strava_oauth).refresh(profile)

        stored = await ProfileRepository(db).get_by_user_id("user-1")
        assert stored.strava_access_token == "old-access"
