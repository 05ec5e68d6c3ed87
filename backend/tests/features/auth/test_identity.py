"""
Tests for bearer token validation against the identity service.
"""

import httpx
import pytest

from fitdash.features.auth import IdentityClient, bearer_token
from fitdash.shared.exceptions import AuthenticationError, UpstreamError


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestBearerToken:

    def test_extracts_token(self):
        assert bearer_token("Bearer abc.def") == "abc.def"

    def test_scheme_is_case_insensitive(self):
        assert bearer_token("bearer abc") == "abc"

    @pytest.mark.parametrize("header", [None, "", "Basic abc", "Bearer", "Bearer   "])
    def test_missing_or_malformed(self, header):
        assert bearer_token(header) is None


class TestIdentityClient:

    @pytest.mark.asyncio
    async def test_valid_token(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["Authorization"]
            seen["apikey"] = request.headers.get("apikey")
            return httpx.Response(200, json={"id": "user-1", "email": "jane@example.com"})

        async with _client(handler) as http:
            identity = IdentityClient(http, base_url="https://id.example.com/", api_key="anon-key")
            user = await identity.get_user("jwt-token")

        assert user.id == "user-1"
        assert user.email == "jane@example.com"
        assert seen["url"] == "https://id.example.com/auth/v1/user"
        assert seen["auth"] == "Bearer jwt-token"
        assert seen["apikey"] == "anon-key"

    @pytest.mark.asyncio
    async def test_missing_token_rejected_without_request(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("identity service must not be called")

        async with _client(handler) as http:
            with pytest.raises(AuthenticationError) as exc_info:
                await IdentityClient(http, base_url="https://id.example.com").get_user(None)

        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [401, 403])
    async def test_rejected_token(self, status):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(status, json={"message": "invalid JWT"})

        async with _client(handler) as http:
            with pytest.raises(AuthenticationError):
                await IdentityClient(http, base_url="https://id.example.com").get_user("expired")

    @pytest.mark.asyncio
    async def test_identity_service_down(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with _client(handler) as http:
            with pytest.raises(UpstreamError) as exc_info:
                await IdentityClient(http, base_url="https://id.example.com").get_user("token")

        assert exc_info.value.status == 502
