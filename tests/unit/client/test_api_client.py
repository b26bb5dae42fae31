"""Unit tests for ProfileWallClient."""

import json

import httpx
import pytest

from client.api import ApiError, ProfileWallClient


def _client(handler) -> ProfileWallClient:
    return ProfileWallClient(base_url="http://wall.test/", transport=httpx.MockTransport(handler))


class TestProfileWallClient:
    @pytest.mark.asyncio
    async def test_create_signup_posts_form_fields(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                201,
                json={
                    "data": {
                        "payment_reference": "pi_1",
                        "client_secret": "pi_1_secret",
                        "username": "alice",
                    }
                },
            )

        async with _client(handler) as client:
            ticket = await client.create_signup(
                username="@Alice",
                catchphrase="hi",
                links=[{"label": "a", "link": "https://x.com"}],
            )

        assert str(seen[0].url) == "http://wall.test/api/v1/signups"
        assert json.loads(seen[0].content) == {
            "username": "@Alice",
            "catchphrase": "hi",
            "links": [{"label": "a", "link": "https://x.com"}],
        }
        assert ticket.payment_reference == "pi_1"
        assert ticket.client_secret == "pi_1_secret"
        assert ticket.username == "alice"

    @pytest.mark.asyncio
    async def test_error_envelope_becomes_api_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                409,
                json={
                    "error_code": "USERNAME_TAKEN",
                    "message": "Username already exists",
                    "details": {"username": "alice"},
                },
            )

        async with _client(handler) as client:
            with pytest.raises(ApiError) as exc_info:
                await client.create_signup("alice", "hi", [])

        assert exc_info.value.status_code == 409
        assert exc_info.value.error_code == "USERNAME_TAKEN"
        assert exc_info.value.message == "Username already exists"
        assert exc_info.value.details == {"username": "alice"}

    @pytest.mark.asyncio
    async def test_non_json_error_uses_reason_phrase(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, text="<html>bad gateway</html>")

        async with _client(handler) as client:
            with pytest.raises(ApiError) as exc_info:
                await client.list_profiles()

        assert exc_info.value.error_code == "HTTP_ERROR"
        assert exc_info.value.message == "Bad Gateway"

    @pytest.mark.asyncio
    async def test_complete_signup_returns_profile(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/api/v1/signups/complete"
            assert json.loads(request.content) == {"payment_reference": "pi_1"}
            return httpx.Response(
                200,
                json={"message": "Profile saved", "data": {"username": "alice"}},
            )

        async with _client(handler) as client:
            profile = await client.complete_signup("pi_1")

        assert profile == {"username": "alice"}

    @pytest.mark.asyncio
    async def test_list_profiles_returns_entries(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "GET"
            return httpx.Response(200, json={"data": [{"title": "alice"}], "total": 1})

        async with _client(handler) as client:
            assert await client.list_profiles() == [{"title": "alice"}]
