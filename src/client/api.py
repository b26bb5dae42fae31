"""Async HTTP client for the Profile Wall API."""

from dataclasses import dataclass
from typing import Any, Optional

import httpx
import structlog

logger = structlog.get_logger()


class ApiError(Exception):
    """Error envelope returned by the API."""

    def __init__(
        self,
        status_code: int,
        error_code: str,
        message: str,
        details: Any | None = None,
    ) -> None:
        self.status_code = status_code
        self.error_code = error_code
        self.message = message
        self.details = details
        super().__init__(f"{status_code} {error_code}: {message}")


@dataclass(frozen=True, slots=True)
class SignupTicket:
    """Pending signup handle returned by ``create_signup``."""

    payment_reference: str
    client_secret: str
    username: str


class ProfileWallClient:
    """Thin wrapper over the signup and feed endpoints."""

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._http = httpx.AsyncClient(
            base_url=f"{base_url.rstrip('/')}/api/v1",
            timeout=timeout,
            transport=transport,
        )

    async def create_signup(
        self,
        username: str,
        catchphrase: str,
        links: list[dict[str, str]],
    ) -> SignupTicket:
        """Stage a signup and get the payment client secret."""
        body = await self._request(
            "POST",
            "/signups",
            json={"username": username, "catchphrase": catchphrase, "links": links},
        )
        data = body["data"]
        return SignupTicket(
            payment_reference=data["payment_reference"],
            client_secret=data["client_secret"],
            username=data["username"],
        )

    async def complete_signup(self, payment_reference: str) -> dict[str, Any]:
        """Promote a paid signup; returns the saved profile."""
        body = await self._request(
            "POST",
            "/signups/complete",
            json={"payment_reference": payment_reference},
        )
        return body["data"]  # type: ignore[no-any-return]

    async def list_profiles(self) -> list[dict[str, Any]]:
        """Fetch the published profile feed."""
        body = await self._request("GET", "/profiles")
        return body["data"]  # type: ignore[no-any-return]

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "ProfileWallClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        response = await self._http.request(method, path, **kwargs)
        if response.is_success:
            return response.json()  # type: ignore[no-any-return]

        try:
            envelope = response.json()
        except ValueError:
            envelope = {}
        if not isinstance(envelope, dict):
            envelope = {}

        error = ApiError(
            status_code=response.status_code,
            error_code=envelope.get("error_code", "HTTP_ERROR"),
            message=envelope.get("message") or response.reason_phrase,
            details=envelope.get("details"),
        )
        logger.info(
            "api_error",
            method=method,
            path=path,
            status_code=error.status_code,
            error_code=error.error_code,
        )
        raise error
