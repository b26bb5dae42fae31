"""Cloudinary implementation of the avatar store.

Avatars are downloaded from a public avatar proxy and republished under a
stable ``<prefix><username>`` public id, so the feed can find them by name.
"""

import asyncio
import io
from typing import Any

import cloudinary.api
import cloudinary.uploader
import httpx
import structlog

logger = structlog.get_logger()


class CloudinaryAvatarStore:
    """IAvatarStore backed by Cloudinary uploads."""

    def __init__(
        self,
        cloud_name: str,
        api_key: str,
        api_secret: str,
        prefix: str = "avatars/",
        source_url: str = "https://unavatar.io/x/{username}",
        timeout: float = 10.0,
        page_size: int = 100,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._credentials = {
            "cloud_name": cloud_name,
            "api_key": api_key,
            "api_secret": api_secret,
        }
        self._prefix = prefix
        self._source_url = source_url
        self._timeout = timeout
        self._page_size = page_size
        self._transport = transport

    def public_id(self, username: str) -> str:
        return f"{self._prefix}{username.lstrip('@').lower()}"

    async def publish(self, username: str) -> str | None:
        """Download the avatar and upload it with overwrite. Never raises."""
        clean_username = username.lstrip("@").lower()
        url = self._source_url.format(username=clean_username)

        try:
            async with httpx.AsyncClient(
                transport=self._transport,
                timeout=self._timeout,
                follow_redirects=True,
            ) as client:
                response = await client.get(url)
        except httpx.HTTPError as e:
            logger.error("avatar_download_error", username=clean_username, error=str(e))
            return None

        if response.status_code != 200:
            logger.error(
                "avatar_download_failed",
                username=clean_username,
                status_code=response.status_code,
            )
            return None

        try:
            result = await asyncio.to_thread(
                cloudinary.uploader.upload,
                io.BytesIO(response.content),
                public_id=self.public_id(clean_username),
                overwrite=True,
                resource_type="image",
                **self._credentials,
            )
        except Exception as e:
            logger.error(
                "avatar_upload_failed",
                username=clean_username,
                error=str(e),
                error_type=type(e).__name__,
            )
            return None

        secure_url: str | None = result.get("secure_url")
        logger.info("avatar_uploaded", username=clean_username, url=secure_url)
        return secure_url

    async def list_urls(self) -> dict[str, str]:
        """Walk every page of the prefix listing and map username -> URL."""
        urls: dict[str, str] = {}
        next_cursor: str | None = None

        while True:
            options: dict[str, Any] = {
                "type": "upload",
                "prefix": self._prefix,
                "max_results": self._page_size,
                **self._credentials,
            }
            if next_cursor:
                options["next_cursor"] = next_cursor

            page = await asyncio.to_thread(cloudinary.api.resources, **options)
            for resource in page.get("resources", []):
                public_id: str = resource.get("public_id", "")
                if not public_id.startswith(self._prefix):
                    continue
                username = public_id[len(self._prefix):].lower()
                if username and resource.get("secure_url"):
                    urls[username] = resource["secure_url"]

            next_cursor = page.get("next_cursor")
            if not next_cursor:
                break

        return urls
