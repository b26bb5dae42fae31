"""Avatar store protocol."""

from typing import Protocol


class IAvatarStore(Protocol):
    """Interface to the image CDN that republishes member avatars."""

    async def publish(self, username: str) -> str | None:
        """
        Fetch the remote avatar for ``username`` and republish it.

        Never raises: failures are logged and reported as None.

        Returns:
            The published secure URL, or None on failure
        """
        ...

    async def list_urls(self) -> dict[str, str]:
        """Map every published username to its avatar URL."""
        ...
