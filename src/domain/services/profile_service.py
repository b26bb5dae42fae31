"""Profile feed service."""

from typing import Callable, List

import structlog

from domain.entities.profile import PublishedProfile
from domain.gateways.avatar_store import IAvatarStore
from domain.repositories.unit_of_work import IUnitOfWork

logger = structlog.get_logger()


class ProfileService:
    """Service layer for reading published profiles."""

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        avatars: IAvatarStore,
    ) -> None:
        self._uow_factory = uow_factory
        self._avatars = avatars

    async def list_published(self) -> List[PublishedProfile]:
        """All profiles, oldest first, each with its avatar URL when one exists.

        The avatar listing is best effort: if the CDN cannot be reached the
        feed is still served, just without avatars.
        """
        async with self._uow_factory() as uow:
            profiles = await uow.profiles.list_all()

        try:
            avatar_urls = await self._avatars.list_urls()
        except Exception:
            logger.exception("avatar_listing_failed", profile_count=len(profiles))
            avatar_urls = {}

        return [
            PublishedProfile(
                profile=profile,
                avatar_url=avatar_urls.get(profile.username.lower()),
            )
            for profile in profiles
        ]

    async def publish_avatar(self, username: str) -> str | None:
        """Republish a member's avatar; used as a post-signup side effect."""
        url = await self._avatars.publish(username)
        if url is None:
            logger.warning("avatar_not_published", username=username)
        return url
