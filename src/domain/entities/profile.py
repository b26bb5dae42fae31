"""Profile domain entity."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID, uuid4

from domain.entities.link import Link


def normalize_username(raw: str | None) -> str:
    """Canonical form used for storage and uniqueness checks.

    ``" @Alice "`` becomes ``"alice"``.
    """
    cleaned = (raw or "").strip()
    if cleaned.startswith("@"):
        cleaned = cleaned[1:]
    return cleaned.strip().lower()


@dataclass
class Profile:
    """Domain entity for a paid, published profile."""

    username: str
    catchphrase: str
    links: list[Link] = field(default_factory=list)
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    def __post_init__(self) -> None:
        """Ensure updated_at is always at least as recent as created_at."""
        if self.updated_at < self.created_at:
            self.updated_at = self.created_at


@dataclass(frozen=True, slots=True)
class PublishedProfile:
    """Read-only value object: a Profile bundled with its avatar URL, if any."""

    profile: Profile
    avatar_url: str | None = None
