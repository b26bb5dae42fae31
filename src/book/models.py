"""Client-side view of one feed entry."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from domain.entities.link import Link


@dataclass(frozen=True, slots=True)
class PageContent:
    """Everything the texture generator needs to draw one content page."""

    title: str
    brief_story: str = ""
    avatar_url: str | None = None
    backlinks: tuple[Link, ...] = field(default_factory=tuple)
    color: str = "#000"
    bg_color: str = "#000"

    @property
    def glyph(self) -> str:
        """Single character shown when there is no avatar image."""
        for char in self.title.lstrip("@"):
            if char.isalnum():
                return char.upper()
        return "?"

    @classmethod
    def from_feed(cls, entry: Mapping[str, Any]) -> "PageContent":
        """Build from one item of ``GET /api/v1/profiles``."""
        return cls(
            title=str(entry.get("title") or ""),
            brief_story=str(entry.get("brief_story") or ""),
            avatar_url=entry.get("avatar_url") or None,
            backlinks=tuple(
                Link.from_dict(item)
                for item in entry.get("backlinks") or []
                if isinstance(item, Mapping)
            ),
            color=str(entry.get("color") or "#000"),
            bg_color=str(entry.get("bg_color") or "#000"),
        )
