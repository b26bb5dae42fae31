"""Link value object and submission filtering."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import AnyUrl, TypeAdapter, ValidationError

_URL_ADAPTER = TypeAdapter(AnyUrl)


@dataclass(frozen=True, slots=True)
class Link:
    """A labeled outbound link shown on a profile page."""

    label: str
    url: str

    def to_dict(self) -> dict[str, str]:
        """Serialize using the feed's wire names."""
        return {"label": self.label, "link": self.url}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Link":
        return cls(
            label=str(data.get("label") or ""),
            url=str(data.get("link") or data.get("url") or ""),
        )


def is_valid_url(value: str | None) -> bool:
    """True when ``value`` parses as an absolute URL with a host."""
    if not value or not value.strip():
        return False
    try:
        url = _URL_ADAPTER.validate_python(value.strip())
    except ValidationError:
        return False
    return bool(url.host)


def is_submittable(link: Link) -> bool:
    """A link is kept only when it is both labeled and validly-URLed."""
    return bool(link.label.strip()) and is_valid_url(link.url)


def filter_links(links: Iterable[Link]) -> list[Link]:
    """Drop invalid links silently, preserving order."""
    return [
        Link(label=link.label.strip(), url=link.url.strip())
        for link in links
        if is_submittable(link)
    ]
