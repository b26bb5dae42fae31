"""Serialization of link lists into the text column shared by both tables."""

import orjson
import structlog

from domain.entities.link import Link

logger = structlog.get_logger()


def dump_links(links: list[Link]) -> str:
    """Serialize links to the JSON text stored in ``links`` columns."""
    return orjson.dumps([link.to_dict() for link in links]).decode()


def load_links(raw: str | None) -> list[Link]:
    """Parse a stored ``links`` blob; a corrupt blob reads as no links."""
    if not raw:
        return []
    try:
        data = orjson.loads(raw)
    except orjson.JSONDecodeError:
        logger.warning("links_blob_unreadable", raw=raw[:200])
        return []
    if not isinstance(data, list):
        return []
    return [Link.from_dict(item) for item in data if isinstance(item, dict)]
