"""Pydantic schemas for the profile feed."""

from pydantic import BaseModel, ConfigDict

from api.v1.schemas.signup import LinkOut


class FeedEntryResponse(BaseModel):
    """One page of the book: a published profile as the client renders it."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "alice",
                "brief_story": "hello from the wall",
                "avatar_url": "https://res.cloudinary.com/demo/image/upload/avatars/alice.jpg",
                "backlinks": [{"label": "site", "link": "https://alice.dev"}],
                "color": "#000",
                "bg_color": "#000",
            }
        },
    )

    title: str
    brief_story: str
    avatar_url: str | None = None
    backlinks: list[LinkOut]
    color: str = "#000"
    bg_color: str = "#000"


class FeedResponse(BaseModel):
    """Schema for the profile feed."""

    data: list[FeedEntryResponse]
    total: int
