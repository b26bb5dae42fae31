"""Profile feed routes."""

from fastapi import APIRouter, Depends, Request

from api.v1.dependencies import get_profile_service
from api.v1.schemas.common import ErrorResponse
from api.v1.schemas.profile import FeedEntryResponse, FeedResponse
from api.v1.schemas.signup import LinkOut
from core.rate_limit import READ_LIMIT, limiter
from domain.services.profile_service import ProfileService

router = APIRouter(prefix="/profiles", tags=["profiles"])


@router.get(
    "",
    response_model=FeedResponse,
    summary="List published profiles",
    responses={500: {"model": ErrorResponse, "description": "Database unavailable"}},
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_profiles(
    request: Request,
    service: ProfileService = Depends(get_profile_service),
) -> FeedResponse:
    """Every published profile with its avatar URL (null until the avatar exists)."""
    published = await service.list_published()
    return FeedResponse(
        data=[
            FeedEntryResponse(
                title=item.profile.username,
                brief_story=item.profile.catchphrase,
                avatar_url=item.avatar_url,
                backlinks=[LinkOut(**link.to_dict()) for link in item.profile.links],
            )
            for item in published
        ],
        total=len(published),
    )
