"""Signup API routes."""

from fastapi import APIRouter, BackgroundTasks, Depends, Request, status

from api.v1.dependencies import get_profile_service, get_signup_service
from api.v1.schemas.common import ErrorResponse
from api.v1.schemas.signup import (
    CompletedProfileDetailResponse,
    CompletedProfileResponse,
    LinkOut,
    SignupCheckoutDetailResponse,
    SignupCheckoutResponse,
    SignupComplete,
    SignupCreate,
)
from core.rate_limit import WRITE_LIMIT, limiter
from domain.services.profile_service import ProfileService
from domain.services.signup_service import SignupService

router = APIRouter(prefix="/signups", tags=["signups"])


@router.post(
    "",
    response_model=SignupCheckoutDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Start a paid signup",
    responses={
        201: {"description": "Payment intent created and signup staged"},
        400: {"model": ErrorResponse, "description": "Username or catchphrase missing"},
        409: {"model": ErrorResponse, "description": "Username already exists"},
        502: {"model": ErrorResponse, "description": "Payment provider error"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def create_signup(
    request: Request,
    body: SignupCreate,
    service: SignupService = Depends(get_signup_service),
) -> SignupCheckoutDetailResponse:
    """Validate the submission, open a payment intent and stage the signup.

    Links that are unlabeled or not valid URLs are dropped silently.
    """
    checkout = await service.create_pending(
        username=body.username,
        catchphrase=body.catchphrase,
        links=[link.to_entity() for link in body.links],
    )
    return SignupCheckoutDetailResponse(
        data=SignupCheckoutResponse(
            payment_reference=checkout.payment_reference,
            client_secret=checkout.client_secret,
            username=checkout.pending.username,
        )
    )


@router.post(
    "/complete",
    response_model=CompletedProfileDetailResponse,
    summary="Promote a paid signup to a profile",
    responses={
        200: {"description": "Profile saved"},
        400: {"model": ErrorResponse, "description": "Payment not completed"},
        404: {"model": ErrorResponse, "description": "No pending signup for this payment"},
        409: {
            "model": ErrorResponse,
            "description": "Username was taken while payment was in progress",
        },
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def complete_signup(
    request: Request,
    body: SignupComplete,
    background_tasks: BackgroundTasks,
    service: SignupService = Depends(get_signup_service),
    profiles: ProfileService = Depends(get_profile_service),
) -> CompletedProfileDetailResponse:
    """Verify payment, publish the profile and fetch its avatar in the background."""
    profile = await service.complete(body.payment_reference)
    background_tasks.add_task(profiles.publish_avatar, profile.username)
    return CompletedProfileDetailResponse(
        data=CompletedProfileResponse(
            username=profile.username,
            catchphrase=profile.catchphrase,
            links=[LinkOut(**link.to_dict()) for link in profile.links],
            created_at=profile.created_at,
        )
    )
