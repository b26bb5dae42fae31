"""Dependency injection factories for API v1."""

from functools import lru_cache
from typing import Callable

from core.config import settings
from domain.gateways.avatar_store import IAvatarStore
from domain.gateways.payment_gateway import IPaymentGateway
from domain.services.profile_service import ProfileService
from domain.services.signup_service import SignupService
from infrastructure.avatars.cloudinary_store import CloudinaryAvatarStore
from infrastructure.database.session import async_session_factory
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork
from infrastructure.payments.stripe_gateway import StripePaymentGateway


def get_uow_factory() -> Callable[[], SQLAlchemyUnitOfWork]:
    """Factory for creating Unit of Work instances."""

    def factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(async_session_factory)

    return factory


@lru_cache
def get_payment_gateway() -> IPaymentGateway:
    """Get the Stripe payment gateway."""
    return StripePaymentGateway(api_key=settings.stripe_secret_key)


@lru_cache
def get_avatar_store() -> IAvatarStore:
    """Get the Cloudinary avatar store."""
    return CloudinaryAvatarStore(
        cloud_name=settings.cloudinary_cloud_name,
        api_key=settings.cloudinary_api_key,
        api_secret=settings.cloudinary_api_secret,
        prefix=settings.avatar_prefix,
        source_url=settings.avatar_source_url,
        timeout=settings.avatar_timeout_seconds,
        page_size=settings.avatar_page_size,
    )


@lru_cache
def get_signup_service() -> SignupService:
    """Get Signup service instance."""
    return SignupService(
        get_uow_factory(),
        payments=get_payment_gateway(),
        price_cents=settings.signup_price_cents,
        currency=settings.signup_currency,
    )


@lru_cache
def get_profile_service() -> ProfileService:
    """Get Profile service instance."""
    return ProfileService(get_uow_factory(), avatars=get_avatar_store())
