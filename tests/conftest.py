"""Pytest configuration and fixtures."""

import os
import sys
from collections.abc import AsyncGenerator
from pathlib import Path
from typing import Any

# Disable rate limiting in tests
os.environ["RATE_LIMIT_ENABLED"] = "false"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from domain.entities.payment import PaymentIntent
from infrastructure.database.models import Base

# Test database URL (SQLite in memory)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class FakePaymentGateway:
    """In-memory stand-in for Stripe PaymentIntents."""

    def __init__(self) -> None:
        self.intents: dict[str, PaymentIntent] = {}
        self.created: list[dict[str, Any]] = []

    async def create_intent(
        self, amount: int, currency: str, metadata: dict[str, str]
    ) -> PaymentIntent:
        intent_id = f"pi_test_{len(self.intents) + 1}"
        intent = PaymentIntent(
            id=intent_id,
            status="requires_payment_method",
            amount=amount,
            currency=currency,
            client_secret=f"{intent_id}_secret",
            metadata=dict(metadata),
        )
        self.intents[intent_id] = intent
        self.created.append({"amount": amount, "currency": currency, "metadata": metadata})
        return intent

    async def retrieve_intent(self, intent_id: str) -> PaymentIntent | None:
        return self.intents.get(intent_id)

    def mark_succeeded(self, intent_id: str) -> None:
        """Simulate the client confirming payment."""
        existing = self.intents.get(intent_id)
        self.intents[intent_id] = PaymentIntent(
            id=intent_id,
            status="succeeded",
            amount=existing.amount if existing else 200,
            currency=existing.currency if existing else "usd",
        )


class FakeAvatarStore:
    """In-memory stand-in for the Cloudinary avatar store."""

    def __init__(self) -> None:
        self.urls: dict[str, str] = {}
        self.published: list[str] = []
        self.fail_listing = False

    async def publish(self, username: str) -> str | None:
        self.published.append(username)
        url = f"https://cdn.test/avatars/{username}.png"
        self.urls[username] = url
        return url

    async def list_urls(self) -> dict[str, str]:
        if self.fail_listing:
            raise ConnectionError("cdn unreachable")
        return dict(self.urls)


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create a fresh in-memory database with all tables."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create session factory."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def payments() -> FakePaymentGateway:
    return FakePaymentGateway()


@pytest.fixture
def avatars() -> FakeAvatarStore:
    return FakeAvatarStore()


@pytest.fixture
async def client(
    session_factory: async_sessionmaker[AsyncSession],
    payments: FakePaymentGateway,
    avatars: FakeAvatarStore,
) -> AsyncGenerator[AsyncClient, None]:
    """
    Create test client wired to the in-memory database and fake providers.

    This client:
    - Uses an in-memory SQLite database
    - Replaces Stripe with FakePaymentGateway
    - Replaces Cloudinary with FakeAvatarStore
    """
    from api.v1.dependencies import get_profile_service, get_signup_service
    from domain.services.profile_service import ProfileService
    from domain.services.signup_service import SignupService
    from infrastructure.database.session import get_async_session
    from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork
    from main import create_app

    app = create_app()

    def test_uow_factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(session_factory)

    def override_get_signup_service() -> SignupService:
        return SignupService(test_uow_factory, payments=payments)

    def override_get_profile_service() -> ProfileService:
        return ProfileService(test_uow_factory, avatars=avatars)

    async def override_get_async_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_signup_service] = override_get_signup_service
    app.dependency_overrides[get_profile_service] = override_get_profile_service
    app.dependency_overrides[get_async_session] = override_get_async_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()
