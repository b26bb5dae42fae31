"""Integration tests for the SQLAlchemy repositories."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from domain.entities.link import Link
from domain.entities.pending_signup import PendingSignup
from domain.entities.profile import Profile
from infrastructure.database.repositories.sqlalchemy_pending_signup_repo import (
    SQLAlchemyPendingSignupRepository,
)
from infrastructure.database.repositories.sqlalchemy_profile_repo import SQLAlchemyProfileRepository
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork


class TestProfileRepository:
    @pytest.mark.asyncio
    async def test_create_and_lookup_case_insensitive(self, db_session: AsyncSession):
        repo = SQLAlchemyProfileRepository(db_session)
        links = [Link(label="site", url="https://alice.dev")]

        await repo.create(Profile(username="alice", catchphrase="hi", links=links))

        assert await repo.exists("ALICE")
        [found] = await repo.list_all()
        assert found.username == "alice"
        assert found.links == links
        assert not await repo.exists("bob")

    @pytest.mark.asyncio
    async def test_list_all(self, db_session: AsyncSession):
        repo = SQLAlchemyProfileRepository(db_session)
        await repo.create(Profile(username="alice", catchphrase="hi"))
        await repo.create(Profile(username="bob", catchphrase="yo"))

        profiles = await repo.list_all()

        assert {p.username for p in profiles} == {"alice", "bob"}


class TestPendingSignupRepository:
    @pytest.mark.asyncio
    async def test_create_get_delete(self, db_session: AsyncSession):
        repo = SQLAlchemyPendingSignupRepository(db_session)
        await repo.create(
            PendingSignup(
                payment_reference="pi_1",
                username="alice",
                catchphrase="hi",
                links=[Link(label="a", url="https://x.com")],
            )
        )

        pending = await repo.get("pi_1")
        assert pending is not None
        assert pending.username == "alice"
        assert pending.links == [Link(label="a", url="https://x.com")]

        assert await repo.delete("pi_1")
        assert await repo.get("pi_1") is None
        assert not await repo.delete("pi_1")


class TestUnitOfWork:
    @pytest.mark.asyncio
    async def test_uncommitted_work_is_rolled_back(
        self, session_factory: async_sessionmaker[AsyncSession]
    ):
        with pytest.raises(RuntimeError):
            async with SQLAlchemyUnitOfWork(session_factory) as uow:
                await uow.profiles.create(Profile(username="alice", catchphrase="hi"))
                raise RuntimeError("abort")

        async with SQLAlchemyUnitOfWork(session_factory) as uow:
            assert not await uow.profiles.exists("alice")

    @pytest.mark.asyncio
    async def test_repositories_require_context(
        self, session_factory: async_sessionmaker[AsyncSession]
    ):
        uow = SQLAlchemyUnitOfWork(session_factory)

        with pytest.raises(RuntimeError):
            _ = uow.profiles
