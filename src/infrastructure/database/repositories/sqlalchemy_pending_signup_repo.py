"""SQLAlchemy implementation of PendingSignup repository."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.pending_signup import PendingSignup
from infrastructure.database.models import PendingProfileModel
from infrastructure.database.repositories.links_codec import dump_links, load_links


class SQLAlchemyPendingSignupRepository:
    """SQLAlchemy implementation of IPendingSignupRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, payment_reference: str) -> PendingSignup | None:
        """Get a pending signup by its payment reference."""
        stmt = select(PendingProfileModel).where(PendingProfileModel.id == payment_reference)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def create(self, pending: PendingSignup) -> PendingSignup:
        """Stage a new pending signup."""
        model = self._to_model(pending)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def delete(self, payment_reference: str) -> bool:
        """Delete a pending signup."""
        stmt = select(PendingProfileModel).where(PendingProfileModel.id == payment_reference)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if not model:
            return False

        await self._session.delete(model)
        await self._session.flush()
        return True

    def _to_entity(self, model: PendingProfileModel) -> PendingSignup:
        """Convert ORM model to domain entity."""
        return PendingSignup(
            payment_reference=model.id,
            username=model.clean_username,
            catchphrase=model.catchphrase,
            links=load_links(model.links),
            created_at=model.created_at,
        )

    def _to_model(self, entity: PendingSignup) -> PendingProfileModel:
        """Convert domain entity to ORM model."""
        return PendingProfileModel(
            id=entity.payment_reference,
            clean_username=entity.username,
            catchphrase=entity.catchphrase,
            links=dump_links(entity.links),
            created_at=entity.created_at,
        )
