"""SQLAlchemy implementation of Profile repository."""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.profile import Profile
from infrastructure.database.models import ProfileModel
from infrastructure.database.repositories.links_codec import dump_links, load_links


class SQLAlchemyProfileRepository:
    """SQLAlchemy implementation of IProfileRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def exists(self, username: str) -> bool:
        """Check whether a username is already taken."""
        stmt = (
            select(func.count())
            .select_from(ProfileModel)
            .where(func.lower(ProfileModel.username) == username.lower())
        )
        result = await self._session.execute(stmt)
        return (result.scalar() or 0) > 0

    async def list_all(self) -> list[Profile]:
        """Get all profiles, oldest first."""
        stmt = select(ProfileModel).order_by(ProfileModel.created_at, ProfileModel.username)
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def create(self, profile: Profile) -> Profile:
        """Create a new profile."""
        model = self._to_model(profile)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    def _to_entity(self, model: ProfileModel) -> Profile:
        """Convert ORM model to domain entity."""
        return Profile(
            id=model.id,
            username=model.username,
            catchphrase=model.catchphrase,
            links=load_links(model.links),
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: Profile) -> ProfileModel:
        """Convert domain entity to ORM model."""
        return ProfileModel(
            id=entity.id,
            username=entity.username,
            catchphrase=entity.catchphrase,
            links=dump_links(entity.links),
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )
