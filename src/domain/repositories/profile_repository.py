"""Profile repository protocol."""

from typing import Protocol

from domain.entities.profile import Profile


class IProfileRepository(Protocol):
    """Repository interface for Profile entities."""

    async def exists(self, username: str) -> bool:
        """Check whether a username is already taken (case-insensitive)."""
        ...

    async def list_all(self) -> list[Profile]:
        """Get all profiles, oldest first."""
        ...

    async def create(self, profile: Profile) -> Profile:
        """Create a new profile."""
        ...
