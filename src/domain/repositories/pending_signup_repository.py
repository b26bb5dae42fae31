"""Pending signup repository protocol."""

from typing import Protocol

from domain.entities.pending_signup import PendingSignup


class IPendingSignupRepository(Protocol):
    """Repository interface for PendingSignup entities."""

    async def get(self, payment_reference: str) -> PendingSignup | None:
        """Get a pending signup by its payment reference."""
        ...

    async def create(self, pending: PendingSignup) -> PendingSignup:
        """Stage a new pending signup."""
        ...

    async def delete(self, payment_reference: str) -> bool:
        """Delete a pending signup and return success status."""
        ...
