"""Pending signup domain entity."""

from dataclasses import dataclass, field
from datetime import datetime

from domain.entities.link import Link
from domain.entities.profile import Profile


@dataclass
class PendingSignup:
    """A not-yet-paid profile submission staged under a payment reference."""

    payment_reference: str
    username: str
    catchphrase: str
    links: list[Link] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.utcnow)

    def promote(self) -> Profile:
        """Build the permanent profile this signup turns into once paid."""
        return Profile(
            username=self.username,
            catchphrase=self.catchphrase,
            links=list(self.links),
            created_at=self.created_at,
            updated_at=datetime.utcnow(),
        )


@dataclass(frozen=True, slots=True)
class SignupCheckout:
    """What the client needs to confirm payment for a pending signup."""

    pending: PendingSignup
    client_secret: str

    @property
    def payment_reference(self) -> str:
        return self.pending.payment_reference
