"""Payment intent value object."""

from dataclasses import dataclass, field

SUCCEEDED = "succeeded"


@dataclass(frozen=True, slots=True)
class PaymentIntent:
    """Provider-agnostic view of a payment intent."""

    id: str
    status: str
    amount: int
    currency: str
    client_secret: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return self.status == SUCCEEDED
