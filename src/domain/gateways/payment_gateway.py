"""Payment gateway protocol."""

from typing import Protocol

from domain.entities.payment import PaymentIntent


class IPaymentGateway(Protocol):
    """Interface to the payment provider."""

    async def create_intent(
        self, amount: int, currency: str, metadata: dict[str, str]
    ) -> PaymentIntent:
        """
        Create a payment intent.

        Args:
            amount: Amount in the smallest currency unit
            currency: ISO currency code
            metadata: Free-form key/value pairs stored on the intent

        Returns:
            The created intent, including its client secret

        Raises:
            PaymentProviderError: If the provider rejects the request
        """
        ...

    async def retrieve_intent(self, intent_id: str) -> PaymentIntent | None:
        """
        Look up a payment intent.

        Returns:
            The intent, or None if the provider does not know the id
        """
        ...
