"""Stripe implementation of the payment gateway.

The stripe SDK is synchronous; calls run in a worker thread so they do not
block the event loop.
"""

import asyncio
from typing import Any

import stripe
import structlog

from core.exceptions import PaymentProviderError
from domain.entities.payment import PaymentIntent

logger = structlog.get_logger()


class StripePaymentGateway:
    """IPaymentGateway backed by Stripe PaymentIntents."""

    def __init__(self, api_key: str) -> None:
        self._api_key = api_key

    async def create_intent(
        self, amount: int, currency: str, metadata: dict[str, str]
    ) -> PaymentIntent:
        """Create a payment intent for ``amount`` in ``currency``."""
        try:
            intent = await asyncio.to_thread(
                stripe.PaymentIntent.create,
                api_key=self._api_key,
                amount=amount,
                currency=currency,
                metadata=metadata,
            )
        except stripe.StripeError as e:
            logger.error(
                "stripe_create_intent_failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            raise PaymentProviderError(e.user_message or "Could not start payment") from e
        return self._to_entity(intent)

    async def retrieve_intent(self, intent_id: str) -> PaymentIntent | None:
        """Look up an intent; unknown ids come back as None."""
        try:
            intent = await asyncio.to_thread(
                stripe.PaymentIntent.retrieve,
                intent_id,
                api_key=self._api_key,
            )
        except stripe.InvalidRequestError:
            logger.info("stripe_intent_not_found", payment_reference=intent_id)
            return None
        except stripe.StripeError as e:
            logger.error(
                "stripe_retrieve_intent_failed",
                payment_reference=intent_id,
                error=str(e),
            )
            raise PaymentProviderError(e.user_message or "Could not verify payment") from e
        return self._to_entity(intent)

    def _to_entity(self, intent: Any) -> PaymentIntent:
        """Convert a Stripe object to the domain value object."""
        return PaymentIntent(
            id=intent["id"],
            status=intent["status"],
            amount=intent["amount"],
            currency=intent["currency"],
            client_secret=intent.get("client_secret"),
            metadata=dict(intent.get("metadata") or {}),
        )
