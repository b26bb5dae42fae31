"""Signup service layer: staging paid signups and promoting them to profiles."""

from typing import Callable, Iterable

import structlog
from sqlalchemy.exc import IntegrityError

from core.exceptions import (
    MissingFieldsError,
    PaymentNotCompletedError,
    PendingSignupNotFoundError,
    UsernameTakenError,
)
from domain.entities.link import Link, filter_links
from domain.entities.pending_signup import PendingSignup, SignupCheckout
from domain.entities.profile import Profile, normalize_username
from domain.gateways.payment_gateway import IPaymentGateway
from domain.repositories.unit_of_work import IUnitOfWork

logger = structlog.get_logger()


class SignupService:
    """Service layer for the pay-to-publish signup flow."""

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        payments: IPaymentGateway,
        price_cents: int = 200,
        currency: str = "usd",
    ) -> None:
        self._uow_factory = uow_factory
        self._payments = payments
        self._price_cents = price_cents
        self._currency = currency

    async def create_pending(
        self,
        username: str,
        catchphrase: str,
        links: Iterable[Link] = (),
    ) -> SignupCheckout:
        """Validate a submission, open a payment intent and stage the signup.

        Validation happens before any call to the payment provider, so a
        rejected submission never creates an intent.
        """
        clean_username = normalize_username(username)
        clean_catchphrase = (catchphrase or "").strip()

        missing = [
            name
            for name, value in (("username", clean_username), ("catchphrase", clean_catchphrase))
            if not value
        ]
        if missing:
            raise MissingFieldsError(missing)

        valid_links = filter_links(links)

        async with self._uow_factory() as uow:
            if await uow.profiles.exists(clean_username):
                raise UsernameTakenError(clean_username)

            intent = await self._payments.create_intent(
                amount=self._price_cents,
                currency=self._currency,
                metadata={"username": clean_username},
            )

            pending = PendingSignup(
                payment_reference=intent.id,
                username=clean_username,
                catchphrase=clean_catchphrase,
                links=valid_links,
            )
            created = await uow.pending_signups.create(pending)
            await uow.commit()

        logger.info(
            "pending_signup_created",
            username=clean_username,
            payment_reference=intent.id,
            link_count=len(valid_links),
        )
        return SignupCheckout(pending=created, client_secret=intent.client_secret or "")

    async def complete(self, payment_reference: str) -> Profile:
        """Promote a paid pending signup to a permanent profile."""
        intent = await self._payments.retrieve_intent(payment_reference)
        if intent is None or not intent.succeeded:
            raise PaymentNotCompletedError(
                payment_reference, intent.status if intent else None
            )

        async with self._uow_factory() as uow:
            pending = await uow.pending_signups.get(payment_reference)
            if not pending:
                raise PendingSignupNotFoundError(payment_reference)

            # Availability was checked before payment; a concurrent signup for
            # the same name may have been promoted since. The pending row is
            # kept so the payment can be reconciled by hand.
            if await uow.profiles.exists(pending.username):
                logger.warning(
                    "promotion_conflict",
                    username=pending.username,
                    payment_reference=payment_reference,
                )
                raise UsernameTakenError(pending.username)

            try:
                profile = await uow.profiles.create(pending.promote())
                await uow.pending_signups.delete(payment_reference)
                await uow.commit()
            except IntegrityError as exc:
                await uow.rollback()
                # Only a unique violation means the name was lost to a race.
                orig = str(exc.orig).lower() if exc.orig else ""
                if "unique" not in orig and "duplicate" not in orig:
                    raise
                logger.warning(
                    "promotion_conflict",
                    username=pending.username,
                    payment_reference=payment_reference,
                    source="constraint",
                )
                raise UsernameTakenError(pending.username) from exc

        logger.info(
            "profile_promoted",
            username=profile.username,
            payment_reference=payment_reference,
        )
        return profile
