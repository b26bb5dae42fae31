"""Multi-step profile signup form: collect details, pay, done."""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Protocol

import structlog

from client.api import ApiError, SignupTicket
from domain.entities.link import Link, is_submittable, is_valid_url
from domain.entities.profile import normalize_username

logger = structlog.get_logger()

GENERIC_ERROR = "Something went wrong. Please try again."
INVALID_URL = "Enter a valid URL"


class FormStep(StrEnum):
    """Where the user is in the signup flow."""

    COLLECT = "collect"
    PAY = "pay"
    DONE = "done"


class InvalidStepError(Exception):
    """An action was attempted from a step that does not allow it."""

    def __init__(self, action: str, step: FormStep) -> None:
        super().__init__(f"Cannot {action} from step '{step}'")
        self.action = action
        self.step = step


@dataclass
class LinkRow:
    """One editable link row."""

    label: str = ""
    link: str = ""

    @property
    def url_error(self) -> str | None:
        """Inline error for this row only; empty rows are not errors."""
        if self.link.strip() and not is_valid_url(self.link):
            return INVALID_URL
        return None

    def to_link(self) -> Link:
        return Link(label=self.label, url=self.link)


@dataclass(frozen=True, slots=True)
class PaymentResult:
    """Outcome of the payment client SDK's confirmation step."""

    payment_reference: str | None = None
    error: str | None = None


class PaymentConfirmer(Protocol):
    """Client-side payment SDK: confirms a payment for a client secret."""

    async def confirm(self, client_secret: str) -> PaymentResult:
        ...


class SignupApi(Protocol):
    """The subset of ProfileWallClient the form drives."""

    async def create_signup(
        self, username: str, catchphrase: str, links: list[dict[str, str]]
    ) -> SignupTicket:
        ...

    async def complete_signup(self, payment_reference: str) -> dict[str, Any]:
        ...


@dataclass
class ProfileForm:
    """State machine behind the signup UI.

    Field values survive every failure so the user can retry without
    re-entering anything.
    """

    api: SignupApi
    username: str = ""
    catchphrase: str = ""
    rows: list[LinkRow] = field(default_factory=lambda: [LinkRow()])
    step: FormStep = FormStep.COLLECT
    errors: dict[str, str] = field(default_factory=dict)
    error: str | None = None
    ticket: SignupTicket | None = None
    profile: dict[str, Any] | None = None

    # Link rows

    def add_link(self) -> LinkRow:
        row = LinkRow()
        self.rows.append(row)
        return row

    def remove_link(self, index: int) -> None:
        del self.rows[index]

    def update_link(
        self, index: int, label: str | None = None, link: str | None = None
    ) -> LinkRow:
        row = self.rows[index]
        if label is not None:
            row.label = label
        if link is not None:
            row.link = link
        return row

    def submitted_links(self) -> list[dict[str, str]]:
        """Rows that are both labeled and validly-URLed, in order."""
        return [
            row.to_link().to_dict()
            for row in self.rows
            if is_submittable(row.to_link())
        ]

    # Steps

    def validate(self) -> bool:
        """Fill ``errors`` with inline messages for required fields."""
        self.errors = {}
        if not normalize_username(self.username):
            self.errors["username"] = "Username is required"
        if not self.catchphrase.strip():
            self.errors["catchphrase"] = "Catchphrase is required"
        return not self.errors

    async def submit(self) -> bool:
        """Stage the signup and move to the payment step."""
        if self.step is not FormStep.COLLECT:
            raise InvalidStepError("submit", self.step)

        self.error = None
        if not self.validate():
            return False

        try:
            self.ticket = await self.api.create_signup(
                username=self.username,
                catchphrase=self.catchphrase,
                links=self.submitted_links(),
            )
        except ApiError as e:
            if e.error_code == "USERNAME_TAKEN":
                self.errors["username"] = e.message
            else:
                self.error = e.message
            return False
        except Exception:
            logger.exception("signup_submit_failed")
            self.error = GENERIC_ERROR
            return False

        self.step = FormStep.PAY
        return True

    def back(self) -> None:
        """The only backwards transition: payment back to the details step."""
        if self.step is not FormStep.PAY:
            raise InvalidStepError("go back", self.step)
        self.error = None
        self.step = FormStep.COLLECT

    async def pay(self, confirmer: PaymentConfirmer) -> bool:
        """Confirm payment, then publish the profile."""
        if self.step is not FormStep.PAY or self.ticket is None:
            raise InvalidStepError("pay", self.step)

        self.error = None
        try:
            result = await confirmer.confirm(self.ticket.client_secret)
        except Exception:
            logger.exception("payment_confirm_failed")
            self.error = GENERIC_ERROR
            return False

        if result.error:
            # Provider messages are shown verbatim.
            self.error = result.error
            return False

        try:
            self.profile = await self.api.complete_signup(
                result.payment_reference or self.ticket.payment_reference
            )
        except ApiError as e:
            self.error = e.message
            return False
        except Exception:
            logger.exception("signup_complete_failed")
            self.error = GENERIC_ERROR
            return False

        self.step = FormStep.DONE
        return True
