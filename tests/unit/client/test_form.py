"""Unit tests for the multi-step ProfileForm."""

from typing import Any

import pytest

from client.api import ApiError, SignupTicket
from client.form import (
    GENERIC_ERROR,
    FormStep,
    InvalidStepError,
    LinkRow,
    PaymentResult,
    ProfileForm,
)


class FakeSignupApi:
    def __init__(self) -> None:
        self.created: list[dict[str, Any]] = []
        self.completed: list[str] = []
        self.create_error: Exception | None = None
        self.complete_error: Exception | None = None

    async def create_signup(
        self, username: str, catchphrase: str, links: list[dict[str, str]]
    ) -> SignupTicket:
        self.created.append({"username": username, "catchphrase": catchphrase, "links": links})
        if self.create_error:
            raise self.create_error
        return SignupTicket(payment_reference="pi_1", client_secret="pi_1_secret", username="alice")

    async def complete_signup(self, payment_reference: str) -> dict[str, Any]:
        self.completed.append(payment_reference)
        if self.complete_error:
            raise self.complete_error
        return {"username": "alice", "catchphrase": "hi", "links": []}


class FakeConfirmer:
    def __init__(self, result: PaymentResult) -> None:
        self.result = result
        self.secrets: list[str] = []

    async def confirm(self, client_secret: str) -> PaymentResult:
        self.secrets.append(client_secret)
        return self.result


@pytest.fixture
def api() -> FakeSignupApi:
    return FakeSignupApi()


@pytest.fixture
def form(api: FakeSignupApi) -> ProfileForm:
    return ProfileForm(api=api, username="@Alice", catchphrase="hi")


class TestLinkRows:
    def test_starts_with_one_empty_row(self, form: ProfileForm):
        assert form.rows == [LinkRow()]

    def test_url_error_only_for_filled_invalid_rows(self):
        assert LinkRow(label="a", link="").url_error is None
        assert LinkRow(label="a", link="https://x.com").url_error is None
        assert LinkRow(label="a", link="notaurl").url_error == "Enter a valid URL"

    def test_submitted_links_keep_only_labeled_valid_rows(self, form: ProfileForm):
        form.update_link(0, label="a", link="https://x.com")
        form.add_link()
        form.update_link(1, label="", link="https://y.com")
        form.add_link()
        form.update_link(2, label="c", link="notaurl")

        assert form.submitted_links() == [{"label": "a", "link": "https://x.com"}]

    def test_remove_link(self, form: ProfileForm):
        form.add_link()
        form.update_link(1, label="b", link="https://b.dev")
        form.remove_link(0)

        assert form.rows == [LinkRow(label="b", link="https://b.dev")]


class TestSubmit:
    @pytest.mark.asyncio
    async def test_moves_to_payment(self, form: ProfileForm, api: FakeSignupApi):
        form.update_link(0, label="a", link="https://x.com")

        assert await form.submit()

        assert form.step is FormStep.PAY
        assert form.ticket is not None
        assert api.created[0]["links"] == [{"label": "a", "link": "https://x.com"}]

    @pytest.mark.asyncio
    async def test_required_fields_block_submission(self, api: FakeSignupApi):
        form = ProfileForm(api=api, username=" @ ", catchphrase="  ")

        assert not await form.submit()

        assert set(form.errors) == {"username", "catchphrase"}
        assert form.step is FormStep.COLLECT
        assert api.created == []

    @pytest.mark.asyncio
    async def test_taken_username_shown_inline(self, form: ProfileForm, api: FakeSignupApi):
        api.create_error = ApiError(409, "USERNAME_TAKEN", "Username already exists")

        assert not await form.submit()

        assert form.errors["username"] == "Username already exists"
        assert form.error is None
        assert form.step is FormStep.COLLECT
        assert form.username == "@Alice"

    @pytest.mark.asyncio
    async def test_unexpected_failure_shows_generic_error(
        self, form: ProfileForm, api: FakeSignupApi
    ):
        api.create_error = ConnectionError("offline")

        assert not await form.submit()

        assert form.error == GENERIC_ERROR
        assert form.catchphrase == "hi"

    @pytest.mark.asyncio
    async def test_cannot_submit_twice(self, form: ProfileForm):
        await form.submit()

        with pytest.raises(InvalidStepError):
            await form.submit()


class TestPay:
    @pytest.mark.asyncio
    async def test_success_completes_signup(self, form: ProfileForm, api: FakeSignupApi):
        await form.submit()
        confirmer = FakeConfirmer(PaymentResult(payment_reference="pi_1"))

        assert await form.pay(confirmer)

        assert confirmer.secrets == ["pi_1_secret"]
        assert api.completed == ["pi_1"]
        assert form.step is FormStep.DONE
        assert form.profile is not None

    @pytest.mark.asyncio
    async def test_provider_error_shown_verbatim(self, form: ProfileForm, api: FakeSignupApi):
        await form.submit()
        confirmer = FakeConfirmer(PaymentResult(error="Your card was declined."))

        assert not await form.pay(confirmer)

        assert form.error == "Your card was declined."
        assert form.step is FormStep.PAY
        assert api.completed == []

    @pytest.mark.asyncio
    async def test_retry_after_failure(self, form: ProfileForm, api: FakeSignupApi):
        await form.submit()
        api.complete_error = ApiError(400, "PAYMENT_NOT_COMPLETED", "Payment not completed")
        confirmer = FakeConfirmer(PaymentResult(payment_reference="pi_1"))

        assert not await form.pay(confirmer)
        assert form.error == "Payment not completed"

        api.complete_error = None
        assert await form.pay(confirmer)
        assert form.error is None
        assert form.step is FormStep.DONE

    @pytest.mark.asyncio
    async def test_cannot_pay_before_submit(self, form: ProfileForm):
        with pytest.raises(InvalidStepError):
            await form.pay(FakeConfirmer(PaymentResult(payment_reference="pi_1")))


class TestBack:
    @pytest.mark.asyncio
    async def test_back_keeps_field_values(self, form: ProfileForm):
        form.update_link(0, label="a", link="https://x.com")
        await form.submit()

        form.back()

        assert form.step is FormStep.COLLECT
        assert form.username == "@Alice"
        assert form.rows[0].link == "https://x.com"

    def test_back_only_from_payment(self, form: ProfileForm):
        with pytest.raises(InvalidStepError):
            form.back()

    @pytest.mark.asyncio
    async def test_no_way_back_from_done(self, form: ProfileForm):
        await form.submit()
        await form.pay(FakeConfirmer(PaymentResult(payment_reference="pi_1")))

        with pytest.raises(InvalidStepError):
            form.back()
