"""
Contact form state handling.

The form is modelled as an immutable ``FormState`` driven by a pure
``reduce(state, action)`` function, so formatting and validation can be
exercised without any UI. ``ContactFormController`` wires the reducer to
validation and to the HTTP call against the relay endpoint.
"""

import logging
import re
import threading
from dataclasses import asdict, dataclass, field, replace
from enum import Enum
from typing import Optional

import requests
from django.conf import settings
from django.core.exceptions import ValidationError

from .exceptions import SubmissionInProgress, TransmissionError

logger = logging.getLogger("contact")

FIELDS = ("name", "email", "phone", "message")
REQUIRED_FIELDS = ("name", "email", "message")
PHONE_DIGITS = 10

PHONE_PARTS = re.compile(r"(\d{0,3})(\d{0,3})(\d{0,4})")
NON_DIGITS = re.compile(r"\D")

SUCCESS_MESSAGE = "Thanks! Your message has been sent."
SUBMIT_FAILED_MESSAGE = "Failed to submit. Please try again."
PHONE_HINT = "Enter a 10-digit number"
VALIDATION_MESSAGES = {
    "required": "Please fill in name, email, and message.",
    "invalid_phone": "Please enter a valid 10-digit phone number.",
}


def digits_only(value):
    return NON_DIGITS.sub("", value or "")


def format_phone(value):
    """
    Mask a phone number as ``DDD-DDD-DDDD`` while it is being typed.

    Partial input keeps a partial mask (``"55512"`` -> ``"555-12"``).
    Input with more than ten digits is returned as typed.
    """
    match = PHONE_PARTS.fullmatch(digits_only(value))
    if not match:
        return value
    return "-".join(part for part in match.groups() if part)


@dataclass(frozen=True)
class Draft:
    name: str = ""
    email: str = ""
    phone: str = ""
    message: str = ""

    def as_payload(self):
        return asdict(self)


class FormStatus(Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    VALIDATION_FAILED = "validation_failed"
    SUBMITTING = "submitting"
    SUBMITTED = "submitted"
    SUBMIT_FAILED = "submit_failed"


@dataclass(frozen=True)
class FormState:
    draft: Draft = field(default_factory=Draft)
    phone_touched: bool = False
    status: FormStatus = FormStatus.IDLE
    success: Optional[str] = None
    error: Optional[str] = None
    failure: Optional[Exception] = None

    @property
    def submitting(self):
        return self.status is FormStatus.SUBMITTING

    @property
    def phone_invalid(self):
        phone = self.draft.phone
        return bool(
            self.phone_touched and phone and len(digits_only(phone)) != PHONE_DIGITS
        )

    @property
    def phone_hint(self):
        return PHONE_HINT if self.phone_invalid else None


# Actions


@dataclass(frozen=True)
class UpdateField:
    key: str
    value: str


@dataclass(frozen=True)
class SubmitStarted:
    pass


@dataclass(frozen=True)
class TransmitStarted:
    pass


@dataclass(frozen=True)
class ValidationFailed:
    error: ValidationError


@dataclass(frozen=True)
class SubmitSucceeded:
    pass


@dataclass(frozen=True)
class SubmitFailed:
    error: TransmissionError


def reduce(state, action):
    if isinstance(action, UpdateField):
        if action.key not in FIELDS:
            raise KeyError(action.key)
        value = action.value if action.value is not None else ""
        if not isinstance(value, str):
            raise TypeError(
                f"{action.key} must be a string, got {type(value).__name__}"
            )
        phone_touched = state.phone_touched
        if action.key == "phone":
            value = format_phone(value)
            phone_touched = True
        return replace(
            state,
            draft=replace(state.draft, **{action.key: value}),
            phone_touched=phone_touched,
        )

    if isinstance(action, SubmitStarted):
        return replace(
            state,
            status=FormStatus.VALIDATING,
            success=None,
            error=None,
            failure=None,
        )

    if isinstance(action, ValidationFailed):
        return replace(
            state,
            status=FormStatus.VALIDATION_FAILED,
            error=VALIDATION_MESSAGES.get(action.error.code, action.error.message),
            failure=action.error,
        )

    if isinstance(action, TransmitStarted):
        return replace(state, status=FormStatus.SUBMITTING)

    if isinstance(action, SubmitSucceeded):
        return FormState(status=FormStatus.SUBMITTED, success=SUCCESS_MESSAGE)

    if isinstance(action, SubmitFailed):
        return replace(
            state,
            status=FormStatus.SUBMIT_FAILED,
            error=SUBMIT_FAILED_MESSAGE,
            failure=action.error,
        )

    raise TypeError(f"Unknown form action: {action!r}")


def validate(draft, phone_touched):
    """
    Raise ``ValidationError`` unless the draft can be sent.

    Required fields are checked before the phone number.
    """
    if not all(getattr(draft, key).strip() for key in REQUIRED_FIELDS):
        raise ValidationError("missing required fields", code="required")
    if (
        phone_touched
        and draft.phone
        and len(digits_only(draft.phone)) != PHONE_DIGITS
    ):
        raise ValidationError("invalid phone", code="invalid_phone")


def send_submission(draft, endpoint_url, timeout=None):
    """POST the draft to the relay endpoint. Only the HTTP status is inspected."""
    try:
        response = requests.post(
            endpoint_url,
            headers={"Content-Type": "application/json"},
            json=draft.as_payload(),
            timeout=timeout,
        )
    except requests.exceptions.RequestException as e:
        raise TransmissionError(str(e)) from e

    if not 200 <= response.status_code < 300:
        raise TransmissionError(
            f"Relay responded with status {response.status_code}",
            status_code=response.status_code,
        )
    return response


class ContactFormController:
    def __init__(self, endpoint_url=None, timeout=None):
        self.endpoint_url = endpoint_url or settings.CONTACT_ENDPOINT_URL
        self.timeout = timeout
        self.state = FormState()
        self._in_flight = threading.Lock()

    def dispatch(self, action):
        self.state = reduce(self.state, action)
        return self.state

    @property
    def submitting(self):
        return self._in_flight.locked()

    def update_field(self, key, raw_value):
        return self.dispatch(UpdateField(key, raw_value))

    def submit(self):
        """
        Validate the current draft and send it to the relay.

        Returns the resulting ``FormState``. Validation and transmission
        errors are reported on the state, not raised.

        Raises:
            SubmissionInProgress: another submission has not finished yet.
        """
        if not self._in_flight.acquire(blocking=False):
            raise SubmissionInProgress("A submission is already in progress")

        try:
            draft = self.state.draft
            self.dispatch(SubmitStarted())

            try:
                validate(draft, self.state.phone_touched)
            except ValidationError as e:
                logger.info(f"Contact form rejected: {e.message}")
                return self.dispatch(ValidationFailed(e))

            self.dispatch(TransmitStarted())
            try:
                send_submission(draft, self.endpoint_url, timeout=self.timeout)
            except TransmissionError as e:
                logger.warning(f"Contact form submission failed: {e.reason}")
                return self.dispatch(SubmitFailed(e))

            logger.info("Contact form submitted")
            return self.dispatch(SubmitSucceeded())
        finally:
            self._in_flight.release()
