class ContactError(Exception):
    """Base class for contact pipeline errors."""


class TransmissionError(ContactError):
    """The relay call from the contact form did not succeed.

    ``status_code`` is the HTTP status the relay answered with, or ``None``
    when the request never got a response.
    """

    def __init__(self, reason, status_code=None):
        super().__init__(reason)
        self.reason = reason
        self.status_code = status_code


class SubmissionInProgress(ContactError):
    """A submission is already in flight for this form."""


class RelayError(ContactError):
    """Forwarding a payload to the automation webhook failed."""

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code
