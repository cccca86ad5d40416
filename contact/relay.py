import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import requests
from django.conf import settings

from .exceptions import RelayError

logger = logging.getLogger("contact")


class RelayFailure(str, Enum):
    PARSE = "parse"
    NETWORK = "network"
    UPSTREAM_STATUS = "upstream_status"


@dataclass(frozen=True)
class RelayResult:
    """Outcome of a single forward to the automation webhook."""

    ok: bool
    failure: Optional[RelayFailure] = None
    status_code: Optional[int] = None
    detail: str = ""

    @classmethod
    def delivered(cls, status_code):
        return cls(ok=True, status_code=status_code)

    @classmethod
    def failed(cls, failure, detail, status_code=None):
        return cls(ok=False, failure=failure, status_code=status_code, detail=detail)


def reject_constant(name):
    raise ValueError(f"{name} is not valid JSON")


def parse_payload(raw_body):
    """Decode a request body as JSON. Any JSON value is accepted."""
    if isinstance(raw_body, (bytes, bytearray)):
        raw_body = raw_body.decode("utf-8")
    # NaN and Infinity are Python extensions, not JSON
    return json.loads(raw_body, parse_constant=reject_constant)


def forward_to_webhook(payload, url=None, timeout=None):
    """
    POST ``payload`` to the webhook and return the response.

    Raises:
        RelayError: the webhook answered with a non-2xx status.
        requests.exceptions.RequestException: the request itself failed.
    """
    url = url or settings.N8N_WEBHOOK_URL
    if timeout is None:
        timeout = settings.N8N_WEBHOOK_TIMEOUT

    response = requests.post(
        url,
        headers={"Content-Type": "application/json"},
        json=payload,
        timeout=timeout,
    )

    if not 200 <= response.status_code < 300:
        raise RelayError(
            f"Failed to send data to n8n: {response.status_code}",
            status_code=response.status_code,
        )
    return response


def relay_submission(raw_body, url=None, timeout=None):
    """
    Parse ``raw_body`` and forward it to the webhook once.

    Never raises for the expected failure modes; the cause is reported
    through the returned ``RelayResult`` instead.
    """
    try:
        payload = parse_payload(raw_body)
    except ValueError as e:
        # JSONDecodeError and UnicodeDecodeError are both ValueErrors
        logger.error(f"Invalid payload received: {str(e)}")
        return RelayResult.failed(RelayFailure.PARSE, str(e))

    try:
        response = forward_to_webhook(payload, url=url, timeout=timeout)
    except RelayError as e:
        logger.error(f"n8n webhook rejected submission: {str(e)}")
        return RelayResult.failed(
            RelayFailure.UPSTREAM_STATUS, str(e), status_code=e.status_code
        )
    except requests.exceptions.RequestException as e:
        logger.error(f"n8n webhook request failed: {str(e)}")
        return RelayResult.failed(RelayFailure.NETWORK, str(e))

    logger.info(f"Submission forwarded to n8n with status {response.status_code}")
    return RelayResult.delivered(response.status_code)
