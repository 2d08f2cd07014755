"""POST the alert lists to the assessment endpoint."""
import logging
from typing import Any

import requests

from .classifier import AlertSet
from .config import Settings
from .errors import PermanentRequestError, RetriesExhaustedError, SubmissionExhaustedError
from .retry import request_with_retry

logger = logging.getLogger(__name__)


def _acknowledgement(response: requests.Response) -> Any:
    # a 2xx is enough; the body is only echoed back to the user
    try:
        return response.json()
    except ValueError:
        logger.warning("Submission acknowledgement was not JSON")
        return response.text


def submit_results(alerts: AlertSet, settings: Settings) -> Any:
    """
    Submit ``alerts`` and return the server's acknowledgement.

    Raises:
        SubmissionExhaustedError: A client error was returned, or every
            allowed attempt hit a rate limit, server error or network error.
    """
    payload = alerts.to_payload()
    headers = {**settings.headers(), "Content-Type": "application/json"}

    def send():
        logger.debug("POST %s %s", settings.submit_url, alerts.counts())
        return requests.post(settings.submit_url, headers=headers, json=payload, timeout=settings.request_timeout)

    try:
        ack = request_with_retry(
            send, settings.submit_policy(), parse=_acknowledgement, description="Submission"
        )
    except (PermanentRequestError, RetriesExhaustedError) as e:
        raise SubmissionExhaustedError(str(e), status_code=e.status_code, attempt=e.attempt) from e

    logger.info("Submission accepted")
    return ack
