"""
Retry policy shared by the patient fetcher and the result submitter.

A ``RetryPolicy`` only answers two questions: how long to wait after a
failed attempt, and whether a status code is worth another attempt.
``request_with_retry`` runs the loop.
"""
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, FrozenSet, Optional

import requests

from .errors import PermanentRequestError, RetriesExhaustedError

logger = logging.getLogger(__name__)

BACKOFF_STRATEGIES = ("exponential", "linear")


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 5
    initial_delay: float = 0.5
    backoff: str = "exponential"
    retry_client_errors: bool = False
    fatal_statuses: FrozenSet[int] = frozenset()

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.backoff not in BACKOFF_STRATEGIES:
            raise ValueError(f"Unknown backoff strategy: {self.backoff!r}")

    def delay(self, attempt: int) -> float:
        """Seconds to wait after failed attempt number ``attempt`` (1-based)."""
        if self.backoff == "linear":
            return self.initial_delay * attempt
        return self.initial_delay * 2 ** (attempt - 1)

    def is_retryable(self, status_code: int) -> bool:
        if status_code in self.fatal_statuses:
            return False
        if status_code == 429 or status_code >= 500:
            return True
        return self.retry_client_errors


def json_body(response: requests.Response) -> Any:
    return response.json()


def _body_snippet(response) -> str:
    return str(getattr(response, "text", ""))[:200]


def request_with_retry(
    send: Callable[[], requests.Response],
    policy: RetryPolicy,
    parse: Callable[[requests.Response], Any] = json_body,
    description: str = "request",
) -> Any:
    """
    Call ``send`` until it returns a 2xx response that ``parse`` accepts.

    Network errors and bodies that fail to decode (``ValueError``) use up
    one attempt each, the same as a retryable status.

    Raises:
        PermanentRequestError: The status is not retryable under ``policy``.
        RetriesExhaustedError: All ``policy.max_attempts`` attempts failed.
    """
    last_status: Optional[int] = None
    last_error = "no attempt made"

    for attempt in range(1, policy.max_attempts + 1):
        try:
            response = send()
        except requests.RequestException as e:
            last_status = None
            last_error = f"{type(e).__name__}: {e}"
        else:
            status = response.status_code
            if 200 <= status < 300:
                try:
                    return parse(response)
                except ValueError as e:
                    last_status = status
                    last_error = f"undecodable response body: {e}"
            elif not policy.is_retryable(status):
                logger.error("%s got HTTP %s on attempt %d, not retrying", description, status, attempt)
                raise PermanentRequestError(
                    f"{description} failed with HTTP {status} on attempt {attempt}: {_body_snippet(response)}",
                    status_code=status,
                    attempt=attempt,
                )
            else:
                last_status = status
                last_error = "rate limited (HTTP 429)" if status == 429 else f"HTTP {status}"

        logger.warning(
            "%s attempt %d/%d failed: %s", description, attempt, policy.max_attempts, last_error
        )
        if attempt < policy.max_attempts:
            wait = policy.delay(attempt)
            logger.debug("Sleeping %.2fs before retrying %s", wait, description)
            time.sleep(wait)

    raise RetriesExhaustedError(
        f"{description} failed after {policy.max_attempts} attempts (last error: {last_error})",
        status_code=last_status,
        attempt=policy.max_attempts,
    )
