"""Fetch every page of the patient collection."""
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from .config import Settings
from .errors import (
    FetchAbortedError,
    FetchExhaustedError,
    PermanentRequestError,
    RetriesExhaustedError,
    UnexpectedResponseShape,
)
from .retry import request_with_retry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Page:
    records: List[Dict[str, Any]]
    # None when the server did not send pagination.hasNext
    has_next: Optional[bool]


def parse_page(payload: Any) -> Page:
    """
    Map one response envelope to a ``Page``.

    Expected shape: ``{"data": [...], "pagination": {"hasNext": bool, ...}}``.
    Items in ``data`` that are not objects are dropped.

    Raises:
        UnexpectedResponseShape: The envelope is not an object, ``data`` is
            missing or not a list, or ``pagination``/``hasNext`` have the
            wrong type.
    """
    if not isinstance(payload, dict):
        raise UnexpectedResponseShape(f"expected a JSON object, got {type(payload).__name__}")

    data = payload.get("data")
    if not isinstance(data, list):
        raise UnexpectedResponseShape(
            f"expected a list under 'data', got {type(data).__name__} (keys: {sorted(payload)})"
        )

    records = [item for item in data if isinstance(item, dict)]
    if len(records) != len(data):
        logger.warning("Dropped %d non-object entries from page data", len(data) - len(records))

    pagination = payload.get("pagination")
    if pagination is None:
        return Page(records, None)
    if not isinstance(pagination, dict):
        raise UnexpectedResponseShape(f"expected 'pagination' to be an object, got {type(pagination).__name__}")

    has_next = pagination.get("hasNext")
    if has_next is not None and not isinstance(has_next, bool):
        raise UnexpectedResponseShape(f"expected 'pagination.hasNext' to be a boolean, got {has_next!r}")
    return Page(records, has_next)


def fetch_page(settings: Settings, page: int) -> Any:
    """GET one page through the fetch retry policy and return the decoded body."""
    params = {"page": page, "limit": settings.page_size}
    headers = settings.headers()

    def send():
        logger.debug("GET %s %s", settings.patients_url, params)
        return requests.get(settings.patients_url, headers=headers, params=params, timeout=settings.request_timeout)

    try:
        return request_with_retry(send, settings.fetch_policy(), description=f"GET page {page}")
    except PermanentRequestError as e:
        hint = " (check the patients endpoint URL)" if e.status_code == 404 else ""
        raise FetchAbortedError(
            f"Fetching page {page} aborted: {e}{hint}", status_code=e.status_code, attempt=e.attempt, page=page
        ) from e
    except RetriesExhaustedError as e:
        raise FetchExhaustedError(
            f"Fetching page {page} exhausted retries: {e}", status_code=e.status_code, attempt=e.attempt, page=page
        ) from e


def fetch_all_patients(settings: Settings) -> List[Dict[str, Any]]:
    """
    Collect patient records from every page, starting at page 1.

    A terminal failure on any page raises and discards what was gathered.
    A malformed envelope stops pagination and keeps the earlier pages.
    """
    patients: List[Dict[str, Any]] = []
    page = 1

    while True:
        if page > settings.max_pages:
            logger.warning("Stopping after %d pages; server still reports more", settings.max_pages)
            break

        payload = fetch_page(settings, page)
        try:
            result = parse_page(payload)
        except UnexpectedResponseShape as e:
            logger.error("Unexpected response shape on page %d, stopping pagination: %s", page, e)
            break

        patients.extend(result.records)
        logger.info("Page %d: %d records (total %d)", page, len(result.records), len(patients))

        if result.has_next is None:
            # no continuation flag, so keep going only while pages have data
            logger.warning("Page %d has no pagination.hasNext flag", page)
            if not result.records:
                break
        elif not result.has_next:
            break
        page += 1

    return patients
