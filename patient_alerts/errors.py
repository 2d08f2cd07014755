"""Exceptions raised by the fetch / classify / submit pipeline."""

from typing import Optional


class AssessmentError(Exception):
    """Base class for every error this package raises."""


class RequestFailedError(AssessmentError):
    def __init__(self, message: str, status_code: Optional[int] = None, attempt: int = 0):
        super().__init__(message)
        self.status_code = status_code
        self.attempt = attempt


class PermanentRequestError(RequestFailedError):
    """The server answered with a status that retrying cannot fix."""


class RetriesExhaustedError(RequestFailedError):
    """Every attempt allowed by the retry policy failed."""


class UnexpectedResponseShape(AssessmentError):
    """A page response did not look like the pagination envelope."""


class FetchError(AssessmentError):
    def __init__(self, message: str, status_code: Optional[int] = None, attempt: int = 0, page: int = 0):
        super().__init__(message)
        self.status_code = status_code
        self.attempt = attempt
        self.page = page


class FetchExhaustedError(FetchError):
    pass


class FetchAbortedError(FetchError):
    pass


class SubmissionExhaustedError(AssessmentError):
    def __init__(self, message: str, status_code: Optional[int] = None, attempt: int = 0):
        super().__init__(message)
        self.status_code = status_code
        self.attempt = attempt


class NoPatientsError(AssessmentError):
    """The patient collection came back empty."""
