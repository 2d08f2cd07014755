"""Fetch patient records, flag risk alerts and submit them to the assessment API."""

from .classifier import AlertSet, PatientAssessment, assess_patient, classify
from .config import Settings
from .errors import (
    AssessmentError,
    FetchAbortedError,
    FetchExhaustedError,
    NoPatientsError,
    SubmissionExhaustedError,
    UnexpectedResponseShape,
)
from .fetcher import fetch_all_patients
from .submitter import submit_results

__version__ = "0.1.0"

__all__ = [
    "AlertSet",
    "AssessmentError",
    "FetchAbortedError",
    "FetchExhaustedError",
    "NoPatientsError",
    "PatientAssessment",
    "Settings",
    "SubmissionExhaustedError",
    "UnexpectedResponseShape",
    "assess_patient",
    "classify",
    "fetch_all_patients",
    "submit_results",
]
