"""Turn raw patient records into alert categories."""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Set

from .scoring import (
    is_fever,
    parse_age,
    parse_bp,
    parse_temp,
    score_age,
    score_bp,
    score_temp,
)

logger = logging.getLogger(__name__)

HIGH_RISK_THRESHOLD = 4


@dataclass(frozen=True)
class PatientAssessment:
    patient_id: str
    bp_score: int
    temp_score: int
    age_score: int
    bp_valid: bool
    temp_valid: bool
    age_valid: bool
    temperature: Optional[float] = None

    @property
    def total_score(self) -> int:
        return self.bp_score + self.temp_score + self.age_score

    @property
    def has_invalid_metric(self) -> bool:
        return not (self.bp_valid and self.temp_valid and self.age_valid)

    @property
    def has_valid_metric(self) -> bool:
        return self.bp_valid or self.temp_valid or self.age_valid

    @property
    def is_high_risk(self) -> bool:
        # a record with nothing parseable is a data issue, not a risk signal
        return self.total_score >= HIGH_RISK_THRESHOLD and self.has_valid_metric

    @property
    def has_fever(self) -> bool:
        return self.temp_valid and is_fever(self.temperature)


@dataclass
class AlertSet:
    """Patient ids per alert category, without duplicates, in first-seen order."""

    high_risk: List[str] = field(default_factory=list)
    fever: List[str] = field(default_factory=list)
    data_quality_issues: List[str] = field(default_factory=list)
    # category name -> ids already in that list
    _seen: Dict[str, Set[str]] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self):
        for name in ("high_risk", "fever", "data_quality_issues"):
            self._seen[name] = set(getattr(self, name))

    def _append(self, name: str, pid: str) -> None:
        seen = self._seen[name]
        if pid not in seen:
            seen.add(pid)
            getattr(self, name).append(pid)

    def add(self, assessment: PatientAssessment) -> None:
        pid = assessment.patient_id
        if assessment.is_high_risk:
            self._append("high_risk", pid)
        if assessment.has_fever:
            self._append("fever", pid)
        if assessment.has_invalid_metric:
            self._append("data_quality_issues", pid)

    def to_payload(self) -> Dict[str, List[str]]:
        return {
            "high_risk_patients": list(self.high_risk),
            "fever_patients": list(self.fever),
            "data_quality_issues": list(self.data_quality_issues),
        }

    def counts(self) -> Dict[str, int]:
        return {key: len(ids) for key, ids in self.to_payload().items()}


def patient_id_of(record: Dict[str, Any]) -> Optional[str]:
    """Return the record's id as a non-blank string, or None if it has no usable one."""
    pid = record.get("patient_id")
    if pid is None or isinstance(pid, bool):
        return None
    if isinstance(pid, int):
        pid = str(pid)
    if not isinstance(pid, str):
        return None
    pid = pid.strip()
    return pid or None


def assess_patient(record: Any) -> Optional[PatientAssessment]:
    """Score one record. Returns None when it cannot be attributed to a patient."""
    if not isinstance(record, dict):
        return None
    pid = patient_id_of(record)
    if pid is None:
        return None

    bp = parse_bp(record.get("blood_pressure"))
    temp = parse_temp(record.get("temperature"))
    age = parse_age(record.get("age"))

    return PatientAssessment(
        patient_id=pid,
        bp_score=score_bp(bp),
        temp_score=score_temp(temp),
        age_score=score_age(age),
        bp_valid=bp is not None,
        temp_valid=temp is not None,
        age_valid=age is not None,
        temperature=temp,
    )


def classify(records: Iterable[Any]) -> AlertSet:
    alerts = AlertSet()
    skipped = 0
    for record in records:
        assessment = assess_patient(record)
        if assessment is None:
            skipped += 1
            continue
        logger.debug(
            "%s: bp=%d temp=%d age=%d total=%d",
            assessment.patient_id,
            assessment.bp_score,
            assessment.temp_score,
            assessment.age_score,
            assessment.total_score,
        )
        alerts.add(assessment)

    if skipped:
        logger.warning("Skipped %d records without a usable patient_id", skipped)
    logger.info("Alert counts: %s", alerts.counts())
    return alerts
