"""
Per-metric parsing and risk points.

Each ``parse_*`` returns ``None`` when the raw value is missing or does not
have the expected numeric shape; that is what makes a metric invalid.
Each ``score_*`` takes the parsed value and returns 0 for ``None``.
"""
import math
import re
from typing import Any, Optional, Tuple

_INT_RE = re.compile(r"^[+-]?[0-9]+$")
_DECIMAL_RE = re.compile(r"^[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)$")


def _parse_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        text = value.strip()
        if _INT_RE.match(text):
            return int(text)
    return None


def parse_bp(value: Any) -> Optional[Tuple[int, int]]:
    """Parse ``"<systolic>/<diastolic>"`` into two ints."""
    if not isinstance(value, str):
        return None
    parts = value.split("/")
    if len(parts) != 2:
        return None
    systolic, diastolic = (_parse_int(p) for p in parts)
    if systolic is None or diastolic is None:
        return None
    return systolic, diastolic


def parse_temp(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            t = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        # same plain-digits rule as ages, so "99_9" or "1e2" are not numbers
        text = value.strip()
        if not _DECIMAL_RE.match(text):
            return None
        t = float(text)
    else:
        return None
    return t if math.isfinite(t) else None


def parse_age(value: Any) -> Optional[int]:
    return _parse_int(value)


def score_bp(bp: Optional[Tuple[int, int]]) -> int:
    if bp is None:
        return 0
    s, d = bp
    if s >= 140 or d >= 90:
        return 4  # Stage 2
    if s >= 130 or d >= 80:
        return 3  # Stage 1
    if s >= 120 and d < 80:
        return 2  # Elevated
    if s < 120 and d < 80:
        return 1  # Normal
    return 0


def score_temp(temp: Optional[float]) -> int:
    if temp is None:
        return 0
    if temp <= 99.5:
        return 0
    if temp <= 100.9:
        return 1  # low fever
    if temp >= 101.0:
        return 2  # high fever
    # 100.9 < t < 101.0 falls between the published bands
    return 1


def score_age(age: Optional[int]) -> int:
    if age is None:
        return 0
    if age > 65:
        return 2
    # under 40 and 40-65 carry the same weight
    return 1


def is_fever(temp: Optional[float]) -> bool:
    return temp is not None and temp >= 99.6
