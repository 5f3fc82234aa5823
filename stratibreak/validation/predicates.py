"""Boolean predicates over raw input values.

Every predicate is total: malformed input yields False, nothing raises.
"""

import math
import re
from collections.abc import Iterable, Mapping
from datetime import date, datetime
from typing import Any

from stratibreak.models.enums import (
    CriticalityLevel,
    GapType,
    ImpactLevel,
    Priority,
    RootCauseCategory,
    SeverityLevel,
)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)
ALPHANUMERIC_RE = re.compile(r"^[a-zA-Z0-9]+$")
STRONG_PASSWORD_RE = re.compile(
    r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]{8,}$"
)
TAG_RE = re.compile(r"^[a-zA-Z0-9_-]{1,50}$")

MIN_EVIDENCE_LENGTH = 10
MIN_STAKEHOLDER_NAME = 3
MAX_STAKEHOLDER_NAME = 100
MAX_VARIANCE = 10.0  # +/-1000%


# --- Enum membership ---


def _is_member(enum_cls: type, value: Any) -> bool:
    return isinstance(value, str) and value in {m.value for m in enum_cls}


def is_valid_gap_type(value: Any) -> bool:
    return _is_member(GapType, value)


def is_valid_severity_level(value: Any) -> bool:
    return _is_member(SeverityLevel, value)


def is_valid_priority(value: Any) -> bool:
    return _is_member(Priority, value)


def is_valid_root_cause_category(value: Any) -> bool:
    return _is_member(RootCauseCategory, value)


def is_valid_impact_level(value: Any) -> bool:
    return _is_member(ImpactLevel, value)


def is_valid_criticality_level(value: Any) -> bool:
    return _is_member(CriticalityLevel, value)


# --- Numeric ranges ---


def is_number(value: Any) -> bool:
    """True for finite ints and floats. Booleans are not numbers here."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return isinstance(value, int) or math.isfinite(value)


def _in_range(value: Any, low: float, high: float) -> bool:
    return is_number(value) and low <= value <= high


def is_valid_confidence(value: Any) -> bool:
    return _in_range(value, 0.0, 1.0)


def is_valid_percentage(value: Any) -> bool:
    return _in_range(value, 0.0, 100.0)


def is_valid_contribution_weight(value: Any) -> bool:
    return _in_range(value, 0.0, 1.0)


def is_reasonable_variance(value: Any) -> bool:
    return _in_range(value, -MAX_VARIANCE, MAX_VARIANCE)


# --- General ---


def is_valid_email(value: Any) -> bool:
    return isinstance(value, str) and EMAIL_RE.match(value) is not None


def is_valid_uuid(value: Any) -> bool:
    """RFC 4122 UUID, versions 1 through 5."""
    return isinstance(value, str) and UUID_RE.match(value) is not None


def is_not_empty(value: Any) -> bool:
    return value is not None


def is_valid_length(value: Any, min_length: int, max_length: int) -> bool:
    return isinstance(value, str) and min_length <= len(value) <= max_length


def is_alphanumeric(value: Any) -> bool:
    return isinstance(value, str) and ALPHANUMERIC_RE.match(value) is not None


def is_strong_password(value: Any) -> bool:
    """At least 8 characters with an upper, a lower, a digit and one of @$!%*?&."""
    return isinstance(value, str) and STRONG_PASSWORD_RE.match(value) is not None


def is_non_empty_list(value: Any) -> bool:
    return isinstance(value, list) and len(value) > 0


def has_required_properties(value: Any, required: Iterable[str]) -> bool:
    if not isinstance(value, Mapping):
        return False
    return all(value.get(key) is not None for key in required)


def are_valid_tags(value: Any) -> bool:
    if not isinstance(value, list):
        return False
    return all(isinstance(tag, str) and TAG_RE.match(tag) for tag in value)


def is_valid_evidence(value: Any) -> bool:
    if not isinstance(value, list):
        return False
    return all(
        isinstance(item, str) and len(item.strip()) >= MIN_EVIDENCE_LENGTH
        for item in value
    )


def are_valid_stakeholders(value: Any) -> bool:
    if not isinstance(value, list):
        return False
    for item in value:
        if not isinstance(item, str):
            return False
        if is_valid_email(item):
            continue
        if not MIN_STAKEHOLDER_NAME <= len(item.strip()) <= MAX_STAKEHOLDER_NAME:
            return False
    return True


def is_valid_date_range(start: Any, end: Any) -> bool:
    """True when start is strictly before end. Both must be dates of the same kind."""
    if not isinstance(start, (date, datetime)) or not isinstance(end, (date, datetime)):
        return False
    if isinstance(start, datetime) != isinstance(end, datetime):
        return False
    try:
        return start < end
    except TypeError:
        # naive vs aware datetimes
        return False
