"""Lenient conversion of free-form strings into domain enums.

Lookups ignore case and surrounding whitespace, and treat internal spaces and
hyphens as underscores, so "In Progress", "in-progress" and "IN_PROGRESS" all
resolve alike. Unknown input returns None instead of raising.
"""

import re
from enum import StrEnum
from typing import Any, TypeVar

from stratibreak.models.enums import (
    CriticalityLevel,
    GapCategory,
    GapStatus,
    GapType,
    ImpactLevel,
    Priority,
    RootCauseCategory,
    SeverityLevel,
    Timeframe,
)

E = TypeVar("E", bound=StrEnum)

_SEPARATORS = re.compile(r"[\s\-]+")


def _normalize(value: str) -> str:
    return _SEPARATORS.sub("_", value.strip()).lower()


def coerce_enum(enum_cls: type[E], value: Any) -> E | None:
    if isinstance(value, enum_cls):
        return value
    if not isinstance(value, str):
        return None
    key = _normalize(value)
    for member in enum_cls:
        if _normalize(member.value) == key:
            return member
    return None


def to_gap_type(value: Any) -> GapType | None:
    return coerce_enum(GapType, value)


def to_severity_level(value: Any) -> SeverityLevel | None:
    return coerce_enum(SeverityLevel, value)


def to_priority(value: Any) -> Priority | None:
    return coerce_enum(Priority, value)


def to_root_cause_category(value: Any) -> RootCauseCategory | None:
    return coerce_enum(RootCauseCategory, value)


def to_impact_level(value: Any) -> ImpactLevel | None:
    return coerce_enum(ImpactLevel, value)


def to_criticality_level(value: Any) -> CriticalityLevel | None:
    return coerce_enum(CriticalityLevel, value)


def to_gap_category(value: Any) -> GapCategory | None:
    return coerce_enum(GapCategory, value)


def to_gap_status(value: Any) -> GapStatus | None:
    return coerce_enum(GapStatus, value)


def to_timeframe(value: Any) -> Timeframe | None:
    return coerce_enum(Timeframe, value)
