"""Input validation: boolean predicates and field-level rules."""

from stratibreak.validation.rules import (
    FieldError,
    raise_for_errors,
    validate_gap,
    validate_gap_filter,
    validate_impact,
    validate_project_area,
    validate_root_cause,
)

__all__ = [
    "FieldError",
    "raise_for_errors",
    "validate_gap",
    "validate_gap_filter",
    "validate_impact",
    "validate_project_area",
    "validate_root_cause",
]
