"""Normalization helpers: text casing and lenient enum coercion."""

from stratibreak.normalization.coerce import (
    to_criticality_level,
    to_gap_category,
    to_gap_type,
    to_impact_level,
    to_priority,
    to_root_cause_category,
    to_severity_level,
)
from stratibreak.normalization.text import (
    keys_to_camel_case,
    remove_none_values,
    sanitize_string,
    to_camel_case,
    to_kebab_case,
    to_pascal_case,
    truncate_string,
)

__all__ = [
    "keys_to_camel_case",
    "remove_none_values",
    "sanitize_string",
    "to_camel_case",
    "to_criticality_level",
    "to_gap_category",
    "to_gap_type",
    "to_impact_level",
    "to_kebab_case",
    "to_pascal_case",
    "to_priority",
    "to_root_cause_category",
    "to_severity_level",
    "truncate_string",
]
