"""Field-level validation of raw gap payloads.

Each ``validate_*`` function takes a plain mapping (as decoded from JSON) and
returns every problem found as a ``FieldError``. An empty list means valid.
Nested records report indexed paths such as ``root_causes[1].confidence``.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from stratibreak.exceptions import DataValidationError
from stratibreak.models.enums import GapCategory, GapStatus, ImpactType
from stratibreak.validation import predicates as p

MAX_ROOT_CAUSES = 20
MAX_AFFECTED_AREAS = 10
MAX_TAGS = 20


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


def _path(prefix: str, name: str) -> str:
    return f"{prefix}.{name}" if prefix else name


def _enum_values(enum_cls: type) -> str:
    return ", ".join(m.value for m in enum_cls)


def _missing(data: Mapping[str, Any], name: str) -> bool:
    value = data.get(name)
    return value is None or (isinstance(value, str) and not value.strip())


def validate_root_cause(data: Any, prefix: str = "") -> list[FieldError]:
    if not isinstance(data, Mapping):
        return [FieldError(prefix or "root_cause", "must be an object")]

    errors: list[FieldError] = []
    if not p.is_valid_root_cause_category(data.get("category")):
        errors.append(FieldError(
            _path(prefix, "category"),
            "must be one of: people, process, technology, environment, management, external",
        ))
    if not p.is_valid_length(data.get("description"), 10, 500):
        errors.append(FieldError(
            _path(prefix, "description"), "must be 10-500 characters"
        ))
    if not p.is_valid_confidence(data.get("confidence")):
        errors.append(FieldError(
            _path(prefix, "confidence"), "must be a number between 0 and 1"
        ))
    if not p.is_valid_contribution_weight(data.get("contribution_weight")):
        errors.append(FieldError(
            _path(prefix, "contribution_weight"), "must be between 0 and 1"
        ))
    evidence = data.get("evidence")
    if evidence is not None and not p.is_valid_evidence(evidence):
        errors.append(FieldError(
            _path(prefix, "evidence"),
            "must be a list of evidence strings of at least 10 characters each",
        ))
    return errors


def validate_impact(data: Any, prefix: str = "") -> list[FieldError]:
    if not isinstance(data, Mapping):
        return [FieldError(prefix or "impact", "must be an object")]

    errors: list[FieldError] = []
    impact_type = data.get("type")
    if not (isinstance(impact_type, str) and impact_type in {t.value for t in ImpactType}):
        errors.append(FieldError(
            _path(prefix, "type"), f"must be one of: {_enum_values(ImpactType)}"
        ))
    if not p.is_valid_impact_level(data.get("level")):
        errors.append(FieldError(
            _path(prefix, "level"),
            "must be one of: negligible, low, medium, high, severe",
        ))
    if _missing(data, "description"):
        errors.append(FieldError(_path(prefix, "description"), "is required"))
    quantitative = data.get("quantitative_value")
    if quantitative is not None and not p.is_number(quantitative):
        errors.append(FieldError(
            _path(prefix, "quantitative_value"), "must be a number"
        ))
    stakeholders = data.get("affected_stakeholders")
    if stakeholders is not None and not p.are_valid_stakeholders(stakeholders):
        errors.append(FieldError(
            _path(prefix, "affected_stakeholders"),
            "must be emails or names of 3-100 characters",
        ))
    return errors


def validate_project_area(data: Any, prefix: str = "") -> list[FieldError]:
    if not isinstance(data, Mapping):
        return [FieldError(prefix or "project_area", "must be an object")]

    errors: list[FieldError] = []
    if not p.is_valid_length(data.get("name"), 1, 100):
        errors.append(FieldError(_path(prefix, "name"), "must be 1-100 characters"))
    criticality = data.get("criticality")
    if criticality is not None and not p.is_valid_criticality_level(criticality):
        errors.append(FieldError(
            _path(prefix, "criticality"), "must be one of: low, medium, high, critical"
        ))
    return errors


def validate_gap(data: Any) -> list[FieldError]:
    """Validate a gap creation payload."""
    if not isinstance(data, Mapping):
        return [FieldError("gap", "must be an object")]

    errors: list[FieldError] = []

    if not p.is_valid_uuid(data.get("project_id")):
        errors.append(FieldError("project_id", "must be a valid UUID"))
    if not p.is_valid_gap_type(data.get("type")):
        errors.append(FieldError("type", "must be a valid gap type"))
    category = data.get("category")
    if category is not None and category not in {c.value for c in GapCategory}:
        errors.append(FieldError(
            "category", f"must be one of: {_enum_values(GapCategory)}"
        ))
    if not p.is_valid_severity_level(data.get("severity")):
        errors.append(FieldError("severity", "must be one of: low, medium, high, critical"))
    priority = data.get("priority")
    if priority is not None and not p.is_valid_priority(priority):
        errors.append(FieldError("priority", "must be one of: low, medium, high, urgent"))
    status = data.get("status")
    if status is not None and status not in {s.value for s in GapStatus}:
        errors.append(FieldError("status", f"must be one of: {_enum_values(GapStatus)}"))

    if not p.is_valid_length(data.get("title"), 1, 255):
        errors.append(FieldError("title", "must be 1-255 characters"))
    if not p.is_valid_length(data.get("description"), 1, 2000):
        errors.append(FieldError("description", "must be 1-2000 characters"))

    for name in ("current_value", "target_value"):
        if _missing(data, name):
            errors.append(FieldError(name, "is required"))
        elif not (p.is_number(data[name]) or isinstance(data[name], str)):
            errors.append(FieldError(name, "must be a number or a string"))

    if not p.is_number(data.get("variance")):
        errors.append(FieldError("variance", "must be a number"))
    elif not p.is_reasonable_variance(data["variance"]):
        errors.append(FieldError(
            "variance", "must be reasonable (between -1000% and +1000%)"
        ))

    confidence = data.get("confidence")
    if confidence is not None and not p.is_valid_confidence(confidence):
        errors.append(FieldError("confidence", "must be a number between 0 and 1"))

    errors.extend(_validate_list(
        data, "root_causes", MAX_ROOT_CAUSES, validate_root_cause
    ))
    errors.extend(_validate_list(
        data, "affected_areas", MAX_AFFECTED_AREAS, validate_project_area
    ))

    impact = data.get("estimated_impact")
    if impact is not None:
        errors.extend(validate_impact(impact, "estimated_impact"))

    tags = data.get("tags")
    if tags is not None:
        if not isinstance(tags, list) or len(tags) > MAX_TAGS:
            errors.append(FieldError("tags", f"must be a list of at most {MAX_TAGS} tags"))
        elif not p.are_valid_tags(tags):
            errors.append(FieldError(
                "tags",
                "tags must be 1-50 characters of letters, digits, hyphens or underscores",
            ))

    return errors


def _validate_list(data, name, limit, validator) -> list[FieldError]:
    items = data.get(name)
    if items is None:
        return []
    if not isinstance(items, list):
        return [FieldError(name, "must be a list")]
    if len(items) > limit:
        return [FieldError(name, f"must contain at most {limit} entries")]

    errors: list[FieldError] = []
    for index, item in enumerate(items):
        errors.extend(validator(item, f"{name}[{index}]"))
    return errors


def validate_gap_filter(data: Any) -> list[FieldError]:
    """Validate query filters for listing stored gaps."""
    if not isinstance(data, Mapping):
        return [FieldError("filter", "must be an object")]

    errors: list[FieldError] = []
    gap_type = data.get("type")
    if gap_type is not None and not p.is_valid_gap_type(gap_type):
        errors.append(FieldError("type", "must be a valid gap type"))
    category = data.get("category")
    if category is not None and category not in {c.value for c in GapCategory}:
        errors.append(FieldError("category", f"must be one of: {_enum_values(GapCategory)}"))
    severity = data.get("severity")
    if severity is not None and not p.is_valid_severity_level(severity):
        errors.append(FieldError("severity", "must be one of: low, medium, high, critical"))
    status = data.get("status")
    if status is not None and status not in {s.value for s in GapStatus}:
        errors.append(FieldError("status", f"must be one of: {_enum_values(GapStatus)}"))

    tags = data.get("tags")
    if tags is not None and not (
        isinstance(tags, list) and all(isinstance(tag, str) for tag in tags)
    ):
        errors.append(FieldError("tags", "must be a list of strings"))

    bounds = {}
    for name in ("min_confidence", "max_confidence"):
        value = data.get(name)
        if value is None:
            continue
        if not p.is_valid_confidence(value):
            errors.append(FieldError(name, "must be a number between 0 and 1"))
        else:
            bounds[name] = value
    if len(bounds) == 2 and bounds["min_confidence"] > bounds["max_confidence"]:
        errors.append(FieldError(
            "min_confidence", "must not be greater than max_confidence"
        ))
    return errors


def raise_for_errors(errors: list[FieldError]) -> None:
    """Raise DataValidationError for the first error, if there is one."""
    if errors:
        raise DataValidationError(errors[0].field, errors[0].message)
