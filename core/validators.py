"""
Input validation for order queries.

All validators raise ValidationError on invalid input.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Sequence

from core.config import FilterField, normalize_environment
from core.exceptions import ValidationError


@dataclass(frozen=True)
class FilterRequest:
    """A validated order query: date bounds, environment and known filters."""
    start_date: str
    end_date: str
    environment: str
    filters: Dict[str, str] = field(default_factory=dict)


def validate_required_string(value: Any, field: str) -> str:
    """
    Require a non-blank string.

    Raises:
        ValidationError: If value is missing, blank or not a string
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(field, "is required")

    if not isinstance(value, str):
        raise ValidationError(field, "Must be a string", value)

    return value.strip()


def validate_filters(
    filters: Mapping[str, Any],
    fields: Sequence[FilterField],
) -> Dict[str, str]:
    """
    Keep only configured filter fields with non-blank values, falling back
    to each field's declared default.

    Unknown keys are dropped here, so they can reach neither the remote query
    nor the cache key.
    """
    known = {}
    for filter_field in fields:
        value = filters.get(filter_field.name)
        value = "" if value is None else str(value).strip()
        value = value or filter_field.default
        if value:
            known[filter_field.name] = value
    return known


def validate_order_query(
    payload: Mapping[str, Any],
    fields: Sequence[FilterField],
    environment: Optional[str] = None,
) -> FilterRequest:
    """
    Validate a raw order query body.

    Args:
        payload: Request body ({startDate, endDate, environment, ...filters})
        fields: Configured filter fields
        environment: Overrides payload['environment'] when given

    Raises:
        ValidationError: If either date bound is missing
    """
    if not payload.get("startDate") or not payload.get("endDate"):
        raise ValidationError("date_range", "Start date and end date are required.")

    return FilterRequest(
        start_date=validate_required_string(payload.get("startDate"), "startDate"),
        end_date=validate_required_string(payload.get("endDate"), "endDate"),
        environment=normalize_environment(environment or payload.get("environment")),
        filters=validate_filters(payload, fields),
    )
