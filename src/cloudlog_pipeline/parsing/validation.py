"""
Declarative field validation for structured events.

Each format declares its rules once as a module-level tuple of
ValidationRule. Validation is all-or-nothing: a single violation rejects
the whole event.
"""

import string
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Optional


class Charset(Enum):
    """Character sets a string field can be restricted to."""

    ALPHANUMERIC = "alphanum"
    HEXADECIMAL = "hexadecimal"


_CHARSETS: dict[Charset, frozenset[str]] = {
    Charset.ALPHANUMERIC: frozenset(string.ascii_letters + string.digits),
    Charset.HEXADECIMAL: frozenset(string.hexdigits),
}


@dataclass(frozen=True)
class ValidationRule:
    """
    Constraint on a single event field.

    Attributes:
        field: Dotted attribute path on the event (e.g. "http_status",
            "core.event_time")
        required: Whether the field must be present (not None)
        min_value: Inclusive lower bound for numeric fields
        max_value: Exclusive upper bound for numeric fields
        length: Exact length for string fields
        max_length: Maximum length for string fields
        charset: Allowed characters for string fields

    Constraints other than `required` are skipped for absent fields.
    """

    field: str
    required: bool = False
    min_value: Optional[int] = None
    max_value: Optional[int] = None
    length: Optional[int] = None
    max_length: Optional[int] = None
    charset: Optional[Charset] = None


_MISSING = object()


def get_field_value(event: Any, path: str) -> Any:
    """
    Resolve a dotted attribute path on an event.

    Returns None when any segment of the path is missing.
    """
    value = event
    for name in path.split("."):
        value = getattr(value, name, _MISSING)
        if value is _MISSING or value is None:
            return None
    return value


def check_rule(rule: ValidationRule, value: Any) -> Optional[str]:
    """
    Evaluate one rule against a field value.

    Returns:
        Error message, or None if the value satisfies the rule
    """
    if value is None:
        if rule.required:
            return f"Required field '{rule.field}' is missing"
        return None

    if rule.min_value is not None or rule.max_value is not None:
        if not isinstance(value, int) or isinstance(value, bool):
            return f"Field '{rule.field}' must be an integer, got {value!r}"
        if rule.min_value is not None and value < rule.min_value:
            return f"Field '{rule.field}' is below minimum {rule.min_value}: {value}"
        if rule.max_value is not None and value >= rule.max_value:
            return (
                f"Field '{rule.field}' must be less than {rule.max_value}: {value}"
            )

    if rule.length is not None or rule.max_length is not None or rule.charset:
        if not isinstance(value, str):
            return f"Field '{rule.field}' must be a string, got {value!r}"
        if rule.length is not None and len(value) != rule.length:
            return (
                f"Field '{rule.field}' must be {rule.length} characters long, "
                f"got {len(value)}"
            )
        if rule.max_length is not None and len(value) > rule.max_length:
            return (
                f"Field '{rule.field}' exceeds maximum length: "
                f"{len(value)} > {rule.max_length}"
            )
        if rule.charset is not None:
            allowed = _CHARSETS[rule.charset]
            if not value or any(ch not in allowed for ch in value):
                return (
                    f"Field '{rule.field}' must be {rule.charset.value}: {value!r}"
                )

    return None


def validate_event(
    event: Any, rules: Iterable[ValidationRule]
) -> tuple[bool, list[str]]:
    """
    Validate an event against every rule.

    Args:
        event: Enriched event
        rules: Rules declared for the event's format

    Returns:
        Tuple of (is_valid, list of error messages)
    """
    errors = []
    for rule in rules:
        error = check_rule(rule, get_field_value(event, rule.field))
        if error:
            errors.append(error)

    return (len(errors) == 0, errors)
