from __future__ import annotations

import re
from enum import Enum
from typing import Any, Callable, Dict, Iterable, Optional, Sequence, Tuple, Union

from .errors import PapiValidationError

BLANK = "cannot be blank"

Reason = Union[str, "FieldErrors"]
Rule = Callable[[Any], Optional[Reason]]
Check = Tuple[str, Any, Sequence[Rule]]


class FieldErrors(Dict[str, Reason]):
    """
    Field name -> reason, kept in the order fields were checked.
    Nested request objects contribute a FieldErrors of their own.
    """

    def render(self) -> str:
        parts = []
        for field, reason in self.items():
            if isinstance(reason, FieldErrors):
                parts.append(f"{field}: {{{reason.render()}}}")
            else:
                parts.append(f"{field}: {reason}")
        return "; ".join(parts)

    def __str__(self) -> str:
        return self.render()


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, bool):
        return value is False
    if isinstance(value, (str, bytes, list, tuple, dict, set)):
        return len(value) == 0
    if isinstance(value, (int, float)):
        return value == 0
    return False


def collect(*checks: Check) -> FieldErrors:
    """Run each field's rules; the first failing rule per field is reported."""
    errors = FieldErrors()
    for field, value, rules in checks:
        for rule in rules:
            reason = rule(value)
            if reason:
                errors[field] = reason
                break
    return errors


# --- Rules ---


def required(value: Any) -> Optional[str]:
    return BLANK if is_blank(value) else None


def required_when(condition: bool, message: str = BLANK) -> Rule:
    def rule(value: Any) -> Optional[str]:
        return message if condition and is_blank(value) else None

    return rule


def when(condition: bool, *rules: Rule) -> Rule:
    def rule(value: Any) -> Optional[Reason]:
        if not condition:
            return None
        for inner in rules:
            reason = inner(value)
            if reason:
                return reason
        return None

    return rule


def min_value(minimum: int) -> Rule:
    """Unset (zero) values pass; pair with `required` to reject them."""

    def rule(value: Any) -> Optional[str]:
        if is_blank(value):
            return None
        return f"must be no less than {minimum}" if value < minimum else None

    return rule


def max_value(maximum: int) -> Rule:
    def rule(value: Any) -> Optional[str]:
        if is_blank(value):
            return None
        return f"must be no greater than {maximum}" if value > maximum else None

    return rule


def one_of(*allowed: Any, message: Optional[str] = None) -> Rule:
    """Blank values pass; pair with `required` to reject them."""
    values = {a.value if isinstance(a, Enum) else a for a in allowed}

    def rule(value: Any) -> Optional[str]:
        if is_blank(value):
            return None
        raw = value.value if isinstance(value, Enum) else value
        if raw in values:
            return None
        return message or f"value '{raw}' is invalid. Must be one of: " + ", ".join(
            f"'{v}'" for v in _ordered(allowed)
        )

    return rule


def matches(pattern: str, message: str = "must be in a valid format") -> Rule:
    compiled = re.compile(pattern)

    def rule(value: Any) -> Optional[str]:
        if is_blank(value):
            return None
        return None if compiled.match(str(value)) else message

    return rule


def by(predicate: Callable[[Any], Optional[str]]) -> Rule:
    """Wrap a custom predicate that returns a reason or None."""
    return predicate


def nested(value: Any) -> Optional[Reason]:
    """Validate a sub-object with its own rules; errors nest under the parent."""
    if value is None:
        return None
    return value.validation_errors() or None


def each(item_rule: Rule) -> Rule:
    """Apply a rule to every list item; failures are keyed by index."""

    def rule(value: Any) -> Optional[Reason]:
        errors = FieldErrors()
        for index, item in enumerate(value or []):
            reason = item_rule(item)
            if reason:
                errors[str(index)] = reason
        return errors or None

    return rule


def _ordered(allowed: Iterable[Any]) -> list:
    return [a.value if isinstance(a, Enum) else a for a in allowed]


def ensure_valid(request: Any, *, operation: Optional[str] = None) -> None:
    errors = request.validation_errors()
    if errors:
        raise PapiValidationError(errors, operation=operation)


__all__ = [
    "FieldErrors",
    "collect",
    "required",
    "required_when",
    "when",
    "min_value",
    "max_value",
    "one_of",
    "matches",
    "by",
    "nested",
    "each",
    "ensure_valid",
    "is_blank",
    "BLANK",
]
