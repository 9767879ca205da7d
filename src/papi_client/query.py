from __future__ import annotations

from enum import Enum
from typing import Any, Mapping, Optional
from urllib.parse import quote, urlencode


def wire_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def literal_bool(value: bool) -> str:
    """For flags that are always sent, even when false."""
    return "true" if value else "false"


def _is_zero(value: Any) -> bool:
    if value is None or value is False:
        return True
    if isinstance(value, (str, list, tuple)) and len(value) == 0:
        return True
    return isinstance(value, int) and not isinstance(value, bool) and value == 0


def _encode(value: Any) -> str:
    value = wire_value(value)
    if value is True:
        return "true"
    if isinstance(value, (list, tuple)):
        return ",".join(str(wire_value(v)) for v in value)
    return str(value)


def build_query(params: Optional[Mapping[str, Any]]) -> str:
    """
    Encode query parameters.
    - zero values (None, "", 0, False, empty list) are omitted
    - keys are sorted alphabetically
    - list values are comma-joined into a single parameter
    """
    if not params:
        return ""
    pairs = [
        (key, _encode(params[key]))
        for key in sorted(params)
        if not _is_zero(wire_value(params[key]))
    ]
    return urlencode(pairs, safe=",")


def build_path(template: str, **segments: Any) -> str:
    escaped = {k: quote(str(wire_value(v)), safe="") for k, v in segments.items()}
    return template.format(**escaped)


def build_url(path: str, params: Optional[Mapping[str, Any]] = None) -> str:
    query = build_query(params)
    return f"{path}?{query}" if query else path


__all__ = ["build_query", "build_path", "build_url", "literal_bool", "wire_value"]
