from __future__ import annotations

from typing import Optional, Sequence, TypeVar

from .errors import ResourceNotFoundError

T = TypeVar("T")


def single_item(
    items: Sequence[T], identifier: str, *, operation: Optional[str] = None
) -> T:
    """
    Lookups by id come back as a one-element list.
    Zero items is a not-found naming the identifier that was asked for.
    """
    if not items:
        raise ResourceNotFoundError(identifier, operation=operation)
    return items[0]


__all__ = ["single_item"]
