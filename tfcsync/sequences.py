"""Small helpers for sequences."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")


def remove_at(items: Sequence[T], index: int) -> list[T]:
    """Return a new list holding items without the element at index.

    Raises IndexError if index is out of range.
    """
    result = list(items)
    del result[index]
    return result