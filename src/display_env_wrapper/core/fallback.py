"""Ordered first-non-empty-wins evaluation of fallback steps."""

from collections.abc import Callable, Iterable
from typing import TypeVar

T = TypeVar("T")

Step = tuple[str, Callable[[], T | None]]


def first_result(steps: Iterable[Step]) -> tuple[str, T] | None:
    """Run ``steps`` in order and stop at the first one returning a value.

    Each step is a ``(name, callable)`` pair. Empty strings and None count as
    no result. Steps after the first success are never called.

    Returns:
        ``(name, value)`` of the winning step, or None if all came up empty.
    """
    for name, step in steps:
        value = step()
        if value:
            return name, value
    return None
