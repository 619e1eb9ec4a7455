"""Batch planning for listing calls.

The metadata service accepts at most three queries per listMetadata call.
"""

from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")

LIST_BATCH_SIZE = 3


def plan_batches(queries: Sequence[T], batch_size: int = LIST_BATCH_SIZE) -> list[list[T]]:
    """Split queries into ordered batches of at most ``batch_size``.

    Args:
        queries: Queries in the order they should be issued
        batch_size: Maximum queries per batch

    Returns:
        Contiguous batches; flattening them yields ``queries`` unchanged

    Raises:
        ValueError: If batch_size is smaller than 1

    Example:
        >>> plan_batches(["a", "b", "c", "d"])
        [['a', 'b', 'c'], ['d']]
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be at least 1, got {batch_size}")

    return [list(queries[start : start + batch_size]) for start in range(0, len(queries), batch_size)]
