"""Chunking helpers for batched store calls."""

from typing import Iterator, List, Sequence, TypeVar

T = TypeVar("T")


def chunked(items: Sequence[T], size: int) -> Iterator[List[T]]:
    """Yield consecutive slices of ``items`` of at most ``size`` elements, in order."""
    if size < 1:
        raise ValueError("chunk size must be >= 1")
    for start in range(0, len(items), size):
        yield list(items[start:start + size])


def chunk_count(total: int, size: int) -> int:
    return (total + size - 1) // size
