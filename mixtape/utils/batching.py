"""Helpers for splitting bulk operations into capped batches."""

from __future__ import annotations

from typing import List, Sequence, TypeVar

T = TypeVar("T")


def batch_offsets(length: int, size: int) -> List[int]:
    """Start offsets of consecutive batches covering ``length`` items."""
    if size <= 0:
        raise ValueError("size must be positive")
    return list(range(0, max(0, length), size))


def chunked(items: Sequence[T], size: int) -> List[Sequence[T]]:
    return [items[offset:offset + size] for offset in batch_offsets(len(items), size)]


__all__ = ["batch_offsets", "chunked"]
