"""Common interface of the grid population backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from typing import Any


class ParallelBackend(ABC):
    """
    Executes independent work items, such as lattice slabs, and gathers results.

    ``GridCache.populate`` splits the lattice along x with ``partition`` and
    hands the ranges to ``parallel_map``; backends differ only in where the
    work runs.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return backend name."""
        ...

    @property
    @abstractmethod
    def n_workers(self) -> int:
        """Return number of concurrent workers."""
        ...

    def parallel_map(self, func: Callable[..., Any], items: Sequence[Any]) -> list[Any]:
        """
        Apply ``func`` to every item and return results in input order.

        The base version runs in the calling process.
        """
        return [func(item) for item in items]

    def partition(self, n_items: int, n_chunks: int | None = None) -> list[tuple[int, int]]:
        """
        Split ``range(n_items)`` into contiguous, non-empty (start, stop) ranges.

        Earlier ranges take one extra item when the split is uneven.

        Args:
            n_items: Number of items, e.g. lattice planes along x.
            n_chunks: Requested number of ranges. Defaults to ``n_workers``;
                never more than ``n_items``.

        Returns:
            List of (start, stop) pairs covering ``range(n_items)``.
        """
        if n_items <= 0:
            return []
        n_chunks = max(1, min(n_chunks or self.n_workers, n_items))
        size, extra = divmod(n_items, n_chunks)

        bounds = []
        start = 0
        for k in range(n_chunks):
            stop = start + size + (k < extra)
            bounds.append((start, stop))
            start = stop
        return bounds
