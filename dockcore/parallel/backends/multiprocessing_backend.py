"""Process-pool backend for filling grid slabs concurrently."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Sequence
from concurrent.futures import ProcessPoolExecutor
from typing import Any

from .base import ParallelBackend

logger = logging.getLogger(__name__)


class MultiprocessingBackend(ParallelBackend):
    """
    Runs slab workers in a pool of local processes.

    The mapped callable and its items cross process boundaries by pickle:
    use module-level functions (or ``functools.partial`` of them) and plain
    data. Results come back in input order.

    Attributes:
        n_workers: Size of the process pool.
    """

    def __init__(self, n_workers: int | None = None) -> None:
        """
        Args:
            n_workers: Pool size. Defaults to the number of CPUs.
        """
        if n_workers is not None and n_workers < 1:
            raise ValueError(f"n_workers must be positive, got {n_workers}")
        self._n_workers = n_workers or os.cpu_count() or 1

    @property
    def name(self) -> str:
        return "multiprocessing"

    @property
    def n_workers(self) -> int:
        return self._n_workers

    def parallel_map(self, func: Callable[..., Any], items: Sequence[Any]) -> list[Any]:
        """Map ``func`` over ``items`` in the pool; tiny inputs run in-process."""
        items = list(items)
        if len(items) <= 1 or self._n_workers == 1:
            return [func(item) for item in items]

        workers = min(self._n_workers, len(items))
        logger.debug("Mapping %d items over %d processes", len(items), workers)
        with ProcessPoolExecutor(max_workers=workers) as executor:
            return list(executor.map(func, items))
