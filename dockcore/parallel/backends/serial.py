"""In-process backend."""

from __future__ import annotations

from .base import ParallelBackend


class SerialBackend(ParallelBackend):
    """Fills every slab in the calling process, one after another."""

    @property
    def name(self) -> str:
        return "serial"

    @property
    def n_workers(self) -> int:
        return 1
