"""Backend selection for grid population."""

from __future__ import annotations

from typing import Literal

from .backends.base import ParallelBackend
from .backends.serial import SerialBackend

BackendType = Literal["serial", "multiprocessing"]

BACKEND_NAMES: tuple[str, ...] = ("serial", "multiprocessing")

# Used by caches constructed without an explicit backend
_default_backend: ParallelBackend | None = None


def create_backend(name: BackendType, n_workers: int | None = None) -> ParallelBackend:
    """
    Build a backend from its name.

    Args:
        name: One of ``BACKEND_NAMES``.
        n_workers: Process count for ``"multiprocessing"``; ignored by
            ``"serial"``.

    Returns:
        New ParallelBackend instance.

    Raises:
        ValueError: If the name is not a known backend.
    """
    if name == "serial":
        return SerialBackend()
    if name == "multiprocessing":
        from .backends.multiprocessing_backend import MultiprocessingBackend

        return MultiprocessingBackend(n_workers)
    raise ValueError(f"Unknown backend: {name!r} (expected one of {', '.join(BACKEND_NAMES)})")


def get_backend(
    backend: BackendType | ParallelBackend | None = None,
    n_workers: int | None = None,
) -> ParallelBackend:
    """
    Resolve a backend argument.

    Instances pass through, names are built with ``create_backend`` and None
    gives the process-wide default (serial unless changed with
    ``set_default_backend``).

    Examples:
        >>> get_backend().name
        'serial'
        >>> get_backend("multiprocessing", n_workers=4).n_workers
        4
    """
    global _default_backend

    if isinstance(backend, ParallelBackend):
        return backend
    if backend is not None:
        return create_backend(backend, n_workers)
    if _default_backend is None:
        _default_backend = SerialBackend()
    return _default_backend


def set_default_backend(
    backend: BackendType | ParallelBackend, n_workers: int | None = None
) -> ParallelBackend:
    """Make ``backend`` the default for caches created without one."""
    global _default_backend

    _default_backend = (
        backend if isinstance(backend, ParallelBackend) else create_backend(backend, n_workers)
    )
    return _default_backend


def reset_default_backend() -> None:
    """Forget the default; the next ``get_backend()`` returns a fresh serial backend."""
    global _default_backend
    _default_backend = None
