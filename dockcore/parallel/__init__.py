"""Serial and process-pool execution of grid population."""

from .backends import MultiprocessingBackend, ParallelBackend, SerialBackend
from .dispatcher import (
    BACKEND_NAMES,
    create_backend,
    get_backend,
    reset_default_backend,
    set_default_backend,
)

__all__ = [
    "BACKEND_NAMES",
    "MultiprocessingBackend",
    "ParallelBackend",
    "SerialBackend",
    "create_backend",
    "get_backend",
    "reset_default_backend",
    "set_default_backend",
]
