"""Grid population backends."""

from .base import ParallelBackend
from .multiprocessing_backend import MultiprocessingBackend
from .serial import SerialBackend

__all__ = ["MultiprocessingBackend", "ParallelBackend", "SerialBackend"]
