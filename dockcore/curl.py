"""Saturating transform applied to per-atom energies and their gradients."""

from __future__ import annotations

import sys

import numpy as np
from numpy.typing import NDArray

EPSILON = sys.float_info.epsilon
MAX_FLOAT = sys.float_info.max


def not_max(v: float) -> bool:
    """Return True unless ``v`` is large enough to mean "no cap"."""
    return v < 0.1 * MAX_FLOAT


def curl(e: float, v: float) -> float:
    """
    Cap a positive energy against ``v``.

    ``e -> e * v / (v + e)`` for ``e > 0``; non-positive energies and
    ``v = inf`` pass through unchanged.

    Args:
        e: Raw energy.
        v: Cap. Values below machine epsilon zero out positive energies.

    Returns:
        Capped energy.
    """
    if e > 0 and not_max(v):
        tmp = 0.0 if v < EPSILON else v / (v + e)
        e *= tmp
    return e


def curl_deriv(
    e: float, deriv: NDArray[np.floating], v: float
) -> tuple[float, NDArray[np.floating]]:
    """
    Cap an energy and scale its gradient consistently.

    Args:
        e: Raw energy.
        deriv: Gradient of ``e``, shape (3,).
        v: Cap.

    Returns:
        Tuple of (capped energy, scaled gradient).
    """
    if e > 0 and not_max(v):
        tmp = 0.0 if v < EPSILON else v / (v + e)
        e *= tmp
        deriv = deriv * tmp**2
    return e, deriv
