"""Base interface for ligand/receptor interaction evaluators."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..system import Model


class InteractionEvaluator(ABC):
    """
    Abstract base class for intermolecular energy evaluators.

    The optimizer calls ``eval`` or ``eval_deriv`` once per candidate pose.
    Implementations read ``model.coords`` and, for ``eval_deriv``, overwrite
    every row of ``model.minus_forces``. Nothing else about the model changes.

    ``v`` caps positive per-atom energies through ``curl``; the default of
    infinity disables the cap.
    """

    @abstractmethod
    def eval(self, model: Model, v: float = math.inf) -> float:
        """
        Compute the interaction energy of the movable atoms.

        Args:
            model: Model holding the pose to score.
            v: Curl cap on per-atom energies.

        Returns:
            Total energy including out-of-bounds penalties.
        """
        ...

    @abstractmethod
    def eval_deriv(self, model: Model, v: float = math.inf) -> float:
        """
        Compute the interaction energy and its gradient.

        The gradient of each movable atom is written to ``model.minus_forces``.

        Args:
            model: Model holding the pose to score.
            v: Curl cap on per-atom energies.

        Returns:
            Total energy including out-of-bounds penalties.
        """
        ...
