"""Atoms, typing schemes and the scored model."""

from .atoms import (
    ADType,
    Atom,
    AtomIndex,
    AtomTyping,
    Bond,
    ElementType,
    XSType,
    num_atom_types,
)
from .model import Model

__all__ = [
    "ADType",
    "Atom",
    "AtomIndex",
    "AtomTyping",
    "Bond",
    "ElementType",
    "Model",
    "XSType",
    "num_atom_types",
]
