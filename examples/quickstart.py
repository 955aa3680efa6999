#!/usr/bin/env python
"""
Quick start example - score a pose with a grid cache and without one.

Builds a tiny receptor (a C-Cl fragment), tabulates a toy pair potential,
then compares cached and direct energies for a ligand oxygen walking
towards the chlorine.

Usage:
    python examples/quickstart.py
"""

import numpy as np

from dockcore import ScoringConfig, TabulatedPotential
from dockcore.system import ADType, Atom, AtomIndex, ElementType, Model, XSType


def toy_energy(t1, t2, r, theta):
    """Gaussian attraction, deeper for linear (180 degree) contacts."""
    return -np.exp(-((r - 3.0) ** 2)) * (0.5 + 0.5 * theta / 180.0)


def main():
    print("=" * 60)
    print("dockcore Quick Start")
    print("=" * 60)

    receptor = [
        Atom.create([0.0, 0.0, 0.0], ElementType.C, ADType.C, XSType.C_H, [AtomIndex(1, True)]),
        Atom.create([1.8, 0.0, 0.0], ElementType.Cl, ADType.Cl, XSType.Cl_H, [AtomIndex(0, True)]),
    ]
    ligand = [Atom.create([4.8, 0.0, 0.0], ElementType.O, ADType.OA, XSType.O_A)]
    model = Model.create(ligand, receptor)

    config = ScoringConfig(center=[3.0, 0.0, 0.0], size=[8.0, 8.0, 8.0])
    table = TabulatedPotential(toy_energy, cutoff=6.0, factor=16.0, angle_step=10.0)

    # 1. Precompute the grid for the ligand's only atom type
    print("\n1. Populating grid cache:")
    print("-" * 40)
    cache = config.build_cache()
    cache.populate(model, table, [XSType.O_A], display_progress=True)
    print(f"   Grid shape: {cache.grids[XSType.O_A].shape}")

    # 2. Compare against the direct evaluator
    print("\n2. Cached vs direct energies:")
    print("-" * 40)
    direct = config.build_direct(model, table)
    for x in (6.0, 5.0, 4.8, 4.0):
        model.set_coords([[x, 0.0, 0.0]])
        print(f"   x = {x:4.1f}  cache = {cache.eval(model):8.4f}  direct = {direct.eval(model):8.4f}")

    # 3. Off-axis contact: the angle term weakens the interaction
    print("\n3. Off-axis contact:")
    print("-" * 40)
    model.set_coords([[1.8, 3.0, 0.0]])
    print(f"   direct = {direct.eval(model):8.4f}  within box: {direct.within(model)}")

    print("\n" + "=" * 60)
    print("Done.")
    print("=" * 60)


if __name__ == "__main__":
    main()
