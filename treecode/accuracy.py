"""Measuring tree forces against each other to judge approximation error."""

from __future__ import annotations

from typing import Sequence

import numpy as np


def force_on_particle(particle, tree, potential, precision, mac) -> np.ndarray:
    """Sum the forces on ``particle`` from every node in its interaction list.

    ``tree`` provides ``interaction_list(particle, mac)``; ``potential``
    provides ``force(particle, node, precision)``.
    """
    force = np.zeros(np.asarray(particle.position, dtype=float).shape[0])
    for node in tree.interaction_list(particle, mac):
        force += np.asarray(potential.force(particle, node, precision), dtype=float)
    return force


def get_forces(particles, indices, tree, potential, precision, mac) -> list[np.ndarray]:
    """Return the force on each particle picked by ``indices``, in that order."""
    return [
        force_on_particle(particles[index], tree, potential, precision, mac)
        for index in indices
    ]


def force_error(direct_forces: Sequence, approx_forces: Sequence) -> float:
    """Return the relative RMS force error, averaged over the components.

    For each component ``c`` the error is
    ``sqrt(sum((approx - direct)**2) / sum(approx**2))``; the result is the
    mean of these over all components.
    """
    direct = np.asarray(direct_forces, dtype=float)
    approx = np.asarray(approx_forces, dtype=float)
    if direct.shape != approx.shape:
        raise ValueError("direct and approximate forces must have the same shape")
    if direct.ndim != 2 or direct.shape[0] == 0:
        raise ValueError("forces must be a non-empty list of vectors")

    squared_error = np.sum((approx - direct) ** 2, axis=0)
    force_squared = np.sum(approx**2, axis=0)
    with np.errstate(divide="ignore", invalid="ignore"):
        per_component = np.sqrt(squared_error / force_squared)
    return float(per_component.mean())