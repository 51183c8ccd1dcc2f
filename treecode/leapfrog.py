"""Particle pushers."""

from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np


class Pusher(ABC):
    """Advances particles by one timestep.

    ``tree`` provides ``rebuild()`` and ``interaction_list(particle, mac)``.
    """

    @abstractmethod
    def push_particles(self, particles, tree, bounds, precision, mac) -> tuple[float, float]:
        """Advance all particles and return ``(kinetic, potential)`` energy."""


class LeapfrogPusher(Pusher):
    """Leapfrog integration, with velocities half a timestep behind positions.

    ``potential`` provides ``force(particle, node, precision)`` and
    ``potential(particle, node, precision)``. The ``timestep`` attribute may be
    changed between pushes, for instance negated to run time backwards.
    """

    def __init__(self, timestep, bounds, potential):
        self.timestep = float(timestep)
        self.bounds = bounds
        self.potential = potential

    def init(self, particles, tree, precision, mac) -> None:
        """Kick every velocity by half a timestep to set up the leapfrog lag."""
        tree.rebuild()
        for particle in particles:
            for node in tree.interaction_list(particle, mac):
                self._push_velocity(particle, node, self.timestep / 2, precision)

    def push_particles(self, particles, tree, bounds, precision, mac) -> tuple[float, float]:
        """Move positions, rebuild the tree, then kick velocities.

        The kinetic energy uses the mean of each particle's speed before and
        after the kick.
        """
        dt = self.timestep
        for particle in particles:
            particle.position = (
                np.asarray(particle.position, dtype=float)
                + np.asarray(particle.velocity, dtype=float) * dt
            )
            bounds.particle_moved(particle)

        tree.rebuild()

        kinetic = 0.0
        potential = 0.0
        for particle in particles:
            initial_speed = float(np.linalg.norm(particle.velocity))
            for node in tree.interaction_list(particle, mac):
                self._push_velocity(particle, node, dt, precision)
                potential += 0.5 * particle.charge * self.potential.potential(
                    particle, node, precision
                )
            new_speed = float(np.linalg.norm(particle.velocity))
            mean_speed = (initial_speed + new_speed) / 2
            kinetic += 0.5 * particle.mass * mean_speed * mean_speed
        return kinetic, potential

    def _push_velocity(self, particle, node, dt: float, precision) -> None:
        force = np.asarray(self.potential.force(particle, node, precision), dtype=float)
        particle.velocity = np.asarray(particle.velocity, dtype=float) + force / particle.mass * dt