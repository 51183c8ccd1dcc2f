"""Boundary conditions: open, periodic, counting, culling and reflective boxes."""

from __future__ import annotations

import sys
from abc import ABC, abstractmethod
from typing import IO, Callable, Sequence

import numpy as np

_OPEN_MARGIN = 0.01


def _vector(value) -> np.ndarray:
    return np.array(value, dtype=float)


class BoundaryConditions(ABC):
    """The boundary of the simulated system.

    Particles are any objects with ``position`` and ``velocity`` vectors and a
    ``charge``; boundaries may replace those vectors when particles move.
    """

    @abstractmethod
    def particle_moved(self, particle) -> None:
        """React to ``particle`` having moved."""

    @abstractmethod
    def timestep_over(self) -> None:
        """React to the end of a timestep."""

    @abstractmethod
    def displacement(self, r1, r2) -> np.ndarray:
        """Return the displacement from ``r2`` to ``r1`` under these boundaries."""

    @property
    @abstractmethod
    def origin(self) -> np.ndarray:
        """The lowest corner of the system."""

    @property
    @abstractmethod
    def size(self) -> float:
        """The length of each side of the system."""


class OpenBoundary(BoundaryConditions):
    """A box that follows the particles, resized as they move.

    :meth:`init` must be called before the box is used.
    """

    def __init__(self):
        self._minimum: np.ndarray | None = None
        self._maximum: np.ndarray | None = None
        self._needs_reset = False

    def init(self, particles) -> None:
        """Fit the box around ``particles``."""
        particles = list(particles)
        if not particles:
            raise ValueError("cannot initialise an open boundary without particles")
        self.reset(particles[0])
        for particle in particles:
            self.particle_moved(particle)

    def reset(self, particle) -> None:
        """Shrink the box to the position of a single particle."""
        position = _vector(particle.position)
        self._minimum = position.copy()
        self._maximum = position.copy()
        self._needs_reset = False

    def particle_moved(self, particle) -> None:
        if self._needs_reset or self._minimum is None:
            self.reset(particle)
        position = _vector(particle.position)
        self._minimum = np.minimum(self._minimum, position)
        self._maximum = np.maximum(self._maximum, position)

    def timestep_over(self) -> None:
        self._needs_reset = True

    def displacement(self, r1, r2) -> np.ndarray:
        return _vector(r1) - _vector(r2)

    def _require_init(self) -> None:
        if self._minimum is None:
            raise RuntimeError("open boundary has not been initialised")

    @property
    def origin(self) -> np.ndarray:
        self._require_init()
        return self._minimum - _OPEN_MARGIN

    @property
    def size(self) -> float:
        self._require_init()
        return float(np.max(self._maximum - self._minimum)) + 2 * _OPEN_MARGIN


class PeriodicBoundary(BoundaryConditions):
    """A fixed box whose opposite faces are joined."""

    def __init__(self, origin, length):
        self._origin = _vector(origin)
        self.length = float(length)

    @property
    def origin(self) -> np.ndarray:
        return self._origin.copy()

    @property
    def size(self) -> float:
        return self.length

    def _wrap(self, particle, on_low=None, on_high=None) -> None:
        position = _vector(particle.position)
        translation = np.zeros_like(position)
        for axis, component in enumerate(position):
            if component < self._origin[axis]:
                translation[axis] = self.length
                if on_low is not None:
                    translation[axis] += on_low(particle, axis, component)
            elif component > self._origin[axis] + self.length:
                translation[axis] = -self.length
                if on_high is not None:
                    translation[axis] += on_high(particle, axis, component)
        particle.position = position + translation

    def particle_moved(self, particle) -> None:
        """Move a particle that left the box to the opposite side."""
        self._wrap(particle)

    def timestep_over(self) -> None:
        """Periodic boundaries keep no per-timestep state."""

    def displacement(self, r1, r2) -> np.ndarray:
        """Return the shortest displacement among the periodic images."""
        disp = _vector(r1) - _vector(r2)
        half = self.length / 2
        disp[disp > half] -= self.length
        disp[disp < -half] += self.length
        return disp


class CountingPeriodicBounds(PeriodicBoundary):
    """Periodic boundaries that count electrons crossing each face per timestep.

    At the end of each timestep a line of ``left<TAB>right<TAB>`` pairs, one per
    axis, is written to ``output``.
    """

    def __init__(self, origin, length, output: IO[str]):
        super().__init__(origin, length)
        self.output = output
        self.left_edge = np.zeros_like(self._origin)
        self.right_edge = np.zeros_like(self._origin)

    def particle_moved(self, particle) -> None:
        def low(p, axis, _component):
            if p.charge == -1:
                self.left_edge[axis] += 1
            return 0.0

        def high(p, axis, _component):
            if p.charge == -1:
                self.right_edge[axis] += 1
            return 0.0

        self._wrap(particle, low, high)

    def timestep_over(self) -> None:
        line = "".join(
            f"{left:g}\t{right:g}\t" for left, right in zip(self.left_edge, self.right_edge)
        )
        self.output.write(line + "\n")
        self.output.flush()
        self.left_edge = np.zeros_like(self._origin)
        self.right_edge = np.zeros_like(self._origin)


class CullingBoundary(PeriodicBoundary):
    """Periodic boundaries that may give crossing particles a fresh velocity.

    ``min_reset[i]`` and ``max_reset[i]`` say whether a particle leaving past the
    lower or upper face of axis ``i`` is re-injected just inside the opposite
    face with a velocity drawn from ``velocity_dist(rng)``, redrawn until it
    points away from the face it is placed at. Crossings of every particle are
    counted and written at the end of each timestep to ``output`` (standard
    error by default).
    """

    def __init__(
        self,
        origin,
        length,
        velocity_dist: Callable,
        min_reset: Sequence[bool],
        max_reset: Sequence[bool],
        rng,
        output: IO[str] | None = None,
    ):
        super().__init__(origin, length)
        dim = self._origin.shape[0]
        if len(min_reset) != dim or len(max_reset) != dim:
            raise ValueError("reset flags must have one entry per dimension")
        self.velocity_dist = velocity_dist
        self.min_reset = [bool(flag) for flag in min_reset]
        self.max_reset = [bool(flag) for flag in max_reset]
        self.rng = rng
        self._output = output
        self.left_edge = np.zeros(dim)
        self.right_edge = np.zeros(dim)

    @property
    def output(self) -> IO[str]:
        """The stream crossing counts are written to."""
        return self._output if self._output is not None else sys.stderr

    def _draw(self, axis: int, negative: bool) -> np.ndarray:
        while True:
            velocity = _vector(self.velocity_dist(self.rng))
            if negative and velocity[axis] <= 0:
                return velocity
            if not negative and velocity[axis] >= 0:
                return velocity

    def particle_moved(self, particle) -> None:
        origin = self._origin
        length = self.length
        nudge = length / 1000

        def low(p, axis, component):
            self.left_edge[axis] += 1
            if not self.min_reset[axis]:
                return 0.0
            p.velocity = self._draw(axis, negative=True)
            return origin[axis] - component - nudge

        def high(p, axis, component):
            self.right_edge[axis] += 1
            if not self.max_reset[axis]:
                return 0.0
            p.velocity = self._draw(axis, negative=False)
            return -(component - (origin[axis] + length) - nudge)

        self._wrap(particle, low, high)

    def timestep_over(self) -> None:
        line = "".join(
            f"{left:g}\t{right:g}\t" for left, right in zip(self.left_edge, self.right_edge)
        )
        self.output.write(line + "\n")
        self.left_edge = np.zeros_like(self._origin)
        self.right_edge = np.zeros_like(self._origin)


class ReflectiveBoundary(BoundaryConditions):
    """A fixed box whose walls mirror particles back inside."""

    def __init__(self, origin, length):
        self._origin = _vector(origin)
        self.length = float(length)

    @property
    def origin(self) -> np.ndarray:
        return self._origin.copy()

    @property
    def size(self) -> float:
        return self.length

    def particle_moved(self, particle) -> None:
        """Reflect a particle that crossed a wall and reverse that velocity component."""
        position = _vector(particle.position)
        velocity = _vector(particle.velocity)
        for axis, component in enumerate(position):
            low = self._origin[axis]
            high = low + self.length
            if component < low:
                position[axis] = 2 * low - component
                velocity[axis] = -velocity[axis]
            elif component > high:
                position[axis] = 2 * high - component
                velocity[axis] = -velocity[axis]
        particle.position = position
        particle.velocity = velocity

    def timestep_over(self) -> None:
        """Reflective boundaries keep no per-timestep state."""

    def displacement(self, r1, r2) -> np.ndarray:
        return _vector(r1) - _vector(r2)