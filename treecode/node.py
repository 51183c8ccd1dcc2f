"""Tree nodes holding particles and their multipole moments."""

from __future__ import annotations

from enum import Enum
from typing import IO, Iterator

import numpy as np


class TreeStatus(Enum):
    """Rank of a node within the tree."""

    ROOT = "root"
    BRANCH = "branch"
    LEAF = "leaf"
    EMPTY = "empty"


class Acceptance(Enum):
    """Verdict of a multipole acceptance criterion for a node."""

    ACCEPT = "accept"
    CONTINUE = "continue"
    REJECT = "reject"


class Node:
    """A cubic cell of the tree with the moments of the particles inside it.

    Particles are any objects with a ``position`` vector and a ``charge``.
    """

    def __init__(self, position, size):
        self.position = np.array(position, dtype=float)
        self.size = float(size)
        self.particles: list = []
        self.daughters: list[Node] = []
        self.status = TreeStatus.EMPTY
        self.parent: Node | None = None

        dim = self.dimensions
        self.charge = 0.0
        self.abs_charge = 0.0
        self.centre_of_charge = np.zeros(dim)
        self.dipole_moments = np.zeros(dim)
        self.quadrupole_moments = np.zeros((dim, dim))

    @property
    def dimensions(self) -> int:
        """Number of spatial dimensions of the node."""
        return self.position.shape[0]

    def add_particle(self, particle) -> None:
        """Add a particle to this node."""
        self.particles.append(particle)

    def clear_particles(self) -> None:
        """Remove all particles from this node."""
        self.particles.clear()

    def split(self) -> None:
        """Distribute the particles into daughters recursively and compute moments.

        A node without particles becomes EMPTY, a node with one particle a LEAF,
        and a node with more is split into 2**d daughters. A ROOT node keeps its
        status; any other node with several particles becomes a BRANCH.
        """
        count = len(self.particles)
        if count == 0:
            self.status = TreeStatus.EMPTY
            return
        if count == 1:
            self.status = TreeStatus.LEAF
            self._calculate_moments()
            return

        if self.status is not TreeStatus.ROOT:
            self.status = TreeStatus.BRANCH

        self._prepare_daughters()
        half = self.size / 2
        for particle in self.particles:
            offsets = ((np.asarray(particle.position, dtype=float) - self.position) / half).astype(int)
            offsets = np.clip(offsets, 0, 1)
            index = sum(int(bit) << axis for axis, bit in enumerate(offsets))
            self.daughters[index].add_particle(particle)

        for daughter in self.daughters:
            daughter.split()
        self._calculate_moments()

    def _prepare_daughters(self) -> None:
        half = self.size / 2
        dim = self.dimensions
        corners = [
            self.position + half * np.array([(i >> j) & 1 for j in range(dim)], dtype=float)
            for i in range(2 ** dim)
        ]
        if len(self.daughters) != len(corners):
            self.daughters = [Node(corner, half) for corner in corners]
        else:
            for daughter, corner in zip(self.daughters, corners):
                daughter.clear_particles()
                daughter.position = corner
                daughter.size = half
        for daughter in self.daughters:
            daughter.parent = self

    def _calculate_moments(self) -> None:
        self.calculate_monopole_moment()
        self.calculate_dipole_moment()
        self.calculate_quadrupole_moment()

    def _occupied_daughters(self) -> Iterator[Node]:
        return (d for d in self.daughters if d.status is not TreeStatus.EMPTY)

    def calculate_monopole_moment(self) -> None:
        """Compute total charge, absolute charge and centre of charge."""
        if self.status is TreeStatus.LEAF:
            particle = self.particles[0]
            self.charge = particle.charge
            self.abs_charge = abs(self.charge)
            self.centre_of_charge = np.array(particle.position, dtype=float)
            return

        self.charge = 0.0
        self.abs_charge = 0.0
        weighted = np.zeros(self.dimensions)
        for daughter in self._occupied_daughters():
            self.charge += daughter.charge
            self.abs_charge += daughter.abs_charge
            weighted += daughter.abs_charge * daughter.centre_of_charge
        self.centre_of_charge = weighted / self.abs_charge

    def calculate_dipole_moment(self) -> None:
        """Compute the dipole moment about the centre of charge from the daughters."""
        dipole = np.zeros(self.dimensions)
        if self.status is not TreeStatus.LEAF:
            for daughter in self._occupied_daughters():
                disp = self.centre_of_charge - daughter.centre_of_charge
                dipole += daughter.dipole_moments - disp * daughter.charge
        self.dipole_moments = dipole

    def calculate_quadrupole_moment(self) -> None:
        """Compute the quadrupole moment about the centre of charge from the daughters."""
        dim = self.dimensions
        quad = np.zeros((dim, dim))
        if self.status is not TreeStatus.LEAF:
            for daughter in self._occupied_daughters():
                disp = self.centre_of_charge - daughter.centre_of_charge
                dip = daughter.dipole_moments
                quad += (
                    daughter.quadrupole_moments
                    - np.outer(disp, dip)
                    - np.outer(dip, disp)
                    + np.outer(disp, disp) * daughter.charge
                )
        self.quadrupole_moments = quad

    def interaction_list(self, particle, bounds, mac) -> list[Node]:
        """Return the nodes that ``particle`` interacts with under ``mac``.

        ``mac.accept(particle, node)`` returns an :class:`Acceptance`.
        """
        found: list[Node] = []
        self._collect_interactions(particle, bounds, mac, found)
        return found

    def _collect_interactions(self, particle, bounds, mac, found: list) -> None:
        if self.status is TreeStatus.EMPTY:
            return
        if self.status is TreeStatus.LEAF and self.particles[0] is particle:
            return
        verdict = mac.accept(particle, self)
        if verdict is Acceptance.ACCEPT:
            found.append(self)
        elif verdict is Acceptance.CONTINUE:
            for daughter in self.daughters:
                daughter._collect_interactions(particle, bounds, mac, found)

    def _gnuplot_nodes(self) -> Iterator[Node]:
        yield self
        if self.status is TreeStatus.LEAF:
            return
        for daughter in self._occupied_daughters():
            yield from daughter._gnuplot_nodes()

    def write_gnuplot(self, out: IO[str]) -> int:
        """Write the node and its occupied descendants as gnuplot rectangles.

        Returns the number of rectangles written.
        """
        count = 0
        for count, node in enumerate(self._gnuplot_nodes(), start=1):
            x, y = node.position[0], node.position[1]
            out.write(
                f"set object {count} rect from {x:g},{y:g} "
                f"to {x + node.size:g},{y + node.size:g}\n"
            )
        return count