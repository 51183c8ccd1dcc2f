"""Periodic output of particle data, and a self-extending vector."""

from __future__ import annotations

import math
import sys
from abc import ABC, abstractmethod
from collections import Counter
from enum import Enum
from typing import Generic, TypeVar

import numpy as np

T = TypeVar("T")


class ParticleTracker(ABC):
    """Writes a record about a set of particles each time :meth:`output` is called.

    The file names ``stdout`` and ``stderr`` write to the standard streams.
    """

    def __init__(self, filename, particles):
        self.particles = list(particles)
        if filename == "stdout":
            self._out = sys.stdout
            self._owned = False
        elif filename == "stderr":
            self._out = sys.stderr
            self._owned = False
        else:
            self._out = open(filename, "w", encoding="utf-8")
            self._owned = True

    @property
    def out(self):
        """The stream being written to."""
        return self._out

    @abstractmethod
    def output(self) -> None:
        """Write one record."""

    def close(self) -> None:
        """Close the output file, leaving the standard streams open."""
        if self._owned and not self._out.closed:
            self._out.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


class CoordRecord(Enum):
    """Which vector a :class:`CoordTracker` writes."""

    POSITION = "position"
    VELOCITY = "velocity"


class CoordTracker(ParticleTracker):
    """Writes every particle's position or velocity on one tab-separated line."""

    def __init__(self, filename, particles, record):
        super().__init__(filename, particles)
        self.record = CoordRecord(record)

    def output(self) -> None:
        attribute = "position" if self.record is CoordRecord.POSITION else "velocity"
        fields = "".join(
            f"{component:.20e}\t"
            for particle in self.particles
            for component in getattr(particle, attribute)
        )
        self._out.write(fields + "\n")

    def flush(self) -> None:
        """Flush the output stream."""
        self._out.flush()


class RadiusTracker(ParticleTracker):
    """Writes a radial number-density histogram about an origin."""

    SEPARATOR = "============================"

    def __init__(self, filename, particles, origin, bin_width):
        super().__init__(filename, particles)
        self.origin = np.asarray(origin, dtype=float)
        self.bin_width = float(bin_width)

    def output(self) -> None:
        bins = Counter(
            int(np.linalg.norm(np.asarray(p.position, dtype=float) - self.origin) / self.bin_width)
            for p in self.particles
        )
        for index in sorted(bins):
            start = index * self.bin_width
            shell_volume = (4.0 / 3) * math.pi * ((start + self.bin_width) ** 3 - start**3)
            density = bins[index] / shell_volume
            self._out.write(f"{start:.20g}\t{density:.20g}\n")
        self._out.write(self.SEPARATOR + "\n")


class FilledVector(Generic[T]):
    """A list that grows on demand, filling new slots with a default value."""

    def __init__(self, init):
        self.init = init
        self._bins: list[T] = []

    def _grow_to(self, position: int) -> None:
        if position < 0:
            raise IndexError(f"negative position {position}")
        missing = position + 1 - len(self._bins)
        if missing > 0:
            self._bins.extend([self.init] * missing)

    def set(self, position, data) -> None:
        """Store ``data`` at ``position``, growing the vector if needed."""
        self._grow_to(position)
        self._bins[position] = data

    def get(self, position):
        """Return the value at ``position``, growing the vector if needed."""
        self._grow_to(position)
        return self._bins[position]

    @property
    def data(self) -> list:
        """The underlying list."""
        return self._bins

    def __len__(self) -> int:
        return len(self._bins)