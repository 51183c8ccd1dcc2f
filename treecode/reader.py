"""Reading particles back from tab-separated position and velocity files."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np


class ReadError(Exception):
    """Raised when particle files cannot be opened or do not match."""


@dataclass(eq=False)
class ParticleState:
    """A point particle with charge, mass, position and velocity."""

    charge: float
    mass: float
    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    velocity: np.ndarray = field(default_factory=lambda: np.zeros(3))

    def __post_init__(self):
        self.position = np.array(self.position, dtype=float)
        self.velocity = np.array(self.velocity, dtype=float)


class ParticleReader:
    """Reads particles from a pair of files holding one timestep per line.

    Each line holds the vector components of every particle, separated by
    whitespace; the position and velocity files must agree line by line.
    """

    def __init__(self, pos_file, vel_file, mass, charge, dimensions=3):
        if dimensions < 1:
            raise ValueError("dimensions must be at least 1")
        self.mass = float(mass)
        self.charge = charge
        self.dimensions = int(dimensions)
        try:
            self._pos = open(pos_file, encoding="utf-8")
        except OSError as exc:
            raise ReadError("Failed to open position file.") from exc
        try:
            self._vel = open(vel_file, encoding="utf-8")
        except OSError as exc:
            self._pos.close()
            raise ReadError("Failed to open velocity file.") from exc

    @staticmethod
    def _parse(line: str, kind: str) -> list[float]:
        try:
            return [float(token) for token in line.split()]
        except ValueError as exc:
            raise ReadError(f"Malformed {kind} record.") from exc

    def read_particles(self, timestep_offset=0) -> list[ParticleState]:
        """Skip ``timestep_offset`` lines, then read the next timestep's particles.

        Components left over after the last complete vector are ignored.
        """
        for _ in range(timestep_offset):
            pos_line = self._pos.readline()
            vel_line = self._vel.readline()
            if not pos_line or not vel_line:
                break

        positions = self._parse(self._pos.readline(), "position")
        velocities = self._parse(self._vel.readline(), "velocity")
        if len(positions) > len(velocities):
            raise ReadError("Reached end of velocity record before end of position record.")
        if len(velocities) > len(positions):
            raise ReadError("Reached end of position record before end of velocity record.")

        dim = self.dimensions
        complete = len(positions) // dim * dim
        pos_rows = np.array(positions[:complete], dtype=float).reshape(-1, dim)
        vel_rows = np.array(velocities[:complete], dtype=float).reshape(-1, dim)
        return [
            ParticleState(self.charge, self.mass, pos, vel)
            for pos, vel in zip(pos_rows, vel_rows)
        ]

    def close(self) -> None:
        """Close both input files."""
        self._pos.close()
        self._vel.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()