"""Time integration loop tying pusher, tree, boundaries and output together."""

from __future__ import annotations

import sys


class TimeIntegrator:
    """Runs a pusher for ``max_time / timestep`` steps, writing periodic output."""

    def __init__(self, timestep, max_time, particles, tree, bounds, pusher, mac):
        if timestep == 0:
            raise ValueError("timestep must be non-zero")
        self.timestep = float(timestep)
        self.max_time = float(max_time)
        self.particles = particles
        self.tree = tree
        self.bounds = bounds
        self.pusher = pusher
        self.mac = mac
        self.trackers: list = []
        self._energies = None

    def start(self, precision, output_every) -> None:
        """Integrate, writing energies and tracker records every ``output_every`` steps."""
        if output_every < 1:
            raise ValueError("output_every must be at least 1")
        num_steps = int(self.max_time / self.timestep)
        for step in range(num_steps):
            kinetic, potential = self.pusher.push_particles(
                self.particles, self.tree, self.bounds, precision, self.mac
            )
            self.bounds.timestep_over()

            percent = step / num_steps * 100
            sys.stdout.write(f"\rTimestep {step} of {num_steps} complete ({percent:g}%)")
            if step % output_every == 0:
                if self._energies is not None:
                    self._energies.write(
                        f"{step * self.timestep:g}\t{kinetic:g}\t{potential:g}\n"
                    )
                    self._energies.flush()
                for tracker in self.trackers:
                    tracker.output()
        sys.stdout.write("\n")

    def set_energy_output_file(self, filename) -> None:
        """Write time, kinetic and potential energy to ``filename``."""
        self.close()
        self._energies = open(filename, "w", encoding="utf-8")

    def add_particle_tracker(self, tracker) -> None:
        """Add a tracker whose ``output()`` is called at each output step."""
        self.trackers.append(tracker)

    def add_particle_trackers(self, trackers) -> None:
        """Add several trackers."""
        self.trackers.extend(trackers)

    def close(self) -> None:
        """Close the energy output file, if any."""
        if self._energies is not None:
            self._energies.close()
            self._energies = None