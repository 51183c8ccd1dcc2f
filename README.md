# treecode

Building blocks for hierarchical tree codes that simulate charged particles.
The package has these parts:

- Tree nodes that sort particles into a 2^d-tree. Each node carries its
  monopole, dipole and quadrupole moments.
- Boundary conditions.
- A leapfrog pusher.
- A time-integration loop.
- Writers and a reader for particle data.

It depends only on numpy.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Particles

Particles can be any objects with these attributes:

- `position` and `velocity`: numpy vectors.
- `charge` and `mass`: numbers.

The package replaces `position` and `velocity` when it moves a particle.
`treecode.reader.ParticleState` is a ready-made dataclass with these fields.

## Modules

### `treecode.node`

`Node(position, size)` is a cubic cell with its lowest corner at `position`.

- `add_particle(p)` adds a particle to the node.
- `clear_particles()` removes all of them.
- `split()` distributes the particles into 2^d daughters, recursively.
  - A node with no particles becomes `TreeStatus.EMPTY`.
  - A node with one particle becomes `TreeStatus.LEAF`.
  - A node with more particles becomes `TreeStatus.BRANCH`. A node whose status is already `TreeStatus.ROOT` keeps it.
  - Afterwards each node holds its moments: `charge`, `abs_charge`, `centre_of_charge`, `dipole_moments` and `quadrupole_moments`. The dipole and quadrupole moments are taken about the centre of charge.
- `calculate_monopole_moment()`, `calculate_dipole_moment()` and `calculate_quadrupole_moment()` recompute each moment on its own.
- `interaction_list(particle, bounds, mac)` walks the tree and returns the nodes that act on `particle`.
  - It calls `mac.accept(particle, node)` on each node it reaches.
  - The call must return an `Acceptance`. `ACCEPT` takes the node, `CONTINUE` descends into the daughters, and `REJECT` drops the node.
  - Empty nodes are skipped, and so is the particle's own leaf.
- `write_gnuplot(out)` writes the node and its occupied descendants as gnuplot `set object N rect from x,y to x,y` lines. It returns the number of lines written.

To build a tree, create a root node and set `node.status = TreeStatus.ROOT`. Then add the particles and call `split()`.

### `treecode.bounds`

Every class here subclasses `BoundaryConditions`. Each one provides these members:

- `particle_moved(p)`
- `timestep_over()`
- `displacement(r1, r2)`
- `origin`
- `size`

The classes are:

- `OpenBoundary`: a box that follows the particles.
  - Call `init(particles)` first.
  - After `timestep_over()`, the next moved particle starts a new extent.
  - `origin` is the minimum position less 0.01, and `size` is the largest extent plus 0.02.
- `PeriodicBoundary(origin, length)`: particles that leave the box are moved to the opposite side. `displacement` returns the shortest periodic image.
- `CountingPeriodicBounds(origin, length, output)`: periodic boundaries that count crossings of particles with charge -1 at each face. On `timestep_over()` it writes `left<TAB>right<TAB>` for each axis to `output`, then resets the counts.
- `CullingBoundary(origin, length, velocity_dist, min_reset, max_reset, rng, output=None)`: periodic boundaries that may re-inject a crossing particle just inside the opposite face.
  - This happens for axes flagged in `min_reset` and `max_reset`.
  - The new velocity comes from `velocity_dist(rng)` and is redrawn until it points away from that face.
  - The crossings of every particle are counted and written to `output`, which is standard error by default.
- `ReflectiveBoundary(origin, length)`: mirrors particles back into the box and reverses the velocity component along the axis they crossed.

### `treecode.leapfrog`

`LeapfrogPusher(timestep, bounds, potential)` is a `Pusher`. It expects these interfaces:

- `potential` provides `force(particle, node, precision)` and `potential(particle, node, precision)`.
- `tree` provides `rebuild()` and `interaction_list(particle, mac)`.

Its methods are:

- `init(particles, tree, precision, mac)` kicks the velocities by half a timestep.
- `push_particles(particles, tree, bounds, precision, mac)` does the following, in order:
  1. It moves the positions and calls `bounds.particle_moved`.
  2. It rebuilds the tree.
  3. It kicks the velocities.
  4. It returns `(kinetic, potential)` energy. The kinetic energy uses the mean of each particle's speed before and after the kick.

The `timestep` attribute may be changed between pushes. Setting it negative runs time backwards.

### `treecode.integrator`

`TimeIntegrator(timestep, max_time, particles, tree, bounds, pusher, mac)` drives a pusher for `int(max_time / timestep)` steps.

- `start(precision, output_every)` runs the steps. After each push it calls `bounds.timestep_over()` and prints the progress to standard output.
- Every `output_every` steps it does two things:
  - It writes `time<TAB>kinetic<TAB>potential` to the energy file, if one is set with `set_energy_output_file(filename)`.
  - It calls `output()` on every tracker added with `add_particle_tracker` or `add_particle_trackers`.
- `close()` closes the energy file.

### `treecode.trackers`

- `ParticleTracker(filename, particles)` is the abstract base class.
  - The file names `stdout` and `stderr` write to the standard streams.
  - Trackers are context managers, and `close()` closes the file.
- `CoordTracker(filename, particles, record)` writes one tab-separated line per `output()` call.
  - The line holds every particle's position or velocity, chosen by `CoordRecord.POSITION` or `CoordRecord.VELOCITY`.
  - Numbers are written in scientific notation with 20 digits.
- `RadiusTracker(filename, particles, origin, bin_width)` writes a radial number-density histogram about `origin`. Each line is `bin_start<TAB>density`, and each histogram ends with a line of `=` signs.
- `FilledVector(init)` is a list that grows on `get` and `set`. New slots are filled with `init`.

### `treecode.reader`

`ParticleReader(pos_file, vel_file, mass, charge, dimensions=3)` reads files in the format `CoordTracker` writes.

- `read_particles(timestep_offset=0)` skips `timestep_offset` lines. It then returns the next line's particles as `ParticleState` objects.
- `ReadError` is raised in these cases:
  - A file cannot be opened.
  - The two records have different lengths.
  - A record is malformed.

### `treecode.accuracy`

- `force_on_particle(particle, tree, potential, precision, mac)` sums the force on a particle from its interaction list.
- `get_forces(particles, indices, tree, potential, precision, mac)` returns that force for each selected particle.
- `force_error(direct_forces, approx_forces)` returns the relative RMS error averaged over the components. For each component it is `sqrt(sum((approx - direct)**2) / sum(approx**2))`.

## Example

```python
import numpy as np

from treecode.reader import ParticleReader, ParticleState
from treecode.trackers import CoordRecord, CoordTracker

particles = [
    ParticleState(1, 1837, np.array([0.1, 0.2, 0.3]), np.zeros(3)),
    ParticleState(-1, 1, np.array([0.4, 0.5, 0.6]), np.array([1.0, 0.0, 0.0])),
]

with CoordTracker("positions.csv", particles, CoordRecord.POSITION) as pos, \
     CoordTracker("velocities.csv", particles, CoordRecord.VELOCITY) as vel:
    pos.output()
    vel.output()

with ParticleReader("positions.csv", "velocities.csv", 1837, 1, 3) as reader:
    states = reader.read_particles(0)
```

## What the package does not provide

The package is a set of parts, not a complete simulation. It does not have:

- A tree object with `rebuild()` and `interaction_list(particle, mac)`.
- A force law, such as a Coulomb or Ewald potential.
- A multipole acceptance criterion, such as Barnes-Hut.
- Generators for initial particle distributions.
- A command-line program.

You supply these yourself, through the interfaces described above. You can build the tree on `Node` and have the criterion return `Acceptance` values.