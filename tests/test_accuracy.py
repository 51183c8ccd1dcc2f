import numpy as np
import pytest

from treecode.accuracy import force_error, force_on_particle, get_forces
from treecode.bounds import OpenBoundary
from treecode.node import Acceptance, Node, TreeStatus
from treecode.reader import ParticleState


class _Tree:
    def __init__(self, bounds, particles):
        self.bounds = bounds
        self.particles = particles
        self.root = None

    def rebuild(self):
        self.root = Node(self.bounds.origin, self.bounds.size)
        self.root.status = TreeStatus.ROOT
        for particle in self.particles:
            self.root.add_particle(particle)
        self.root.split()

    def interaction_list(self, particle, mac):
        return self.root.interaction_list(particle, self.bounds, mac)


class _LeafOnlyMac:
    def accept(self, particle, node):
        if node.status is TreeStatus.LEAF:
            return Acceptance.ACCEPT
        return Acceptance.CONTINUE


class _Coulomb:
    def force(self, particle, node, precision):
        r = np.asarray(particle.position) - node.centre_of_charge
        return particle.charge * node.charge * r / np.linalg.norm(r) ** 3


def _analytic_force(test_part, parts):
    force = np.zeros(3)
    for p in parts:
        if p is test_part:
            continue
        r = test_part.position - p.position
        force += p.charge * r / np.dot(r, r) / np.linalg.norm(r)
    return force


@pytest.fixture
def system():
    rng = np.random.default_rng(0)
    parts = [ParticleState(1, 1837, rng.uniform(0, 1, 3)) for _ in range(10)]
    parts += [ParticleState(-1, 1, rng.uniform(0, 1, 3)) for _ in range(10)]
    bounds = OpenBoundary()
    bounds.init(parts)
    tree = _Tree(bounds, parts)
    tree.rebuild()
    return parts, tree


def test_force_matches_direct_sum_when_every_leaf_is_opened(system):
    parts, tree = system
    part = parts[0]
    tree_force = force_on_particle(part, tree, _Coulomb(), "quadrupole", _LeafOnlyMac())
    expected = part.charge * _analytic_force(part, parts)
    np.testing.assert_allclose(tree_force, expected, rtol=1e-5)


def test_lone_particle_feels_no_force():
    part = ParticleState(1, 1, [0.5, 0.5, 0.5])
    bounds = OpenBoundary()
    bounds.init([part])
    tree = _Tree(bounds, [part])
    tree.rebuild()
    force = force_on_particle(part, tree, _Coulomb(), "monopole", _LeafOnlyMac())
    np.testing.assert_array_equal(force, np.zeros(3))


def test_get_forces_follows_index_order(system):
    parts, tree = system
    indices = [5, 0, 12]
    forces = get_forces(parts, indices, tree, _Coulomb(), "monopole", _LeafOnlyMac())
    assert len(forces) == len(indices)
    for index, force in zip(indices, forces):
        single = force_on_particle(parts[index], tree, _Coulomb(), "monopole", _LeafOnlyMac())
        np.testing.assert_allclose(force, single)


def test_get_forces_with_no_indices_is_empty(system):
    parts, tree = system
    assert get_forces(parts, [], tree, _Coulomb(), "monopole", _LeafOnlyMac()) == []


def test_identical_forces_have_zero_error(system):
    parts, tree = system
    forces = get_forces(parts, range(len(parts)), tree, _Coulomb(), "monopole", _LeafOnlyMac())
    assert force_error(forces, forces) == 0.0


def test_doubled_approximation_gives_half_error():
    direct = [np.array([1.0, -2.0, 3.0]), np.array([0.5, 4.0, -1.0])]
    approx = [2 * f for f in direct]
    assert force_error(direct, approx) == pytest.approx(0.5)


def test_error_is_scale_invariant():
    direct = [np.array([1.0, 2.0]), np.array([-3.0, 0.5])]
    approx = [np.array([1.1, 1.8]), np.array([-2.7, 0.6])]
    scaled_direct = [10 * f for f in direct]
    scaled_approx = [10 * f for f in approx]
    assert force_error(direct, approx) == pytest.approx(
        force_error(scaled_direct, scaled_approx)
    )


def test_mismatched_lengths_raise():
    with pytest.raises(ValueError):
        force_error([np.zeros(3)], [np.zeros(3), np.zeros(3)])


def test_empty_forces_raise():
    with pytest.raises(ValueError):
        force_error([], [])