from dataclasses import dataclass

import numpy as np
import pytest

from treecode.trackers import (
    CoordRecord,
    CoordTracker,
    FilledVector,
    ParticleTracker,
    RadiusTracker,
)

TOLERANCE = 1e-10


@dataclass(eq=False)
class Part:
    position: np.ndarray
    velocity: np.ndarray
    charge: float = 1.0
    mass: float = 1837.0


@pytest.fixture
def ions():
    rng = np.random.default_rng(1)
    return [Part(rng.uniform(0, 1, 3), rng.normal(size=3)) for _ in range(2)]


def read_fields(path):
    line = path.read_text(encoding="utf-8").splitlines()[0]
    return [float(x) for x in line.split("\t") if x]


def test_coord_tracker_positions_round_trip(tmp_path, ions):
    path = tmp_path / "pos.csv"
    with CoordTracker(str(path), ions, CoordRecord.POSITION) as tracker:
        tracker.output()
    values = np.array(read_fields(path)).reshape(len(ions), 3)
    for original, read in zip(ions, values):
        np.testing.assert_allclose(read, original.position, rtol=TOLERANCE)


def test_coord_tracker_velocities_round_trip(tmp_path, ions):
    path = tmp_path / "vel.csv"
    with CoordTracker(str(path), ions, CoordRecord.VELOCITY) as tracker:
        tracker.output()
        tracker.output()
    lines = path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    values = np.array(read_fields(path)).reshape(len(ions), 3)
    for original, read in zip(ions, values):
        np.testing.assert_allclose(read, original.velocity, rtol=TOLERANCE)


def test_coord_tracker_format(tmp_path):
    path = tmp_path / "p.csv"
    part = Part(np.array([1.5, 0.0]), np.zeros(2))
    with CoordTracker(str(path), [part], CoordRecord.POSITION) as tracker:
        tracker.output()
    assert path.read_text(encoding="utf-8") == (
        "1.50000000000000000000e+00\t0.00000000000000000000e+00\t\n"
    )


def test_stdout_tracker(capsys):
    part = Part(np.array([2.0]), np.array([-1.0]))
    tracker = CoordTracker("stdout", [part], CoordRecord.VELOCITY)
    tracker.output()
    tracker.close()
    assert capsys.readouterr().out == "-1.00000000000000000000e+00\t\n"


def test_radius_tracker(tmp_path):
    path = tmp_path / "dens.csv"
    parts = [
        Part(np.array([0.5, 0.0, 0.0]), np.zeros(3)),
        Part(np.array([0.0, 1.5, 0.0]), np.zeros(3)),
        Part(np.array([0.0, 0.0, 1.2]), np.zeros(3)),
    ]
    with RadiusTracker(str(path), parts, np.zeros(3), 1.0) as tracker:
        tracker.output()
    lines = path.read_text(encoding="utf-8").splitlines()
    assert lines[-1] == "============================"
    assert len(lines) == 3
    start0, dens0 = lines[0].split("\t")
    start1, dens1 = lines[1].split("\t")
    assert float(start0) == 0.0
    assert float(dens0) == pytest.approx(0.238732414637843)
    assert float(start1) == 1.0
    assert float(dens1) == pytest.approx(0.0682092613250980)


def test_tracker_is_abstract():
    with pytest.raises(TypeError):
        ParticleTracker("stdout", [])


def test_filled_vector_get_grows():
    vec = FilledVector(0)
    assert vec.get(3) == 0
    assert vec.data == [0, 0, 0, 0]
    assert len(vec) == 4


def test_filled_vector_set():
    vec = FilledVector(0.0)
    vec.set(2, 5.0)
    assert vec.data == [0.0, 0.0, 5.0]
    vec.set(0, 1.0)
    assert vec.data == [1.0, 0.0, 5.0]
    assert vec.get(2) == 5.0


def test_filled_vector_negative_position():
    vec = FilledVector(0)
    with pytest.raises(IndexError):
        vec.set(-1, 3)