"""
Field: simultaneous update, determinism, conservation and the Sun/Earth year.
"""
import math

import numpy as np
import pytest

from gravfield.config.settings import (
    ConfigurationError,
    EARTH_MASS,
    EARTH_PERIHELION,
    EARTH_PERIHELION_SPEED,
    GRAVITATIONAL_CONSTANT,
    SECS_PER_YEAR,
)
from gravfield.models.bodies import Body, sun_earth
from gravfield.physics import diagnostics
from gravfield.physics.field import Field
from gravfield.physics.gravity import NewtonianGravity
from gravfield.physics.point import Point
from gravfield.physics.vector import Vector3


def three_bodies():
    return [
        (1.0, [0.5, 0.0, 0.0], [0.0, 0.2, 0.0]),
        (1.0, [-0.5, 0.0, 0.0], [0.0, -0.2, 0.0]),
        (1.0, [0.0, 0.5, 0.0], [0.1, 0.0, 0.0]),
    ]


class TestConfiguration:

    def test_empty_point_set(self):
        with pytest.raises(ConfigurationError, match="at least one point"):
            Field([], NewtonianGravity(), 1.0)

    @pytest.mark.parametrize("dt", [0.0, -1.0, float("nan")])
    def test_bad_dt(self, dt):
        with pytest.raises(ConfigurationError, match="dt"):
            Field([Point(1.0)], NewtonianGravity(), dt)

    @pytest.mark.parametrize("mass", [0.0, -5.0])
    def test_bad_mass(self, mass):
        with pytest.raises(ConfigurationError, match="mass"):
            Field.gravitational([(mass, [0.0, 0.0, 0.0], [0.0, 0.0, 0.0])], G=1.0, dt=0.1)

    def test_unknown_solver(self):
        with pytest.raises(ConfigurationError, match="Unknown solver"):
            Field([Point(1.0)], NewtonianGravity(), 1.0, solver="verlet-9")

    def test_law_must_compute_acceleration(self):
        with pytest.raises(ConfigurationError):
            Field([Point(1.0)], object(), 1.0)

    def test_step_and_constant_are_host_supplied(self):
        with pytest.raises(TypeError):
            Field.gravitational(three_bodies(), G=1.0)
        with pytest.raises(TypeError):
            Field.gravitational(three_bodies(), dt=0.01)

    def test_built_from_tuples_and_bodies(self):
        f1 = Field.gravitational(three_bodies(), G=1.0, dt=0.01, trajectory_capacity=16)
        f2 = Field.gravitational([Body(*b) for b in three_bodies()], G=1.0, dt=0.01, trajectory_capacity=16)
        assert len(f1) == len(f2) == 3
        assert np.array_equal(f1.positions(), f2.positions())
        assert f1.points[0].trajectory.capacity == 16
        assert f1.points[2].velocity == Vector3(0.1, 0.0, 0.0)


class TestUpdate:

    def test_advances_time_by_dt(self):
        field = Field.gravitational(three_bodies(), G=1.0, dt=0.25)
        assert field.time == 0.0
        field.update()
        assert field.time == 0.25
        field.update()
        field.update()
        assert field.time == 0.75
        assert field.step_count == 3

    def test_uses_pre_update_snapshot(self):
        """Point B's force is computed from A's old position, not its new one."""
        field = Field.gravitational(
            [(1.0, [0.0, 0.0, 0.0], [0.0, 0.0, 0.0]), (1.0, [1.0, 0.0, 0.0], [0.0, 0.0, 0.0])],
            G=1.0, dt=0.1,
        )
        field.update()
        a, b = field.points
        assert np.allclose(a.velocity.to_array(), [0.1, 0.0, 0.0], rtol=1e-15)
        assert np.allclose(b.velocity.to_array(), [-0.1, 0.0, 0.0], rtol=1e-15)
        assert np.allclose(a.position.to_array(), [0.01, 0.0, 0.0], rtol=1e-15)
        assert np.allclose(b.position.to_array(), [0.99, 0.0, 0.0], rtol=1e-15)

    def test_order_independent_two_points(self):
        bodies = sun_earth()
        forward = Field.gravitational(bodies, G=GRAVITATIONAL_CONSTANT, dt=3600.0)
        backward = Field.gravitational(bodies[::-1], G=GRAVITATIONAL_CONSTANT, dt=3600.0)
        for _ in range(5):
            forward.update()
            backward.update()
        assert forward.points[0].state == backward.points[1].state
        assert forward.points[1].state == backward.points[0].state

    @pytest.mark.parametrize("solver", ["euler", "symplectic_euler", "rk4"])
    def test_order_independent_three_points(self, solver):
        bodies = three_bodies()
        forward = Field.gravitational(bodies, G=1.0, dt=1e-3, solver=solver)
        backward = Field.gravitational(bodies[::-1], G=1.0, dt=1e-3, solver=solver)
        for _ in range(20):
            forward.update()
            backward.update()
        assert np.allclose(forward.positions(), backward.positions()[::-1], rtol=1e-12, atol=1e-15)

    @pytest.mark.parametrize("solver", ["euler", "rk4"])
    def test_small_step_agrees_with_symplectic_euler(self, solver):
        """Every scheme sees only the other points, so one small step lands in the same place."""
        bodies = [
            (1.0, [0.5, 0.0, 0.0], [0.0, 0.2, 0.0]),
            (1.0, [-0.5, 0.0, 0.0], [0.0, -0.2, 0.0]),
        ]
        reference = Field.gravitational(bodies, G=1.0, dt=1e-3, solver="symplectic_euler")
        field = Field.gravitational(bodies, G=1.0, dt=1e-3, solver=solver)
        reference.update()
        field.update()
        assert np.allclose(field.positions(), reference.positions(), rtol=0.0, atol=1e-5)
        for p, q in zip(field.points, reference.points):
            assert np.allclose(p.velocity.to_array(), q.velocity.to_array(), rtol=0.0, atol=1e-5)

    def test_rk4_single_point_moves_in_a_straight_line(self):
        field = Field.gravitational([(5.0, [1.0, 2.0, 3.0], [0.5, 0.0, -1.0])], G=1.0, dt=0.1, solver="rk4")
        for _ in range(10):
            field.update()
        assert np.allclose(field.positions()[0], [1.5, 2.0, 2.0], rtol=0.0, atol=1e-12)
        assert field.points[0].velocity == Vector3(0.5, 0.0, -1.0)

    def test_records_each_step(self):
        field = Field.gravitational(three_bodies(), G=1.0, dt=0.01, trajectory_capacity=4)
        for _ in range(6):
            field.update()
        for p in field.points:
            assert len(p.trajectory) == 4
            assert p.trajectory.last == p.position

    def test_records_only_on_request(self):
        field = Field.gravitational(three_bodies(), G=1.0, dt=0.01, trajectory_capacity=4, record_trajectories=False)
        start = [p.position for p in field.points]
        for _ in range(6):
            field.update()
        for p, p0 in zip(field.points, start):
            assert all(s == p0 for s in p.trajectory)
        field.record()
        for p in field.points:
            assert p.trajectory.last == p.position
            assert p.trajectory.get(-2) != p.position

    def test_mass_never_changes(self):
        field = Field.gravitational(three_bodies(), G=1.0, dt=0.01)
        for _ in range(10):
            field.update()
        assert [p.mass for p in field.points] == [1.0, 1.0, 1.0]
        with pytest.raises(AttributeError):
            field.points[0].mass = 2.0


class TestDeterminism:

    @pytest.mark.parametrize("solver", ["euler", "symplectic_euler", "rk4"])
    def test_replay(self, solver):
        f1 = Field.gravitational(three_bodies(), G=1.0, dt=1e-3, solver=solver)
        f2 = Field.gravitational(three_bodies(), G=1.0, dt=1e-3, solver=solver)
        for _ in range(200):
            f1.update()
            f2.update()
            assert np.array_equal(f1.positions(), f2.positions())


class TestConservation:

    def test_momentum_three_bodies(self):
        field = Field.gravitational(three_bodies(), G=1.0, dt=1e-3)
        p0 = field.momentum()
        for _ in range(500):
            field.update()
        assert np.allclose(field.momentum(), p0, rtol=0.0, atol=1e-12)

    def test_energy_three_bodies(self):
        field = Field.gravitational(three_bodies(), G=1.0, dt=1e-4)
        e0 = field.energy()
        for _ in range(1000):
            field.update()
        assert abs((field.energy() - e0) / e0) < 1e-2

    def test_energy_matches_point_diagnostics(self):
        field = Field.gravitational(three_bodies(), G=1.0, dt=1e-3)
        for _ in range(50):
            field.update()
        assert field.energy() == pytest.approx(diagnostics.total_energy(field.points, G=1.0), rel=1e-12)
        assert diagnostics.potential_energy(field.points, G=1.0) == pytest.approx(
            field.energy() - diagnostics.kinetic_energy(field.points), rel=1e-12,
        )

    def test_center_of_mass_moves_uniformly(self):
        field = Field.gravitational(three_bodies(), G=1.0, dt=1e-3)
        c0 = field.center_of_mass()
        vcom = field.momentum() / 3.0
        for _ in range(300):
            field.update()
        assert np.allclose(field.center_of_mass(), c0 + vcom * field.time, atol=1e-9)


def run_year(solver, dt=3600.0):
    field = Field.gravitational(sun_earth(), G=GRAVITATIONAL_CONSTANT, dt=dt, trajectory_capacity=8, solver=solver)
    p0 = field.momentum()
    radii = []
    steps = int(math.ceil(SECS_PER_YEAR / dt))
    for i in range(steps):
        field.update()
        if i % 24 == 0:
            radii.append(field.points[1].position.norm())
    return field, p0, radii


def assert_orbit_closes(field):
    earth = field.points[1]
    start = Vector3.ex * EARTH_PERIHELION
    assert earth.position.dist(start) < 0.01 * EARTH_PERIHELION


def assert_orbit_bounded(radii):
    assert len(radii) > 300
    assert min(radii) > 0.95 * EARTH_PERIHELION
    assert max(radii) < 1.1 * EARTH_PERIHELION


class TestSunEarthYear:
    """One simulated year of the Sun/Earth pair closes the orbit."""

    @pytest.fixture(scope="class")
    def run(self):
        return run_year("symplectic_euler")

    def test_orbit_closes(self, run):
        field, _, _ = run
        assert_orbit_closes(field)

    def test_orbit_stays_bounded(self, run):
        _, _, radii = run
        assert_orbit_bounded(radii)

    def test_momentum_conserved(self, run):
        field, p0, _ = run
        scale = EARTH_MASS * EARTH_PERIHELION_SPEED
        assert np.linalg.norm(field.momentum() - p0) < 1e-9 * scale


class TestSunEarthYearRK4:
    """RK4 stages move each point off its frozen position; the year still closes."""

    @pytest.fixture(scope="class")
    def run(self):
        return run_year("rk4")

    def test_orbit_closes(self, run):
        field, _, _ = run
        assert field.solver.name == "rk4"
        assert_orbit_closes(field)

    def test_orbit_stays_bounded(self, run):
        _, _, radii = run
        assert_orbit_bounded(radii)

    def test_sun_stays_near_origin(self, run):
        field, _, _ = run
        assert field.points[0].position.norm() < 1e-3 * EARTH_PERIHELION
