"""
Field: owns every Point and advances simulated time.

Each update() freezes the masses and positions of all points into one
SourceSnapshot, integrates every point against that snapshot with its own entry
left out, and only then assigns the new states. No point ever sees another point's post-update position
within the same step, so the result does not depend on the order of `points`.
"""
import logging
from typing import Iterable, Optional, Sequence

import numpy as np

from gravfield.config.settings import (
    BUFFER_LENGTH,
    ConfigurationError,
    require_positive,
)
from gravfield.physics import diagnostics
from gravfield.physics.gravity import AccelerationLaw, NewtonianGravity, SourceSnapshot
from gravfield.physics.point import Point
from gravfield.physics.solver import Solver, get_solver

logger = logging.getLogger(__name__)


class Field:
    def __init__(
        self,
        points: Sequence[Point],
        law: AccelerationLaw,
        dt: float,
        solver: Optional[Solver] = None,
        record_trajectories: bool = True,
    ):
        """
        points: point masses, in the order external renderers index them
        law: acceleration law evaluated for every point against all points
        dt: fixed step in simulated seconds
        solver: Solver instance or name; defaults to settings.DEFAULT_SOLVER
        record_trajectories: push positions into trajectories after every update
        """
        self.points = tuple(points)
        if not self.points:
            raise ConfigurationError("Field needs at least one point")
        if not callable(getattr(law, "acceleration", None)):
            raise ConfigurationError(f"Acceleration law must implement acceleration(), got {law!r}")
        self.law = law
        self.dt = require_positive("dt", dt)
        self.solver = solver if isinstance(solver, Solver) else get_solver(solver)
        self.record_trajectories = bool(record_trajectories)
        self.step_count = 0

        logger.debug(
            "Field created: %d points, dt=%.6g s, solver=%s, law=%r",
            len(self.points), self.dt, self.solver.name, self.law,
        )

    @classmethod
    def gravitational(
        cls,
        bodies: Iterable,
        G: float,
        dt: float,
        trajectory_capacity: int = BUFFER_LENGTH,
        solver=None,
        record_trajectories: bool = True,
    ) -> "Field":
        """
        Build a Newtonian field from (mass, position, velocity) triples or Body objects.
        G and dt come from the host; there is no built-in step or constant here.
        """
        points = []
        for body in bodies:
            if hasattr(body, "mass"):
                mass, position, velocity = body.mass, body.position, body.velocity
            else:
                mass, position, velocity = body
            points.append(Point(mass, position, velocity, trajectory_capacity=trajectory_capacity))
        return cls(points, NewtonianGravity(G), dt, solver=solver, record_trajectories=record_trajectories)

    @property
    def time(self) -> float:
        """Simulated seconds since construction."""
        return self.step_count * self.dt

    def snapshot(self) -> SourceSnapshot:
        return SourceSnapshot.from_points(self.points)

    def _acceleration_from(self, sources: SourceSnapshot):
        def acceleration(position):
            return self.law.acceleration(position, sources)
        return acceleration

    def update(self) -> None:
        sources = self.snapshot()

        # each point is pulled by every other point, never by its own frozen entry
        new_states = [
            self.solver.step(p.state, self._acceleration_from(sources.without(i)), self.dt)
            for i, p in enumerate(self.points)
        ]

        for point, state in zip(self.points, new_states):
            point.state = state
        self.step_count += 1

        if self.record_trajectories:
            self.record()

    def record(self) -> None:
        """Push every point's current position into its trajectory."""
        for point in self.points:
            point.trajectory.push(point.position)

    def positions(self) -> np.ndarray:
        return np.array([p.position.to_array() for p in self.points], dtype=float).reshape(-1, 3)

    def momentum(self) -> np.ndarray:
        return diagnostics.total_momentum(self.points)

    def center_of_mass(self) -> np.ndarray:
        return diagnostics.center_of_mass(self.points)

    def energy(self) -> float:
        """Kinetic plus potential energy; requires a law with potential_energy()."""
        potential = getattr(self.law, "potential_energy", None)
        if potential is None:
            raise TypeError(f"{type(self.law).__name__} does not define a potential energy")
        return diagnostics.kinetic_energy(self.points) + potential(self.snapshot())

    def __len__(self) -> int:
        return len(self.points)

    def __repr__(self):
        return f"Field(points={len(self.points)}, dt={self.dt!r}, solver={self.solver.name!r}, time={self.time!r})"
