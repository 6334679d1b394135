import math

from gravfield.physics.vector import Vector3, Vector6
from gravfield.physics.trajectory import TrajectoryBuffer
from gravfield.config.settings import BUFFER_LENGTH, require_positive


class Point:
    """
    Point mass with a 6D state (position, velocity) and a bounded trajectory.
    Mass is fixed at construction; the Field that owns the point mutates its state.
    """
    def __init__(self, mass, position=None, velocity=None, trajectory_capacity=BUFFER_LENGTH):
        self._mass = require_positive("mass", mass)
        position = Vector3.zeros() if position is None else _vector3(position)
        velocity = Vector3.zeros() if velocity is None else _vector3(velocity)
        self.state = Vector6.from_vectors(position, velocity)
        self.trajectory = TrajectoryBuffer.filled(trajectory_capacity, position)

    @property
    def mass(self) -> float:
        return self._mass

    @property
    def position(self) -> Vector3:
        return self.state.upper

    @property
    def velocity(self) -> Vector3:
        return self.state.lower

    @property
    def momentum(self) -> Vector3:
        return self.velocity * self._mass

    @property
    def kinetic_energy(self) -> float:
        v = self.velocity
        return 0.5 * self._mass * v.dot(v)

    def __repr__(self):
        return f"Point(mass={self._mass}, position={self.position!r}, velocity={self.velocity!r})"


def _vector3(value) -> Vector3:
    if isinstance(value, Vector3):
        return value
    return Vector3.from_array(value)


def is_finite_state(point: Point) -> bool:
    return all(math.isfinite(c) for c in point.state.to_array())
