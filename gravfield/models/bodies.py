# gravfield/models/bodies.py
from typing import List, Sequence

import numpy as np

from gravfield.config.settings import (
    EARTH_MASS,
    EARTH_PERIHELION,
    EARTH_PERIHELION_SPEED,
    SUN_MASS,
    require_positive,
)
from gravfield.physics.vector import Vector3


class Body:
    """
    Initial conditions for one point mass: mass (kg), position (m), velocity (m/s).
    """
    def __init__(self, mass, position=None, velocity=None, name="Body"):
        self.name = name
        self.mass = require_positive("mass", mass)
        self.position = Vector3.zeros() if position is None else _to_vector3(position)
        self.velocity = Vector3.zeros() if velocity is None else _to_vector3(velocity)

    def __iter__(self):
        # unpacks as (mass, position, velocity)
        return iter((self.mass, self.position, self.velocity))

    def __repr__(self):
        return f"{self.name}(mass={self.mass}, position={self.position!r}, velocity={self.velocity!r})"


def _to_vector3(v) -> Vector3:
    """Coerce a Vector3, a 3-sequence or a scalar (taken as x) to Vector3."""
    if isinstance(v, Vector3):
        return v
    arr = np.array(v, dtype=float)
    if arr.ndim == 0:
        return Vector3(float(arr), 0.0, 0.0)
    return Vector3.from_array(arr)


def sun_earth() -> List[Body]:
    """
    Sun at rest at the origin and Earth at perihelion moving along +y.
    """
    return [
        Body(SUN_MASS, name="Sun"),
        Body(
            EARTH_MASS,
            Vector3.ex * EARTH_PERIHELION,
            Vector3.ey * EARTH_PERIHELION_SPEED,
            name="Earth",
        ),
    ]


def to_center_of_mass_frame(bodies: Sequence[Body]) -> List[Body]:
    """
    Return copies of `bodies` shifted so the centre of mass sits at the origin
    and total momentum is zero.
    """
    masses = np.array([b.mass for b in bodies], dtype=float)
    positions = np.array([b.position.to_array() for b in bodies], dtype=float)
    velocities = np.array([b.velocity.to_array() for b in bodies], dtype=float)

    com = np.average(positions, axis=0, weights=masses)
    vcom = np.average(velocities, axis=0, weights=masses)

    return [
        Body(b.mass, positions[i] - com, velocities[i] - vcom, name=b.name)
        for i, b in enumerate(bodies)
    ]
