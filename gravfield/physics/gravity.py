# gravfield/physics/gravity.py
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from gravfield.config.settings import GRAVITATIONAL_CONSTANT, require_positive
from gravfield.physics.vector import Vector3


@dataclass(frozen=True, eq=False)
class SourceSnapshot:
    """
    Frozen masses and positions of every source, taken before a Field update.
    Both arrays are read-only so a law evaluated against the snapshot cannot
    move the points it reads.
    """
    masses: np.ndarray
    positions: np.ndarray

    @classmethod
    def from_points(cls, points: Sequence) -> "SourceSnapshot":
        masses = np.array([p.mass for p in points], dtype=float)
        positions = np.array([p.position.to_array() for p in points], dtype=float).reshape(-1, 3)
        masses.flags.writeable = False
        positions.flags.writeable = False
        return cls(masses, positions)

    def without(self, index: int) -> "SourceSnapshot":
        """
        The same snapshot with source `index` left out: what one point of the
        field is attracted by. Solvers that evaluate away from the point's
        frozen position (RK4 stages) must not see its own entry.
        """
        index = range(len(self))[index]
        keep = np.arange(len(self)) != index
        masses = self.masses[keep]
        positions = self.positions[keep]
        masses.flags.writeable = False
        positions.flags.writeable = False
        return SourceSnapshot(masses, positions)

    def __len__(self) -> int:
        return self.masses.shape[0]


def gravitational_acceleration(position, positions, masses, G: float = GRAVITATIONAL_CONSTANT) -> np.ndarray:
    """
    a(p) = sum_i G * m_i * (p_i - p) / |p_i - p|^3

    A zero separation has its cubed distance taken as +inf, so a point never
    accelerates itself and coincident sources add nothing.
    """
    p = np.asarray(position, dtype=float)
    dr = np.asarray(positions, dtype=float) - p
    dist3 = np.linalg.norm(dr, axis=1) ** 3
    dist3[dist3 == 0.0] = np.inf
    k = G * np.asarray(masses, dtype=float) / dist3
    return np.sum(k[:, None] * dr, axis=0)


class AccelerationLaw:
    """
    Base acceleration law. Maps a position and a SourceSnapshot to an acceleration.
    Laws are stateless and only read the snapshot.
    """
    def acceleration(self, position: Vector3, sources: SourceSnapshot) -> Vector3:
        raise NotImplementedError

    def __call__(self, position: Vector3, sources: SourceSnapshot) -> Vector3:
        return self.acceleration(position, sources)


class NewtonianGravity(AccelerationLaw):
    def __init__(self, G: float = GRAVITATIONAL_CONSTANT):
        self.G = require_positive("G", G)

    def acceleration(self, position: Vector3, sources: SourceSnapshot) -> Vector3:
        if len(sources) == 0:
            return Vector3.zeros()
        a = gravitational_acceleration(position.to_array(), sources.positions, sources.masses, self.G)
        return Vector3.from_array(a)

    def potential_energy(self, sources: SourceSnapshot) -> float:
        """-sum over pairs of G * m_i * m_j / r_ij (coincident pairs skipped)."""
        m = sources.masses
        q = sources.positions
        diff = q[:, None, :] - q[None, :, :]
        r = np.linalg.norm(diff, axis=-1)
        iu = np.triu_indices(len(m), 1)
        r_pairs = r[iu]
        mprod = (m[:, None] * m[None, :])[iu]
        nonzero = r_pairs > 0.0
        return float(-self.G * np.sum(mprod[nonzero] / r_pairs[nonzero]))

    def __repr__(self):
        return f"NewtonianGravity(G={self.G!r})"


class CompositeLaw(AccelerationLaw):
    """Sum of several acceleration laws."""
    def __init__(self, *laws):
        self.laws = list(laws)

    def acceleration(self, position: Vector3, sources: SourceSnapshot) -> Vector3:
        total = np.zeros(3, dtype=float)
        for law in self.laws:
            total += law.acceleration(position, sources).to_array()
        return Vector3.from_array(total)
