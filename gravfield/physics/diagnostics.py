# gravfield/physics/diagnostics.py
import numpy as np

from gravfield.config.settings import GRAVITATIONAL_CONSTANT
from gravfield.physics.gravity import NewtonianGravity, SourceSnapshot


def total_momentum(points) -> np.ndarray:
    """Sum of m_i * v_i (kg m/s)."""
    total = np.zeros(3, dtype=float)
    for p in points:
        total += p.mass * p.velocity.to_array()
    return total


def kinetic_energy(points) -> float:
    return float(sum(p.kinetic_energy for p in points))


def potential_energy(points, G: float = GRAVITATIONAL_CONSTANT) -> float:
    return NewtonianGravity(G).potential_energy(SourceSnapshot.from_points(points))


def total_energy(points, G: float = GRAVITATIONAL_CONSTANT) -> float:
    """
    Total mechanical energy (kinetic + Newtonian potential).
    Used as a numerical stability diagnostic, not as a conservation proof.
    """
    return kinetic_energy(points) + potential_energy(points, G)


def center_of_mass(points) -> np.ndarray:
    masses = np.array([p.mass for p in points], dtype=float)
    positions = np.array([p.position.to_array() for p in points], dtype=float).reshape(-1, 3)
    return np.average(positions, axis=0, weights=masses)


def relative_drift(initial: float, final: float) -> float:
    if initial == 0.0:
        return abs(final)
    return abs((final - initial) / initial)
