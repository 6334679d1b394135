"""
Project settings (constants + small helpers).
Units: meters (m), seconds (s), kilograms (kg), meters/second (m/s).
"""
from __future__ import annotations

import math
import os
from typing import Optional

# Paths
BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(__file__)))
OUTPUT_DIR = os.path.join(BASE_DIR, "outputs")

# Run
VALIDATE_ON_IMPORT = False

# Physics
GRAVITATIONAL_CONSTANT = 6.67408e-11  # universal gravitation constant in SI

# Sun / Earth (Earth starts at perihelion)
SUN_MASS = 1.9891e30
EARTH_MASS = 5.9736e24
EARTH_PERIHELION = 1.47098074e11
EARTH_PERIHELION_SPEED = 3.0287e4

# Time
SECS_PER_DAY = 86400.0
SECS_PER_MONTH = 2.628e6
SECS_PER_YEAR = 365.25 * SECS_PER_DAY

# Animation
TARGET_FRAMERATE = 60
SAMPLES_PER_FRAME = 8192
DELTA = 1.0 / TARGET_FRAMERATE  # real seconds per rendered frame
SPEED = SECS_PER_MONTH  # simulated seconds per real second

# Trajectory buffers
BUFFER_LENGTH = 4096
BUFFER_LENGTH_MIN = 1
BUFFER_LENGTH_MAX = 65536

# Integration
DEFAULT_SOLVER = "symplectic_euler"

# CLI defaults
DEFAULT_FRAMES = 60
LOG_EVERY_FRAMES = 10


class ConfigurationError(ValueError):
    """Raised when the simulation is built from parameters it cannot run with."""


def substep_dt(speed: Optional[float] = None) -> float:
    """
    Simulated seconds per Field.update(): delta / samples per frame, scaled by speed.
    """
    s = SPEED if speed is None else float(speed)
    return (DELTA / SAMPLES_PER_FRAME) * s


DT = substep_dt()


def clamp_buffer_length(val: Optional[int]) -> int:
    out = int(BUFFER_LENGTH if val is None else val)
    return max(BUFFER_LENGTH_MIN, min(BUFFER_LENGTH_MAX, out))


def require_positive(name: str, value: float) -> float:
    value = float(value)
    if not math.isfinite(value) or value <= 0.0:
        raise ConfigurationError(f"{name} must be a finite number > 0, got {value!r}")
    return value


def validate_settings() -> None:
    if GRAVITATIONAL_CONSTANT <= 0:
        raise ConfigurationError("GRAVITATIONAL_CONSTANT must be > 0")
    if SUN_MASS <= 0 or EARTH_MASS <= 0:
        raise ConfigurationError("Body masses must be > 0")
    if TARGET_FRAMERATE <= 0:
        raise ConfigurationError("TARGET_FRAMERATE must be > 0")
    if SAMPLES_PER_FRAME <= 0:
        raise ConfigurationError("SAMPLES_PER_FRAME must be > 0")
    if SPEED <= 0:
        raise ConfigurationError("SPEED must be > 0")
    if DT <= 0:
        raise ConfigurationError("DT must be > 0")
    if not BUFFER_LENGTH_MIN <= BUFFER_LENGTH <= BUFFER_LENGTH_MAX:
        raise ConfigurationError("BUFFER_LENGTH must lie within [BUFFER_LENGTH_MIN, BUFFER_LENGTH_MAX]")
    if DEFAULT_FRAMES <= 0:
        raise ConfigurationError("DEFAULT_FRAMES must be > 0")


if VALIDATE_ON_IMPORT:
    validate_settings()
