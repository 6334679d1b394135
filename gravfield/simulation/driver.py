"""
Frame driver: the explicit replacement for a requestAnimationFrame loop.

Every advance() runs one bounded, synchronous burst of Field.update() calls that
covers `frame_duration` simulated seconds, then copies positions and trails out
into a read-only FrameSnapshot for the renderer. Nothing is rescheduled
implicitly; the host decides when (and whether) the next frame runs.
"""
import logging
import math
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

import numpy as np

from gravfield.config.settings import SECS_PER_DAY, ConfigurationError, require_positive
from gravfield.physics.field import Field

logger = logging.getLogger(__name__)

# tolerance on frame_duration / dt before rounding the substep count up
_RATIO_EPS = 1e-9


def substeps_for(frame_duration: float, dt: float) -> int:
    """Number of dt steps needed to cover frame_duration: ceil(frame_duration / dt)."""
    ratio = require_positive("frame_duration", frame_duration) / require_positive("dt", dt)
    return max(1, int(math.ceil(ratio - _RATIO_EPS)))


def _frozen(arr: np.ndarray) -> np.ndarray:
    arr = np.array(arr, dtype=float)
    arr.flags.writeable = False
    return arr


@dataclass(frozen=True, eq=False)
class FrameSnapshot:
    """
    Copied-out state after one frame. Arrays are read-only.
    positions: (n_points, 3); trajectories: one (len, 3) array per point, oldest first.
    """
    frame: int
    time: float
    positions: np.ndarray
    trajectories: Tuple[np.ndarray, ...]

    @property
    def days(self) -> float:
        return self.time / SECS_PER_DAY

    def to_dict(self) -> dict:
        return {
            "frame": self.frame,
            "time": self.time,
            "days": self.days,
            "positions": self.positions.tolist(),
            "trajectories": [t.tolist() for t in self.trajectories],
        }


class FrameDriver:
    def __init__(self, field: Field, frame_duration: float):
        """
        field: the Field to drive (owned by the driver for the run)
        frame_duration: simulated seconds covered by one rendered frame
        """
        self.field = field
        self.frame_duration = require_positive("frame_duration", frame_duration)
        self.substeps = substeps_for(self.frame_duration, field.dt)
        self.frame = 0
        self._running = False

        logger.info(
            "Driver ready: %d substeps/frame, dt=%.6g s, %.6g simulated s/frame",
            self.substeps, field.dt, self.frame_duration,
        )

    @property
    def time(self) -> float:
        """Simulated seconds elapsed; only ever increases."""
        return self.field.time

    @property
    def elapsed_days(self) -> float:
        return self.time / SECS_PER_DAY

    def advance(self) -> FrameSnapshot:
        """Run one frame's burst of substeps and return the resulting snapshot."""
        for _ in range(self.substeps):
            self.field.update()
        if not self.field.record_trajectories:
            self.field.record()
        self.frame += 1

        snap = self.snapshot()
        logger.debug("Frame %d done: t=%.3f days", self.frame, snap.days)
        return snap

    def snapshot(self) -> FrameSnapshot:
        return FrameSnapshot(
            frame=self.frame,
            time=self.time,
            positions=_frozen(self.field.positions()),
            trajectories=tuple(_frozen(p.trajectory.positions) for p in self.field.points),
        )

    def run(self, frames: Optional[int] = None) -> Iterator[FrameSnapshot]:
        """
        Yield one snapshot per frame until `frames` frames ran or stop() is called.
        frames=None runs until stopped.
        """
        if frames is not None and int(frames) < 0:
            raise ConfigurationError("frames must be >= 0")
        self._running = True
        done = 0
        try:
            while self._running and (frames is None or done < int(frames)):
                yield self.advance()
                done += 1
        finally:
            self._running = False
            logger.info("Driver stopped after %d frame(s), t=%.3f days", done, self.elapsed_days)

    def stop(self) -> None:
        """No further frames start; the current frame (if any) has already completed."""
        self._running = False
