# gravfield/physics/trajectory.py
import numpy as np

from gravfield.config.settings import ConfigurationError
from gravfield.physics.vector import Vector3


class TrajectoryBuffer:
    """
    Fixed-capacity history of past positions, used to draw trails.

    Samples live in a preallocated (capacity, 3) arena. `_head` is the slot the
    next push writes to and `_count` how many slots hold samples, so a push at
    capacity overwrites the oldest sample in place (FIFO) without reallocating.
    Reads never change the buffer.
    """

    def __init__(self, capacity: int):
        capacity = int(capacity)
        if capacity < 1:
            raise ConfigurationError(f"Trajectory capacity must be >= 1, got {capacity}")
        self._data = np.zeros((capacity, 3), dtype=float)
        self._head = 0
        self._count = 0

    @classmethod
    def filled(cls, capacity: int, position) -> "TrajectoryBuffer":
        """Buffer at capacity where every sample is `position` (a trail that starts as a dot)."""
        buf = cls(capacity)
        buf._data[:] = _as_xyz(position)
        buf._count = buf.capacity
        return buf

    @property
    def capacity(self) -> int:
        return self._data.shape[0]

    @property
    def is_full(self) -> bool:
        return self._count == self.capacity

    def push(self, position) -> None:
        self._data[self._head] = _as_xyz(position)
        self._head = (self._head + 1) % self.capacity
        if self._count < self.capacity:
            self._count += 1

    def clear(self) -> None:
        self._head = 0
        self._count = 0

    def _slot(self, index: int) -> int:
        if index < 0:
            index += self._count
        if index < 0 or index >= self._count:
            raise IndexError(f"Trajectory index out of range (len={self._count})")
        oldest = (self._head - self._count) % self.capacity
        return (oldest + index) % self.capacity

    def get(self, index: int) -> Vector3:
        """Sample at chronological index; 0 is the oldest, -1 the newest."""
        return Vector3.from_array(self._data[self._slot(index)])

    __getitem__ = get

    @property
    def last(self) -> Vector3:
        return self.get(-1)

    @property
    def positions(self) -> np.ndarray:
        """Copy of the samples as an (n, 3) array, oldest first."""
        oldest = (self._head - self._count) % self.capacity
        idx = (oldest + np.arange(self._count)) % self.capacity
        return self._data[idx]

    def __len__(self) -> int:
        return self._count

    def __iter__(self):
        for i in range(self._count):
            yield self.get(i)

    def __reversed__(self):
        for i in range(self._count - 1, -1, -1):
            yield self.get(i)

    def __repr__(self) -> str:
        return f"TrajectoryBuffer(len={self._count}, capacity={self.capacity})"


def _as_xyz(position) -> np.ndarray:
    if isinstance(position, Vector3):
        return position.to_array()
    arr = np.asarray(position, dtype=float)
    if arr.shape != (3,):
        raise ConfigurationError(f"Trajectory samples must be 3D, got shape {arr.shape}")
    return arr
