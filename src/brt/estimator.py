"""CPU utilization estimate and sparkline encoding for brt."""

import math
from collections import deque
from collections.abc import Iterable, Sequence

from brt.logging import get_logger

log = get_logger(__name__)

DEFAULT_THRESHOLDS: tuple[float, float, float, float] = (0.1, 20.0, 50.0, 70.0)
DEFAULT_HISTORY_LENGTH = 10
LEVELS = 5

# Two readings per glyph: index is left_level * 5 + right_level.
GLYPHS = " ⢀⢠⢰⢸⡀⣀⣠⣰⣸⡄⣄⣤⣴⣼⡆⣆⣦⣶⣾⡇⣇⣧⣷⣿"


def cpu_percent(
    cpu_delta: float,
    wall_delta: float,
    cores: int,
    pid: int | None = None,
) -> float:
    """
    Convert a CPU-time delta into a percentage of the whole machine.

    Args:
        cpu_delta: CPU seconds (user + system) consumed during the interval.
        wall_delta: Wall-clock seconds covered by the interval.
        cores: Logical core count; the result is divided by it.
        pid: Only used for logging clamped values.

    Returns:
        A value in [0.0, 100.0]. A non-positive interval or core count
        yields 0.0.
    """
    if wall_delta <= 0 or cores <= 0:
        return 0.0
    percent = cpu_delta / wall_delta * 100.0 / cores
    if math.isnan(percent):
        return 0.0
    if percent < 0.0 or percent > 100.0:
        clamped = min(max(percent, 0.0), 100.0)
        log.debug("cpu_clamped", pid=pid, raw=percent, clamped=clamped)
        return clamped
    return percent


class CpuHistory:
    """Fixed-capacity FIFO of recent CPU readings, oldest first."""

    __slots__ = ("_values",)

    def __init__(
        self, capacity: int = DEFAULT_HISTORY_LENGTH, values: Iterable[float] = ()
    ) -> None:
        if capacity < 1:
            raise ValueError(f"History capacity must be at least 1, got {capacity}")
        self._values: deque[float] = deque([0.0] * capacity, maxlen=capacity)
        self._values.extend(values)

    @property
    def capacity(self) -> int:
        return self._values.maxlen  # type: ignore[return-value]

    def push(self, value: float) -> None:
        """Append the newest reading, evicting the oldest."""
        self._values.append(value)

    def values(self) -> tuple[float, ...]:
        return tuple(self._values)

    def __len__(self) -> int:
        return len(self._values)


class Sparkline:
    """Encodes CPU histories as braille glyphs, two readings per glyph."""

    def __init__(self, thresholds: Sequence[float] = DEFAULT_THRESHOLDS) -> None:
        thresholds = tuple(thresholds)
        if len(thresholds) != LEVELS - 1:
            raise ValueError(f"Expected {LEVELS - 1} thresholds, got {len(thresholds)}")
        if any(a >= b for a, b in zip(thresholds, thresholds[1:])):
            raise ValueError(f"Thresholds must be strictly increasing: {thresholds}")
        self.thresholds = thresholds

    def level(self, value: float) -> int:
        """Bucket a percentage into an intensity level 0-4."""
        for level, bound in enumerate(self.thresholds):
            if value < bound:
                return level
        return LEVELS - 1

    def encode(self, history: Sequence[float]) -> str:
        """Render a history; an odd trailing reading is paired with zero."""
        levels = [self.level(value) for value in history]
        if len(levels) % 2:
            levels.append(0)
        return "".join(
            GLYPHS[left * LEVELS + right] for left, right in zip(levels[::2], levels[1::2])
        )
