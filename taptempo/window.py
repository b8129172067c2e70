from collections import deque
from enum import Enum
from typing import Deque, Optional

NANOS_PER_SECOND = 1_000_000_000
MAX_PRECISION = 5


class InvalidConfiguration(ValueError):
    """Raised at startup when tempo settings cannot produce a usable window."""


class WindowState(Enum):
    EMPTY = "empty"
    WARMING = "warming"
    FULL = "full"


def bpm_from_interval(interval_s: float) -> Optional[float]:
    """Convert a mean beat interval (seconds) to BPM.

    A zero interval has no finite tempo, so it maps to None rather than inf.
    """
    if interval_s <= 0:
        return None
    return 60.0 / interval_s


def format_tempo(bpm: float, precision: int = 0) -> str:
    return f"{bpm:.{precision}f}"


class SampleWindow:
    """Bounded FIFO of hit timestamps and the mean interval they imply.

    Timestamps are monotonic instants in nanoseconds supplied by the caller.
    Once the window holds ``capacity`` samples every new hit evicts the oldest
    one, so the estimate averages over at most ``capacity - 1`` intervals.

    Estimation is non-consuming: ``estimate()`` and ``tempo()`` never modify
    the samples, repeated calls give the same answer until the next hit.
    """

    def __init__(self, capacity: int, precision: int = 0, idle_reset_duration: float = 5):
        if capacity < 2:
            raise InvalidConfiguration("sample size must be at least two.")
        if not 0 <= precision <= MAX_PRECISION:
            raise InvalidConfiguration(
                f"precision must be between 0 and {MAX_PRECISION} digits, got {precision}."
            )
        if idle_reset_duration <= 0:
            raise InvalidConfiguration("reset time must be a positive number of seconds.")
        self._capacity = int(capacity)
        self._precision = int(precision)
        self._idle_reset_duration = idle_reset_duration
        self._samples: Deque[int] = deque()

    # Properties
    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def precision(self) -> int:
        return self._precision

    @property
    def idle_reset_duration(self) -> float:
        return self._idle_reset_duration

    @property
    def idle_reset_ns(self) -> int:
        return int(self._idle_reset_duration * NANOS_PER_SECOND)

    @property
    def samples(self) -> tuple:
        return tuple(self._samples)

    @property
    def last_sample(self) -> Optional[int]:
        return self._samples[-1] if self._samples else None

    @property
    def state(self) -> WindowState:
        if not self._samples:
            return WindowState.EMPTY
        if len(self._samples) < self._capacity:
            return WindowState.WARMING
        return WindowState.FULL

    def __len__(self) -> int:
        return len(self._samples)

    def record(self, now: int) -> int:
        """Append a hit and evict the oldest one past capacity. Returns the sample count."""
        # Never let a late timestamp break chronological order.
        if self._samples and now < self._samples[-1]:
            now = self._samples[-1]
        self._samples.append(now)
        if len(self._samples) > self._capacity:
            self._samples.popleft()
        return len(self._samples)

    def estimate(self) -> Optional[float]:
        """Mean inter-hit interval in seconds, or None with fewer than two samples."""
        if len(self._samples) <= 1:
            return None
        elapsed_ns = self._samples[-1] - self._samples[0]
        return elapsed_ns / (len(self._samples) - 1) / NANOS_PER_SECOND

    def tempo(self) -> Optional[float]:
        interval = self.estimate()
        if interval is None:
            return None
        return bpm_from_interval(interval)

    def is_idle(self, now: int) -> bool:
        """True when the gap since the last hit exceeds the idle reset duration."""
        last = self.last_sample
        if last is None:
            return False
        return now - last > self.idle_reset_ns

    def reset(self):
        self._samples.clear()

    def format(self, bpm: float) -> str:
        return format_tempo(bpm, self._precision)
