"""Timer context manager."""

import time
from typing import Optional


class Timer:
    """Measure wall time of a block.

        with Timer() as t:
            run()
        print(t.elapsed_ms)
    """

    def __init__(self):
        self.start: Optional[float] = None
        self.end: Optional[float] = None

    def __enter__(self) -> "Timer":
        self.start = time.perf_counter()
        self.end = None
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.end = time.perf_counter()

    @property
    def elapsed(self) -> float:
        """Seconds since start (up to now while still running)."""
        if self.start is None:
            return 0.0
        end = self.end if self.end is not None else time.perf_counter()
        return end - self.start

    @property
    def elapsed_ms(self) -> int:
        return int(self.elapsed * 1000)
