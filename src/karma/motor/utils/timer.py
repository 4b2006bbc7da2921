import time
from typing import Callable, Optional


class PollingTicker:
    """Fixed-period loop pacing with an injectable clock.

    >>> ticker = PollingTicker(0.02)
    >>> while running:
    ...     ticker.start_loop()
    ...     work()
    ...     ticker.end_loop()
    """

    def __init__(
        self,
        period: float,
        clock: Optional[Callable[[], float]] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        if period <= 0:
            raise ValueError(f"period must be positive, got: {period}")
        self.period = period
        self._clock = clock or time.monotonic
        self._sleep = sleep or time.sleep
        self._loop_start = None

    def now(self) -> float:
        return self._clock()

    def start_loop(self):
        self._loop_start = self._clock()

    def end_loop(self):
        if self._loop_start is None:
            self._sleep(self.period)
            return
        remaining = self.period - (self._clock() - self._loop_start)
        if remaining > 0:
            self._sleep(remaining)
