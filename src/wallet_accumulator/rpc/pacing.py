"""Fixed inter-request pacing to stay under remote rate limits."""

import threading
import time
from collections.abc import Callable


class RequestPacer:
    """
    Enforces a fixed minimum delay between consecutive requests on one stream.

    This is a plain pacing delay, not a token bucket. Concurrent callers sharing
    a pacer are serialized so the combined request rate never exceeds one per
    ``interval``.

    Parameters
    ----------
    interval : float
        Minimum seconds between the start of two consecutive requests
    sleep : Callable[[float], None]
        Sleep function (injectable for tests)
    clock : Callable[[], float]
        Monotonic clock (injectable for tests)

    """

    def __init__(
        self,
        interval: float,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if interval < 0:
            msg = f"interval must be non-negative, got {interval}"
            raise ValueError(msg)
        self.interval = interval
        self._sleep = sleep
        self._clock = clock
        self._lock = threading.Lock()
        self._last: float | None = None

    def wait(self) -> float:
        """
        Block until the next request on this stream may start.

        Returns
        -------
        float
            Seconds actually slept

        """
        with self._lock:
            now = self._clock()
            slept = 0.0
            if self._last is not None:
                remaining = self._last + self.interval - now
                if remaining > 0:
                    self._sleep(remaining)
                    slept = remaining
                    now = self._clock()
            self._last = now
            return slept

    def reset(self) -> None:
        """Forget the previous request so the next one starts immediately."""
        with self._lock:
            self._last = None
