"""
Performance utilities: API rate limiting and background file writes.
"""

import time
from collections import deque
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, List
from rich.console import Console

from .constants import RATE_LIMIT_CALLS, RATE_LIMIT_PERIOD_SECONDS, IMAGE_WRITER_THREADS

console = Console()

# Slack for float rounding when comparing against a window boundary
_CLOCK_TOLERANCE = 1e-9


class RateLimiter:
    """Rate limiter for API calls.

    Allows at most ``max_calls`` acquisitions in any rolling window of
    ``period`` seconds. Waiting callers sleep; they are never rejected.
    """

    def __init__(
        self,
        max_calls: int = RATE_LIMIT_CALLS,
        period: float = RATE_LIMIT_PERIOD_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize rate limiter.

        Args:
            max_calls: Maximum calls per period
            period: Time period in seconds
            clock: Monotonic time source
            sleep: Function used to wait
        """
        self.max_calls = max_calls
        self.period = period
        self._clock = clock
        self._sleep = sleep
        self.calls = deque()

    def _forget_old_calls(self, now: float) -> None:
        while self.calls and now >= self.calls[0] + self.period - _CLOCK_TOLERANCE:
            self.calls.popleft()

    def tokens_remaining(self) -> int:
        """Number of calls that could be made right now without waiting."""
        self._forget_old_calls(self._clock())
        return self.max_calls - len(self.calls)

    def acquire(self) -> None:
        """Wait until a call fits in the budget, then record it."""
        now = self._clock()
        self._forget_old_calls(now)

        if len(self.calls) >= self.max_calls:
            console.print("[dim]*** delaying for rate limit[/dim]")

        while len(self.calls) >= self.max_calls:
            deadline = self.calls[0] + self.period
            self._sleep(deadline - now)
            now = self._clock()
            self._forget_old_calls(now)

        self.calls.append(now)


class BackgroundWriter:
    """Write files on worker threads so downloads don't wait on the disk."""

    def __init__(self, max_workers: int = IMAGE_WRITER_THREADS):
        self._executor = ThreadPoolExecutor(max_workers=max_workers)
        self._futures = []

    def submit(self, path: Path, data: bytes) -> None:
        path = Path(path)
        self._futures.append((path, self._executor.submit(path.write_bytes, data)))

    def wait(self) -> List[Path]:
        """
        Block until every submitted write has finished.

        Returns:
            Paths written since the last wait

        Raises:
            OSError: The first write error, after all writes have settled
        """
        futures, self._futures = self._futures, []
        first_error = None
        written = []
        for path, future in futures:
            try:
                future.result()
                written.append(path)
            except OSError as e:
                console.print(f"[bold red]Error writing file:[/bold red] {e}")
                first_error = first_error or e
        if first_error:
            raise first_error
        return written

    def close(self) -> None:
        self._executor.shutdown(wait=True)
