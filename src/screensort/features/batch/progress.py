"""
Throttled progress reporting.
"""

import time
from typing import Callable, Optional, Tuple

ProgressCallback = Callable[[int, int], None]


class ProgressThrottle:
    """
    Forwards ``(current, total)`` updates no more often than ``interval`` seconds.

    The first update and the final one (``current == total``) are always delivered,
    as is any update passed with ``force=True``.
    """

    def __init__(
        self,
        callback: Optional[ProgressCallback],
        interval: float = 0.1,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.callback = callback
        self.interval = interval
        self.clock = clock
        self._last_emit: Optional[float] = None
        self._last_value: Optional[Tuple[int, int]] = None

    def update(self, current: int, total: int, force: bool = False) -> bool:
        """
        Report progress.

        Returns:
            True if the update was delivered
        """
        if self.callback is None:
            return False
        if self._last_value == (current, total):
            return False

        now = self.clock()
        due = self._last_emit is None or now - self._last_emit >= self.interval
        if not (due or force or current >= total):
            return False

        self._last_emit = now
        self._last_value = (current, total)
        self.callback(current, total)
        return True

    def flush(self, current: int, total: int) -> bool:
        return self.update(current, total, force=True)
