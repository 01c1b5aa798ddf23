"""
Per-container flush throttling.
"""
import logging
import threading
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class FlushThrottle:
    """
    Tracks when each container was last flushed.

    Times are monotonic clock readings in seconds, so wall clock steps never
    hold back a flush. Entries are created on first flush and kept for the
    life of the process.
    """

    def __init__(self, interval: int = 0):
        """
        Initialize the throttle.

        Args:
            interval (int): Minimum seconds between two flushes of one container.
                0 disables throttling.
        """
        self.interval = interval
        self._last_flush: Dict[str, float] = {}
        self._lock = threading.Lock()

    def should_flush(self, container: str, now: float) -> bool:
        """
        Decide whether a container may flush at the given time.

        Records now as the container's last flush when returning True. The
        stored time never moves backwards.

        Args:
            container (str): Display name of the container
            now (float): Monotonic clock reading in seconds

        Returns:
            bool: True if the interval has passed since the last flush
        """
        with self._lock:
            last = self._last_flush.get(container)
            if last is None:
                self._last_flush[container] = now
            elif self.interval <= 0:
                self._last_flush[container] = max(last, now)
            elif now - last < self.interval:
                return False
            else:
                self._last_flush[container] = now
        logger.debug("Flushing container stats for %s", container)
        return True

    def last_flush(self, container: str) -> Optional[float]:
        with self._lock:
            return self._last_flush.get(container)

    def __len__(self) -> int:
        with self._lock:
            return len(self._last_flush)
