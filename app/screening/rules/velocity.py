"""Rapid-fire attempt rule.

Detects repeated payment attempts from the same source against the
same email domain in a short window. Bots cycling through card numbers
tend to hit the gateway every few seconds with an identical
source/domain pair, while a legitimate customer retrying rarely does.

The tracker remembers the time of the last attempt per key. Reading the
previous attempt and recording the current one happen as a single step
under a lock, so concurrent requests for the same key cannot both miss
each other.
"""

import threading
from datetime import datetime
from typing import Dict, Optional


def rapid_fire_key(source: str, domain: str) -> str:
    return f"{source}-{domain}"


class RapidFireTracker:
    """Keyed debounce window: key -> time of last attempt."""

    def __init__(self) -> None:
        self._last_attempt: Dict[str, datetime] = {}
        self._lock = threading.Lock()

    def record(self, key: str, timestamp: datetime) -> Optional[datetime]:
        """Store `timestamp` for `key` and return the previous attempt time."""
        with self._lock:
            previous = self._last_attempt.get(key)
            self._last_attempt[key] = timestamp
            return previous

    def is_rapid_fire(self, key: str, timestamp: datetime, window_seconds: float) -> bool:
        """Record the attempt and report whether the last one was within the window."""
        previous = self.record(key, timestamp)
        if previous is None:
            return False
        return abs((timestamp - previous).total_seconds()) < window_seconds

    def clear(self) -> None:
        with self._lock:
            self._last_attempt.clear()

    def __len__(self) -> int:
        return len(self._last_attempt)
