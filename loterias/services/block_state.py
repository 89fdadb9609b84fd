"""Process-wide cooldown gate for upstream requests.

Tripped when the upstream keeps answering 403; while it is active every
fetch fails fast without touching the network.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from threading import Lock
from typing import Callable

logger = logging.getLogger(__name__)

DEFAULT_BLOCK_DURATION = timedelta(hours=1)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BlockState:
    """Guarded block deadline shared by all concurrent fetchers."""

    def __init__(self, clock: Callable[[], datetime] = _utcnow) -> None:
        self._lock = Lock()
        self._clock = clock
        self._blocked_until: datetime | None = None

    @property
    def blocked_until(self) -> datetime | None:
        with self._lock:
            return self._blocked_until

    def remaining(self) -> timedelta:
        """Time left until requests are allowed again (zero when not blocked)."""

        with self._lock:
            if self._blocked_until is None:
                return timedelta(0)
            left = self._blocked_until - self._clock()
        return left if left > timedelta(0) else timedelta(0)

    def is_blocked(self) -> bool:
        return self.remaining() > timedelta(0)

    def trip(self, duration: timedelta = DEFAULT_BLOCK_DURATION) -> datetime:
        """Block until now + duration. Never moves an existing deadline earlier."""

        with self._lock:
            deadline = self._clock() + duration
            if self._blocked_until is None or deadline > self._blocked_until:
                self._blocked_until = deadline
            current = self._blocked_until
        logger.warning("Upstream blocked until %s", current.isoformat())
        return current

    def reset(self) -> None:
        with self._lock:
            was = self._blocked_until
            self._blocked_until = None
        if was is not None:
            logger.info("Block state cleared (was blocked until %s)", was.isoformat())

    def snapshot(self) -> dict[str, object]:
        with self._lock:
            until = self._blocked_until
            now = self._clock()
        left = (until - now) if until is not None else timedelta(0)
        blocked = left > timedelta(0)
        return {
            "blocked": blocked,
            "blocked_until": until.isoformat() if blocked and until is not None else None,
            "remaining_seconds": int(left.total_seconds()) if blocked else 0,
        }


BLOCK_STATE = BlockState()
