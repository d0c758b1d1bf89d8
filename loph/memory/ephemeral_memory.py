"""Ephemeral per-user conversational memory with a sliding time window.

Purpose of this abstraction:
    Keep the recent `(prompt, response)` pairs of each user as lightweight context
    for the orchestrator. Nothing is persisted; the window lives in process memory.

Retention model:
    - `record` appends, then prunes the user's window to entries within `ttl_ms`.
    - `recent` filters on read, so visibility is exact even before the next prune.
    - Expired entries are never returned. A window that filters down to nothing
      is dropped by `recent`, so idle users do not keep a key.
    - There is no entry-count cap. Windows larger than `warn_threshold` log a
      warning on every `record`.

Concurrency:
    Append-and-prune runs under a single `threading.Lock`, so concurrent records
    for the same user never lose or duplicate entries.

Time source:
    `clock` returns wall-clock milliseconds and is injectable for tests.
"""

import threading
import time
import logging
from dataclasses import dataclass


logger = logging.getLogger(__name__)


DEFAULT_TTL_MS = 60_000
DEFAULT_WARN_THRESHOLD = 500


def _now_ms() -> float:
    return time.time() * 1000.0


@dataclass(frozen=True)
class MemoryEntry:
    prompt: str
    response: str
    timestamp: float


class EphemeralMemoryStore:
    """Thread-safe map of user id -> time-windowed list of `MemoryEntry`."""

    def __init__(
        self,
        ttl_ms: int = DEFAULT_TTL_MS,
        clock=_now_ms,
        warn_threshold: int = DEFAULT_WARN_THRESHOLD,
    ):
        self.ttl_ms = ttl_ms
        self.warn_threshold = warn_threshold
        self._clock = clock
        self._windows = {}
        self._lock = threading.Lock()

    def _is_live(self, entry: MemoryEntry, now: float) -> bool:
        return now - entry.timestamp <= self.ttl_ms

    def record(self, user_id: str, prompt: str, response: str) -> None:
        """Append one interaction and prune the user's window atomically."""
        with self._lock:
            now = self._clock()
            window = self._windows.get(user_id, [])
            window.append(MemoryEntry(prompt=prompt, response=response, timestamp=now))
            window = [entry for entry in window if self._is_live(entry, now)]
            self._windows[user_id] = window
            size = len(window)

        if size > self.warn_threshold:
            logger.warning(
                "Memory window for %s holds %d entries (threshold %d)",
                user_id,
                size,
                self.warn_threshold,
            )

    def recent(self, user_id: str) -> list[MemoryEntry]:
        """Return non-expired entries for `user_id`, oldest first."""
        with self._lock:
            now = self._clock()
            live = [
                entry
                for entry in self._windows.get(user_id, ())
                if self._is_live(entry, now)
            ]
            if not live:
                self._windows.pop(user_id, None)
            return live

    def tracked_users(self) -> int:
        """Number of users currently holding a window."""
        with self._lock:
            return len(self._windows)

    def clear(self, user_id: str) -> None:
        with self._lock:
            self._windows.pop(user_id, None)
