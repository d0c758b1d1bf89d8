"""Per-user activation gate.

Purpose of this abstraction:
    Decide whether a user's messages reach the orchestrator at all. State is a
    plain membership set toggled only by the activate/deactivate control tokens.

State model:
    - Unseen users are Inactive.
    - `activate` adds the user, `deactivate` removes it; both are idempotent.
    - Membership never expires by time.

Concurrency:
    All operations hold `_lock`, so the gate can be shared between the event loop
    and worker threads.
"""

import threading
import logging


logger = logging.getLogger(__name__)


class ActivationGate:
    """Thread-safe set of active user ids."""

    def __init__(self):
        self._active = set()
        self._lock = threading.Lock()

    def is_active(self, user_id: str) -> bool:
        with self._lock:
            return user_id in self._active

    def activate(self, user_id: str) -> None:
        with self._lock:
            if user_id in self._active:
                return
            self._active.add(user_id)
        logger.info("User activated: %s", user_id)

    def deactivate(self, user_id: str) -> None:
        with self._lock:
            if user_id not in self._active:
                return
            self._active.discard(user_id)
        logger.info("User deactivated: %s", user_id)

    def active_count(self) -> int:
        with self._lock:
            return len(self._active)
