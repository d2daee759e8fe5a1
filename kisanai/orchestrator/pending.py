"""Per-user single-slot store for mutations awaiting confirmation."""
from __future__ import annotations

import logging
import threading
import time
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional

from kisanai.orchestrator.types import PendingAction

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300.0


class PendingActionStore(ABC):
    """Contract for the pending-action slot.

    ``has``/``get`` treat an action older than the TTL as absent and purge it,
    unless ``include_expired=True`` is passed (used to report expiry to the
    user instead of silently forgetting). ``pop`` removes and returns the raw
    slot atomically regardless of age.
    """

    @abstractmethod
    def has(self, user_id: str, *, include_expired: bool = False) -> bool:
        ...

    @abstractmethod
    def get(self, user_id: str, *, include_expired: bool = False) -> Optional[PendingAction]:
        ...

    @abstractmethod
    def set(self, user_id: str, action: PendingAction) -> None:
        ...

    @abstractmethod
    def clear(self, user_id: str) -> bool:
        """Remove the slot. Returns True when something was removed."""
        ...

    @abstractmethod
    def pop(self, user_id: str) -> Optional[PendingAction]:
        ...

    @property
    @abstractmethod
    def ttl_seconds(self) -> float:
        ...


class InMemoryPendingActionStore(PendingActionStore):
    """Lock-guarded dict in process memory. Lost on restart; no background sweeper."""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self._ttl = ttl_seconds
        self._clock = clock
        self._actions: Dict[str, PendingAction] = {}
        self._lock = threading.Lock()

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    @property
    def size(self) -> int:
        with self._lock:
            return len(self._actions)

    def _live(self, user_id: str, include_expired: bool) -> Optional[PendingAction]:
        # Caller holds self._lock.
        action = self._actions.get(user_id)
        if action is None or include_expired:
            return action
        if action.is_expired(self._ttl, self._clock()):
            del self._actions[user_id]
            logger.debug("Purged expired pending action", extra={"user_id": user_id})
            return None
        return action

    def has(self, user_id: str, *, include_expired: bool = False) -> bool:
        with self._lock:
            return self._live(user_id, include_expired) is not None

    def get(self, user_id: str, *, include_expired: bool = False) -> Optional[PendingAction]:
        with self._lock:
            return self._live(user_id, include_expired)

    def set(self, user_id: str, action: PendingAction) -> None:
        with self._lock:
            replaced = self._actions.get(user_id)
            self._actions[user_id] = action
        if replaced is not None:
            logger.info(
                "Pending %s replaced by %s",
                replaced.type.value, action.type.value,
                extra={"user_id": user_id, "action_type": action.type.value},
            )

    def clear(self, user_id: str) -> bool:
        with self._lock:
            return self._actions.pop(user_id, None) is not None

    def pop(self, user_id: str) -> Optional[PendingAction]:
        with self._lock:
            return self._actions.pop(user_id, None)
