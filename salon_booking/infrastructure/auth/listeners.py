from __future__ import annotations

import logging
import threading
from typing import Callable

from salon_booking.application.ports.auth import AuthStateListener
from salon_booking.domain.entities.auth import AuthSession


class AuthListenerRegistry:
    def __init__(self) -> None:
        self._listeners: list[AuthStateListener] = []
        self._lock = threading.Lock()
        self._logger = logging.getLogger(__name__)

    def add(self, callback: AuthStateListener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._listeners:
                    self._listeners.remove(callback)

        return unsubscribe

    def emit(self, event: str, session: AuthSession | None) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(event, session)
            except Exception as e:
                self._logger.error("Auth listener failed", extra={"reason": event, "error": str(e)})

    def __len__(self) -> int:
        return len(self._listeners)
