from __future__ import annotations

import logging
from typing import Callable
from urllib.parse import urlencode

from salon_booking.application.exceptions import AuthenticationRequiredError
from salon_booking.application.ports.auth import AuthPort, AuthStateListener
from salon_booking.domain.entities.auth import SIGNED_IN, SIGNED_OUT, AuthSession, AuthUser
from salon_booking.infrastructure.auth.listeners import AuthListenerRegistry


class MockAuth(AuthPort):
    """In-process auth for dev and tests: tokens are registered up front."""

    def __init__(self, users_by_token: dict[str, AuthUser] | None = None) -> None:
        self._users_by_token: dict[str, AuthUser] = dict(users_by_token or {})
        self._revoked: set[str] = set()
        self._listeners = AuthListenerRegistry()
        self._logger = logging.getLogger(__name__)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def register(self, access_token: str, user: AuthUser) -> None:
        self._users_by_token[access_token] = user
        self._revoked.discard(access_token)

    def get_session(self, access_token: str | None) -> AuthSession | None:
        user = self.get_user(access_token)
        if user is None:
            return None
        return AuthSession(access_token=access_token, user=user)

    def get_user(self, access_token: str | None) -> AuthUser | None:
        if not access_token or access_token in self._revoked:
            return None
        return self._users_by_token.get(access_token)

    def sign_in_with_oauth(self, provider: str, redirect_to: str) -> str:
        return "mock://auth/authorize?" + urlencode({"provider": provider, "redirect_to": redirect_to})

    def set_session(self, access_token: str, refresh_token: str | None = None) -> AuthSession:
        user = self.get_user(access_token)
        if user is None:
            raise AuthenticationRequiredError("Invalid or expired access token")
        session = AuthSession(access_token=access_token, user=user, refresh_token=refresh_token)
        self._listeners.emit(SIGNED_IN, session)
        return session

    def sign_out(self, access_token: str) -> None:
        user = self._users_by_token.get(access_token)
        self._revoked.add(access_token)
        self._logger.info("Mock sign out", extra={"user_id": user.id if user else None})
        self._listeners.emit(SIGNED_OUT, AuthSession(access_token=access_token, user=user or AuthUser(id="")))

    def on_auth_state_change(self, callback: AuthStateListener) -> Callable[[], None]:
        return self._listeners.add(callback)
