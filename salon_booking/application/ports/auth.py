from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable

from salon_booking.domain.entities.auth import AuthSession, AuthUser

AuthStateListener = Callable[[str, "AuthSession | None"], None]


class AuthPort(ABC):
    @abstractmethod
    def get_session(self, access_token: str | None) -> AuthSession | None:
        """Resolve a session for the token, or None when it is missing or invalid."""
        raise NotImplementedError

    @abstractmethod
    def get_user(self, access_token: str | None) -> AuthUser | None:
        raise NotImplementedError

    @abstractmethod
    def sign_in_with_oauth(self, provider: str, redirect_to: str) -> str:
        """Return the provider authorization URL the browser should be sent to."""
        raise NotImplementedError

    @abstractmethod
    def set_session(self, access_token: str, refresh_token: str | None = None) -> AuthSession:
        """Adopt tokens returned by the OAuth callback. Emits SIGNED_IN."""
        raise NotImplementedError

    @abstractmethod
    def sign_out(self, access_token: str) -> None:
        """Revoke the session. Emits SIGNED_OUT."""
        raise NotImplementedError

    @abstractmethod
    def on_auth_state_change(self, callback: AuthStateListener) -> Callable[[], None]:
        """Register a listener for (event, session). Returns an unsubscribe function."""
        raise NotImplementedError
