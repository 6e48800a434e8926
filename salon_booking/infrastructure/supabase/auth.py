from __future__ import annotations

import logging
import time
from typing import Any, Callable
from urllib.parse import urlencode

from salon_booking.application.exceptions import AuthenticationRequiredError, RemoteStoreError
from salon_booking.application.ports.auth import AuthPort, AuthStateListener
from salon_booking.domain.entities.auth import SIGNED_IN, SIGNED_OUT, TOKEN_REFRESHED, AuthSession, AuthUser
from salon_booking.infrastructure.auth.listeners import AuthListenerRegistry
from salon_booking.infrastructure.supabase.client import SupabaseClient


def _user_from_payload(payload: dict[str, Any]) -> AuthUser:
    metadata = payload.get("user_metadata") or {}
    return AuthUser(
        id=str(payload["id"]),
        email=payload.get("email"),
        full_name=metadata.get("full_name") or metadata.get("name"),
    )


class SupabaseAuth(AuthPort):
    """GoTrue endpoints under /auth/v1, sharing the PostgREST client's connection."""

    def __init__(self, client: SupabaseClient) -> None:
        self._client = client
        self._listeners = AuthListenerRegistry()
        self._logger = logging.getLogger(__name__)

    def get_session(self, access_token: str | None) -> AuthSession | None:
        user = self.get_user(access_token)
        if user is None:
            return None
        return AuthSession(access_token=access_token, user=user)

    def get_user(self, access_token: str | None) -> AuthUser | None:
        if not access_token:
            return None
        try:
            resp = self._client.request("GET", "/auth/v1/user", access_token=access_token)
        except RemoteStoreError as e:
            if e.status_code in (401, 403):
                return None
            raise
        return _user_from_payload(resp.json())

    def sign_in_with_oauth(self, provider: str, redirect_to: str) -> str:
        query = urlencode({"provider": provider, "redirect_to": redirect_to})
        return f"{self._client.base_url}/auth/v1/authorize?{query}"

    def set_session(self, access_token: str, refresh_token: str | None = None) -> AuthSession:
        user = self.get_user(access_token)
        if user is None:
            raise AuthenticationRequiredError("Invalid or expired access token")
        session = AuthSession(access_token=access_token, user=user, refresh_token=refresh_token)
        self._listeners.emit(SIGNED_IN, session)
        return session

    def refresh_session(self, refresh_token: str) -> AuthSession:
        resp = self._client.request(
            "POST",
            "/auth/v1/token",
            params=[("grant_type", "refresh_token")],
            json={"refresh_token": refresh_token},
        )
        data = resp.json()
        expires_in = data.get("expires_in")
        session = AuthSession(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token"),
            user=_user_from_payload(data["user"]),
            expires_at=time.time() + float(expires_in) if expires_in else None,
        )
        self._listeners.emit(TOKEN_REFRESHED, session)
        return session

    def sign_out(self, access_token: str) -> None:
        user = None
        try:
            user = self.get_user(access_token)
            self._client.request("POST", "/auth/v1/logout", access_token=access_token)
        finally:
            self._listeners.emit(
                SIGNED_OUT,
                AuthSession(access_token=access_token, user=user or AuthUser(id="")),
            )

    def on_auth_state_change(self, callback: AuthStateListener) -> Callable[[], None]:
        return self._listeners.add(callback)
