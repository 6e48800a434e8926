from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor, Future, wait
from datetime import datetime
from typing import Callable

from salon_booking.application.exceptions import AuthenticationRequiredError, PermissionDeniedError
from salon_booking.application.ports.auth import AuthPort
from salon_booking.application.ports.profile_repository import ProfileRepositoryPort
from salon_booking.application.use_cases.booking_records import BookingRecordManager
from salon_booking.domain.entities.auth import SIGNED_IN, SIGNED_OUT, TOKEN_REFRESHED, AuthSession, AuthUser
from salon_booking.domain.entities.booking import Booking
from salon_booking.domain.entities.profile import Profile, ProfileUpdate


class SessionContext:
    """
    Identity, profile and bookings of one signed-in user, passed explicitly
    to whatever needs them.

    init() resolves the session and profile and subscribes to auth events;
    teardown() unsubscribes and settles background work. Profile loads
    triggered by auth events run on the shared executor and never raise
    into the event handler.
    """

    def __init__(
        self,
        auth: AuthPort,
        profiles: ProfileRepositoryPort,
        bookings: BookingRecordManager,
        executor: Executor,
        teardown_timeout: float = 5.0,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._auth = auth
        self._profiles = profiles
        self._bookings = bookings
        self._executor = executor
        self._teardown_timeout = teardown_timeout
        self._clock = clock
        self._logger = logging.getLogger(__name__)
        self._lock = threading.Lock()
        self._tasks: list[Future] = []
        self._unsubscribe: Callable[[], None] | None = None

        self.access_token: str | None = None
        self.session: AuthSession | None = None
        self.user: AuthUser | None = None
        self.profile: Profile | None = None
        self.bookings: list[Booking] = []
        self.initialized = False

    # -- lifecycle -----------------------------------------------------------

    def init(self, access_token: str | None) -> "SessionContext":
        if self._unsubscribe is None:
            self._unsubscribe = self._auth.on_auth_state_change(self._handle_auth_event)

        self.access_token = access_token
        try:
            session = self._auth.get_session(access_token) if access_token else None
        except Exception as e:
            self._logger.error("Error getting session", extra={"error": str(e)})
            session = None

        if session is not None:
            self._set_session(session)
            self.profile = self._fetch_profile(session.user.id)
        else:
            self._clear()
        self.initialized = True
        return self

    def teardown(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

        with self._lock:
            tasks, self._tasks = self._tasks, []
        pending = [t for t in tasks if not t.cancel()]
        if pending:
            done, not_done = wait(pending, timeout=self._teardown_timeout)
            if not_done:
                self._logger.warning("Background tasks still running at teardown", extra={"count": len(not_done)})

    def wait_for_background(self, timeout: float | None = None) -> None:
        with self._lock:
            tasks = list(self._tasks)
        if tasks:
            wait(tasks, timeout=timeout if timeout is not None else self._teardown_timeout)

    # -- auth ----------------------------------------------------------------

    def sign_in_url(self, provider: str, redirect_to: str) -> str:
        return self._auth.sign_in_with_oauth(provider, redirect_to)

    def sign_in_with_tokens(self, access_token: str, refresh_token: str | None = None) -> AuthSession:
        """Adopt tokens from the OAuth callback; the profile loads in the background."""
        self.access_token = access_token
        return self._auth.set_session(access_token, refresh_token)

    def sign_out(self) -> None:
        token = self.access_token
        try:
            if token:
                self._auth.sign_out(token)
        except Exception as e:
            self._logger.error("Error during sign out", extra={"error": str(e)})
            raise
        finally:
            self._clear()

    def _handle_auth_event(self, event: str, session: AuthSession | None) -> None:
        if not self._concerns_me(session):
            return

        self._logger.info("Auth state changed", extra={"reason": event})
        if event == SIGNED_OUT:
            self._clear()
            return

        if event in (SIGNED_IN, TOKEN_REFRESHED) and session is not None:
            self._set_session(session)
            self._spawn(self._load_profile_in_background, session.user)

    def _concerns_me(self, session: AuthSession | None) -> bool:
        if session is None:
            return False
        if self.access_token and session.access_token == self.access_token:
            return True
        return self.user is not None and session.user.id == self.user.id

    # -- background work -----------------------------------------------------

    def _spawn(self, fn: Callable[..., None], *args) -> None:
        future = self._executor.submit(fn, *args)
        with self._lock:
            self._tasks = [t for t in self._tasks if not t.done()]
            self._tasks.append(future)

    def _load_profile_in_background(self, user: AuthUser) -> None:
        try:
            profile = self._profiles.get(user.id)
            if profile is None:
                profile = self._profiles.upsert(self._new_profile(user))
                self._logger.info("Profile created on first sign in", extra={"user_id": user.id})
            with self._lock:
                if self.user is not None and self.user.id == user.id:
                    self.profile = profile
        except Exception as e:
            self._logger.error("Error fetching profile after sign in", extra={"user_id": user.id, "error": str(e)})

    # -- profile -------------------------------------------------------------

    @property
    def needs_onboarding(self) -> bool:
        return self.user is not None and (self.profile is None or self.profile.needs_onboarding)

    @property
    def is_admin(self) -> bool:
        return self.profile is not None and self.profile.is_admin

    def require_user(self) -> AuthUser:
        if self.user is None:
            raise AuthenticationRequiredError("Please sign in to continue.")
        return self.user

    def require_admin(self) -> Profile:
        self.require_user()
        if not self.is_admin:
            raise PermissionDeniedError("Admin access required.")
        return self.profile

    def fetch_profile(self) -> Profile | None:
        user = self.require_user()
        self.profile = self._fetch_profile(user.id)
        return self.profile

    def update_profile(self, updates: ProfileUpdate, complete_onboarding: bool | None = None) -> Profile:
        """
        Upsert the signed-in user's profile. Unset fields keep their stored
        value; id and email always come from the auth user.
        """
        user = self.require_user()
        existing = self.profile or self._fetch_profile(user.id)
        now = self._clock()

        if complete_onboarding is None:
            onboarding_completed = existing.onboarding_completed if existing else False
        else:
            onboarding_completed = complete_onboarding

        profile = Profile(
            id=user.id,
            email_id=user.email or (existing.email_id if existing else ""),
            full_name=_pick(updates.full_name, existing.full_name if existing else None) or "",
            phone_number=_pick(updates.phone_number, existing.phone_number if existing else None),
            instagram_id=_pick(updates.instagram_id, existing.instagram_id if existing else None),
            gender=_pick(updates.gender, existing.gender if existing else None),
            onboarding_completed=onboarding_completed,
            is_admin=existing.is_admin if existing else False,
            created_at=existing.created_at if existing and existing.created_at else now,
            updated_at=now,
        )
        try:
            stored = self._profiles.upsert(profile)
        except Exception as e:
            self._logger.error("Error upserting profile", extra={"user_id": user.id, "error": str(e)})
            raise
        self.profile = stored
        self._logger.info("Profile updated", extra={"user_id": user.id})
        return stored

    def refresh_bookings(self) -> list[Booking]:
        user = self.require_user()
        self.bookings = self._bookings.by_user(user.id)
        return self.bookings

    # -- internals -----------------------------------------------------------

    def _fetch_profile(self, user_id: str) -> Profile | None:
        try:
            return self._profiles.get(user_id)
        except Exception as e:
            self._logger.error("Error fetching profile", extra={"user_id": user_id, "error": str(e)})
            return None

    def _new_profile(self, user: AuthUser) -> Profile:
        now = self._clock()
        return Profile(
            id=user.id,
            full_name=user.full_name or "",
            email_id=user.email or "",
            onboarding_completed=False,
            is_admin=False,
            created_at=now,
            updated_at=now,
        )

    def _set_session(self, session: AuthSession) -> None:
        with self._lock:
            self.session = session
            self.user = session.user
            self.access_token = session.access_token

    def _clear(self) -> None:
        with self._lock:
            self.session = None
            self.user = None
            self.profile = None
            self.bookings = []


def _pick(value: str | None, fallback: str | None) -> str | None:
    if value is None:
        return fallback
    value = value.strip()
    return value or None
