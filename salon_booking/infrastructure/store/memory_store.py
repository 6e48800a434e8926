from __future__ import annotations

import threading
import time
import uuid
from collections import OrderedDict
from dataclasses import fields, replace
from datetime import date, datetime
from typing import Any, Callable, Iterable

from salon_booking.application.exceptions import BookingNotFoundError, RemoteStoreError
from salon_booking.application.ports.booking_repository import BookingRepositoryPort
from salon_booking.application.ports.form_session_store import FormSessionStorePort
from salon_booking.application.ports.profile_repository import ProfileRepositoryPort
from salon_booking.application.ports.service_catalog import ServiceCatalogPort
from salon_booking.domain.entities.booking import Booking, BookingCustomer, BookingStatus
from salon_booking.domain.entities.profile import Profile
from salon_booking.domain.entities.service_catalog import Service, ServiceCategory
from salon_booking.infrastructure.store.seed_catalog import SEED_CATEGORIES, SEED_SERVICES

_BOOKING_COLUMNS = {f.name for f in fields(Booking)} - {"id", "customer", "created_at"}


def _order_key(value: Any) -> tuple[int, Any]:
    # rows with a NULL sort column go last, as in Postgres "nulls last"
    return (0, value) if value is not None else (1, 0)


class MemoryServiceCatalog(ServiceCatalogPort):
    def __init__(
        self,
        services: Iterable[Service] | None = None,
        categories: Iterable[ServiceCategory] | None = None,
    ) -> None:
        self._services = list(SEED_SERVICES if services is None else services)
        self._categories = list(SEED_CATEGORIES if categories is None else categories)

    def list_active_services(self) -> list[Service]:
        return sorted((s for s in self._services if s.is_active), key=lambda s: _order_key(s.sort_order))

    def list_featured_services(self) -> list[Service]:
        featured = [s for s in self._services if s.is_active and s.is_featured]
        featured.sort(key=lambda s: s.created_at or datetime.min, reverse=True)
        return sorted(featured, key=lambda s: _order_key(s.sort_order))

    def list_services_by_category(self, category_id: str) -> list[Service]:
        matching = [s for s in self._services if s.is_active and s.category_id == category_id]
        return sorted(matching, key=lambda s: (_order_key(s.sort_order), s.name))

    def list_all_services(self) -> list[Service]:
        active = [s for s in self._services if s.is_active]
        return sorted(active, key=lambda s: (_order_key(s.category_id), _order_key(s.sort_order), s.name))

    def list_categories(self) -> list[ServiceCategory]:
        return sorted(self._categories, key=lambda c: _order_key(c.sort_order))


class MemoryProfileRepository(ProfileRepositoryPort):
    def __init__(self, profiles: Iterable[Profile] | None = None) -> None:
        self._profiles: dict[str, Profile] = {p.id: p for p in profiles or []}
        self._lock = threading.Lock()

    def get(self, user_id: str) -> Profile | None:
        return self._profiles.get(user_id)

    def upsert(self, profile: Profile) -> Profile:
        with self._lock:
            existing = self._profiles.get(profile.id)
            if existing is not None and existing.created_at is not None:
                profile = replace(profile, created_at=existing.created_at)
            self._profiles[profile.id] = profile
        return profile

    def list_page(self, offset: int, limit: int, search: str | None = None) -> tuple[list[Profile], int]:
        profiles = list(self._profiles.values())
        if search:
            needle = search.lower()
            profiles = [
                p
                for p in profiles
                if needle in (p.full_name or "").lower()
                or needle in (p.email_id or "").lower()
                or needle in (p.phone_number or "").lower()
            ]
        profiles.sort(key=lambda p: p.created_at or datetime.min, reverse=True)
        return profiles[offset : offset + limit], len(profiles)


class MemoryBookingRepository(BookingRepositoryPort):
    def __init__(
        self,
        profiles: ProfileRepositoryPort | None = None,
        enforce_slot_uniqueness: bool = False,
    ) -> None:
        self._bookings: dict[str, Booking] = {}
        self._profiles = profiles
        self._enforce_slot_uniqueness = enforce_slot_uniqueness
        self._lock = threading.Lock()

    def insert(
        self,
        user_id: str,
        booking_date: date,
        time_slot: str | None,
        services: list[str],
        category_list: list[str],
        total_amount: float | None,
        amount_paid: float | None,
        status: BookingStatus,
    ) -> Booking:
        now = datetime.now()
        booking = Booking(
            id=str(uuid.uuid4()),
            user_id=user_id,
            booking_date=booking_date,
            time_slot=time_slot,
            services=list(services),
            category_list=list(category_list),
            status=status,
            total_amount=total_amount,
            amount_paid=amount_paid,
            created_at=now,
            updated_at=now,
        )
        with self._lock:
            self._check_slot_free(booking)
            self._bookings[booking.id] = booking
        return booking

    def update(self, booking_id: str, changes: dict[str, Any]) -> Booking:
        unknown = set(changes) - _BOOKING_COLUMNS
        if unknown:
            raise RemoteStoreError(f"column {sorted(unknown)[0]!r} of relation \"bookings\" does not exist", 400)

        if "status" in changes:
            changes = {**changes, "status": BookingStatus.parse(changes["status"])}

        with self._lock:
            existing = self._bookings.get(booking_id)
            if existing is None:
                raise BookingNotFoundError(f"Booking {booking_id} not found")
            updated = replace(existing, **changes)
            self._check_slot_free(updated)
            self._bookings[booking_id] = updated
        return updated

    def get(self, booking_id: str) -> Booking | None:
        booking = self._bookings.get(booking_id)
        return self._with_customer(booking) if booking else None

    def list(
        self,
        user_id: str | None = None,
        status: BookingStatus | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        order_by: str = "created_at",
        with_customer: bool = False,
    ) -> list[Booking]:
        rows = self._filter(user_id, status, date_from, date_to)
        rows.sort(key=lambda b: _order_key(getattr(b, order_by)), reverse=True)
        if with_customer:
            rows = [self._with_customer(b) for b in rows]
        return rows

    def list_page(
        self,
        offset: int,
        limit: int,
        status: BookingStatus | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> tuple[list[Booking], int]:
        rows = self.list(status=status, date_from=date_from, date_to=date_to, order_by="booking_date", with_customer=True)
        return rows[offset : offset + limit], len(rows)

    def _filter(
        self,
        user_id: str | None,
        status: BookingStatus | None,
        date_from: date | None,
        date_to: date | None,
    ) -> list[Booking]:
        rows: list[Booking] = []
        for booking in list(self._bookings.values()):
            if user_id is not None and booking.user_id != user_id:
                continue
            if status is not None and booking.status != status:
                continue
            if date_from is not None and booking.booking_date < date_from:
                continue
            if date_to is not None and booking.booking_date > date_to:
                continue
            rows.append(booking)
        return rows

    def _with_customer(self, booking: Booking) -> Booking:
        if self._profiles is None:
            return booking
        profile = self._profiles.get(booking.user_id)
        if profile is None:
            return booking
        return replace(
            booking,
            customer=BookingCustomer(
                full_name=profile.full_name,
                email_id=profile.email_id,
                phone_number=profile.phone_number,
            ),
        )

    def _check_slot_free(self, booking: Booking) -> None:
        if not self._enforce_slot_uniqueness or not booking.time_slot:
            return
        if booking.status == BookingStatus.CANCELLED:
            return
        for other in self._bookings.values():
            if other.id == booking.id or other.status == BookingStatus.CANCELLED:
                continue
            if other.booking_date == booking.booking_date and other.time_slot == booking.time_slot:
                raise RemoteStoreError(
                    'duplicate key value violates unique constraint "bookings_date_slot_key"',
                    409,
                    "23505",
                )


class MemoryFormSessionStore(FormSessionStorePort):
    """
    Open booking forms by id. Sessions idle for longer than `ttl_seconds`
    expire, and once `max_sessions` is reached the least recently used one
    is evicted to make room.
    """

    def __init__(
        self,
        max_sessions: int = 1000,
        ttl_seconds: float = 1800.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._sessions: OrderedDict[str, tuple[str, Any, float]] = OrderedDict()
        self._max_sessions = max_sessions
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()

    def create(self, owner_id: str, machine) -> str:
        session_id = uuid.uuid4().hex
        with self._lock:
            now = self._clock()
            self._expire(now)
            while self._sessions and len(self._sessions) >= self._max_sessions:
                self._sessions.popitem(last=False)
            self._sessions[session_id] = (owner_id, machine, now)
        return session_id

    def get(self, session_id: str, owner_id: str):
        with self._lock:
            entry = self._sessions.get(session_id)
            if entry is None or entry[0] != owner_id:
                return None
            now = self._clock()
            if now - entry[2] > self._ttl_seconds:
                del self._sessions[session_id]
                return None
            self._sessions[session_id] = (owner_id, entry[1], now)
            self._sessions.move_to_end(session_id)
            return entry[1]

    def delete(self, session_id: str, owner_id: str) -> bool:
        with self._lock:
            entry = self._sessions.get(session_id)
            if entry is None or entry[0] != owner_id:
                return False
            del self._sessions[session_id]
        return True

    def __len__(self) -> int:
        return len(self._sessions)

    def _expire(self, now: float) -> None:
        expired = [sid for sid, (_, _, touched) in self._sessions.items() if now - touched > self._ttl_seconds]
        for sid in expired:
            del self._sessions[sid]
