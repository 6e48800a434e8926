from __future__ import annotations

from datetime import date
from typing import Any

from salon_booking.application.exceptions import BookingNotFoundError
from salon_booking.application.ports.booking_repository import BookingRepositoryPort
from salon_booking.application.ports.profile_repository import ProfileRepositoryPort
from salon_booking.application.ports.service_catalog import ServiceCatalogPort
from salon_booking.domain.entities.booking import Booking, BookingStatus
from salon_booking.domain.entities.profile import Profile
from salon_booking.domain.entities.service_catalog import Service, ServiceCategory
from salon_booking.infrastructure.supabase.client import SupabaseClient
from salon_booking.infrastructure.supabase.mappers import (
    booking_from_row,
    category_from_row,
    profile_from_row,
    profile_to_row,
    service_from_row,
)

SERVICE_WITH_CATEGORY = "*,category:service_categories(*)"
BOOKING_WITH_PROFILE = "*,profile:profiles(full_name,email_id,phone_number)"


class SupabaseServiceCatalog(ServiceCatalogPort):
    def __init__(self, client: SupabaseClient) -> None:
        self._client = client

    def _services(self):
        return self._client.table("services").select(SERVICE_WITH_CATEGORY).eq("is_active", True)

    def list_active_services(self) -> list[Service]:
        rows, _ = self._services().order("sort_order").execute()
        return [service_from_row(r) for r in rows]

    def list_featured_services(self) -> list[Service]:
        rows, _ = (
            self._services()
            .eq("is_featured", True)
            .order("sort_order")
            .order("created_at", ascending=False)
            .execute()
        )
        return [service_from_row(r) for r in rows]

    def list_services_by_category(self, category_id: str) -> list[Service]:
        rows, _ = self._services().eq("category_id", category_id).order("sort_order").order("name").execute()
        return [service_from_row(r) for r in rows]

    def list_all_services(self) -> list[Service]:
        rows, _ = self._services().order("category_id").order("sort_order").order("name").execute()
        return [service_from_row(r) for r in rows]

    def list_categories(self) -> list[ServiceCategory]:
        rows, _ = self._client.table("service_categories").select("*").order("sort_order").execute()
        return [category_from_row(r) for r in rows]


def _ilike_pattern(term: str) -> str:
    # double-quoted so commas and parentheses stay inside the or=(...) value
    escaped = term.replace("\\", "\\\\").replace('"', '\\"')
    return f'"*{escaped}*"'


class SupabaseProfileRepository(ProfileRepositoryPort):
    def __init__(self, client: SupabaseClient) -> None:
        self._client = client

    def get(self, user_id: str) -> Profile | None:
        rows, _ = self._client.table("profiles").select("*").eq("id", user_id).execute()
        return profile_from_row(rows[0]) if rows else None

    def upsert(self, profile: Profile) -> Profile:
        rows = self._client.table("profiles").upsert(profile_to_row(profile), on_conflict="id")
        return profile_from_row(rows[0]) if rows else profile

    def list_page(self, offset: int, limit: int, search: str | None = None) -> tuple[list[Profile], int]:
        query = self._client.table("profiles").select("*").count_exact().order("created_at", ascending=False)
        if search:
            pattern = _ilike_pattern(search)
            query = query.or_(
                f"full_name.ilike.{pattern},email_id.ilike.{pattern},phone_number.ilike.{pattern}"
            )
        rows, count = query.range(offset, offset + limit - 1).execute()
        return [profile_from_row(r) for r in rows], count if count is not None else len(rows)


class SupabaseBookingRepository(BookingRepositoryPort):
    def __init__(self, client: SupabaseClient) -> None:
        self._client = client

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
        rows = self._client.table("bookings").insert(
            {
                "user_id": user_id,
                "booking_date": booking_date,
                "time_slot": time_slot,
                "services": services,
                "category_list": category_list,
                "total_amount": total_amount,
                "amount_paid": amount_paid,
                "status": status,
            }
        )
        return booking_from_row(rows[0])

    def update(self, booking_id: str, changes: dict[str, Any]) -> Booking:
        rows = self._client.table("bookings").eq("id", booking_id).update(changes)
        if not rows:
            raise BookingNotFoundError(f"Booking {booking_id} not found")
        return booking_from_row(rows[0])

    def get(self, booking_id: str) -> Booking | None:
        rows, _ = self._client.table("bookings").select(BOOKING_WITH_PROFILE).eq("id", booking_id).execute()
        return booking_from_row(rows[0]) if rows else None

    def list(
        self,
        user_id: str | None = None,
        status: BookingStatus | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        order_by: str = "created_at",
        with_customer: bool = False,
    ) -> list[Booking]:
        query = self._filtered(BOOKING_WITH_PROFILE if with_customer else "*", status, date_from, date_to)
        if user_id is not None:
            query = query.eq("user_id", user_id)
        rows, _ = query.order(order_by, ascending=False).execute()
        return [booking_from_row(r) for r in rows]

    def list_page(
        self,
        offset: int,
        limit: int,
        status: BookingStatus | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> tuple[list[Booking], int]:
        query = self._filtered(BOOKING_WITH_PROFILE, status, date_from, date_to).count_exact()
        rows, count = query.order("booking_date", ascending=False).range(offset, offset + limit - 1).execute()
        return [booking_from_row(r) for r in rows], count if count is not None else len(rows)

    def _filtered(self, columns: str, status, date_from, date_to):
        query = self._client.table("bookings").select(columns)
        if status is not None:
            query = query.in_("status", status.stored_values())
        if date_from is not None:
            query = query.gte("booking_date", date_from)
        if date_to is not None:
            query = query.lte("booking_date", date_to)
        return query
