from __future__ import annotations

from datetime import date, datetime
from typing import Any

from salon_booking.domain.entities.booking import Booking, BookingCustomer, BookingStatus
from salon_booking.domain.entities.profile import Profile
from salon_booking.domain.entities.service_catalog import Service, ServiceCategory


def parse_datetime(value: Any) -> datetime | None:
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None


def parse_date(value: Any) -> date | None:
    if not value:
        return None
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _number(value: Any) -> float | None:
    if value is None or value == "":
        return None
    return float(value)


def category_from_row(row: dict[str, Any]) -> ServiceCategory:
    return ServiceCategory(
        id=str(row["id"]),
        name=row.get("name") or "",
        icon=row.get("icon"),
        sort_order=row.get("sort_order"),
        created_at=parse_datetime(row.get("created_at")),
    )


def service_from_row(row: dict[str, Any]) -> Service:
    category = row.get("category")
    return Service(
        id=str(row["id"]),
        name=row.get("name") or "",
        category_id=row.get("category_id"),
        price=_number(row.get("price")),
        duration_minutes=row.get("duration_minutes"),
        gender=row.get("gender"),
        description=row.get("description"),
        image_url=row.get("image_url"),
        is_active=bool(row.get("is_active", True)),
        is_featured=bool(row.get("is_featured")),
        sort_order=row.get("sort_order"),
        created_at=parse_datetime(row.get("created_at")),
        category=category_from_row(category) if isinstance(category, dict) else None,
    )


def profile_from_row(row: dict[str, Any]) -> Profile:
    return Profile(
        id=str(row["id"]),
        full_name=row.get("full_name") or "",
        email_id=row.get("email_id") or "",
        phone_number=row.get("phone_number"),
        instagram_id=row.get("instagram_id"),
        gender=row.get("gender"),
        onboarding_completed=bool(row.get("onboarding_completed")),
        is_admin=bool(row.get("is_admin")),
        created_at=parse_datetime(row.get("created_at")),
        updated_at=parse_datetime(row.get("updated_at")),
    )


def profile_to_row(profile: Profile) -> dict[str, Any]:
    return {
        "id": profile.id,
        "full_name": profile.full_name,
        "email_id": profile.email_id,
        "phone_number": profile.phone_number,
        "instagram_id": profile.instagram_id,
        "gender": profile.gender,
        "onboarding_completed": profile.onboarding_completed,
        "is_admin": profile.is_admin,
        "created_at": profile.created_at,
        "updated_at": profile.updated_at,
    }


def booking_from_row(row: dict[str, Any]) -> Booking:
    joined = row.get("profile") or row.get("profiles")
    customer = None
    if isinstance(joined, dict):
        customer = BookingCustomer(
            full_name=joined.get("full_name"),
            email_id=joined.get("email_id"),
            phone_number=joined.get("phone_number"),
        )
    return Booking(
        id=str(row["id"]),
        user_id=str(row.get("user_id") or ""),
        booking_date=parse_date(row.get("booking_date")),
        time_slot=row.get("time_slot"),
        services=list(row.get("services") or []),
        category_list=list(row.get("category_list") or []),
        status=BookingStatus.parse(row.get("status")),
        total_amount=_number(row.get("total_amount")),
        amount_paid=_number(row.get("amount_paid")),
        created_at=parse_datetime(row.get("created_at")),
        updated_at=parse_datetime(row.get("updated_at")),
        customer=customer,
    )


def booking_to_row(booking: Booking) -> dict[str, Any]:
    return {
        "id": booking.id,
        "user_id": booking.user_id,
        "booking_date": booking.booking_date,
        "time_slot": booking.time_slot,
        "services": list(booking.services),
        "category_list": list(booking.category_list),
        "status": booking.status,
        "total_amount": booking.total_amount,
        "amount_paid": booking.amount_paid,
        "created_at": booking.created_at,
        "updated_at": booking.updated_at,
    }
