from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum


class BookingStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    CANCELLED = "cancelled"
    COMPLETED = "completed"

    @classmethod
    def parse(cls, value: str | BookingStatus | None) -> BookingStatus:
        """Map stored values, including legacy spellings, onto the closed set."""
        if isinstance(value, BookingStatus):
            return value
        normalized = (value or "").strip().lower()
        if not normalized:
            return cls.PENDING
        legacy = _LEGACY_STATUS_VALUES.get(normalized)
        if legacy is not None:
            return legacy
        try:
            return cls(normalized)
        except ValueError:
            raise ValueError(f"Unknown booking status: {value!r}") from None

    @property
    def label(self) -> str:
        return STATUS_LABELS[self]

    def stored_values(self) -> list[str]:
        """This status plus the legacy spellings that still map onto it."""
        return [self.value] + [k for k, v in _LEGACY_STATUS_VALUES.items() if v is self]


_LEGACY_STATUS_VALUES = {
    "accept": BookingStatus.ACCEPTED,
    "confirmed": BookingStatus.ACCEPTED,
    "cancel": BookingStatus.CANCELLED,
    "canceled": BookingStatus.CANCELLED,
}

STATUS_LABELS = {
    BookingStatus.PENDING: "Pending",
    BookingStatus.ACCEPTED: "Accepted",
    BookingStatus.CANCELLED: "Cancelled",
    BookingStatus.COMPLETED: "Completed",
}


@dataclass(frozen=True)
class BookingCustomer:
    full_name: str | None = None
    email_id: str | None = None
    phone_number: str | None = None


@dataclass(frozen=True)
class Booking:
    id: str
    user_id: str
    booking_date: date
    services: list[str] = field(default_factory=list)
    category_list: list[str] = field(default_factory=list)
    status: BookingStatus = BookingStatus.PENDING
    time_slot: str | None = None
    total_amount: float | None = None
    amount_paid: float | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    customer: BookingCustomer | None = None  # joined from profiles for admin views

    # Customer self-service rules; the record manager does not enforce them.
    @property
    def can_edit(self) -> bool:
        return self.status == BookingStatus.PENDING

    @property
    def can_reschedule(self) -> bool:
        return self.status in (BookingStatus.PENDING, BookingStatus.ACCEPTED)

    @property
    def can_cancel(self) -> bool:
        return self.status in (BookingStatus.PENDING, BookingStatus.ACCEPTED)


@dataclass(frozen=True)
class BookingSearch:
    status: BookingStatus | None = None
    month: str | None = None  # "yyyy-MM"
    search: str | None = None
    page: int = 1
    per_page: int = 10


@dataclass(frozen=True)
class BookingPage:
    bookings: list[Booking]
    total: int
    page: int
    per_page: int

    @property
    def total_pages(self) -> int:
        if self.per_page <= 0:
            return 0
        return (self.total + self.per_page - 1) // self.per_page
