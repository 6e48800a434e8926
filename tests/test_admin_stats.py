"""
Tests for the admin dashboard figures and the customer directory.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from salon_booking.application.exceptions import BookingOperationError
from salon_booking.application.use_cases.admin_stats import (
    AdminStatsUseCase,
    categorize_service,
    dashboard_summary,
    status_breakdown,
)
from salon_booking.application.use_cases.customers import CustomerDirectoryUseCase
from salon_booking.domain.entities.booking import Booking, BookingStatus
from salon_booking.domain.entities.profile import Profile
from salon_booking.infrastructure.store.memory_store import MemoryProfileRepository


def _booking(id: str, day: date, services: list[str], status=BookingStatus.PENDING, total=100.0, paid=100.0) -> Booking:
    return Booking(
        id=id,
        user_id="user-1",
        booking_date=day,
        services=services,
        status=status,
        total_amount=total,
        amount_paid=paid,
    )


def test_categorize_service():
    assert categorize_service("Beard Trim") == "men"
    assert categorize_service("Classic Shave") == "men"
    assert categorize_service("Haircut") == "men"
    assert categorize_service("Facial") == "women"
    assert categorize_service("Hair Spa") == "women"
    assert categorize_service("Hair Colour") == "unisex"


def test_status_breakdown_percentages():
    bookings = [
        _booking("1", date(2025, 3, 1), ["Haircut"]),
        _booking("2", date(2025, 3, 2), ["Haircut"], status=BookingStatus.ACCEPTED),
        _booking("3", date(2025, 3, 3), ["Haircut"], status=BookingStatus.ACCEPTED),
    ]
    breakdown = status_breakdown(bookings)
    assert breakdown.total == 3
    assert breakdown.counts[BookingStatus.ACCEPTED] == 2
    assert breakdown.percentage(BookingStatus.ACCEPTED) == 67
    assert breakdown.percentage(BookingStatus.PENDING) == 33
    assert breakdown.percentage(BookingStatus.COMPLETED) == 0


def test_status_breakdown_empty():
    assert status_breakdown([]).percentage(BookingStatus.PENDING) == 0


def test_dashboard_summary_totals():
    march = [
        _booking("1", date(2025, 3, 1), ["Beard Trim", "Facial"], total=850, paid=500),
        _booking("2", date(2025, 3, 9), ["Manicure"], total=450, paid=450),
    ]
    february = [_booking("3", date(2025, 2, 20), ["Hair Colour"], total=1500, paid=0)]

    summary = dashboard_summary(march + february, march, "2025-03")

    assert summary.total_bookings == 3
    assert summary.monthly_bookings == 2
    assert summary.men_bookings == 1
    assert summary.women_bookings == 2
    assert summary.total_revenue == 2800
    assert summary.total_amount_paid == 950
    assert [b.id for b in summary.recent_bookings] == ["2", "1"]


def test_dashboard_keeps_ten_most_recent():
    start = date(2025, 3, 1)
    monthly = [_booking(str(i), start + timedelta(days=i), ["Haircut"]) for i in range(15)]
    summary = dashboard_summary(monthly, monthly, "2025-03")
    assert len(summary.recent_bookings) == 10
    assert summary.recent_bookings[0].booking_date == date(2025, 3, 15)


def test_admin_stats_use_case_defaults_to_current_month(manager):
    manager.create("user-1", date(2025, 3, 14), None, ["Facial"], ["Skin"], 700)
    manager.create("user-1", date(2025, 4, 2), None, ["Haircut"], ["Hair"], 300)

    summary = AdminStatsUseCase(manager).dashboard(today=date(2025, 3, 20))

    assert summary.month == "2025-03"
    assert summary.monthly_bookings == 1
    assert summary.total_bookings == 2


def test_customer_directory_search_and_pages():
    profiles = MemoryProfileRepository(
        Profile(
            id=f"user-{i}",
            full_name=f"Customer {i}",
            email_id=f"c{i}@example.com",
            created_at=datetime(2025, 1, 1) + timedelta(days=i),
        )
        for i in range(12)
    )
    directory = CustomerDirectoryUseCase(profiles, per_page=5)

    first = directory.list_customers()
    assert first.total == 12
    assert first.total_pages == 3
    assert first.customers[0].id == "user-11"

    last = directory.list_customers(page=3)
    assert [p.id for p in last.customers] == ["user-1", "user-0"]

    found = directory.list_customers(search="c7@")
    assert [p.id for p in found.customers] == ["user-7"]


def test_customer_directory_wraps_store_errors():
    class BrokenProfiles(MemoryProfileRepository):
        def list_page(self, offset, limit, search=None):
            raise RuntimeError("timeout")

    with pytest.raises(BookingOperationError):
        CustomerDirectoryUseCase(BrokenProfiles()).list_customers()
