"""
Tests for booking writes, rescheduling and admin search.
"""

from __future__ import annotations

from datetime import date, datetime

import pytest

from conftest import NOW, fixed_clock

from salon_booking.application.exceptions import BookingNotFoundError, BookingOperationError, RemoteStoreError
from salon_booking.application.use_cases.booking_records import BookingRecordManager, month_bounds
from salon_booking.domain.entities.booking import BookingSearch, BookingStatus
from salon_booking.domain.entities.profile import Profile
from salon_booking.infrastructure.store.memory_store import MemoryBookingRepository
from salon_booking.infrastructure.store.seed_catalog import SEED_SERVICES


def _create(manager: BookingRecordManager, user_id="user-1", booking_date=date(2025, 3, 20), **kwargs):
    values = dict(
        user_id=user_id,
        booking_date=booking_date,
        time_slot="9:00 AM - 11:00 AM",
        services=["Haircut"],
        category_list=["Hair"],
        total_amount=300,
    )
    values.update(kwargs)
    return manager.create(**values)


def test_month_bounds():
    assert month_bounds("2025-02") == (date(2025, 2, 1), date(2025, 2, 28))
    assert month_bounds("2024-02") == (date(2024, 2, 1), date(2024, 2, 29))
    assert month_bounds("2025-12") == (date(2025, 12, 1), date(2025, 12, 31))
    with pytest.raises(ValueError):
        month_bounds("2025-13")
    with pytest.raises(ValueError):
        month_bounds("March")


def test_create_is_pending_and_paid_in_full(manager):
    booking = _create(manager)
    assert booking.status == BookingStatus.PENDING
    assert booking.amount_paid == booking.total_amount == 300


def test_create_requires_services(manager):
    with pytest.raises(ValueError):
        _create(manager, services=[])


def test_update_status_accepts_legacy_spelling(manager):
    booking = _create(manager)
    updated = manager.update_status(booking.id, "confirmed")
    assert updated.status == BookingStatus.ACCEPTED
    assert updated.updated_at == NOW


def test_update_status_rejects_unknown(manager):
    booking = _create(manager)
    with pytest.raises(ValueError):
        manager.update_status(booking.id, "no-show")


def test_update_status_rejects_blank(manager, repository):
    """An empty status is refused instead of resetting the booking to pending."""
    booking = _create(manager)
    manager.update_status(booking.id, BookingStatus.ACCEPTED)
    for blank in ("", "   ", None):
        with pytest.raises(ValueError):
            manager.update_status(booking.id, blank)
    assert repository.get(booking.id).status == BookingStatus.ACCEPTED


def test_update_amount_paid_leaves_updated_at(repository):
    manager = BookingRecordManager(repository, clock=fixed_clock(datetime(2025, 3, 1, 9, 0)))
    booking = _create(manager)
    later = BookingRecordManager(repository, clock=fixed_clock(datetime(2025, 3, 2, 9, 0)))
    updated = later.update_amount_paid(booking.id, 150)
    assert updated.amount_paid == 150
    assert updated.updated_at == booking.updated_at
    with pytest.raises(ValueError):
        later.update_amount_paid(booking.id, -1)


def test_missing_booking_raises_not_found(manager):
    with pytest.raises(BookingNotFoundError):
        manager.get("missing")
    with pytest.raises(BookingNotFoundError):
        manager.cancel("missing")


def test_store_failure_becomes_booking_operation_error(repository):
    class RejectingRepository(MemoryBookingRepository):
        def update(self, booking_id, changes):
            raise RemoteStoreError('new row violates row-level security policy for table "bookings"', 403)

    manager = BookingRecordManager(RejectingRepository(), clock=fixed_clock())
    with pytest.raises(BookingOperationError) as excinfo:
        manager.cancel("any")
    assert "row-level security" in str(excinfo.value)
    assert excinfo.value.action == "update booking status"


def test_reschedule_today_substitutes_first_available_slot(manager):
    """A 9-11 AM booking moved to today at 14:30 lands on 3-5 PM."""
    booking = _create(manager)
    moved = manager.reschedule(booking.id, NOW.date(), now=NOW)
    assert moved.booking_date == NOW.date()
    assert moved.time_slot == "3:00 PM - 5:00 PM"


def test_reschedule_other_day_keeps_slot(manager):
    booking = _create(manager)
    moved = manager.reschedule(booking.id, date(2025, 4, 2), "5:00 PM - 7:00 PM", now=NOW)
    assert moved.time_slot == "5:00 PM - 7:00 PM"


def test_reschedule_late_today_keeps_slot(manager):
    booking = _create(manager)
    moved = manager.reschedule(booking.id, NOW.date(), now=datetime(2025, 3, 14, 21, 15))
    assert moved.time_slot == "9:00 AM - 11:00 AM"


def test_edit_services_recomputes_totals(manager):
    booking = _create(manager)
    edited = manager.edit_services(booking.id, ["Facial", "Manicure"], list(SEED_SERVICES))
    assert edited.services == ["Facial", "Manicure"]
    assert edited.total_amount == 1150
    assert edited.category_list == ["Skin", "Nails"]
    assert edited.amount_paid == 300


def test_by_user_and_by_status(manager):
    first = _create(manager, booking_date=date(2025, 3, 20))
    second = _create(manager, booking_date=date(2025, 3, 25))
    _create(manager, user_id="user-2")
    manager.cancel(first.id)

    mine = manager.by_user("user-1")
    assert [b.id for b in mine] == [second.id, first.id]
    assert [b.id for b in manager.by_user("user-1", "cancelled")] == [first.id]
    assert [b.id for b in manager.by_status(BookingStatus.CANCELLED)] == [first.id]


def test_search_paginates_by_month(profiles, manager):
    for day in range(1, 13):
        _create(manager, booking_date=date(2025, 3, day))
    _create(manager, booking_date=date(2025, 4, 1))

    page = manager.search(BookingSearch(month="2025-03", page=2, per_page=5))
    assert page.total == 12
    assert page.total_pages == 3
    assert [b.booking_date.day for b in page.bookings] == [7, 6, 5, 4, 3]


def test_search_matches_customer_and_service(profiles, manager):
    profiles.upsert(Profile(id="user-1", full_name="Asha Rao", email_id="asha@example.com"))
    profiles.upsert(Profile(id="user-2", full_name="Vikram", email_id="vikram@example.com"))
    _create(manager, user_id="user-1")
    _create(manager, user_id="user-2", services=["Beard Trim"])

    by_name = manager.search(BookingSearch(search="asha"))
    assert by_name.total == 1
    assert by_name.bookings[0].customer.full_name == "Asha Rao"

    by_service = manager.search(BookingSearch(search="beard"))
    assert by_service.total == 1
    assert by_service.bookings[0].user_id == "user-2"


def test_slot_uniqueness_when_enforced(profiles):
    manager = BookingRecordManager(
        MemoryBookingRepository(profiles=profiles, enforce_slot_uniqueness=True), clock=fixed_clock()
    )
    first = _create(manager)
    with pytest.raises(BookingOperationError):
        _create(manager, user_id="user-2")
    manager.cancel(first.id)
    assert _create(manager, user_id="user-2").status == BookingStatus.PENDING
