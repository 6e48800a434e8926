from __future__ import annotations

import calendar
import logging
from datetime import date, datetime
from typing import Any, Callable, TypeVar

from salon_booking.application.exceptions import BookingNotFoundError, BookingOperationError
from salon_booking.application.ports.booking_repository import BookingRepositoryPort
from salon_booking.application.utils.pricing import (
    calculate_total_amount,
    distinct_category_names,
    select_services,
)
from salon_booking.application.utils.time_slots import pick_slot_for_date
from salon_booking.domain.entities.booking import Booking, BookingPage, BookingSearch, BookingStatus
from salon_booking.domain.entities.service_catalog import Service

T = TypeVar("T")


def month_bounds(month: str) -> tuple[date, date]:
    """First and last calendar day of a "yyyy-MM" month."""
    try:
        year_str, month_str = month.split("-", 1)
        year, month_num = int(year_str), int(month_str)
        last_day = calendar.monthrange(year, month_num)[1]
    except (ValueError, calendar.IllegalMonthError) as e:
        raise ValueError(f"Invalid month {month!r}, expected yyyy-MM") from e
    return date(year, month_num, 1), date(year, month_num, last_day)


def _matches_search(booking: Booking, term: str) -> bool:
    needle = term.lower()
    customer = booking.customer
    if customer is not None:
        if customer.full_name and needle in customer.full_name.lower():
            return True
        if customer.phone_number and term in customer.phone_number:
            return True
        if customer.email_id and needle in customer.email_id.lower():
            return True
    return any(needle in service.lower() for service in booking.services)


class BookingRecordManager:
    """
    Booking writes and queries against the remote store. Status changes are
    not checked for legality here; who may do what is decided by the caller.
    Remote failures are re-raised as BookingOperationError, never retried.
    """

    def __init__(
        self,
        repository: BookingRepositoryPort,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._repository = repository
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    def create(
        self,
        user_id: str,
        booking_date: date,
        time_slot: str | None,
        services: list[str],
        category_list: list[str],
        total_amount: float | None,
    ) -> Booking:
        if not services:
            raise ValueError("A booking needs at least one service")

        booking = self._run(
            "create booking",
            lambda: self._repository.insert(
                user_id=user_id,
                booking_date=booking_date,
                time_slot=time_slot,
                services=list(services),
                category_list=list(category_list),
                total_amount=total_amount,
                amount_paid=total_amount,
                status=BookingStatus.PENDING,
            ),
            user_id=user_id,
        )
        self._logger.info("Booking created", extra={"booking_id": booking.id, "user_id": user_id})
        return booking

    def update_status(self, booking_id: str, new_status: BookingStatus | str) -> Booking:
        if not isinstance(new_status, BookingStatus) and not (new_status or "").strip():
            raise ValueError("Booking status is required")
        status = BookingStatus.parse(new_status)
        booking = self._update(booking_id, {"status": status}, "update booking status")
        self._logger.info("Booking status updated", extra={"booking_id": booking_id, "status": status.value})
        return booking

    def update_amount_paid(self, booking_id: str, amount: float) -> Booking:
        if amount is None or amount < 0:
            raise ValueError("Please enter a valid amount.")
        return self._update(booking_id, {"amount_paid": amount}, "update amount paid", touch=False)

    def reschedule(
        self,
        booking_id: str,
        new_date: date,
        new_time_slot: str | None = None,
        now: datetime | None = None,
    ) -> Booking:
        """
        Move a booking to another date. The requested slot (or the booking's
        current one) is replaced by the first available slot of the new date
        when it is no longer bookable there.
        """
        current = new_time_slot
        if current is None:
            existing = self.get(booking_id)
            current = existing.time_slot

        time_slot = pick_slot_for_date(new_date, current, now or self._clock())
        if time_slot != current:
            self._logger.info(
                "Time slot substituted on reschedule",
                extra={"booking_id": booking_id, "requested": current, "time_slot": time_slot},
            )
        return self._update(
            booking_id,
            {"booking_date": new_date, "time_slot": time_slot},
            "reschedule booking",
        )

    def edit_services(self, booking_id: str, new_services: list[str], catalog: list[Service]) -> Booking:
        """Replace the services and recompute total_amount and category_list. amount_paid is left alone."""
        if not new_services:
            raise ValueError("Please select at least one service")

        selected = select_services(catalog, new_services)
        changes: dict[str, Any] = {
            "services": list(new_services),
            "category_list": distinct_category_names(selected),
            "total_amount": calculate_total_amount(catalog, new_services),
        }
        return self._update(booking_id, changes, "update booking services")

    def cancel(self, booking_id: str) -> Booking:
        return self.update_status(booking_id, BookingStatus.CANCELLED)

    def get(self, booking_id: str) -> Booking:
        booking = self._run("fetch booking", lambda: self._repository.get(booking_id), booking_id=booking_id)
        if booking is None:
            raise BookingNotFoundError(f"Booking {booking_id} not found")
        return booking

    def by_status(self, status: BookingStatus | str) -> list[Booking]:
        parsed = BookingStatus.parse(status)
        return self._run(
            "fetch bookings by status",
            lambda: self._repository.list(status=parsed, with_customer=True),
            status=parsed.value,
        )

    def by_user(self, user_id: str, status: BookingStatus | str | None = None) -> list[Booking]:
        parsed = BookingStatus.parse(status) if status else None
        return self._run(
            "fetch user bookings",
            lambda: self._repository.list(user_id=user_id, status=parsed, order_by="booking_date"),
            user_id=user_id,
        )

    def all(self, order_by: str = "created_at") -> list[Booking]:
        return self._run("fetch bookings", lambda: self._repository.list(order_by=order_by, with_customer=True))

    def in_range(self, date_from: date, date_to: date) -> list[Booking]:
        return self._run(
            "fetch bookings in range",
            lambda: self._repository.list(
                date_from=date_from, date_to=date_to, order_by="booking_date", with_customer=True
            ),
        )

    def search(self, filters: BookingSearch) -> BookingPage:
        """
        Admin listing. Without a search term paging is done by the store;
        with one, matching runs over customer and service names locally.
        """
        page = max(filters.page, 1)
        per_page = max(filters.per_page, 1)
        offset = (page - 1) * per_page
        date_from = date_to = None
        if filters.month:
            date_from, date_to = month_bounds(filters.month)

        term = (filters.search or "").strip()
        if not term:
            bookings, total = self._run(
                "fetch bookings",
                lambda: self._repository.list_page(
                    offset=offset,
                    limit=per_page,
                    status=filters.status,
                    date_from=date_from,
                    date_to=date_to,
                ),
            )
            return BookingPage(bookings=bookings, total=total, page=page, per_page=per_page)

        candidates = self._run(
            "fetch bookings",
            lambda: self._repository.list(
                status=filters.status,
                date_from=date_from,
                date_to=date_to,
                order_by="booking_date",
                with_customer=True,
            ),
        )
        matched = [b for b in candidates if _matches_search(b, term)]
        return BookingPage(
            bookings=matched[offset : offset + per_page],
            total=len(matched),
            page=page,
            per_page=per_page,
        )

    def _update(self, booking_id: str, changes: dict[str, Any], action: str, touch: bool = True) -> Booking:
        if touch:
            changes = {**changes, "updated_at": self._clock()}
        return self._run(action, lambda: self._repository.update(booking_id, changes), booking_id=booking_id)

    def _run(self, action: str, operation: Callable[[], T], **context: Any) -> T:
        try:
            return operation()
        except (BookingNotFoundError, BookingOperationError):
            raise
        except Exception as e:
            self._logger.error(f"Error: failed to {action}", extra={**context, "error": str(e)})
            raise BookingOperationError(str(e), action=action) from e
