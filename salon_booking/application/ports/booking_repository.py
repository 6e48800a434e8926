from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from typing import Any

from salon_booking.domain.entities.booking import Booking, BookingStatus


class BookingRepositoryPort(ABC):
    @abstractmethod
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
        raise NotImplementedError

    @abstractmethod
    def update(self, booking_id: str, changes: dict[str, Any]) -> Booking:
        """
        Apply column changes to one booking and return the stored row.
        Raises BookingNotFoundError when no row matches.
        """
        raise NotImplementedError

    @abstractmethod
    def get(self, booking_id: str) -> Booking | None:
        raise NotImplementedError

    @abstractmethod
    def list(
        self,
        user_id: str | None = None,
        status: BookingStatus | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        order_by: str = "created_at",
        with_customer: bool = False,
    ) -> list[Booking]:
        """Bookings matching every given filter, ordered by `order_by` descending."""
        raise NotImplementedError

    @abstractmethod
    def list_page(
        self,
        offset: int,
        limit: int,
        status: BookingStatus | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> tuple[list[Booking], int]:
        """
        One page of bookings (customer joined), newest booking_date first.
        Returns (bookings, total_matching).
        """
        raise NotImplementedError
