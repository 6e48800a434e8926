from __future__ import annotations

import logging
from dataclasses import dataclass

from salon_booking.application.exceptions import BookingOperationError
from salon_booking.application.ports.profile_repository import ProfileRepositoryPort
from salon_booking.domain.entities.profile import Profile


@dataclass(frozen=True)
class CustomerPage:
    customers: list[Profile]
    total: int
    page: int
    per_page: int

    @property
    def total_pages(self) -> int:
        return (self.total + self.per_page - 1) // self.per_page if self.per_page > 0 else 0


class CustomerDirectoryUseCase:
    def __init__(self, profiles: ProfileRepositoryPort, per_page: int = 10) -> None:
        self._profiles = profiles
        self._per_page = per_page
        self._logger = logging.getLogger(__name__)

    def list_customers(self, page: int = 1, search: str | None = None) -> CustomerPage:
        page = max(page, 1)
        offset = (page - 1) * self._per_page
        term = (search or "").strip() or None
        try:
            customers, total = self._profiles.list_page(offset=offset, limit=self._per_page, search=term)
        except Exception as e:
            self._logger.error("Error fetching customers", extra={"error": str(e)})
            raise BookingOperationError(str(e), action="fetch customers") from e
        return CustomerPage(customers=customers, total=total, page=page, per_page=self._per_page)
