from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from salon_booking.application.use_cases.booking_form import BookingFormMachine


class FormSessionStorePort(ABC):
    @abstractmethod
    def create(self, owner_id: str, machine: "BookingFormMachine") -> str:
        """Store a new form session and return its id."""
        raise NotImplementedError

    @abstractmethod
    def get(self, session_id: str, owner_id: str) -> "BookingFormMachine | None":
        raise NotImplementedError

    @abstractmethod
    def delete(self, session_id: str, owner_id: str) -> bool:
        raise NotImplementedError
