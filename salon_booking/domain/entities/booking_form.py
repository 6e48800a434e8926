from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import IntEnum


class FormStep(IntEnum):
    CONTACT = 1
    CATEGORY = 2
    SERVICE = 3
    CONFIRMATION = 4


@dataclass(frozen=True)
class BookingFormData:
    full_name: str = ""
    email_id: str = ""
    phone_number: str | None = None
    booking_date: date | None = None
    time_slot: str | None = None
    gender: str | None = "female"
    categories: tuple[str, ...] = ()
    services: tuple[str, ...] = ()


@dataclass(frozen=True)
class ValidationResult:
    ok: bool
    errors: dict[str, str] = field(default_factory=dict)

    @staticmethod
    def success() -> "ValidationResult":
        return ValidationResult(ok=True)

    @staticmethod
    def failure(errors: dict[str, str]) -> "ValidationResult":
        return ValidationResult(ok=False, errors=dict(errors))
