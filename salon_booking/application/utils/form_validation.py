from __future__ import annotations

import re
from typing import Callable, Iterable

from salon_booking.domain.entities.booking_form import BookingFormData, FormStep, ValidationResult

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

STEP_FIELDS: dict[FormStep, tuple[str, ...]] = {
    FormStep.CONTACT: ("full_name", "email_id", "booking_date", "gender"),
    FormStep.CATEGORY: ("categories",),
    FormStep.SERVICE: ("services",),
}

ALL_FIELDS = ("full_name", "email_id", "booking_date", "gender", "categories", "services")


def _check_full_name(data: BookingFormData) -> str | None:
    if not (data.full_name or "").strip():
        return "Full name is required"
    return None


def _check_email(data: BookingFormData) -> str | None:
    if not _EMAIL_RE.match((data.email_id or "").strip()):
        return "Valid email is required"
    return None


def _check_booking_date(data: BookingFormData) -> str | None:
    if data.booking_date is None:
        return "Booking date is required"
    return None


def _check_gender(data: BookingFormData) -> str | None:
    if data.gender not in ("male", "female"):
        return "Please select a gender"
    return None


def _check_categories(data: BookingFormData) -> str | None:
    if not data.categories:
        return "Please select at least one category"
    return None


def _check_services(data: BookingFormData) -> str | None:
    if not data.services:
        return "Please select at least one service"
    return None


_CHECKS: dict[str, Callable[[BookingFormData], str | None]] = {
    "full_name": _check_full_name,
    "email_id": _check_email,
    "booking_date": _check_booking_date,
    "gender": _check_gender,
    "categories": _check_categories,
    "services": _check_services,
}


def validate_booking_form(data: BookingFormData, fields: Iterable[str] = ALL_FIELDS) -> ValidationResult:
    """Run the checks for `fields` only and collect one message per failing field."""
    errors: dict[str, str] = {}
    for name in fields:
        check = _CHECKS.get(name)
        if check is None:
            raise KeyError(f"No validation rule for field {name!r}")
        message = check(data)
        if message:
            errors[name] = message
    if errors:
        return ValidationResult.failure(errors)
    return ValidationResult.success()


def validate_step(data: BookingFormData, step: FormStep) -> ValidationResult:
    return validate_booking_form(data, STEP_FIELDS.get(step, ()))
