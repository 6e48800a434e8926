"""
Tests for step validation and pricing helpers.
"""

from __future__ import annotations

from datetime import date

import pytest

from salon_booking.application.utils.form_validation import validate_booking_form, validate_step
from salon_booking.application.utils.pricing import (
    calculate_total_amount,
    distinct_category_names,
    retain_categories,
    select_services,
)
from salon_booking.domain.entities.booking_form import BookingFormData, FormStep
from salon_booking.domain.entities.service_catalog import Service
from salon_booking.infrastructure.store.seed_catalog import SEED_SERVICES


def _contact(**overrides) -> BookingFormData:
    values = dict(full_name="Asha", email_id="asha@example.com", booking_date=date(2025, 3, 14), gender="female")
    values.update(overrides)
    return BookingFormData(**values)


def test_contact_step_only_checks_its_fields():
    """Step 1 passes without categories or services."""
    assert validate_step(_contact(), FormStep.CONTACT).ok


def test_contact_step_messages():
    result = validate_step(_contact(full_name="  ", email_id="not-an-email"), FormStep.CONTACT)
    assert not result.ok
    assert result.errors == {
        "full_name": "Full name is required",
        "email_id": "Valid email is required",
    }


def test_category_and_service_steps():
    data = _contact()
    assert validate_step(data, FormStep.CATEGORY).errors == {"categories": "Please select at least one category"}
    assert validate_step(data, FormStep.SERVICE).errors == {"services": "Please select at least one service"}


def test_full_validation_collects_all_errors():
    result = validate_booking_form(BookingFormData(gender=None))
    assert set(result.errors) == {"full_name", "email_id", "booking_date", "gender", "categories", "services"}


def test_unknown_field_is_rejected():
    with pytest.raises(KeyError):
        validate_booking_form(_contact(), fields=("nickname",))


def test_total_amount_sums_selected_prices():
    """Haircut (300) and Facial (700) total 1000."""
    assert calculate_total_amount(SEED_SERVICES, ["Haircut", "Facial"]) == 1000


def test_total_amount_treats_missing_price_as_zero():
    catalog = [Service(id="a", name="Consultation", price=None), Service(id="b", name="Trim", price=100)]
    assert calculate_total_amount(catalog, ["Consultation", "Trim", "Unknown"]) == 100


def test_retain_categories_drops_unused():
    selected = select_services(SEED_SERVICES, ["Haircut", "Facial"])
    assert retain_categories(["Hair", "Skin", "Nails"], selected) == ["Hair", "Skin"]


def test_distinct_category_names_in_catalog_order():
    selected = select_services(SEED_SERVICES, ["Facial", "Haircut", "Hair Spa"])
    assert distinct_category_names(selected) == ["Hair", "Skin"]
