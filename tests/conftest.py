from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime

import pytest

from salon_booking.application.use_cases.booking_form import BookingFormMachine
from salon_booking.application.use_cases.booking_records import BookingRecordManager
from salon_booking.application.use_cases.service_catalog import ServiceCatalogUseCase
from salon_booking.domain.entities.profile import Profile
from salon_booking.infrastructure.store.memory_store import (
    MemoryBookingRepository,
    MemoryProfileRepository,
    MemoryServiceCatalog,
)

# Friday afternoon; "1:00 PM - 3:00 PM" has started, "3:00 PM - 5:00 PM" has not
NOW = datetime(2025, 3, 14, 14, 30)


def fixed_clock(now: datetime = NOW):
    return lambda: now


@pytest.fixture
def profiles() -> MemoryProfileRepository:
    return MemoryProfileRepository()


@pytest.fixture
def repository(profiles) -> MemoryBookingRepository:
    return MemoryBookingRepository(profiles=profiles)


@pytest.fixture
def manager(repository) -> BookingRecordManager:
    return BookingRecordManager(repository=repository, clock=fixed_clock())


@pytest.fixture
def catalog() -> ServiceCatalogUseCase:
    return ServiceCatalogUseCase(MemoryServiceCatalog())


@pytest.fixture
def profile() -> Profile:
    return Profile(
        id="user-1",
        full_name="Asha Rao",
        email_id="asha@example.com",
        phone_number="9876543210",
        gender="female",
        onboarding_completed=True,
    )


@pytest.fixture
def machine(catalog, manager, profile) -> BookingFormMachine:
    form = BookingFormMachine(catalog=catalog, bookings=manager, profile=profile, clock=fixed_clock())
    form.open()
    return form


@pytest.fixture
def executor():
    pool = ThreadPoolExecutor(max_workers=2)
    yield pool
    pool.shutdown(wait=True, cancel_futures=True)
