"""
Tests for the multi-step booking form.
"""

from __future__ import annotations

import threading
from datetime import date

from conftest import NOW, fixed_clock

from salon_booking.application.ports.service_catalog import ServiceCatalogPort
from salon_booking.application.use_cases.booking_form import BookingFormMachine
from salon_booking.application.use_cases.booking_records import BookingRecordManager
from salon_booking.application.use_cases.service_catalog import ServiceCatalogUseCase
from salon_booking.domain.entities.auth import AuthUser
from salon_booking.domain.entities.booking_form import FormStep
from salon_booking.infrastructure.store.memory_store import MemoryBookingRepository, MemoryServiceCatalog

USER = AuthUser(id="user-1", email="asha@example.com", full_name="Asha Rao")


def _fill_to_service_step(machine: BookingFormMachine, categories=("Hair", "Skin"), services=("Haircut", "Facial")):
    assert machine.next_step().ok
    machine.update(categories=list(categories))
    assert machine.next_step().ok
    machine.update(services=list(services))
    assert machine.step == FormStep.SERVICE


class ServicesDown(MemoryServiceCatalog):
    def list_active_services(self):
        raise RuntimeError("connection refused")


class FailingCatalog(ServiceCatalogPort):
    def list_active_services(self):
        raise RuntimeError("connection refused")

    def list_featured_services(self):
        raise RuntimeError("connection refused")

    def list_services_by_category(self, category_id):
        raise RuntimeError("connection refused")

    def list_all_services(self):
        raise RuntimeError("connection refused")

    def list_categories(self):
        raise RuntimeError("connection refused")


def test_open_prefills_from_profile(machine):
    """A fresh form starts at step 1 with profile contact details and today's date."""
    assert machine.step == FormStep.CONTACT
    assert machine.data.full_name == "Asha Rao"
    assert machine.data.email_id == "asha@example.com"
    assert machine.data.booking_date == NOW.date()
    assert machine.data.gender == "female"
    assert machine.data.categories == ()
    assert len(machine.snapshot.services) == 10


def test_gender_defaults_to_female_without_profile(catalog, manager):
    form = BookingFormMachine(catalog=catalog, bookings=manager, profile=None, clock=fixed_clock())
    form.open()
    assert form.data.gender == "female"
    assert form.data.full_name == ""


def test_next_step_blocks_on_invalid_contact(machine):
    machine.update(full_name="", email_id="nope")
    result = machine.next_step()
    assert not result.ok
    assert machine.step == FormStep.CONTACT
    assert machine.errors["full_name"] == "Full name is required"
    assert machine.errors["email_id"] == "Valid email is required"


def test_update_clears_field_error(machine):
    machine.update(full_name="")
    machine.next_step()
    machine.update(full_name="Asha")
    assert "full_name" not in machine.errors


def test_back_navigation(machine):
    assert not machine.prev_step()
    assert machine.next_step().ok
    assert machine.prev_step()
    assert machine.step == FormStep.CONTACT


def test_next_from_service_step_asks_for_submit(machine):
    _fill_to_service_step(machine)
    result = machine.next_step()
    assert not result.ok
    assert machine.step == FormStep.SERVICE


def test_clearing_categories_empties_services(machine):
    """With no categories selected no services remain, and repeating the update changes nothing."""
    _fill_to_service_step(machine)
    machine.update(categories=[])
    assert machine.data.services == ()
    snapshot = machine.data
    machine.update(categories=[])
    assert machine.data == snapshot


def test_deselecting_category_drops_its_services(machine):
    _fill_to_service_step(machine)
    machine.toggle_category("Skin")
    assert machine.data.categories == ("Hair",)
    assert machine.data.services == ("Haircut",)


def test_filtered_services_respect_gender(machine):
    machine.update(categories=["Hair", "Grooming"], gender="male")
    names = {s.name for s in machine.filtered_services()}
    assert "Beard Trim" in names
    assert "Haircut" in names
    assert "Hair Colour" in names
    assert "Hair Spa" not in names


def test_changing_date_repicks_time_slot(machine):
    machine.update(booking_date=date(2025, 3, 20), time_slot="9:00 AM - 11:00 AM")
    assert machine.data.time_slot == "9:00 AM - 11:00 AM"
    machine.update(booking_date=NOW.date())
    assert machine.data.time_slot == "3:00 PM - 5:00 PM"


def test_submit_creates_pending_booking(machine, repository):
    """Submitting Haircut and Facial records a pending booking worth 1000, paid in full."""
    _fill_to_service_step(machine, categories=("Hair", "Skin", "Nails"))
    assert machine.total_amount == 1000

    booking = machine.submit(USER)

    assert booking is not None
    assert booking.total_amount == 1000
    assert booking.amount_paid == 1000
    assert booking.status.value == "pending"
    assert booking.category_list == ["Hair", "Skin"]
    assert machine.step == FormStep.CONFIRMATION
    assert machine.booking_confirmed
    assert machine.confirmed_data.services == ("Haircut", "Facial")
    assert [n.title for n in machine.drain_notifications()] == ["Booking Confirmed!"]
    assert len(repository.list()) == 1


def test_submit_calls_success_callback(catalog, manager, profile):
    confirmed = []
    form = BookingFormMachine(
        catalog=catalog, bookings=manager, profile=profile, clock=fixed_clock(), on_success=confirmed.append
    )
    form.open()
    _fill_to_service_step(form)
    booking = form.submit(USER)
    assert confirmed == [booking]


def test_submit_without_user_notifies(machine, repository):
    _fill_to_service_step(machine)
    assert machine.submit(None) is None
    notes = machine.drain_notifications()
    assert notes[0].title == "Authentication Required"
    assert notes[0].description == "Please log in to book an appointment."
    assert machine.step == FormStep.SERVICE
    assert repository.list() == []


def test_submit_without_profile_notifies(machine):
    _fill_to_service_step(machine)
    machine.set_profile(None)
    assert machine.submit(USER) is None
    assert machine.drain_notifications()[0].description == "User profile not found. Please try again."


def test_submit_before_service_step_is_refused(machine, repository):
    assert machine.submit(USER) is None
    assert machine.step == FormStep.CONTACT
    assert repository.list() == []


def test_write_failure_keeps_form_on_service_step(catalog, profile):
    class BrokenRepository(MemoryBookingRepository):
        def insert(self, *args, **kwargs):
            raise RuntimeError("permission denied for table bookings")

    form = BookingFormMachine(
        catalog=catalog,
        bookings=BookingRecordManager(BrokenRepository(), clock=fixed_clock()),
        profile=profile,
        clock=fixed_clock(),
    )
    form.open()
    _fill_to_service_step(form)

    assert form.submit(USER) is None
    assert form.step == FormStep.SERVICE
    assert not form.submitting
    assert form.drain_notifications()[0].description == "Failed to create booking. Please try again."


def test_reentrant_submit_creates_one_booking(catalog, profile):
    """A second submit issued while the first is still writing is ignored."""
    inner_results = []

    class ReentrantRepository(MemoryBookingRepository):
        def insert(self, *args, **kwargs):
            inner_results.append(form.submit(USER))
            return super().insert(*args, **kwargs)

    repository = ReentrantRepository()
    form = BookingFormMachine(
        catalog=catalog,
        bookings=BookingRecordManager(repository, clock=fixed_clock()),
        profile=profile,
        clock=fixed_clock(),
    )
    form.open()
    _fill_to_service_step(form)

    booking = form.submit(USER)

    assert booking is not None
    assert inner_results == [None]
    assert len(repository.list()) == 1


def test_concurrent_submit_creates_one_booking(catalog, profile):
    entered = threading.Event()
    release = threading.Event()

    class SlowRepository(MemoryBookingRepository):
        def insert(self, *args, **kwargs):
            entered.set()
            release.wait(timeout=5)
            return super().insert(*args, **kwargs)

    repository = SlowRepository()
    form = BookingFormMachine(
        catalog=catalog,
        bookings=BookingRecordManager(repository, clock=fixed_clock()),
        profile=profile,
        clock=fixed_clock(),
    )
    form.open()
    _fill_to_service_step(form)

    results = []
    worker = threading.Thread(target=lambda: results.append(form.submit(USER)))
    worker.start()
    assert entered.wait(timeout=5)
    second = form.submit(USER)
    release.set()
    worker.join(timeout=5)

    assert second is None
    assert results[0] is not None
    assert len(repository.list()) == 1


def test_services_failure_keeps_categories(manager, profile):
    """A failed services load shows "Failed to load services." but step 2 still lists every category."""
    form = BookingFormMachine(
        catalog=ServiceCatalogUseCase(ServicesDown()),
        bookings=manager,
        profile=profile,
        clock=fixed_clock(),
    )
    form.open()

    notes = form.drain_notifications()
    assert len(notes) == 1
    assert notes[0].title == "Error"
    assert notes[0].description == "Failed to load services."
    assert notes[0].variant == "destructive"
    assert form.snapshot.load_failed
    assert form.snapshot.services == ()
    assert [c.name for c in form.snapshot.categories] == ["Hair", "Skin", "Nails", "Grooming"]

    assert form.next_step().ok
    form.toggle_category(form.snapshot.categories[0].name)
    assert form.next_step().ok
    assert form.step == FormStep.SERVICE
    assert form.filtered_services() == []
    assert not form.can_submit
    assert form.submit(USER) is None
    assert form.errors["services"] == "Please select at least one service"


def test_whole_catalog_failure_is_notified(manager, profile):
    form = BookingFormMachine(
        catalog=ServiceCatalogUseCase(FailingCatalog()),
        bookings=manager,
        profile=profile,
        clock=fixed_clock(),
    )
    form.open()

    descriptions = [n.description for n in form.drain_notifications()]
    assert descriptions == ["Failed to load service categories.", "Failed to load services."]
    assert form.snapshot.categories == ()
    assert form.snapshot.services == ()
    assert form.next_step().ok


def test_service_outside_catalog_is_dropped(machine):
    """A service name the catalog does not offer never reaches a booking."""
    _fill_to_service_step(machine, services=("Haircut", "Gold Facial Deluxe"))

    assert machine.data.services == ("Haircut",)
    assert machine.errors["services"] == "Not available for this booking: Gold Facial Deluxe"

    booking = machine.submit(USER)
    assert booking.services == ["Haircut"]
    assert booking.total_amount == 300
    assert booking.category_list == ["Hair"]


def test_service_outside_selected_categories_is_dropped(machine):
    _fill_to_service_step(machine, categories=("Hair",), services=("Haircut", "Manicure"))
    assert machine.data.services == ("Haircut",)
    assert machine.errors["services"] == "Not available for this booking: Manicure"


def test_submit_refuses_services_not_offered_for_gender(machine, repository):
    """Switching to male after picking Facial blocks the submit."""
    _fill_to_service_step(machine)
    machine.update(gender="male")

    assert machine.submit(USER) is None
    assert machine.errors["services"] == "Not available for this booking: Facial"
    assert machine.step == FormStep.SERVICE
    assert repository.list() == []


def test_reset_after_confirmation(machine):
    _fill_to_service_step(machine)
    machine.submit(USER)
    machine.reset()
    assert machine.step == FormStep.CONTACT
    assert not machine.booking_confirmed
    assert machine.booking is None
    assert machine.data.services == ()
    assert machine.data.full_name == "Asha Rao"
