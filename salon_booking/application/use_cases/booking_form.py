from __future__ import annotations

import logging
import threading
from dataclasses import replace
from datetime import datetime
from typing import Any, Callable

from salon_booking.application.exceptions import BookingOperationError, CatalogUnavailableError
from salon_booking.application.use_cases.booking_records import BookingRecordManager
from salon_booking.application.use_cases.service_catalog import ServiceCatalogUseCase
from salon_booking.application.utils.form_validation import validate_booking_form, validate_step
from salon_booking.application.utils.pricing import calculate_total_amount, retain_categories
from salon_booking.application.utils.time_slots import get_available_time_slots, pick_slot_for_date
from salon_booking.domain.entities.auth import AuthUser
from salon_booking.domain.entities.booking import Booking
from salon_booking.domain.entities.booking_form import BookingFormData, FormStep, ValidationResult
from salon_booking.domain.entities.notification import Notification
from salon_booking.domain.entities.profile import Profile
from salon_booking.domain.entities.service_catalog import CatalogSnapshot, Service, ServiceCategory
from salon_booking.domain.entities.time_slot import TimeSlot

_EDITABLE_FIELDS = {
    "full_name",
    "email_id",
    "phone_number",
    "booking_date",
    "time_slot",
    "gender",
    "categories",
    "services",
}


def _unavailable_message(names: list[str]) -> str:
    return f"Not available for this booking: {', '.join(names)}"


class BookingFormMachine:
    """
    Multi-step booking form: contact -> category -> service -> confirmation.

    Each forward move validates only the fields owned by the current step.
    Back navigation is allowed from CATEGORY and SERVICE. CONFIRMATION is
    reached only through a successful submit and is left only via reset().
    Problems the user should see are queued as notifications; call
    drain_notifications() after each operation.
    """

    def __init__(
        self,
        catalog: ServiceCatalogUseCase,
        bookings: BookingRecordManager,
        profile: Profile | None = None,
        clock: Callable[[], datetime] = datetime.now,
        on_success: Callable[[Booking], None] | None = None,
    ) -> None:
        self._catalog = catalog
        self._bookings = bookings
        self._profile = profile
        self._clock = clock
        self._on_success = on_success
        self._logger = logging.getLogger(__name__)
        self._submit_lock = threading.Lock()
        self._notifications: list[Notification] = []

        self.step = FormStep.CONTACT
        self.data = BookingFormData()
        self.errors: dict[str, str] = {}
        self.snapshot = CatalogSnapshot()
        self.submitting = False
        self.booking_confirmed = False
        self.confirmed_data: BookingFormData | None = None
        self.booking: Booking | None = None

    # -- lifecycle -----------------------------------------------------------

    def open(self) -> None:
        """Load the catalog snapshot once and start from a clean form."""
        self.load_catalog()
        self.reset()

    def load_catalog(self) -> None:
        """
        Categories and services load independently: a services failure still
        leaves the category step populated.
        """
        categories: tuple[ServiceCategory, ...] = ()
        services: tuple[Service, ...] = ()
        failed = False
        try:
            categories = tuple(self._catalog.fetch_categories())
        except CatalogUnavailableError as e:
            self._logger.error("Error fetching service categories", extra={"error": str(e)})
            self._notify("Error", "Failed to load service categories.", "destructive")
            failed = True
        try:
            services = tuple(self._catalog.fetch_services())
        except CatalogUnavailableError as e:
            self._logger.error("Error fetching services", extra={"error": str(e)})
            self._notify("Error", "Failed to load services.", "destructive")
            failed = True
        self.snapshot = CatalogSnapshot(
            services=services,
            categories=categories,
            loaded_at=self._clock(),
            load_failed=failed,
        )

    def reset(self) -> None:
        profile = self._profile
        self.step = FormStep.CONTACT
        self.booking_confirmed = False
        self.confirmed_data = None
        self.booking = None
        self.submitting = False
        self.errors = {}
        self.data = BookingFormData(
            full_name=(profile.full_name if profile else "") or "",
            email_id=(profile.email_id if profile else "") or "",
            phone_number=(profile.phone_number if profile else None) or "",
            booking_date=self._clock().date(),
            time_slot=None,
            gender=(profile.gender if profile and profile.gender in ("male", "female") else "female"),
            categories=(),
            services=(),
        )

    def set_profile(self, profile: Profile | None) -> None:
        self._profile = profile

    # -- field updates -------------------------------------------------------

    def update(self, **changes: Any) -> None:
        """
        Set form fields without validating them. Changing categories drops
        service picks that no longer belong to a selected category.
        """
        unknown = set(changes) - _EDITABLE_FIELDS
        if unknown:
            raise KeyError(f"Unknown form fields: {', '.join(sorted(unknown))}")

        if "categories" in changes:
            changes["categories"] = tuple(dict.fromkeys(changes["categories"] or ()))
        if "services" in changes:
            changes["services"] = tuple(dict.fromkeys(changes["services"] or ()))

        self.data = replace(self.data, **changes)
        for name in changes:
            self.errors.pop(name, None)

        if "categories" in changes:
            self._drop_services_outside_categories()
        if "services" in changes:
            self._drop_unavailable_services()
        if "booking_date" in changes and self.data.time_slot and self.data.booking_date:
            slot = pick_slot_for_date(self.data.booking_date, self.data.time_slot, self._clock())
            self.data = replace(self.data, time_slot=slot)

    def toggle_category(self, name: str) -> None:
        categories = list(self.data.categories)
        if name in categories:
            categories.remove(name)
        else:
            categories.append(name)
        self.update(categories=categories)

    def toggle_service(self, name: str) -> None:
        services = list(self.data.services)
        if name in services:
            services.remove(name)
        else:
            services.append(name)
        self.update(services=services)

    def _drop_services_outside_categories(self) -> None:
        selected_categories = set(self.data.categories)
        if not selected_categories:
            kept: tuple[str, ...] = ()
        else:
            kept = tuple(
                name
                for name in self.data.services
                if (svc := self.snapshot.find_by_name(name)) is not None
                and svc.category_name in selected_categories
            )
        if kept != self.data.services:
            self.data = replace(self.data, services=kept)

    def _unavailable_services(self) -> list[str]:
        offered = {s.name for s in self.filtered_services()}
        return [name for name in self.data.services if name not in offered]

    def _drop_unavailable_services(self) -> None:
        unavailable = self._unavailable_services()
        if not unavailable:
            return
        self.data = replace(self.data, services=tuple(n for n in self.data.services if n not in unavailable))
        self.errors["services"] = _unavailable_message(unavailable)

    # -- navigation ----------------------------------------------------------

    def next_step(self) -> ValidationResult:
        if self.step >= FormStep.SERVICE:
            return ValidationResult.failure({"step": "Use submit to confirm the booking"})

        result = validate_step(self.data, self.step)
        if not result.ok:
            self.errors.update(result.errors)
            self._logger.info("Step validation failed", extra={"step": int(self.step), "reason": ",".join(result.errors)})
            return result

        self.errors = {}
        self.step = FormStep(self.step + 1)
        return result

    def prev_step(self) -> bool:
        if self.step in (FormStep.CATEGORY, FormStep.SERVICE):
            self.step = FormStep(self.step - 1)
            return True
        return False

    # -- submission ----------------------------------------------------------

    def submit(self, user: AuthUser | None) -> Booking | None:
        """
        Persist the booking. A call made while another submit is in flight
        is ignored and returns None, as do failed attempts (see notifications).
        """
        with self._submit_lock:
            if self.submitting:
                self._logger.info("Form submission already in progress, ignoring duplicate submission")
                return None
            self.submitting = True

        try:
            return self._submit(user)
        finally:
            self.submitting = False

    def _submit(self, user: AuthUser | None) -> Booking | None:
        if self.step != FormStep.SERVICE:
            self._notify("Error", "Please complete the previous steps first.", "destructive")
            return None

        if self._profile is None:
            self._notify("Error", "User profile not found. Please try again.", "destructive")
            return None

        if user is None:
            self._notify("Authentication Required", "Please log in to book an appointment.", "destructive")
            return None

        result = validate_booking_form(self.data)
        if not result.ok:
            self.errors.update(result.errors)
            return None

        unavailable = self._unavailable_services()
        if unavailable:
            self.errors["services"] = _unavailable_message(unavailable)
            self._logger.info("Submit refused, services not offered", extra={"user_id": user.id, "reason": ",".join(unavailable)})
            return None

        data = self.data
        selected = self.snapshot.select_by_names(list(data.services))
        total_amount = calculate_total_amount(self.snapshot.services, data.services)
        category_list = retain_categories(data.categories, selected)

        try:
            booking = self._bookings.create(
                user_id=user.id,
                booking_date=data.booking_date,
                time_slot=data.time_slot,
                services=list(data.services),
                category_list=category_list,
                total_amount=total_amount,
            )
        except BookingOperationError as e:
            self._logger.error("Error creating booking", extra={"user_id": user.id, "error": str(e)})
            self._notify("Error", "Failed to create booking. Please try again.", "destructive")
            return None

        self.booking = booking
        self.confirmed_data = data
        self.booking_confirmed = True
        self.step = FormStep.CONFIRMATION
        self._notify("Booking Confirmed!", "Your appointment has been successfully booked.")
        if self._on_success is not None:
            self._on_success(booking)
        return booking

    # -- derived views -------------------------------------------------------

    @property
    def can_submit(self) -> bool:
        return self.step == FormStep.SERVICE and bool(self.data.services) and not self.submitting

    @property
    def total_amount(self) -> float:
        return calculate_total_amount(self.snapshot.services, self.data.services)

    def filtered_services(self) -> list[Service]:
        """Catalog services in a selected category that fit the chosen gender."""
        selected = set(self.data.categories)
        return [
            s
            for s in self.snapshot.services
            if s.category_name in selected and s.is_eligible_for(self.data.gender)
        ]

    def available_time_slots(self) -> list[TimeSlot]:
        return get_available_time_slots(self.data.booking_date, self._clock())

    def drain_notifications(self) -> list[Notification]:
        drained, self._notifications = self._notifications, []
        return drained

    def _notify(self, title: str, description: str, variant: str = "default") -> None:
        self._notifications.append(Notification(title=title, description=description, variant=variant))
