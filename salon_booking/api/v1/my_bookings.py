from fastapi import APIRouter, Depends, Query

from salon_booking.api.v1.errors import translate_errors
from salon_booking.api.v1.schemas import (
    BookingResponseSchema,
    BookingSchema,
    EditServicesRequestSchema,
    NotificationSchema,
    RescheduleRequestSchema,
    booking_schema,
)
from salon_booking.application.exceptions import PermissionDeniedError
from salon_booking.application.use_cases.booking_records import BookingRecordManager
from salon_booking.application.use_cases.service_catalog import ServiceCatalogUseCase
from salon_booking.application.use_cases.session_context import SessionContext
from salon_booking.domain.entities.booking import Booking
from salon_booking.wiring.dependencies import get_booking_manager, get_catalog_use_case, get_session_context

router = APIRouter()


def _own_booking(ctx: SessionContext, manager: BookingRecordManager, booking_id: str) -> Booking:
    user = ctx.require_user()
    booking = manager.get(booking_id)
    if booking.user_id != user.id:
        raise PermissionDeniedError("You can only manage your own bookings.")
    return booking


@router.get("/me/bookings", response_model=list[BookingSchema])
def list_my_bookings(
    status: str | None = Query(None),
    ctx: SessionContext = Depends(get_session_context),
    manager: BookingRecordManager = Depends(get_booking_manager),
):
    with translate_errors():
        user = ctx.require_user()
        bookings = manager.by_user(user.id, None if status in (None, "", "all") else status)
    return [booking_schema(b) for b in bookings]


@router.post("/me/bookings/{booking_id}/cancel", response_model=BookingResponseSchema)
def cancel_booking(
    booking_id: str,
    ctx: SessionContext = Depends(get_session_context),
    manager: BookingRecordManager = Depends(get_booking_manager),
):
    with translate_errors():
        booking = _own_booking(ctx, manager, booking_id)
        if not booking.can_cancel:
            raise PermissionDeniedError(f"A {booking.status.label.lower()} booking cannot be cancelled.")
        booking = manager.cancel(booking_id)
    return BookingResponseSchema(
        booking=booking_schema(booking),
        notifications=[
            NotificationSchema(title="Booking Cancelled", description="Your booking has been successfully cancelled.")
        ],
    )


@router.post("/me/bookings/{booking_id}/reschedule", response_model=BookingResponseSchema)
def reschedule_booking(
    booking_id: str,
    req: RescheduleRequestSchema,
    ctx: SessionContext = Depends(get_session_context),
    manager: BookingRecordManager = Depends(get_booking_manager),
):
    with translate_errors():
        booking = _own_booking(ctx, manager, booking_id)
        if not booking.can_reschedule:
            raise PermissionDeniedError(f"A {booking.status.label.lower()} booking cannot be rescheduled.")
        booking = manager.reschedule(booking_id, req.booking_date, req.time_slot or booking.time_slot)
    return BookingResponseSchema(
        booking=booking_schema(booking),
        notifications=[
            NotificationSchema(title="Booking Rescheduled!", description="Your appointment has been successfully rescheduled.")
        ],
    )


@router.put("/me/bookings/{booking_id}/services", response_model=BookingResponseSchema)
def edit_booking_services(
    booking_id: str,
    req: EditServicesRequestSchema,
    ctx: SessionContext = Depends(get_session_context),
    manager: BookingRecordManager = Depends(get_booking_manager),
    catalog: ServiceCatalogUseCase = Depends(get_catalog_use_case),
):
    with translate_errors():
        booking = _own_booking(ctx, manager, booking_id)
        if not booking.can_edit:
            raise PermissionDeniedError("Only pending bookings can be edited.")
        services = catalog.fetch_services()
        known = {s.name for s in services}
        unknown = [name for name in req.services if name not in known]
        if unknown:
            raise ValueError(f"Unknown services: {', '.join(unknown)}")
        booking = manager.edit_services(booking_id, req.services, services)
    return BookingResponseSchema(
        booking=booking_schema(booking),
        notifications=[
            NotificationSchema(title="Booking Updated!", description="Your booking services have been successfully updated.")
        ],
    )
