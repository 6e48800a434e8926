import logging

from fastapi import APIRouter, Depends, HTTPException, Response

from salon_booking.api.v1.errors import translate_errors
from salon_booking.api.v1.schemas import (
    BookingFormSchema,
    BookingFormUpdateSchema,
    TimeSlotSchema,
    booking_schema,
    category_schema,
    form_data_schema,
    notification_schemas,
    service_schema,
)
from salon_booking.application.ports.form_session_store import FormSessionStorePort
from salon_booking.application.use_cases.booking_form import BookingFormMachine
from salon_booking.application.use_cases.session_context import SessionContext
from salon_booking.wiring.dependencies import (
    get_booking_manager,
    get_catalog_use_case,
    get_form_store,
    get_session_context,
)

router = APIRouter()
logger = logging.getLogger(__name__)

_ANONYMOUS = ""


def _owner(ctx: SessionContext) -> str:
    return ctx.user.id if ctx.user else _ANONYMOUS


def _form_schema(form_id: str, machine: BookingFormMachine) -> BookingFormSchema:
    return BookingFormSchema(
        id=form_id,
        step=int(machine.step),
        data=form_data_schema(machine.data),
        errors=dict(machine.errors),
        can_submit=machine.can_submit,
        submitting=machine.submitting,
        total_amount=machine.total_amount,
        catalog_unavailable=machine.snapshot.load_failed,
        categories=[category_schema(c) for c in machine.snapshot.categories],
        services=[service_schema(s) for s in machine.filtered_services()],
        time_slots=[TimeSlotSchema(value=s.value, label=s.label) for s in machine.available_time_slots()],
        booking_confirmed=machine.booking_confirmed,
        booking=booking_schema(machine.booking) if machine.booking else None,
        notifications=notification_schemas(machine.drain_notifications()),
    )


def _load(form_id: str, ctx: SessionContext, store: FormSessionStorePort) -> BookingFormMachine:
    machine = store.get(form_id, _owner(ctx))
    if machine is None:
        raise HTTPException(status_code=404, detail="Booking form not found")
    machine.set_profile(ctx.profile)
    return machine


@router.post("/booking-forms", response_model=BookingFormSchema, status_code=201)
def open_form(
    ctx: SessionContext = Depends(get_session_context),
    store: FormSessionStorePort = Depends(get_form_store),
):
    machine = BookingFormMachine(
        catalog=get_catalog_use_case(),
        bookings=get_booking_manager(),
        profile=ctx.profile,
    )
    machine.open()
    form_id = store.create(_owner(ctx), machine)
    logger.info("Booking form opened", extra={"user_id": _owner(ctx) or None})
    return _form_schema(form_id, machine)


@router.get("/booking-forms/{form_id}", response_model=BookingFormSchema)
def get_form(
    form_id: str,
    ctx: SessionContext = Depends(get_session_context),
    store: FormSessionStorePort = Depends(get_form_store),
):
    return _form_schema(form_id, _load(form_id, ctx, store))


@router.patch("/booking-forms/{form_id}", response_model=BookingFormSchema)
def update_form(
    form_id: str,
    req: BookingFormUpdateSchema,
    ctx: SessionContext = Depends(get_session_context),
    store: FormSessionStorePort = Depends(get_form_store),
):
    machine = _load(form_id, ctx, store)
    changes = req.model_dump(exclude_unset=True, mode="python")
    toggle_category = changes.pop("toggle_category", None)
    toggle_service = changes.pop("toggle_service", None)
    if changes.get("gender") is not None:
        changes["gender"] = req.gender.value

    with translate_errors():
        if changes:
            machine.update(**changes)
        if toggle_category:
            machine.toggle_category(toggle_category)
        if toggle_service:
            machine.toggle_service(toggle_service)
    return _form_schema(form_id, machine)


@router.post("/booking-forms/{form_id}/next", response_model=BookingFormSchema)
def next_step(
    form_id: str,
    ctx: SessionContext = Depends(get_session_context),
    store: FormSessionStorePort = Depends(get_form_store),
):
    machine = _load(form_id, ctx, store)
    machine.next_step()
    return _form_schema(form_id, machine)


@router.post("/booking-forms/{form_id}/back", response_model=BookingFormSchema)
def prev_step(
    form_id: str,
    ctx: SessionContext = Depends(get_session_context),
    store: FormSessionStorePort = Depends(get_form_store),
):
    machine = _load(form_id, ctx, store)
    machine.prev_step()
    return _form_schema(form_id, machine)


@router.post("/booking-forms/{form_id}/submit", response_model=BookingFormSchema)
def submit_form(
    form_id: str,
    ctx: SessionContext = Depends(get_session_context),
    store: FormSessionStorePort = Depends(get_form_store),
):
    machine = _load(form_id, ctx, store)
    booking = machine.submit(ctx.user)
    response = _form_schema(form_id, machine)
    if booking is not None:
        # the confirmation is returned once, the form itself is discarded
        store.delete(form_id, _owner(ctx))
        logger.info("Booking submitted", extra={"booking_id": booking.id, "user_id": booking.user_id})
    return response


@router.post("/booking-forms/{form_id}/reset", response_model=BookingFormSchema)
def reset_form(
    form_id: str,
    ctx: SessionContext = Depends(get_session_context),
    store: FormSessionStorePort = Depends(get_form_store),
):
    machine = _load(form_id, ctx, store)
    machine.reset()
    return _form_schema(form_id, machine)


@router.delete("/booking-forms/{form_id}", status_code=204)
def close_form(
    form_id: str,
    ctx: SessionContext = Depends(get_session_context),
    store: FormSessionStorePort = Depends(get_form_store),
):
    if not store.delete(form_id, _owner(ctx)):
        raise HTTPException(status_code=404, detail="Booking form not found")
    return Response(status_code=204)
