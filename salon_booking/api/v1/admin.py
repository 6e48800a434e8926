import logging

from fastapi import APIRouter, Depends, Query

from salon_booking.api.v1.errors import translate_errors
from salon_booking.api.v1.schemas import (
    AmountPaidUpdateSchema,
    BookingPageSchema,
    BookingResponseSchema,
    CustomerPageSchema,
    DashboardSchema,
    NotificationSchema,
    StatusBreakdownSchema,
    StatusUpdateSchema,
    booking_schema,
    dashboard_schema,
    profile_schema,
    status_breakdown_schema,
)
from salon_booking.application.use_cases.admin_stats import AdminStatsUseCase
from salon_booking.application.use_cases.booking_records import BookingRecordManager
from salon_booking.application.use_cases.customers import CustomerDirectoryUseCase
from salon_booking.application.use_cases.session_context import SessionContext
from salon_booking.core.config import settings
from salon_booking.domain.entities.booking import BookingSearch, BookingStatus
from salon_booking.wiring.dependencies import (
    get_admin_stats,
    get_booking_manager,
    get_customer_directory,
    get_session_context,
)

router = APIRouter()
logger = logging.getLogger(__name__)


def require_admin(ctx: SessionContext = Depends(get_session_context)) -> SessionContext:
    with translate_errors():
        ctx.require_admin()
    return ctx


@router.get("/admin/bookings", response_model=BookingPageSchema)
def list_bookings(
    status: str | None = Query(None),
    month: str | None = Query(None, pattern=r"^\d{4}-\d{2}$"),
    search: str | None = Query(None),
    page: int = Query(1, ge=1),
    ctx: SessionContext = Depends(require_admin),
    manager: BookingRecordManager = Depends(get_booking_manager),
):
    with translate_errors():
        filters = BookingSearch(
            status=BookingStatus.parse(status) if status and status != "all" else None,
            month=month,
            search=search,
            page=page,
            per_page=settings.BOOKINGS_PER_PAGE,
        )
        result = manager.search(filters)
    return BookingPageSchema(
        bookings=[booking_schema(b) for b in result.bookings],
        total=result.total,
        page=result.page,
        per_page=result.per_page,
        total_pages=result.total_pages,
    )


@router.patch("/admin/bookings/{booking_id}/status", response_model=BookingResponseSchema)
def update_booking_status(
    booking_id: str,
    req: StatusUpdateSchema,
    ctx: SessionContext = Depends(require_admin),
    manager: BookingRecordManager = Depends(get_booking_manager),
):
    with translate_errors():
        booking = manager.update_status(booking_id, req.status)
    return BookingResponseSchema(
        booking=booking_schema(booking),
        notifications=[
            NotificationSchema(title="Success", description=f"Booking status updated to {booking.status.value}.")
        ],
    )


@router.patch("/admin/bookings/{booking_id}/amount-paid", response_model=BookingResponseSchema)
def update_amount_paid(
    booking_id: str,
    req: AmountPaidUpdateSchema,
    ctx: SessionContext = Depends(require_admin),
    manager: BookingRecordManager = Depends(get_booking_manager),
):
    with translate_errors():
        booking = manager.update_amount_paid(booking_id, req.amount_paid)
    logger.info("Amount paid updated", extra={"booking_id": booking_id, "user_id": ctx.user.id})
    return BookingResponseSchema(
        booking=booking_schema(booking),
        notifications=[NotificationSchema(title="Success", description="Amount paid updated successfully.")],
    )


@router.get("/admin/stats", response_model=StatusBreakdownSchema)
def booking_stats(
    ctx: SessionContext = Depends(require_admin),
    uc: AdminStatsUseCase = Depends(get_admin_stats),
):
    with translate_errors():
        breakdown = uc.status_breakdown()
    return status_breakdown_schema(breakdown)


@router.get("/admin/dashboard", response_model=DashboardSchema)
def dashboard(
    month: str | None = Query(None, pattern=r"^\d{4}-\d{2}$"),
    ctx: SessionContext = Depends(require_admin),
    uc: AdminStatsUseCase = Depends(get_admin_stats),
):
    with translate_errors():
        summary = uc.dashboard(month)
    return dashboard_schema(summary)


@router.get("/admin/customers", response_model=CustomerPageSchema)
def list_customers(
    search: str | None = Query(None),
    page: int = Query(1, ge=1),
    ctx: SessionContext = Depends(require_admin),
    uc: CustomerDirectoryUseCase = Depends(get_customer_directory),
):
    with translate_errors():
        result = uc.list_customers(page=page, search=search)
    return CustomerPageSchema(
        customers=[profile_schema(p) for p in result.customers],
        total=result.total,
        page=result.page,
        per_page=result.per_page,
        total_pages=result.total_pages,
    )
