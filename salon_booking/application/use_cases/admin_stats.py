from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from salon_booking.application.use_cases.booking_records import BookingRecordManager, month_bounds
from salon_booking.domain.entities.booking import Booking, BookingStatus

MEN_KEYWORDS = ("beard", "haircut", "shave", "mustache")
WOMEN_KEYWORDS = ("facial", "waxing", "eyebrow", "manicure", "pedicure", "hair spa")


def categorize_service(name: str) -> str:
    """Rough audience of a service name: "men", "women" or "unisex"."""
    lowered = name.lower()
    if any(keyword in lowered for keyword in MEN_KEYWORDS):
        return "men"
    if any(keyword in lowered for keyword in WOMEN_KEYWORDS):
        return "women"
    return "unisex"


@dataclass(frozen=True)
class StatusBreakdown:
    counts: dict[BookingStatus, int]
    total: int

    def percentage(self, status: BookingStatus) -> int:
        if self.total <= 0:
            return 0
        return round(self.counts.get(status, 0) * 100 / self.total)


@dataclass(frozen=True)
class DashboardSummary:
    month: str
    total_bookings: int
    monthly_bookings: int
    men_bookings: int
    women_bookings: int
    total_revenue: float
    total_amount_paid: float
    recent_bookings: list[Booking] = field(default_factory=list)


def status_breakdown(bookings: list[Booking]) -> StatusBreakdown:
    counts = {status: 0 for status in BookingStatus}
    for booking in bookings:
        counts[booking.status] += 1
    return StatusBreakdown(counts=counts, total=sum(counts.values()))


def dashboard_summary(all_bookings: list[Booking], monthly_bookings: list[Booking], month: str) -> DashboardSummary:
    men = women = 0
    revenue = paid = 0.0
    for booking in all_bookings:
        if booking.total_amount:
            revenue += float(booking.total_amount)
        if booking.amount_paid:
            paid += float(booking.amount_paid)
        audiences = {categorize_service(s) for s in booking.services}
        if "women" in audiences:
            women += 1
        if "men" in audiences:
            men += 1

    recent = sorted(monthly_bookings, key=lambda b: b.booking_date, reverse=True)[:10]
    return DashboardSummary(
        month=month,
        total_bookings=len(all_bookings),
        monthly_bookings=len(monthly_bookings),
        men_bookings=men,
        women_bookings=women,
        total_revenue=revenue,
        total_amount_paid=paid,
        recent_bookings=recent,
    )


class AdminStatsUseCase:
    def __init__(self, bookings: BookingRecordManager) -> None:
        self._bookings = bookings

    def status_breakdown(self) -> StatusBreakdown:
        return status_breakdown(self._bookings.all())

    def dashboard(self, month: str | None = None, today: date | None = None) -> DashboardSummary:
        if month is None:
            month = (today or date.today()).strftime("%Y-%m")
        start, end = month_bounds(month)
        return dashboard_summary(self._bookings.all(), self._bookings.in_range(start, end), month)
