from datetime import date, datetime
from enum import Enum
from pydantic import BaseModel, Field

from salon_booking.application.use_cases.admin_stats import DashboardSummary, StatusBreakdown
from salon_booking.domain.entities.booking import Booking, BookingStatus
from salon_booking.domain.entities.booking_form import BookingFormData
from salon_booking.domain.entities.notification import Notification
from salon_booking.domain.entities.profile import Profile
from salon_booking.domain.entities.service_catalog import Service, ServiceCategory


class Gender(str, Enum):
    male = "male"
    female = "female"


class NotificationSchema(BaseModel):
    title: str
    description: str
    variant: str = "default"


class CategorySchema(BaseModel):
    id: str
    name: str
    icon: str | None = None
    sort_order: int | None = None


class ServiceSchema(BaseModel):
    id: str
    name: str
    category_id: str | None = None
    category_name: str | None = None
    price: float | None = None
    duration_minutes: int | None = None
    gender: str | None = None
    description: str | None = None
    image_url: str | None = None
    is_featured: bool = False


class CategoryGroupSchema(BaseModel):
    category: CategorySchema | None = None
    services: list[ServiceSchema] = Field(default_factory=list)


class TimeSlotSchema(BaseModel):
    value: str
    label: str


class ProfileSchema(BaseModel):
    id: str
    full_name: str
    email_id: str
    phone_number: str | None = None
    instagram_id: str | None = None
    gender: str | None = None
    onboarding_completed: bool = False
    is_admin: bool = False


class ProfileUpdateSchema(BaseModel):
    full_name: str | None = None
    phone_number: str | None = None
    instagram_id: str | None = None
    gender: Gender | None = None


class OnboardingSchema(BaseModel):
    full_name: str = Field(min_length=1)
    phone_number: str | None = None
    instagram_id: str | None = None
    gender: Gender | None = None


class UserSchema(BaseModel):
    id: str
    email: str | None = None
    full_name: str | None = None


class MeResponseSchema(BaseModel):
    user: UserSchema | None = None
    profile: ProfileSchema | None = None
    needs_onboarding: bool = False
    is_admin: bool = False


class LoginUrlSchema(BaseModel):
    url: str


class SessionRequestSchema(BaseModel):
    access_token: str = Field(min_length=1)
    refresh_token: str | None = None


class CustomerSchema(BaseModel):
    full_name: str | None = None
    email_id: str | None = None
    phone_number: str | None = None


class BookingSchema(BaseModel):
    id: str
    user_id: str
    booking_date: date
    time_slot: str | None = None
    services: list[str] = Field(default_factory=list)
    category_list: list[str] = Field(default_factory=list)
    status: BookingStatus
    status_label: str
    total_amount: float | None = None
    amount_paid: float | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    customer: CustomerSchema | None = None
    can_edit: bool = False
    can_reschedule: bool = False
    can_cancel: bool = False


class BookingResponseSchema(BaseModel):
    booking: BookingSchema
    notifications: list[NotificationSchema] = Field(default_factory=list)


class RescheduleRequestSchema(BaseModel):
    booking_date: date
    time_slot: str | None = None


class EditServicesRequestSchema(BaseModel):
    services: list[str] = Field(min_length=1)


class StatusUpdateSchema(BaseModel):
    status: str = Field(min_length=1)


class AmountPaidUpdateSchema(BaseModel):
    amount_paid: float = Field(ge=0)


class BookingPageSchema(BaseModel):
    bookings: list[BookingSchema]
    total: int
    page: int
    per_page: int
    total_pages: int


class StatusBreakdownSchema(BaseModel):
    total: int
    counts: dict[str, int]
    percentages: dict[str, int]


class DashboardSchema(BaseModel):
    month: str
    total_bookings: int
    monthly_bookings: int
    men_bookings: int
    women_bookings: int
    total_revenue: float
    total_amount_paid: float
    recent_bookings: list[BookingSchema] = Field(default_factory=list)


class CustomerPageSchema(BaseModel):
    customers: list[ProfileSchema]
    total: int
    page: int
    per_page: int
    total_pages: int


class BookingFormDataSchema(BaseModel):
    full_name: str = ""
    email_id: str = ""
    phone_number: str | None = None
    booking_date: date | None = None
    time_slot: str | None = None
    gender: str | None = None
    categories: list[str] = Field(default_factory=list)
    services: list[str] = Field(default_factory=list)


class BookingFormUpdateSchema(BaseModel):
    full_name: str | None = None
    email_id: str | None = None
    phone_number: str | None = None
    booking_date: date | None = None
    time_slot: str | None = None
    gender: Gender | None = None
    categories: list[str] | None = None
    services: list[str] | None = None
    toggle_category: str | None = None
    toggle_service: str | None = None


class BookingFormSchema(BaseModel):
    id: str
    step: int
    data: BookingFormDataSchema
    errors: dict[str, str] = Field(default_factory=dict)
    can_submit: bool = False
    submitting: bool = False
    total_amount: float = 0
    catalog_unavailable: bool = False
    categories: list[CategorySchema] = Field(default_factory=list)
    services: list[ServiceSchema] = Field(default_factory=list)
    time_slots: list[TimeSlotSchema] = Field(default_factory=list)
    booking_confirmed: bool = False
    booking: BookingSchema | None = None
    notifications: list[NotificationSchema] = Field(default_factory=list)


def category_schema(category: ServiceCategory) -> CategorySchema:
    return CategorySchema(id=category.id, name=category.name, icon=category.icon, sort_order=category.sort_order)


def service_schema(service: Service) -> ServiceSchema:
    return ServiceSchema(
        id=service.id,
        name=service.name,
        category_id=service.category_id,
        category_name=service.category_name,
        price=service.price,
        duration_minutes=service.duration_minutes,
        gender=service.gender,
        description=service.description,
        image_url=service.image_url,
        is_featured=service.is_featured,
    )


def profile_schema(profile: Profile) -> ProfileSchema:
    return ProfileSchema(
        id=profile.id,
        full_name=profile.full_name,
        email_id=profile.email_id,
        phone_number=profile.phone_number,
        instagram_id=profile.instagram_id,
        gender=profile.gender,
        onboarding_completed=profile.onboarding_completed,
        is_admin=profile.is_admin,
    )


def booking_schema(booking: Booking) -> BookingSchema:
    customer = booking.customer
    return BookingSchema(
        id=booking.id,
        user_id=booking.user_id,
        booking_date=booking.booking_date,
        time_slot=booking.time_slot,
        services=list(booking.services),
        category_list=list(booking.category_list),
        status=booking.status,
        status_label=booking.status.label,
        total_amount=booking.total_amount,
        amount_paid=booking.amount_paid,
        created_at=booking.created_at,
        updated_at=booking.updated_at,
        customer=(
            CustomerSchema(
                full_name=customer.full_name,
                email_id=customer.email_id,
                phone_number=customer.phone_number,
            )
            if customer else None
        ),
        can_edit=booking.can_edit,
        can_reschedule=booking.can_reschedule,
        can_cancel=booking.can_cancel,
    )


def form_data_schema(data: BookingFormData) -> BookingFormDataSchema:
    return BookingFormDataSchema(
        full_name=data.full_name,
        email_id=data.email_id,
        phone_number=data.phone_number,
        booking_date=data.booking_date,
        time_slot=data.time_slot,
        gender=data.gender,
        categories=list(data.categories),
        services=list(data.services),
    )


def notification_schemas(notifications: list[Notification]) -> list[NotificationSchema]:
    return [
        NotificationSchema(title=n.title, description=n.description, variant=n.variant)
        for n in notifications
    ]


def status_breakdown_schema(breakdown: StatusBreakdown) -> StatusBreakdownSchema:
    return StatusBreakdownSchema(
        total=breakdown.total,
        counts={status.value: count for status, count in breakdown.counts.items()},
        percentages={status.value: breakdown.percentage(status) for status in breakdown.counts},
    )


def dashboard_schema(summary: DashboardSummary) -> DashboardSchema:
    return DashboardSchema(
        month=summary.month,
        total_bookings=summary.total_bookings,
        monthly_bookings=summary.monthly_bookings,
        men_bookings=summary.men_bookings,
        women_bookings=summary.women_bookings,
        total_revenue=summary.total_revenue,
        total_amount_paid=summary.total_amount_paid,
        recent_bookings=[booking_schema(b) for b in summary.recent_bookings],
    )
