from datetime import date, datetime

from fastapi import APIRouter, Depends, Query

from salon_booking.api.v1.errors import translate_errors
from salon_booking.api.v1.schemas import (
    CategoryGroupSchema,
    CategorySchema,
    Gender,
    ServiceSchema,
    TimeSlotSchema,
    category_schema,
    service_schema,
)
from salon_booking.application.use_cases.service_catalog import (
    ServiceCatalogUseCase,
    filter_services,
    group_by_category,
)
from salon_booking.application.utils.time_slots import get_available_time_slots
from salon_booking.wiring.dependencies import get_catalog_use_case

router = APIRouter()


@router.get("/services", response_model=list[ServiceSchema])
def list_services(uc: ServiceCatalogUseCase = Depends(get_catalog_use_case)):
    with translate_errors():
        services = uc.fetch_services()
    return [service_schema(s) for s in services]


@router.get("/services/featured", response_model=list[ServiceSchema])
def list_featured_services(uc: ServiceCatalogUseCase = Depends(get_catalog_use_case)):
    with translate_errors():
        services = uc.fetch_featured_services()
    return [service_schema(s) for s in services]


@router.get("/services/filter", response_model=list[ServiceSchema])
def filter_catalog(
    gender: Gender | None = Query(None),
    category_id: str | None = Query(None),
    uc: ServiceCatalogUseCase = Depends(get_catalog_use_case),
):
    with translate_errors():
        services = uc.fetch_services()
    matched = filter_services(services, gender=gender.value if gender else None, category_id=category_id)
    return [service_schema(s) for s in matched]


@router.get("/services/grouped", response_model=list[CategoryGroupSchema])
def list_services_grouped(uc: ServiceCatalogUseCase = Depends(get_catalog_use_case)):
    with translate_errors():
        services = uc.fetch_all_services()
        categories = uc.fetch_categories()
    return [
        CategoryGroupSchema(
            category=category_schema(g.category) if g.category else None,
            services=[service_schema(s) for s in g.services],
        )
        for g in group_by_category(services, categories)
    ]


@router.get("/categories", response_model=list[CategorySchema])
def list_categories(uc: ServiceCatalogUseCase = Depends(get_catalog_use_case)):
    with translate_errors():
        categories = uc.fetch_categories()
    return [category_schema(c) for c in categories]


@router.get("/categories/{category_id}/services", response_model=list[ServiceSchema])
def list_category_services(category_id: str, uc: ServiceCatalogUseCase = Depends(get_catalog_use_case)):
    with translate_errors():
        services = uc.fetch_services_by_category(category_id)
    return [service_schema(s) for s in services]


@router.get("/time-slots", response_model=list[TimeSlotSchema])
def list_time_slots(selected_date: date | None = Query(None, alias="date")):
    slots = get_available_time_slots(selected_date, datetime.now())
    return [TimeSlotSchema(value=s.value, label=s.label) for s in slots]
