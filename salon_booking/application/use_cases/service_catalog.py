from __future__ import annotations

import logging

from salon_booking.application.exceptions import CatalogUnavailableError
from salon_booking.application.ports.service_catalog import ServiceCatalogPort
from salon_booking.domain.entities.service_catalog import (
    CategoryGroup,
    Service,
    ServiceCategory,
)


class ServiceCatalogUseCase:
    """
    Read access to the salon's offerings. Nothing is cached here: every
    caller gets a fresh load, so two open flows may see different catalogs.
    """

    def __init__(self, catalog: ServiceCatalogPort) -> None:
        self._catalog = catalog
        self._logger = logging.getLogger(__name__)

    def fetch_services(self) -> list[Service]:
        return self._load("services", self._catalog.list_active_services)

    def fetch_categories(self) -> list[ServiceCategory]:
        return self._load("service_categories", self._catalog.list_categories)

    def fetch_featured_services(self) -> list[Service]:
        return self._load("featured services", self._catalog.list_featured_services)

    def fetch_services_by_category(self, category_id: str) -> list[Service]:
        return self._load("category services", lambda: self._catalog.list_services_by_category(category_id))

    def fetch_all_services(self) -> list[Service]:
        return self._load("all services", self._catalog.list_all_services)

    def _load(self, what: str, loader):
        try:
            return loader()
        except Exception as e:
            self._logger.error("Error fetching %s", what, extra={"error": str(e)})
            raise CatalogUnavailableError(f"Failed to load {what}: {e}") from e


def filter_services(
    services: list[Service],
    gender: str | None = None,
    category_id: str | None = None,
) -> list[Service]:
    """Services matching the category (if given) and eligible for the gender (unisex always matches)."""
    result: list[Service] = []
    for service in services:
        if category_id is not None and service.category_id != category_id:
            continue
        if not service.is_eligible_for(gender):
            continue
        result.append(service)
    return result


def group_by_category(services: list[Service], categories: list[ServiceCategory] | None = None) -> list[CategoryGroup]:
    """
    Group services under their category. Groups follow the order of
    `categories` when given, otherwise first appearance. Services without a
    category end up in a trailing group with category None.
    """
    groups: dict[str | None, CategoryGroup] = {}
    for category in categories or []:
        groups[category.id] = CategoryGroup(category=category, services=[])

    for service in services:
        key = service.category_id
        if key not in groups:
            groups[key] = CategoryGroup(category=service.category, services=[])
        groups[key].services.append(service)

    ordered = [g for k, g in groups.items() if k is not None and g.services]
    if None in groups and groups[None].services:
        ordered.append(groups[None])
    return ordered
