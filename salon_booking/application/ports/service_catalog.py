from __future__ import annotations

from abc import ABC, abstractmethod

from salon_booking.domain.entities.service_catalog import Service, ServiceCategory


class ServiceCatalogPort(ABC):
    @abstractmethod
    def list_active_services(self) -> list[Service]:
        """Active services with their category joined, ordered by sort_order."""
        raise NotImplementedError

    @abstractmethod
    def list_featured_services(self) -> list[Service]:
        """Active featured services, ordered by sort_order then newest first."""
        raise NotImplementedError

    @abstractmethod
    def list_services_by_category(self, category_id: str) -> list[Service]:
        """Active services of one category, ordered by sort_order then name."""
        raise NotImplementedError

    @abstractmethod
    def list_all_services(self) -> list[Service]:
        """Active services ordered by category_id, sort_order, name."""
        raise NotImplementedError

    @abstractmethod
    def list_categories(self) -> list[ServiceCategory]:
        """All categories ordered by sort_order."""
        raise NotImplementedError
