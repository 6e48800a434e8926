from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class ServiceCategory:
    id: str
    name: str
    icon: str | None = None
    sort_order: int | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class Service:
    id: str
    name: str
    category_id: str | None = None
    price: float | None = None
    duration_minutes: int | None = None
    gender: str | None = None  # "male", "female", "unisex"; None means unisex
    description: str | None = None
    image_url: str | None = None
    is_active: bool = True
    is_featured: bool = False
    sort_order: int | None = None
    created_at: datetime | None = None
    category: ServiceCategory | None = None  # joined from service_categories

    @property
    def category_name(self) -> str | None:
        return self.category.name if self.category else None

    def is_eligible_for(self, gender: str | None) -> bool:
        """Unisex (or unset) services match every gender filter."""
        if gender is None:
            return True
        if not self.gender or self.gender == "unisex":
            return True
        return self.gender == gender


@dataclass(frozen=True)
class CatalogSnapshot:
    """Services and categories as loaded when a booking flow opens."""

    services: tuple[Service, ...] = ()
    categories: tuple[ServiceCategory, ...] = ()
    loaded_at: datetime | None = None
    load_failed: bool = False

    def find_by_name(self, name: str) -> Service | None:
        for service in self.services:
            if service.name == name:
                return service
        return None

    def select_by_names(self, names: list[str]) -> list[Service]:
        wanted = set(names)
        return [s for s in self.services if s.name in wanted]


@dataclass(frozen=True)
class CategoryGroup:
    category: ServiceCategory | None
    services: list[Service] = field(default_factory=list)
