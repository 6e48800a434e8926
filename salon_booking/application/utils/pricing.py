from __future__ import annotations

from typing import Iterable

from salon_booking.domain.entities.service_catalog import Service


def select_services(catalog: Iterable[Service], names: Iterable[str]) -> list[Service]:
    """Catalog entries whose name is in `names`, in catalog order."""
    wanted = set(names)
    return [s for s in catalog if s.name in wanted]


def calculate_total_amount(catalog: Iterable[Service], names: Iterable[str]) -> float:
    """Sum of catalog prices for the named services; a missing price counts as 0."""
    return sum((s.price or 0) for s in select_services(catalog, names))


def retain_categories(categories: Iterable[str], selected: list[Service]) -> list[str]:
    """Keep only categories that at least one selected service belongs to."""
    used = {s.category_name for s in selected if s.category_name}
    return [c for c in categories if c in used]


def distinct_category_names(selected: list[Service]) -> list[str]:
    names: list[str] = []
    for service in selected:
        name = service.category_name
        if name and name not in names:
            names.append(name)
    return names
