from __future__ import annotations

from salon_booking.domain.entities.service_catalog import Service, ServiceCategory

SEED_CATEGORIES: tuple[ServiceCategory, ...] = (
    ServiceCategory(id="cat-hair", name="Hair", icon="scissors", sort_order=1),
    ServiceCategory(id="cat-skin", name="Skin", icon="sparkles", sort_order=2),
    ServiceCategory(id="cat-nails", name="Nails", icon="hand", sort_order=3),
    ServiceCategory(id="cat-grooming", name="Grooming", icon="user", sort_order=4),
)

_CATEGORY_BY_ID = {c.id: c for c in SEED_CATEGORIES}


def _service(
    id: str,
    name: str,
    category_id: str,
    price: float,
    duration: int,
    gender: str | None,
    sort_order: int,
    featured: bool = False,
    description: str | None = None,
) -> Service:
    return Service(
        id=id,
        name=name,
        category_id=category_id,
        price=price,
        duration_minutes=duration,
        gender=gender,
        description=description,
        is_active=True,
        is_featured=featured,
        sort_order=sort_order,
        category=_CATEGORY_BY_ID[category_id],
    )


SEED_SERVICES: tuple[Service, ...] = (
    _service("svc-haircut", "Haircut", "cat-hair", 300, 30, "unisex", 1, featured=True),
    _service("svc-hair-spa", "Hair Spa", "cat-hair", 900, 60, "female", 2),
    _service("svc-hair-colour", "Hair Colour", "cat-hair", 1500, 90, None, 3, featured=True),
    _service("svc-facial", "Facial", "cat-skin", 700, 45, "female", 1, featured=True),
    _service("svc-cleanup", "Skin Clean-up", "cat-skin", 500, 30, "unisex", 2),
    _service("svc-waxing", "Full Arm Waxing", "cat-skin", 400, 30, "female", 3),
    _service("svc-manicure", "Manicure", "cat-nails", 450, 40, "unisex", 1),
    _service("svc-pedicure", "Pedicure", "cat-nails", 550, 45, "unisex", 2),
    _service("svc-beard", "Beard Trim", "cat-grooming", 150, 20, "male", 1),
    _service("svc-shave", "Classic Shave", "cat-grooming", 200, 25, "male", 2),
)
