import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from salon_booking.api.v1.admin import router as admin_router
from salon_booking.api.v1.auth import router as auth_router
from salon_booking.api.v1.booking_forms import router as booking_forms_router
from salon_booking.api.v1.catalog import router as catalog_router
from salon_booking.api.v1.my_bookings import router as my_bookings_router
from salon_booking.core.config import settings
from salon_booking.wiring.dependencies import get_executor, shutdown_executor


class ContextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        extras = []
        for key in ("booking_id", "user_id", "status", "step", "table", "error", "reason"):
            value = getattr(record, key, None)
            if value not in (None, ""):
                extras.append(f"{key}={value}")
        base = super().format(record)
        if extras:
            return f"{base} | " + " ".join(extras)
        return base


handler = logging.StreamHandler()
handler.setFormatter(ContextFormatter("%(levelname)s:%(name)s:%(message)s"))

root = logging.getLogger()
root.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
root.handlers.clear()
root.addHandler(handler)


@asynccontextmanager
async def lifespan(app: FastAPI):
    get_executor()
    logging.getLogger(__name__).info("Salon booking API started", extra={"table": settings.STORE_PROVIDER})
    yield
    shutdown_executor()


app = FastAPI(title=f"{settings.SALON_NAME} Booking API", version="1.0.0", lifespan=lifespan)

app.include_router(catalog_router, prefix="/api/v1", tags=["catalog"])
app.include_router(auth_router, prefix="/api/v1", tags=["auth"])
app.include_router(booking_forms_router, prefix="/api/v1", tags=["booking-forms"])
app.include_router(my_bookings_router, prefix="/api/v1", tags=["bookings"])
app.include_router(admin_router, prefix="/api/v1", tags=["admin"])


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
