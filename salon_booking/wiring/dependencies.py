from functools import lru_cache
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterator

from fastapi import Header

from salon_booking.core.config import settings
from salon_booking.application.ports.auth import AuthPort
from salon_booking.application.ports.booking_repository import BookingRepositoryPort
from salon_booking.application.ports.form_session_store import FormSessionStorePort
from salon_booking.application.ports.profile_repository import ProfileRepositoryPort
from salon_booking.application.ports.service_catalog import ServiceCatalogPort
from salon_booking.application.use_cases.admin_stats import AdminStatsUseCase
from salon_booking.application.use_cases.booking_records import BookingRecordManager
from salon_booking.application.use_cases.customers import CustomerDirectoryUseCase
from salon_booking.application.use_cases.service_catalog import ServiceCatalogUseCase
from salon_booking.application.use_cases.session_context import SessionContext
from salon_booking.infrastructure.auth.mock_auth import MockAuth
from salon_booking.infrastructure.store.json_store import JsonBookingRepository, JsonProfileRepository
from salon_booking.infrastructure.store.memory_store import (
    MemoryBookingRepository,
    MemoryFormSessionStore,
    MemoryProfileRepository,
    MemoryServiceCatalog,
)
from salon_booking.infrastructure.supabase.auth import SupabaseAuth
from salon_booking.infrastructure.supabase.client import SupabaseClient
from salon_booking.infrastructure.supabase.repositories import (
    SupabaseBookingRepository,
    SupabaseProfileRepository,
    SupabaseServiceCatalog,
)


_profile_repository: ProfileRepositoryPort | None = None
_booking_repository: BookingRepositoryPort | None = None
_form_store: FormSessionStorePort | None = None
_auth: AuthPort | None = None
_executor: ThreadPoolExecutor | None = None


def _store_provider() -> str:
    return settings.STORE_PROVIDER.strip().lower()


@lru_cache
def get_supabase_client() -> SupabaseClient:
    return SupabaseClient(
        base_url=settings.SUPABASE_URL or "",
        api_key=settings.SUPABASE_ANON_KEY or "",
        timeout=settings.SUPABASE_TIMEOUT_SECONDS,
    )


@lru_cache
def get_service_catalog() -> ServiceCatalogPort:
    if _store_provider() == "supabase":
        return SupabaseServiceCatalog(get_supabase_client())
    return MemoryServiceCatalog()


def get_profile_repository() -> ProfileRepositoryPort:
    global _profile_repository
    if _profile_repository is None:
        provider = _store_provider()
        if provider == "supabase":
            _profile_repository = SupabaseProfileRepository(get_supabase_client())
        elif provider == "json":
            _profile_repository = JsonProfileRepository(settings.DATA_DIR)
        else:
            _profile_repository = MemoryProfileRepository()
    return _profile_repository


def get_booking_repository() -> BookingRepositoryPort:
    global _booking_repository
    if _booking_repository is None:
        provider = _store_provider()
        if provider == "supabase":
            _booking_repository = SupabaseBookingRepository(get_supabase_client())
        elif provider == "json":
            _booking_repository = JsonBookingRepository(
                settings.DATA_DIR,
                profiles=get_profile_repository(),
                enforce_slot_uniqueness=settings.ENFORCE_SLOT_UNIQUENESS,
            )
        else:
            _booking_repository = MemoryBookingRepository(
                profiles=get_profile_repository(),
                enforce_slot_uniqueness=settings.ENFORCE_SLOT_UNIQUENESS,
            )
        logging.getLogger(__name__).info("Booking store ready", extra={"table": provider})
    return _booking_repository


def get_auth() -> AuthPort:
    global _auth
    if _auth is None:
        if _store_provider() == "supabase":
            _auth = SupabaseAuth(get_supabase_client())
        else:
            _auth = MockAuth()
    return _auth


def get_form_store() -> FormSessionStorePort:
    global _form_store
    if _form_store is None:
        _form_store = MemoryFormSessionStore(
            max_sessions=settings.MAX_FORM_SESSIONS,
            ttl_seconds=settings.FORM_SESSION_TTL_SECONDS,
        )
    return _form_store


def get_executor() -> ThreadPoolExecutor:
    global _executor
    if _executor is None:
        _executor = ThreadPoolExecutor(
            max_workers=settings.BACKGROUND_WORKERS,
            thread_name_prefix="salon-bg",
        )
    return _executor


def shutdown_executor() -> None:
    global _executor
    if _executor is not None:
        _executor.shutdown(wait=True, cancel_futures=True)
        _executor = None


def get_catalog_use_case() -> ServiceCatalogUseCase:
    return ServiceCatalogUseCase(catalog=get_service_catalog())


def get_booking_manager() -> BookingRecordManager:
    return BookingRecordManager(repository=get_booking_repository())


def get_admin_stats() -> AdminStatsUseCase:
    return AdminStatsUseCase(bookings=get_booking_manager())


def get_customer_directory() -> CustomerDirectoryUseCase:
    return CustomerDirectoryUseCase(
        profiles=get_profile_repository(),
        per_page=settings.CUSTOMERS_PER_PAGE,
    )


def bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_session_context(authorization: str | None = Header(default=None)) -> Iterator[SessionContext]:
    ctx = SessionContext(
        auth=get_auth(),
        profiles=get_profile_repository(),
        bookings=get_booking_manager(),
        executor=get_executor(),
        teardown_timeout=settings.TEARDOWN_TIMEOUT_SECONDS,
    )
    ctx.init(bearer_token(authorization))
    try:
        yield ctx
    finally:
        ctx.teardown()


def reset_state() -> None:
    """Drop cached adapters so the next request rebuilds them from settings."""
    global _profile_repository, _booking_repository, _form_store, _auth
    _profile_repository = None
    _booking_repository = None
    _form_store = None
    _auth = None
    get_service_catalog.cache_clear()
    if get_supabase_client.cache_info().currsize:
        get_supabase_client().close()
    get_supabase_client.cache_clear()
