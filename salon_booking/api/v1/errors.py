from contextlib import contextmanager
from typing import Iterator

from fastapi import HTTPException

from salon_booking.application.exceptions import (
    AuthenticationRequiredError,
    BookingNotFoundError,
    BookingOperationError,
    CatalogUnavailableError,
    PermissionDeniedError,
    RemoteStoreError,
)


@contextmanager
def translate_errors() -> Iterator[None]:
    """Map application errors raised inside a route onto HTTP status codes."""
    try:
        yield
    except AuthenticationRequiredError as e:
        raise HTTPException(status_code=401, detail=str(e) or "Please sign in")
    except PermissionDeniedError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except BookingNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (ValueError, KeyError) as e:
        raise HTTPException(status_code=400, detail=str(e.args[0]) if e.args else str(e))
    except (BookingOperationError, CatalogUnavailableError, RemoteStoreError) as e:
        raise HTTPException(status_code=502, detail=str(e))
