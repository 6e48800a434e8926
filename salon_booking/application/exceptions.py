class RemoteStoreError(RuntimeError):
    """Raised by store adapters when the data platform rejects or fails a request."""

    def __init__(self, message: str, status_code: int | None = None, code: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code


class CatalogUnavailableError(RuntimeError):
    """Raised when services or categories cannot be loaded."""
    pass


class BookingOperationError(RuntimeError):
    """Raised when a booking write or query fails. Carries the remote error message."""

    def __init__(self, message: str, action: str | None = None) -> None:
        super().__init__(message)
        self.action = action


class BookingNotFoundError(LookupError):
    pass


class AuthenticationRequiredError(PermissionError):
    """Raised when an operation needs a signed-in user and there is none."""
    pass


class PermissionDeniedError(PermissionError):
    pass
