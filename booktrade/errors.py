"""Error taxonomy for listing operations.

Every public operation of the service layer raises one of these; the HTTP
layer renders them as ``{"error": message}`` with ``status_code``.
"""

from typing import Optional


class BookTradeError(Exception):
    """Base class for errors reported to clients."""

    status_code = 400

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(BookTradeError):
    """Malformed or missing input."""


class Forbidden(BookTradeError):
    """Caller does not own the listing (reported as 400)."""


class NotAvailable(BookTradeError):
    """Listing is locked against mutation."""


class NotFound(BookTradeError):
    """Missing listing or image. 404 on reads, 400 on mutating paths."""

    status_code = 404


class InvalidCode(BookTradeError):
    """Activation code is unknown or was already redeemed."""


class StorageError(BookTradeError):
    """Blob write or delete failed."""

    status_code = 500


class DatabaseError(BookTradeError):
    """Persistence failure."""

    status_code = 500
