"""
Exception types.

Missing records are never exceptions: lookups return None or an empty
collection. Only malformed payloads and store failures are raised.
"""

import asyncio

from sqlalchemy.exc import SQLAlchemyError


class LedgerHistoryError(Exception):
    """Base class for ledger history errors."""
    pass


class MalformedPayloadError(LedgerHistoryError):
    """Raised when a payload kind tag or required field is missing or unexpected."""

    def __init__(self, message: str, kind: str | None = None) -> None:
        super().__init__(message)
        self.kind = kind


class StoreUnavailableError(LedgerHistoryError):
    """
    Raised when the backing store fails or the request deadline expires.

    Fatal for the current request only; no partial result accompanies it.
    """

    def __init__(self, operation: str, cause: BaseException | None = None) -> None:
        detail = f": {type(cause).__name__}: {cause}" if cause else ""
        super().__init__(f"Store unavailable during {operation}{detail}")
        self.operation = operation
        self.cause = cause


# Errors from the store-access layer that end the request
STORE_ERRORS = (
    SQLAlchemyError,
    OSError,
    asyncio.TimeoutError,
)


def is_store_error(exc: BaseException) -> bool:
    """
    Check if exception comes from the store-access layer.

    Args:
        exc: Exception to check

    Returns:
        True if the request must fail with StoreUnavailableError
    """
    return isinstance(exc, STORE_ERRORS)
