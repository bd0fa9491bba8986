"""
Database decorators for store error translation and timing.

Store operations run inside a request-scoped transaction owned by the
caller. These decorators turn driver failures into StoreUnavailableError
and log how long each operation took.
"""

import time
from collections.abc import Callable
from functools import wraps
from typing import Any, TypeVar

from loguru import logger

from ledger_history.utils.exceptions import StoreUnavailableError, is_store_error


T = TypeVar("T")


def with_store_errors(func: Callable[..., T]) -> Callable[..., T]:
    """
    Decorator translating store failures into StoreUnavailableError.

    Usage:
        @with_store_errors
        async def find_slice(self, ...):
            result = await self.session.execute(stmt)
            ...

    The decorator will:
    1. Execute the wrapped coroutine
    2. Log its duration at DEBUG level
    3. Re-raise SQLAlchemy, OS and timeout errors as StoreUnavailableError

    No retry is attempted; retries belong to the store-access collaborator.
    """
    @wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> T:
        start = time.monotonic()
        try:
            result = await func(*args, **kwargs)
        except StoreUnavailableError:
            raise
        except Exception as e:
            if not is_store_error(e):
                raise
            logger.error(
                f"[Store] {func.__qualname__} failed: {type(e).__name__}: {e}"
            )
            raise StoreUnavailableError(func.__qualname__, e) from e

        logger.debug(
            f"[Store] {func.__qualname__} took "
            f"{(time.monotonic() - start) * 1000:.1f} ms"
        )
        return result

    return wrapper
