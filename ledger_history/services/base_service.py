"""
Base service class.

Provides common functionality for all service classes: the request
session and a logger bound to the service name.
"""

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession


class BaseService:
    """
    Base service class.

    Services read through repositories built on the session they receive.
    The session belongs to the caller's request transaction, so services
    never commit read work themselves.
    """

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize base service.

        Args:
            session: Async database session
        """
        self.session = session
        self.logger = logger.bind(service=self.__class__.__name__)

    async def commit(self) -> None:
        """
        Commit current transaction.

        Only used by write paths (filter index backfill).
        """
        await self.session.commit()
