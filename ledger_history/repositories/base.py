"""
Base repository.

Generic lookups for all repositories. Repositories never commit:
the caller owns the request-scoped transaction.
"""

from typing import Any, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_history.models.base import Base
from ledger_history.utils.db_decorators import with_store_errors

# Generic type for model
ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Base repository with generic lookups.

    Type Parameters:
        ModelType: SQLAlchemy model class

    Example:
        class TokenRepository(BaseRepository[Token]):
            def __init__(self, session: AsyncSession):
                super().__init__(Token, session)
    """

    def __init__(
        self, model: type[ModelType], session: AsyncSession
    ) -> None:
        """
        Initialize repository.

        Args:
            model: SQLAlchemy model class
            session: Async database session
        """
        self.model = model
        self.session = session

    @with_store_errors
    async def get(self, key: Any) -> ModelType | None:
        """
        Get entity by primary key.

        Args:
            key: Primary key value

        Returns:
            Entity or None if not found
        """
        return await self.session.get(self.model, key)

    @with_store_errors
    async def get_by(
        self, **filters: Any
    ) -> ModelType | None:
        """
        Get single entity by filters.

        Args:
            **filters: Column filters

        Returns:
            First matching entity or None
        """
        stmt = select(self.model).filter_by(**filters).limit(1)
        result = await self.session.execute(stmt)
        return result.scalars().first()

