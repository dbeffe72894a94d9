"""
Generic repository for database operations.

Provides async find/create/save/delete operations over one SQLAlchemy
model using an ``AsyncSession``. Criteria are equality filters on
column names; ``relations`` names relationship attributes to load
eagerly alongside the matched rows.
"""

import structlog
from typing import Any, Dict, Generic, List, Optional, Sequence, Type, TypeVar

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from podcast_api.models.common import Base

logger = structlog.get_logger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


class EntityNotFoundError(Exception):
    """Raised by ``find_one_or_fail`` when no row matches the criteria."""

    def __init__(self, model: Type[Base], criteria: Dict[str, Any]):
        self.model = model
        self.criteria = criteria
        super().__init__(f"{model.__name__} matching {criteria} not found")


class Repository(Generic[ModelT]):
    """Repository for one entity type."""

    def __init__(self, session: AsyncSession, model: Type[ModelT]):
        """
        Initialize repository.

        Args:
            session: Request-scoped database session
            model: ORM model class handled by this repository
        """
        self.session = session
        self.model = model

    def _select(self, criteria: Optional[Dict[str, Any]], relations: Sequence[str]):
        stmt = select(self.model)
        if criteria:
            stmt = stmt.filter_by(**criteria)
        for relation in relations:
            stmt = stmt.options(selectinload(getattr(self.model, relation)))
        return stmt

    async def find(
        self,
        criteria: Optional[Dict[str, Any]] = None,
        relations: Sequence[str] = ()
    ) -> List[ModelT]:
        """
        Find all entities matching the criteria, ordered by id.

        Args:
            criteria: Column equality filters (all rows when omitted)
            relations: Relationship names to load eagerly

        Returns:
            Matching entities
        """
        try:
            stmt = self._select(criteria, relations).order_by(self.model.id)
            result = await self.session.execute(stmt)
            return list(result.scalars().all())

        except Exception as e:
            logger.error("entity_find_failed", model=self.model.__name__, error=str(e))
            raise

    async def find_one(
        self,
        criteria: Dict[str, Any],
        relations: Sequence[str] = ()
    ) -> Optional[ModelT]:
        """
        Find the first entity matching the criteria.

        Args:
            criteria: Column equality filters
            relations: Relationship names to load eagerly

        Returns:
            Entity or None if not found
        """
        try:
            result = await self.session.execute(self._select(criteria, relations))
            entity = result.scalars().first()

            if entity is None:
                logger.debug("entity_not_found", model=self.model.__name__, criteria=criteria)

            return entity

        except Exception as e:
            logger.error(
                "entity_find_one_failed",
                model=self.model.__name__,
                criteria=criteria,
                error=str(e)
            )
            raise

    async def find_one_or_fail(
        self,
        criteria: Dict[str, Any],
        relations: Sequence[str] = ()
    ) -> ModelT:
        """
        Find the first entity matching the criteria.

        Raises:
            EntityNotFoundError: If no entity matches
        """
        entity = await self.find_one(criteria, relations)
        if entity is None:
            raise EntityNotFoundError(self.model, criteria)
        return entity

    def create(self, **fields: Any) -> ModelT:
        """
        Instantiate an unsaved entity.

        Args:
            **fields: Column and relationship values

        Returns:
            Transient entity; persist it with ``save``
        """
        return self.model(**fields)

    async def save(self, entity: ModelT) -> ModelT:
        """
        Insert or update an entity and commit.

        Args:
            entity: New or loaded entity

        Returns:
            The saved entity with its primary key populated

        Raises:
            sqlalchemy.exc.SQLAlchemyError: On database error (after rollback)
        """
        try:
            self.session.add(entity)
            await self.session.commit()

            logger.debug("entity_saved", model=self.model.__name__, entity_id=entity.id)
            return entity

        except Exception as e:
            await self.session.rollback()
            logger.error("entity_save_failed", model=self.model.__name__, error=str(e))
            raise

    async def delete(self, criteria: Dict[str, Any]) -> int:
        """
        Delete all entities matching the criteria and commit.

        Args:
            criteria: Column equality filters

        Returns:
            Number of rows deleted
        """
        try:
            stmt = delete(self.model).filter_by(**criteria)
            result = await self.session.execute(stmt)
            await self.session.commit()

            logger.info(
                "entities_deleted",
                model=self.model.__name__,
                criteria=criteria,
                count=result.rowcount
            )
            return result.rowcount

        except Exception as e:
            await self.session.rollback()
            logger.error(
                "entity_delete_failed",
                model=self.model.__name__,
                criteria=criteria,
                error=str(e)
            )
            raise
