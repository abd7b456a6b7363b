"""Base repository class with common database operations"""

import logging
from datetime import datetime
from typing import Any, Dict, Generic, List, Optional, Sequence, Type, TypeVar, Union

from pydantic import BaseModel
from sqlalchemy import Table, delete, func, insert, literal_column, select, update
from sqlalchemy.sql import ClauseElement, Executable

from bamboozled.database.connection import get_engine
from bamboozled.database.exceptions import ItemNotFoundError
from bamboozled.database.helpers import generate_id, to_db_timestamp, to_flag
from bamboozled.database.retry import with_standard_retry

logger = logging.getLogger(__name__)

T = TypeVar('T', bound=BaseModel)

# Insertion order; breaks ties between rows created in the same millisecond
ROWID = literal_column("rowid")


def to_db_values(values: Union[BaseModel, Dict[str, Any]]) -> Dict[str, Any]:
    """Convert model fields or a plain dict to column values (ISO text timestamps, 0/1 flags)"""
    if isinstance(values, BaseModel):
        values = values.model_dump(exclude_unset=True)

    converted = {}
    for key, value in values.items():
        if isinstance(value, datetime):
            value = to_db_timestamp(value)
        elif isinstance(value, bool):
            value = to_flag(value)
        converted[key] = value
    return converted


class BaseRepository(Generic[T]):
    """CRUD operations for one table, returning pydantic models.

    Every statement runs in its own transaction through the standard retry
    policy, so driver errors reach callers as ``DatabaseError`` subclasses.
    """

    table: Table
    model: Type[T]
    id_prefix: Optional[str] = None

    @property
    def pk(self):
        return list(self.table.primary_key.columns)[0]

    @with_standard_retry
    async def _fetch_all(self, statement: Executable) -> List[Dict[str, Any]]:
        async with get_engine().begin() as conn:
            result = await conn.execute(statement)
            return [dict(row) for row in result.mappings().all()]

    async def _fetch_one(self, statement: Executable) -> Optional[Dict[str, Any]]:
        rows = await self._fetch_all(statement)
        return rows[0] if rows else None

    @with_standard_retry
    async def _scalar(self, statement: Executable) -> Any:
        async with get_engine().begin() as conn:
            result = await conn.execute(statement)
            return result.scalar()

    @with_standard_retry
    async def _execute(self, *statements: Executable) -> int:
        """Run statements in one transaction and return the total affected row count"""
        affected = 0
        async with get_engine().begin() as conn:
            for statement in statements:
                result = await conn.execute(statement)
                affected += max(result.rowcount or 0, 0)
        return affected

    def _to_model(self, row: Optional[Dict[str, Any]]) -> Optional[T]:
        if row is None:
            return None
        return self.model.model_validate(row)

    def _to_models(self, rows: Sequence[Dict[str, Any]]) -> List[T]:
        return [self.model.model_validate(row) for row in rows]

    async def create(self, values: Union[BaseModel, Dict[str, Any]]) -> T:
        """Insert a row and return it as a model"""
        row = to_db_values(values)
        if not row.get(self.pk.name):
            row[self.pk.name] = generate_id(self.id_prefix)

        await self._execute(insert(self.table).values(**row))
        logger.debug(f"Created {self.table.name} row {row[self.pk.name]}")

        created = await self.get_by_id(row[self.pk.name])
        return created

    async def get_by_id(self, item_id: str) -> Optional[T]:
        row = await self._fetch_one(select(self.table).where(self.pk == item_id))
        return self._to_model(row)

    async def update(self, item_id: str, values: Union[BaseModel, Dict[str, Any]]) -> T:
        """Update a row; raises ItemNotFoundError when it does not exist"""
        changes = to_db_values(values)
        if changes:
            affected = await self._execute(
                update(self.table).where(self.pk == item_id).values(**changes)
            )
            if affected == 0:
                raise ItemNotFoundError(f"{self.table.name} row {item_id} not found")

        updated = await self.get_by_id(item_id)
        if updated is None:
            raise ItemNotFoundError(f"{self.table.name} row {item_id} not found")
        return updated

    async def delete(self, item_id: str) -> bool:
        affected = await self._execute(delete(self.table).where(self.pk == item_id))
        if affected:
            logger.debug(f"Deleted {self.table.name} row {item_id}")
        return affected > 0

    async def query(
        self,
        *conditions: ClauseElement,
        order_by: Optional[Sequence[Any]] = None,
        limit: Optional[int] = None
    ) -> List[T]:
        """Rows matching all conditions"""
        statement = select(self.table).where(*conditions)
        if order_by:
            statement = statement.order_by(*order_by)
        if limit is not None:
            statement = statement.limit(limit)
        return self._to_models(await self._fetch_all(statement))

    async def exists(self, item_id: str) -> bool:
        count = await self._scalar(
            select(func.count()).select_from(self.table).where(self.pk == item_id)
        )
        return bool(count)

    async def count(self, *conditions: ClauseElement) -> int:
        count = await self._scalar(select(func.count()).select_from(self.table).where(*conditions))
        return count or 0

    async def get_all(self) -> List[T]:
        return await self.query(order_by=[ROWID])
