import json
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Type

import asyncpg
from pydantic import BaseModel

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Raised when a store rejects a write before it reaches the database."""
    pass


async def init_connection(connection: asyncpg.Connection):
    """Pool `init` hook: decode JSON/JSONB columns to Python objects."""
    for type_name in ("json", "jsonb"):
        await connection.set_type_codec(
            type_name, encoder=json.dumps, decoder=json.loads, schema="pg_catalog"
        )


class AsyncPostgresClient:
    """
    Table-scoped PostgreSQL client. Every entity store subclasses it and sets
    `table` and `model`; the helpers below issue equality-filtered
    select/insert/update/delete statements and convert rows to models.
    """
    table: str = ""
    model: Type[BaseModel] = None

    def __init__(self, pool: asyncpg.Pool):
        self._pool = pool

    @asynccontextmanager
    async def _connection(self, connection: Optional[asyncpg.Connection] = None):
        """Reuses the caller's connection (e.g. inside a transaction) or acquires one."""
        if connection is not None:
            yield connection
        else:
            async with self._pool.acquire() as acquired:
                yield acquired

    @asynccontextmanager
    async def transaction(self):
        """Yields a connection with an open transaction."""
        async with self._pool.acquire() as connection:
            async with connection.transaction():
                yield connection

    def _to_model(self, record) -> BaseModel:
        return self.model(**dict(record))

    @staticmethod
    def _where(filters: Optional[Dict[str, Any]], start: int = 1) -> Tuple[str, List[Any]]:
        if not filters:
            return "", []
        clauses, args = [], []
        for position, (column, value) in enumerate(filters.items(), start=start):
            clauses.append(f"{column} = ${position}")
            args.append(value)
        return " WHERE " + " AND ".join(clauses), args

    async def _select(self, filters: Optional[Dict[str, Any]] = None, order_by: Optional[str] = None,
                      connection: Optional[asyncpg.Connection] = None) -> List[BaseModel]:
        where, args = self._where(filters)
        query = f"SELECT * FROM {self.table}{where}"
        if order_by:
            query += f" ORDER BY {order_by}"
        async with self._connection(connection) as conn:
            records = await conn.fetch(query + ";", *args)
            return [self._to_model(record) for record in records]

    async def _select_one(self, filters: Dict[str, Any],
                          connection: Optional[asyncpg.Connection] = None) -> Optional[BaseModel]:
        where, args = self._where(filters)
        query = f"SELECT * FROM {self.table}{where} LIMIT 1;"
        async with self._connection(connection) as conn:
            record = await conn.fetchrow(query, *args)
            return self._to_model(record) if record else None

    async def _insert(self, values: Dict[str, Any],
                      connection: Optional[asyncpg.Connection] = None) -> BaseModel:
        columns = list(values.keys())
        placeholders = ", ".join(f"${i}" for i in range(1, len(columns) + 1))
        query = f"INSERT INTO {self.table} ({', '.join(columns)}) VALUES ({placeholders}) RETURNING *;"
        async with self._connection(connection) as conn:
            record = await conn.fetchrow(query, *values.values())
            return self._to_model(record)

    async def _insert_many(self, columns: Sequence[str], rows: Iterable[Sequence[Any]],
                           connection: Optional[asyncpg.Connection] = None):
        rows = list(rows)
        if not rows:
            return
        placeholders = ", ".join(f"${i}" for i in range(1, len(columns) + 1))
        query = f"INSERT INTO {self.table} ({', '.join(columns)}) VALUES ({placeholders});"
        async with self._connection(connection) as conn:
            await conn.executemany(query, rows)

    async def _update(self, filters: Dict[str, Any], values: Dict[str, Any],
                      connection: Optional[asyncpg.Connection] = None) -> str:
        if not values:
            return "UPDATE 0"
        assignments, args = [], []
        for position, (column, value) in enumerate(values.items(), start=1):
            assignments.append(f"{column} = ${position}")
            args.append(value)
        where, where_args = self._where(filters, start=len(args) + 1)
        query = f"UPDATE {self.table} SET {', '.join(assignments)}{where};"
        async with self._connection(connection) as conn:
            return await conn.execute(query, *args, *where_args)

    async def _delete(self, filters: Dict[str, Any],
                      connection: Optional[asyncpg.Connection] = None) -> str:
        where, args = self._where(filters)
        query = f"DELETE FROM {self.table}{where};"
        async with self._connection(connection) as conn:
            return await conn.execute(query, *args)

    # --- Default CRUD surface shared by the simple stores ---

    async def get_all(self) -> List[BaseModel]:
        return await self._select()

    async def get_by_id(self, record_id) -> Optional[BaseModel]:
        return await self._select_one({"id": record_id})

    async def add(self, values: Dict[str, Any]) -> BaseModel:
        values = {key: value for key, value in values.items() if key != "id"}
        return await self._insert(values)

    async def update(self, record_id, updates: Dict[str, Any]) -> str:
        updates = {key: value for key, value in updates.items() if key != "id"}
        return await self._update({"id": record_id}, updates)

    async def delete(self, record_id) -> str:
        return await self._delete({"id": record_id})


def affected_rows(status: str) -> int:
    """Parses asyncpg's command status ('UPDATE 3', 'DELETE 0') into a row count."""
    try:
        return int(str(status).split()[-1])
    except (ValueError, IndexError, AttributeError):
        return 0
