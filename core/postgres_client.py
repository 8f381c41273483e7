"""
PostgreSQL Client for the gifting platform

Async PostgreSQL client on a native asyncpg connection pool.
Works against a plain PostgreSQL server or a Supabase database.

Usage:
    from core.postgres_client import AsyncPostgresClient

    db = AsyncPostgresClient(dsn=settings.infrastructure.dsn, service_name="gifting_service")

    async with db:
        rows = await db.query("SELECT * FROM gifting.orders WHERE campaign_id = $1", [campaign_id])
        affected = await db.execute("DELETE FROM gifting.orders WHERE id = $1", [order_id])
"""

import json
import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID

import asyncpg

logger = logging.getLogger(__name__)


class ExtendedJSONEncoder(json.JSONEncoder):
    """JSON encoder that handles Decimal, datetime and UUID types"""
    def default(self, obj):
        if isinstance(obj, Decimal):
            return float(obj)
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        if isinstance(obj, UUID):
            return str(obj)
        return super().default(obj)


def json_dumps(obj):
    """JSON dumps with Decimal and datetime support"""
    return json.dumps(obj, cls=ExtendedJSONEncoder)


def rows_affected(status: str) -> int:
    """Parse the affected row count from an asyncpg command tag ("DELETE 1", "INSERT 0 3")"""
    if not status:
        return 0
    tail = status.strip().rsplit(" ", 1)[-1]
    try:
        return int(tail)
    except ValueError:
        return 0


async def _init_connection(conn: asyncpg.Connection) -> None:
    for type_name in ("json", "jsonb"):
        await conn.set_type_codec(
            type_name,
            encoder=json_dumps,
            decoder=json.loads,
            schema="pg_catalog",
        )


class AsyncPostgresClient:
    """
    PostgreSQL client backed by an asyncpg pool.

    The pool is created lazily on first use (``connect`` or ``async with``)
    and kept open until ``close``. JSON/JSONB columns are encoded and decoded
    transparently, so callers pass and receive plain dicts and lists.
    """

    def __init__(
        self,
        dsn: str,
        service_name: str = "gifting_service",
        min_size: int = 1,
        max_size: int = 10,
    ):
        self.dsn = dsn
        self.service_name = service_name
        self.min_size = min_size
        self.max_size = max_size
        self._pool: Optional[asyncpg.Pool] = None

    @property
    def is_connected(self) -> bool:
        return self._pool is not None

    async def connect(self) -> None:
        """Create the connection pool if it does not exist yet"""
        if self._pool is not None:
            return
        self._pool = await asyncpg.create_pool(
            dsn=self.dsn,
            min_size=self.min_size,
            max_size=self.max_size,
            init=_init_connection,
        )
        logger.info(f"PostgreSQL pool created for {self.service_name}")

    async def close(self) -> None:
        """Close the connection pool"""
        if self._pool is not None:
            await self._pool.close()
            self._pool = None
            logger.info(f"PostgreSQL pool closed for {self.service_name}")

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        # Pool stays open between calls; close() releases it
        return False

    async def health_check(self) -> bool:
        """Check database health"""
        try:
            await self.connect()
            value = await self._pool.fetchval("SELECT 1")
            return value == 1
        except (asyncpg.PostgresError, OSError) as e:
            logger.warning(f"PostgreSQL health check failed: {e}")
            return False

    async def query(self, sql: str, params: Optional[List[Any]] = None) -> List[Dict[str, Any]]:
        """Execute query and return results"""
        await self.connect()
        records = await self._pool.fetch(sql, *(params or []))
        return [dict(record) for record in records]

    async def query_row(self, sql: str, params: Optional[List[Any]] = None) -> Optional[Dict[str, Any]]:
        """Execute query and return single row"""
        await self.connect()
        record = await self._pool.fetchrow(sql, *(params or []))
        return dict(record) if record is not None else None

    async def execute(self, sql: str, params: Optional[List[Any]] = None) -> int:
        """Execute SQL statement and return the number of rows affected"""
        await self.connect()
        status = await self._pool.execute(sql, *(params or []))
        return rows_affected(status)
