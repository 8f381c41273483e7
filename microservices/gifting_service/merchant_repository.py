"""
Merchant Repository

Per-shop plan and claim usage records - PostgreSQL (asyncpg)
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from core.postgres_client import AsyncPostgresClient
from .models import Shop

logger = logging.getLogger(__name__)


class MerchantRepository:
    """Merchant usage store - PostgreSQL (Async)"""

    def __init__(self, db: AsyncPostgresClient, schema: str = "gifting", default_plan: str = "FREE"):
        self.db = db
        self.schema = schema
        self.shops_table = "shops"
        self.default_plan = default_plan

    @property
    def _table(self) -> str:
        return f"{self.schema}.{self.shops_table}"

    async def get_shop(self, shop: str) -> Optional[Shop]:
        """Get merchant usage by shop domain"""
        try:
            async with self.db:
                row = await self.db.query_row(f"SELECT * FROM {self._table} WHERE shop = $1", [shop])
            return Shop(**row) if row else None
        except Exception as e:
            logger.error(f"Error getting shop {shop}: {e}")
            raise

    async def increment_claims(self, shop: str, delta: int = 1) -> Shop:
        """Add delta to the merchant claims counter, creating the shop if needed"""
        try:
            async with self.db:
                row = await self.db.query_row(
                    f"""
                    INSERT INTO {self._table} (shop, active_plan, total_claims_count, plan_started_at)
                    VALUES ($1, $2, GREATEST($3, 0), $4)
                    ON CONFLICT (shop) DO UPDATE
                    SET total_claims_count = GREATEST({self._table}.total_claims_count + $3, 0)
                    RETURNING *
                    """,
                    [shop, self.default_plan, delta, datetime.now(timezone.utc)],
                )
            logger.info(f"Claims for {shop} now {row['total_claims_count']}")
            return Shop(**row)
        except Exception as e:
            logger.error(f"Error incrementing claims for shop {shop}: {e}")
            raise

    async def reserve_claim(self, shop: str, limit: Optional[int] = None) -> Optional[Shop]:
        """Count one claim unless the shop already reached limit; None when full"""
        try:
            async with self.db:
                row = await self.db.query_row(
                    f"""
                    INSERT INTO {self._table} (shop, active_plan, total_claims_count, plan_started_at)
                    VALUES ($1, $2, 1, $3)
                    ON CONFLICT (shop) DO UPDATE
                    SET total_claims_count = {self._table}.total_claims_count + 1
                    WHERE $4::int IS NULL OR {self._table}.total_claims_count < $4::int
                    RETURNING *
                    """,
                    [shop, self.default_plan, datetime.now(timezone.utc), limit],
                )
            return Shop(**row) if row else None
        except Exception as e:
            logger.error(f"Error reserving claim for shop {shop}: {e}")
            raise
