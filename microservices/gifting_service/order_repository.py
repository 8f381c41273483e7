"""
Order Repository

Data access layer for influencer orders and duplicate attempts - PostgreSQL (asyncpg)
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from core.postgres_client import AsyncPostgresClient
from .models import (
    DuplicateAttempt,
    DuplicateDecision,
    Order,
    OrderCreatePayload,
    OrderStatus,
)

logger = logging.getLogger(__name__)


class OrderRepository:
    """Order and duplicate attempt store - PostgreSQL (Async)"""

    def __init__(self, db: AsyncPostgresClient, schema: str = "gifting"):
        self.db = db
        self.schema = schema
        self.orders_table = "orders"
        self.duplicates_table = "duplicate_attempts"

    @property
    def _orders(self) -> str:
        return f"{self.schema}.{self.orders_table}"

    @property
    def _duplicates(self) -> str:
        return f"{self.schema}.{self.duplicates_table}"

    async def initialize(self):
        """Initialize database connection"""
        await self.db.connect()
        logger.info("Order repository initialized with PostgreSQL")

    async def close(self):
        """Close database connection"""
        logger.info("Order repository database connection closed")

    # ====================
    # Orders
    # ====================

    async def find_by_campaign_and_identity(
        self,
        campaign_id: str,
        email: Optional[str] = None,
        instagram: Optional[str] = None,
        tiktok: Optional[str] = None,
    ) -> bool:
        """Whether a prior order on the campaign shares the email or a handle"""
        conditions = []
        params: List[Any] = [campaign_id]
        if email:
            params.append(email)
            conditions.append(f"influencer_email = ${len(params)}")
        for handle in (instagram, tiktok):
            if handle:
                params.append(handle)
                conditions.append(f"influencer_handle = ${len(params)}")
        if not conditions:
            return False

        try:
            async with self.db:
                row = await self.db.query_row(
                    f"SELECT id FROM {self._orders} WHERE campaign_id = $1 AND ({' OR '.join(conditions)}) LIMIT 1",
                    params,
                )
            return row is not None
        except Exception as e:
            logger.error(f"Error checking duplicate orders for campaign {campaign_id}: {e}")
            raise

    async def create_order(self, payload: OrderCreatePayload) -> Order:
        """Create a pending order"""
        try:
            order_id = str(uuid.uuid4())
            now = datetime.now(timezone.utc)

            async with self.db:
                row = await self.db.query_row(
                    f"""
                    INSERT INTO {self._orders} (
                        id, campaign_id, influencer_name, influencer_email, influencer_phone,
                        influencer_handle, shipping_address, items, status, custom_answer,
                        terms_consent, marketing_opt_in, created_at, updated_at
                    ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12, $13, $13)
                    RETURNING *
                    """,
                    [
                        order_id,
                        payload.campaign_id,
                        payload.influencer_name,
                        payload.influencer_email,
                        payload.influencer_phone,
                        payload.influencer_handle,
                        payload.shipping_address,
                        payload.items,
                        OrderStatus.PENDING.value,
                        payload.custom_answer,
                        payload.terms_consent,
                        payload.marketing_opt_in,
                        now,
                    ],
                )
            logger.info(f"Order created: {order_id} for campaign {payload.campaign_id}")
            return Order(**row)
        except Exception as e:
            logger.error(f"Error creating order for campaign {payload.campaign_id}: {e}")
            raise

    async def get_order(self, order_id: str) -> Optional[Order]:
        """Get order by ID"""
        try:
            async with self.db:
                row = await self.db.query_row(f"SELECT * FROM {self._orders} WHERE id = $1", [order_id])
            return Order(**row) if row else None
        except Exception as e:
            logger.error(f"Error getting order {order_id}: {e}")
            raise

    async def list_orders(
        self,
        campaign_id: Optional[str] = None,
        status: Optional[OrderStatus] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Order]:
        """List orders, newest first"""
        try:
            conditions = []
            params: List[Any] = []
            if campaign_id:
                params.append(campaign_id)
                conditions.append(f"campaign_id = ${len(params)}")
            if status:
                params.append(OrderStatus(status).value)
                conditions.append(f"status = ${len(params)}")

            where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
            params.extend([limit, offset])
            query = f"""
                SELECT * FROM {self._orders} {where}
                ORDER BY created_at DESC
                LIMIT ${len(params) - 1} OFFSET ${len(params)}
            """

            async with self.db:
                rows = await self.db.query(query, params)
            return [Order(**row) for row in rows]
        except Exception as e:
            logger.error(f"Error listing orders: {e}")
            raise

    async def mark_order_synced(
        self, order_id: str, shopify_order_id: str, shopify_order_number: Optional[str] = None
    ) -> Optional[Order]:
        """Record the platform order and move the order to draft_created"""
        try:
            async with self.db:
                row = await self.db.query_row(
                    f"""
                    UPDATE {self._orders}
                    SET shopify_order_id = $1, shopify_order_number = $2, status = $3, updated_at = $4
                    WHERE id = $5
                    RETURNING *
                    """,
                    [
                        shopify_order_id,
                        shopify_order_number,
                        OrderStatus.DRAFT_CREATED.value,
                        datetime.now(timezone.utc),
                        order_id,
                    ],
                )
            return Order(**row) if row else None
        except Exception as e:
            logger.error(f"Error syncing order {order_id}: {e}")
            raise

    async def update_status_by_shopify_id(self, shopify_order_id: str, status: OrderStatus) -> int:
        """Update status of orders linked to a platform order, returns rows affected"""
        try:
            async with self.db:
                return await self.db.execute(
                    f"UPDATE {self._orders} SET status = $1, updated_at = $2 WHERE shopify_order_id = $3",
                    [OrderStatus(status).value, datetime.now(timezone.utc), shopify_order_id],
                )
        except Exception as e:
            logger.error(f"Error updating status for platform order {shopify_order_id}: {e}")
            raise

    # ====================
    # Duplicate attempts
    # ====================

    async def insert_duplicate_attempt(
        self, campaign_id: str, influencer_info: Dict[str, Any], reason: str
    ) -> DuplicateAttempt:
        """Record a blocked duplicate claim for merchant review"""
        try:
            async with self.db:
                row = await self.db.query_row(
                    f"""
                    INSERT INTO {self._duplicates} (id, campaign_id, influencer_info, reason, decision, created_at)
                    VALUES ($1, $2, $3, $4, $5, $6)
                    RETURNING *
                    """,
                    [
                        str(uuid.uuid4()),
                        campaign_id,
                        influencer_info,
                        reason,
                        DuplicateDecision.PENDING.value,
                        datetime.now(timezone.utc),
                    ],
                )
            return DuplicateAttempt(**row)
        except Exception as e:
            logger.error(f"Error recording duplicate attempt for campaign {campaign_id}: {e}")
            raise

    async def get_duplicate_attempt(self, attempt_id: str) -> Optional[DuplicateAttempt]:
        try:
            async with self.db:
                row = await self.db.query_row(
                    f"SELECT * FROM {self._duplicates} WHERE id = $1", [attempt_id]
                )
            return DuplicateAttempt(**row) if row else None
        except Exception as e:
            logger.error(f"Error getting duplicate attempt {attempt_id}: {e}")
            raise

    async def list_duplicate_attempts(
        self, campaign_id: Optional[str] = None, limit: int = 50
    ) -> List[DuplicateAttempt]:
        """List duplicate attempts awaiting review, newest first"""
        try:
            params: List[Any] = [DuplicateDecision.PENDING.value]
            query = f"SELECT * FROM {self._duplicates} WHERE decision = $1"
            if campaign_id:
                params.append(campaign_id)
                query += f" AND campaign_id = ${len(params)}"
            params.append(limit)
            query += f" ORDER BY created_at DESC LIMIT ${len(params)}"

            async with self.db:
                rows = await self.db.query(query, params)
            return [DuplicateAttempt(**row) for row in rows]
        except Exception as e:
            logger.error(f"Error listing duplicate attempts: {e}")
            raise

    async def set_duplicate_decision(
        self, attempt_id: str, expected: DuplicateDecision, decision: DuplicateDecision
    ) -> bool:
        """Compare-and-set the review decision, False when it was not `expected`"""
        try:
            async with self.db:
                affected = await self.db.execute(
                    f"UPDATE {self._duplicates} SET decision = $1 WHERE id = $2 AND decision = $3",
                    [DuplicateDecision(decision).value, attempt_id, DuplicateDecision(expected).value],
                )
            return affected > 0
        except Exception as e:
            logger.error(f"Error setting decision on duplicate attempt {attempt_id}: {e}")
            raise

    async def delete_duplicate_attempt(
        self, attempt_id: str, expected_decision: Optional[DuplicateDecision] = None
    ) -> bool:
        """Delete an attempt, optionally only while it carries `expected_decision`"""
        try:
            query = f"DELETE FROM {self._duplicates} WHERE id = $1"
            params: List[Any] = [attempt_id]
            if expected_decision is not None:
                query += " AND decision = $2"
                params.append(DuplicateDecision(expected_decision).value)

            async with self.db:
                affected = await self.db.execute(query, params)
            return affected > 0
        except Exception as e:
            logger.error(f"Error deleting duplicate attempt {attempt_id}: {e}")
            raise
