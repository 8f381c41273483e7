"""
Campaign Repository

Data access layer for gifting campaigns - PostgreSQL (asyncpg)
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from core.postgres_client import AsyncPostgresClient
from .models import (
    CAMPAIGN_CONFIG_FIELDS,
    Campaign,
    CampaignCreateRequest,
    CampaignStatus,
)

logger = logging.getLogger(__name__)


class CampaignRepository:
    """Campaign store - PostgreSQL (Async)"""

    def __init__(self, db: AsyncPostgresClient, schema: str = "gifting"):
        self.db = db
        self.schema = schema
        self.campaigns_table = "campaigns"

    @property
    def _table(self) -> str:
        return f"{self.schema}.{self.campaigns_table}"

    async def initialize(self):
        """Initialize database connection"""
        await self.db.connect()
        logger.info("Campaign repository initialized with PostgreSQL")

    async def close(self):
        """Close database connection"""
        logger.info("Campaign repository database connection closed")

    async def health_check(self) -> bool:
        """Check repository health"""
        return await self.db.health_check()

    # ====================
    # Queries
    # ====================

    async def get_campaign_by_slug(self, slug: str, active_only: bool = True) -> Optional[Campaign]:
        """Get campaign by public link slug"""
        try:
            query = f"SELECT * FROM {self._table} WHERE slug = $1"
            params: List[Any] = [slug]
            if active_only:
                query += " AND status = $2"
                params.append(CampaignStatus.ACTIVE.value)
            query += " LIMIT 1"

            async with self.db:
                row = await self.db.query_row(query, params)
            return self._row_to_campaign(row) if row else None
        except Exception as e:
            logger.error(f"Error getting campaign by slug {slug}: {e}")
            raise

    async def get_campaign(self, campaign_id: str) -> Optional[Campaign]:
        """Get campaign by ID"""
        try:
            async with self.db:
                row = await self.db.query_row(
                    f"SELECT * FROM {self._table} WHERE id = $1", [campaign_id]
                )
            return self._row_to_campaign(row) if row else None
        except Exception as e:
            logger.error(f"Error getting campaign {campaign_id}: {e}")
            raise

    async def list_active_campaigns(self) -> List[Campaign]:
        """List campaigns that are not archived, newest first"""
        try:
            async with self.db:
                rows = await self.db.query(
                    f"SELECT * FROM {self._table} WHERE status != $1 ORDER BY created_at DESC",
                    [CampaignStatus.ARCHIVED.value],
                )
            return [self._row_to_campaign(row) for row in rows]
        except Exception as e:
            logger.error(f"Error listing campaigns: {e}")
            raise

    # ====================
    # Mutations
    # ====================

    async def create_campaign(self, request: CampaignCreateRequest) -> Campaign:
        """Create an active campaign with zero claims"""
        try:
            campaign_id = str(uuid.uuid4())
            now = datetime.now(timezone.utc)
            config = request.model_dump(include=set(CAMPAIGN_CONFIG_FIELDS))

            async with self.db:
                row = await self.db.query_row(
                    f"""
                    INSERT INTO {self._table} (
                        id, name, slug, shop, merchant_id, welcome_message, brand_color,
                        config, selected_product_ids, status, claims_count, created_at
                    ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, 0, $11)
                    RETURNING *
                    """,
                    [
                        campaign_id,
                        request.name,
                        request.slug,
                        request.shop,
                        request.merchant_id,
                        request.welcome_message,
                        request.brand_color,
                        config,
                        request.selected_product_ids,
                        CampaignStatus.ACTIVE.value,
                        now,
                    ],
                )
            logger.info(f"Campaign created: {campaign_id} ({request.slug})")
            return self._row_to_campaign(row)
        except Exception as e:
            logger.error(f"Error creating campaign {request.slug}: {e}")
            raise

    async def archive_campaign(self, campaign_id: str) -> bool:
        """Archive campaign, False when it does not exist"""
        try:
            async with self.db:
                affected = await self.db.execute(
                    f"UPDATE {self._table} SET status = $1 WHERE id = $2",
                    [CampaignStatus.ARCHIVED.value, campaign_id],
                )
            return affected > 0
        except Exception as e:
            logger.error(f"Error archiving campaign {campaign_id}: {e}")
            raise

    async def increment_claims_count(self, campaign_id: str, delta: int = 1) -> None:
        """Add delta to the campaign claims counter"""
        try:
            async with self.db:
                await self.db.execute(
                    f"UPDATE {self._table} SET claims_count = COALESCE(claims_count, 0) + $1 WHERE id = $2",
                    [delta, campaign_id],
                )
        except Exception as e:
            logger.error(f"Error incrementing claims for campaign {campaign_id}: {e}")
            raise

    async def reserve_claim_slot(self, campaign_id: str, limit: Optional[int] = None) -> bool:
        """Count one claim unless the counter already reached limit; False when full"""
        try:
            async with self.db:
                affected = await self.db.execute(
                    f"""
                    UPDATE {self._table} SET claims_count = COALESCE(claims_count, 0) + 1
                    WHERE id = $1 AND ($2::int IS NULL OR COALESCE(claims_count, 0) < $2::int)
                    """,
                    [campaign_id, limit],
                )
            return affected > 0
        except Exception as e:
            logger.error(f"Error reserving claim slot for campaign {campaign_id}: {e}")
            raise

    # ====================
    # Row mapping
    # ====================

    def _row_to_campaign(self, row: Dict[str, Any]) -> Campaign:
        config = row.get("config") or {}
        selected = row.get("selected_product_ids")
        if not isinstance(selected, list):
            selected = config.get("selected_product_ids") or []

        settings = {key: config[key] for key in CAMPAIGN_CONFIG_FIELDS if config.get(key) is not None}
        return Campaign(
            id=row["id"],
            slug=row["slug"],
            name=row.get("name") or "",
            shop=row.get("shop"),
            merchant_id=row.get("merchant_id"),
            welcome_message=row.get("welcome_message"),
            brand_color=row.get("brand_color"),
            status=row.get("status") or CampaignStatus.ACTIVE.value,
            claims_count=row.get("claims_count") if row.get("claims_count") is not None else 0,
            selected_product_ids=[str(pid) for pid in selected],
            created_at=row.get("created_at"),
            **settings,
        )
