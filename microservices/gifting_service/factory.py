"""
Gifting Service Factory

Factory for creating gifting service instances with proper dependency injection.
"""

import logging
from typing import Optional

from core.config import GiftingConfig, get_settings
from core.postgres_client import AsyncPostgresClient

from .campaign_repository import CampaignRepository
from .clients.shopify_client import ShopifyClient
from .gifting_service import GiftingService
from .merchant_repository import MerchantRepository
from .order_repository import OrderRepository

logger = logging.getLogger(__name__)


class GiftingServiceFactory:
    """Factory for creating gifting service components"""

    def __init__(self, config: Optional[GiftingConfig] = None):
        self.config = config or get_settings()
        self._db: Optional[AsyncPostgresClient] = None
        self._campaign_repository: Optional[CampaignRepository] = None
        self._order_repository: Optional[OrderRepository] = None
        self._merchant_repository: Optional[MerchantRepository] = None
        self._shopify_client: Optional[ShopifyClient] = None
        self._service: Optional[GiftingService] = None

    async def initialize(self) -> None:
        """Initialize all components"""
        logger.info("Initializing Gifting Service components...")
        infra = self.config.infrastructure

        self._db = AsyncPostgresClient(
            dsn=infra.dsn,
            service_name="gifting_service",
            min_size=infra.pool_min_size,
            max_size=infra.pool_max_size,
        )
        self._campaign_repository = CampaignRepository(self._db, schema=infra.postgres_schema)
        self._order_repository = OrderRepository(self._db, schema=infra.postgres_schema)
        self._merchant_repository = MerchantRepository(
            self._db, schema=infra.postgres_schema, default_plan=self.config.default_plan
        )

        try:
            await self._campaign_repository.initialize()
        except Exception as e:
            # Pool is created lazily again on first query
            logger.warning(f"PostgreSQL not reachable at startup: {e}")

        if self.config.shopify.is_configured:
            self._shopify_client = ShopifyClient(self.config.shopify)
        else:
            logger.warning("Shopify credentials not configured - claims will not create platform orders")

        self._service = GiftingService(
            campaign_repository=self._campaign_repository,
            order_repository=self._order_repository,
            merchant_repository=self._merchant_repository,
            commerce_platform=self._shopify_client,
            default_plan=self.config.default_plan,
        )

        logger.info("Gifting Service components initialized")

    async def close(self) -> None:
        """Close all components"""
        logger.info("Closing Gifting Service components...")

        if self._shopify_client:
            await self._shopify_client.close()

        if self._db:
            await self._db.close()

        logger.info("Gifting Service components closed")

    @property
    def campaign_repository(self) -> CampaignRepository:
        """Get campaign repository"""
        if not self._campaign_repository:
            raise RuntimeError("Factory not initialized. Call initialize() first.")
        return self._campaign_repository

    @property
    def service(self) -> GiftingService:
        """Get gifting service"""
        if not self._service:
            raise RuntimeError("Factory not initialized. Call initialize() first.")
        return self._service

    @property
    def shopify_client(self) -> Optional[ShopifyClient]:
        """Get Shopify client, None when credentials are missing"""
        return self._shopify_client


__all__ = [
    "GiftingServiceFactory",
]
