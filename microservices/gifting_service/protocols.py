"""
Gifting Service Protocols (Interfaces)

These interfaces define contracts for dependency injection.
NO import-time I/O dependencies - safe to import anywhere.
"""
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

# Import only models (no I/O dependencies)
from .models import (
    Campaign,
    CampaignCreateRequest,
    DuplicateAttempt,
    DuplicateDecision,
    Order,
    OrderCreatePayload,
    OrderStatus,
    PlatformOrderResult,
    Product,
    Shop,
)


# ============================================================================
# Custom Exceptions - defined here to avoid importing repository
# ============================================================================

class GiftingServiceError(Exception):
    """Base exception for gifting service errors"""
    pass


class CampaignNotFoundError(GiftingServiceError):
    """Campaign not found error"""
    pass


class CampaignValidationError(GiftingServiceError):
    """Campaign configuration is malformed"""
    pass


class OrderNotFoundError(GiftingServiceError):
    """Order not found error"""
    pass


class DuplicateAttemptNotFoundError(GiftingServiceError):
    """Duplicate attempt not found error"""
    pass


class DuplicateAttemptResolvedError(GiftingServiceError):
    """Duplicate attempt was already accepted or declined by another reviewer"""
    pass


class CommercePlatformError(GiftingServiceError):
    """Commerce platform request failed"""
    pass



# ============================================================================
# Repository Protocols
# ============================================================================

@runtime_checkable
class CampaignRepositoryProtocol(Protocol):
    """Interface for the campaign store"""

    async def get_campaign_by_slug(self, slug: str, active_only: bool = True) -> Optional[Campaign]:
        """Get campaign by its public link slug"""
        ...

    async def get_campaign(self, campaign_id: str) -> Optional[Campaign]:
        """Get campaign by ID"""
        ...

    async def list_active_campaigns(self) -> List[Campaign]:
        """List campaigns that are not archived, newest first"""
        ...

    async def create_campaign(self, request: CampaignCreateRequest) -> Campaign:
        """Create an active campaign with zero claims"""
        ...

    async def archive_campaign(self, campaign_id: str) -> bool:
        """Archive campaign, False when it does not exist"""
        ...

    async def increment_claims_count(self, campaign_id: str, delta: int = 1) -> None:
        """Add delta to the campaign claims counter"""
        ...

    async def reserve_claim_slot(self, campaign_id: str, limit: Optional[int] = None) -> bool:
        """Atomically count one claim while under limit, False when the campaign is full"""
        ...


@runtime_checkable
class OrderRepositoryProtocol(Protocol):
    """Interface for the order store, including duplicate attempts"""

    async def find_by_campaign_and_identity(
        self,
        campaign_id: str,
        email: Optional[str] = None,
        instagram: Optional[str] = None,
        tiktok: Optional[str] = None,
    ) -> bool:
        """Whether a prior order on the campaign shares the email or a handle"""
        ...

    async def create_order(self, payload: OrderCreatePayload) -> Order:
        """Create a pending order"""
        ...

    async def get_order(self, order_id: str) -> Optional[Order]:
        """Get order by ID"""
        ...

    async def list_orders(
        self,
        campaign_id: Optional[str] = None,
        status: Optional[OrderStatus] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Order]:
        """List orders, newest first"""
        ...

    async def mark_order_synced(
        self, order_id: str, shopify_order_id: str, shopify_order_number: Optional[str] = None
    ) -> Optional[Order]:
        """Record the platform order and move the order to draft_created"""
        ...

    async def update_status_by_shopify_id(self, shopify_order_id: str, status: OrderStatus) -> int:
        """Update status of orders linked to a platform order, returns rows affected"""
        ...

    async def insert_duplicate_attempt(
        self, campaign_id: str, influencer_info: Dict[str, Any], reason: str
    ) -> DuplicateAttempt:
        """Record a blocked duplicate claim for merchant review"""
        ...

    async def get_duplicate_attempt(self, attempt_id: str) -> Optional[DuplicateAttempt]:
        """Get duplicate attempt by ID"""
        ...

    async def list_duplicate_attempts(
        self, campaign_id: Optional[str] = None, limit: int = 50
    ) -> List[DuplicateAttempt]:
        """List duplicate attempts awaiting review, newest first"""
        ...

    async def set_duplicate_decision(
        self, attempt_id: str, expected: DuplicateDecision, decision: DuplicateDecision
    ) -> bool:
        """Compare-and-set the review decision, False when it was not `expected`"""
        ...

    async def delete_duplicate_attempt(
        self, attempt_id: str, expected_decision: Optional[DuplicateDecision] = None
    ) -> bool:
        """Delete an attempt, optionally only while it carries `expected_decision`"""
        ...


@runtime_checkable
class MerchantRepositoryProtocol(Protocol):
    """Interface for merchant usage records"""

    async def get_shop(self, shop: str) -> Optional[Shop]:
        """Get merchant usage by shop domain"""
        ...

    async def increment_claims(self, shop: str, delta: int = 1) -> Shop:
        """Add delta to the merchant claims counter, creating the shop if needed"""
        ...

    async def reserve_claim(self, shop: str, limit: Optional[int] = None) -> Optional[Shop]:
        """Atomically count one claim while under limit, None when the plan cap is reached"""
        ...


# ============================================================================
# Client Protocols
# ============================================================================

@runtime_checkable
class CommercePlatformProtocol(Protocol):
    """Interface for the commerce platform (Shopify Admin API)"""

    async def list_products(self, first: int = 50) -> List[Product]:
        """Catalog products in canonical shape"""
        ...

    async def create_draft_order_or_order(
        self,
        variant_ids: List[str],
        email: str,
        shipping_address: Optional[Dict[str, Any]],
        influencer_info: Optional[Dict[str, Any]] = None,
        order_id: Optional[str] = None,
    ) -> PlatformOrderResult:
        """Create a fully discounted draft order, or an order, for a claim"""
        ...

    async def register_webhooks(self, app_url: Optional[str] = None) -> Dict[str, bool]:
        """Subscribe to order lifecycle topics, per-topic success"""
        ...
