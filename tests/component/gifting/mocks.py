"""
Gifting Service - Mock Dependencies

In-memory implementations of the repository and commerce platform
protocols for component testing. Return the service's own model objects.
"""
import asyncio
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from microservices.gifting_service.models import (
    Campaign,
    CampaignCreateRequest,
    CampaignStatus,
    DuplicateAttempt,
    DuplicateDecision,
    Order,
    OrderCreatePayload,
    OrderStatus,
    PlatformOrderResult,
    Product,
    Shop,
    CAMPAIGN_CONFIG_FIELDS,
)
from microservices.gifting_service.protocols import CommercePlatformError


class _CallLog:
    """Call recording shared by the mocks"""

    def __init__(self):
        self._call_log: List[Dict] = []
        self._error: Optional[Exception] = None

    def set_error(self, error: Optional[Exception]):
        """Set an error to be raised on operations"""
        self._error = error

    def _log_call(self, method: str, **kwargs):
        self._call_log.append({"method": method, "kwargs": kwargs})

    def _raise_if_error(self):
        if self._error:
            raise self._error

    def assert_called(self, method: str):
        called_methods = [c["method"] for c in self._call_log]
        assert method in called_methods, f"Expected {method} to be called, but got {called_methods}"

    def assert_not_called(self, method: str):
        called_methods = [c["method"] for c in self._call_log]
        assert method not in called_methods, f"Expected {method} not to be called"

    def get_call_count(self, method: str) -> int:
        return sum(1 for c in self._call_log if c["method"] == method)


class MockCampaignRepository(_CallLog):
    """Implements CampaignRepositoryProtocol"""

    def __init__(self):
        super().__init__()
        self._data: Dict[str, Campaign] = {}

    def set_campaign(self, campaign: Campaign) -> Campaign:
        self._data[campaign.id] = campaign
        return campaign

    async def health_check(self) -> bool:
        return self._error is None

    async def get_campaign_by_slug(self, slug: str, active_only: bool = True) -> Optional[Campaign]:
        self._log_call("get_campaign_by_slug", slug=slug, active_only=active_only)
        self._raise_if_error()
        for campaign in self._data.values():
            if campaign.slug != slug:
                continue
            if active_only and campaign.status != CampaignStatus.ACTIVE:
                continue
            return campaign
        return None

    async def get_campaign(self, campaign_id: str) -> Optional[Campaign]:
        self._log_call("get_campaign", campaign_id=campaign_id)
        return self._data.get(campaign_id)

    async def list_active_campaigns(self) -> List[Campaign]:
        self._log_call("list_active_campaigns")
        return [c for c in self._data.values() if c.status != CampaignStatus.ARCHIVED]

    async def create_campaign(self, request: CampaignCreateRequest) -> Campaign:
        self._log_call("create_campaign", slug=request.slug)
        self._raise_if_error()
        campaign = Campaign(
            id=str(uuid.uuid4()),
            slug=request.slug,
            name=request.name,
            shop=request.shop,
            merchant_id=request.merchant_id,
            welcome_message=request.welcome_message,
            brand_color=request.brand_color,
            selected_product_ids=request.selected_product_ids,
            created_at=datetime.now(timezone.utc),
            **request.model_dump(include=set(CAMPAIGN_CONFIG_FIELDS)),
        )
        return self.set_campaign(campaign)

    async def archive_campaign(self, campaign_id: str) -> bool:
        self._log_call("archive_campaign", campaign_id=campaign_id)
        campaign = self._data.get(campaign_id)
        if not campaign:
            return False
        self._data[campaign_id] = campaign.model_copy(update={"status": CampaignStatus.ARCHIVED})
        return True

    async def increment_claims_count(self, campaign_id: str, delta: int = 1) -> None:
        self._log_call("increment_claims_count", campaign_id=campaign_id, delta=delta)
        campaign = self._data.get(campaign_id)
        if campaign:
            count = int(float(campaign.claims_count or 0)) + delta
            self._data[campaign_id] = campaign.model_copy(update={"claims_count": count})

    async def reserve_claim_slot(self, campaign_id: str, limit: Optional[int] = None) -> bool:
        self._log_call("reserve_claim_slot", campaign_id=campaign_id, limit=limit)
        campaign = self._data.get(campaign_id)
        if not campaign:
            return False
        count = int(float(campaign.claims_count or 0))
        if limit is not None and count >= limit:
            return False
        self._data[campaign_id] = campaign.model_copy(update={"claims_count": count + 1})
        return True


class MockOrderRepository(_CallLog):
    """Implements OrderRepositoryProtocol, including duplicate attempts"""

    def __init__(self):
        super().__init__()
        self.orders: Dict[str, Order] = {}
        self.attempts: Dict[str, DuplicateAttempt] = {}
        self._duplicate_check_error: Optional[Exception] = None
        self._create_order_error: Optional[Exception] = None

    def set_order(self, order: Order) -> Order:
        self.orders[order.id] = order
        return order

    def set_attempt(self, attempt: DuplicateAttempt) -> DuplicateAttempt:
        self.attempts[attempt.id] = attempt
        return attempt

    def set_duplicate_check_error(self, error: Optional[Exception]):
        self._duplicate_check_error = error

    def set_create_order_error(self, error: Optional[Exception]):
        self._create_order_error = error

    async def find_by_campaign_and_identity(
        self,
        campaign_id: str,
        email: Optional[str] = None,
        instagram: Optional[str] = None,
        tiktok: Optional[str] = None,
    ) -> bool:
        self._log_call("find_by_campaign_and_identity", campaign_id=campaign_id, email=email,
                       instagram=instagram, tiktok=tiktok)
        if self._duplicate_check_error:
            raise self._duplicate_check_error
        handles = {h for h in (instagram, tiktok) if h}
        for order in self.orders.values():
            if order.campaign_id != campaign_id:
                continue
            if email and order.influencer_email == email:
                return True
            if order.influencer_handle and order.influencer_handle in handles:
                return True
        return False

    async def create_order(self, payload: OrderCreatePayload) -> Order:
        self._log_call("create_order", campaign_id=payload.campaign_id, influencer_email=payload.influencer_email)
        if self._create_order_error:
            raise self._create_order_error
        now = datetime.now(timezone.utc)
        order = Order(id=str(uuid.uuid4()), status=OrderStatus.PENDING, created_at=now, updated_at=now,
                      **payload.model_dump())
        return self.set_order(order)

    async def get_order(self, order_id: str) -> Optional[Order]:
        self._log_call("get_order", order_id=order_id)
        return self.orders.get(order_id)

    async def list_orders(
        self,
        campaign_id: Optional[str] = None,
        status: Optional[OrderStatus] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Order]:
        self._log_call("list_orders", campaign_id=campaign_id, status=status, limit=limit, offset=offset)
        orders = [
            o for o in self.orders.values()
            if (not campaign_id or o.campaign_id == campaign_id) and (not status or o.status == status)
        ]
        return orders[offset:offset + limit]

    async def mark_order_synced(
        self, order_id: str, shopify_order_id: str, shopify_order_number: Optional[str] = None
    ) -> Optional[Order]:
        self._log_call("mark_order_synced", order_id=order_id, shopify_order_id=shopify_order_id)
        order = self.orders.get(order_id)
        if not order:
            return None
        updated = order.model_copy(update={
            "shopify_order_id": shopify_order_id,
            "shopify_order_number": shopify_order_number,
            "status": OrderStatus.DRAFT_CREATED,
        })
        return self.set_order(updated)

    async def update_status_by_shopify_id(self, shopify_order_id: str, status: OrderStatus) -> int:
        self._log_call("update_status_by_shopify_id", shopify_order_id=shopify_order_id, status=status)
        count = 0
        for order in list(self.orders.values()):
            if order.shopify_order_id == shopify_order_id:
                self.set_order(order.model_copy(update={"status": status}))
                count += 1
        return count

    async def insert_duplicate_attempt(
        self, campaign_id: str, influencer_info: Dict[str, Any], reason: str
    ) -> DuplicateAttempt:
        self._log_call("insert_duplicate_attempt", campaign_id=campaign_id, reason=reason)
        attempt = DuplicateAttempt(
            id=str(uuid.uuid4()),
            campaign_id=campaign_id,
            influencer_info=influencer_info,
            reason=reason,
            created_at=datetime.now(timezone.utc),
        )
        return self.set_attempt(attempt)

    async def get_duplicate_attempt(self, attempt_id: str) -> Optional[DuplicateAttempt]:
        self._log_call("get_duplicate_attempt", attempt_id=attempt_id)
        return self.attempts.get(attempt_id)

    async def list_duplicate_attempts(
        self, campaign_id: Optional[str] = None, limit: int = 50
    ) -> List[DuplicateAttempt]:
        self._log_call("list_duplicate_attempts", campaign_id=campaign_id, limit=limit)
        attempts = [
            a for a in self.attempts.values()
            if a.decision == DuplicateDecision.PENDING and (not campaign_id or a.campaign_id == campaign_id)
        ]
        return attempts[:limit]

    async def set_duplicate_decision(
        self, attempt_id: str, expected: DuplicateDecision, decision: DuplicateDecision
    ) -> bool:
        self._log_call("set_duplicate_decision", attempt_id=attempt_id, expected=expected, decision=decision)
        attempt = self.attempts.get(attempt_id)
        if not attempt or attempt.decision != expected:
            return False
        self.attempts[attempt_id] = attempt.model_copy(update={"decision": decision})
        return True

    async def delete_duplicate_attempt(
        self, attempt_id: str, expected_decision: Optional[DuplicateDecision] = None
    ) -> bool:
        self._log_call("delete_duplicate_attempt", attempt_id=attempt_id, expected_decision=expected_decision)
        attempt = self.attempts.get(attempt_id)
        if not attempt:
            return False
        if expected_decision is not None and attempt.decision != expected_decision:
            return False
        del self.attempts[attempt_id]
        return True


class MockMerchantRepository(_CallLog):
    """Implements MerchantRepositoryProtocol"""

    def __init__(self, default_plan: str = "FREE"):
        super().__init__()
        self.shops: Dict[str, Shop] = {}
        self.default_plan = default_plan

    def set_shop(self, shop: Shop) -> Shop:
        self.shops[shop.shop] = shop
        return shop

    async def get_shop(self, shop: str) -> Optional[Shop]:
        self._log_call("get_shop", shop=shop)
        record = self.shops.get(shop)
        await asyncio.sleep(0)
        return record

    async def increment_claims(self, shop: str, delta: int = 1) -> Shop:
        self._log_call("increment_claims", shop=shop, delta=delta)
        record = self.shops.get(shop) or Shop(shop=shop, active_plan=self.default_plan)
        updated = record.model_copy(update={"total_claims_count": max(record.total_claims_count + delta, 0)})
        return self.set_shop(updated)

    async def reserve_claim(self, shop: str, limit: Optional[int] = None) -> Optional[Shop]:
        self._log_call("reserve_claim", shop=shop, limit=limit)
        record = self.shops.get(shop) or Shop(shop=shop, active_plan=self.default_plan)
        if limit is not None and record.total_claims_count >= limit:
            return None
        return self.set_shop(record.model_copy(update={"total_claims_count": record.total_claims_count + 1}))


class MockCommercePlatform(_CallLog):
    """Implements CommercePlatformProtocol"""

    def __init__(self, products: Optional[List[Product]] = None):
        super().__init__()
        self.products = products or []
        self.created: List[Dict[str, Any]] = []
        self._counter = 1000
        self._create_error: Optional[Exception] = None

    def set_create_error(self, error: Optional[Exception]):
        """Error raised only when creating orders, the catalog stays readable"""
        self._create_error = error

    async def list_products(self, first: int = 50) -> List[Product]:
        self._log_call("list_products", first=first)
        await asyncio.sleep(0)
        self._raise_if_error()
        return self.products[:first]

    async def create_draft_order_or_order(
        self,
        variant_ids: List[str],
        email: str,
        shipping_address: Optional[Dict[str, Any]],
        influencer_info: Optional[Dict[str, Any]] = None,
        order_id: Optional[str] = None,
    ) -> PlatformOrderResult:
        self._log_call("create_draft_order_or_order", variant_ids=variant_ids, email=email,
                       shipping_address=shipping_address, influencer_info=influencer_info, order_id=order_id)
        self._raise_if_error()
        if self._create_error:
            raise self._create_error
        if not variant_ids:
            raise CommercePlatformError("Missing Shopify variant ID for this product.")
        self._counter += 1
        result = PlatformOrderResult(id=f"gid://shopify/DraftOrder/{self._counter}", name=f"#D{self._counter}")
        self.created.append({"result": result, "order_id": order_id, "variant_ids": variant_ids,
                             "shipping_address": shipping_address, "influencer_info": influencer_info})
        return result

    async def register_webhooks(self, app_url: Optional[str] = None) -> Dict[str, bool]:
        self._log_call("register_webhooks", app_url=app_url)
        self._raise_if_error()
        return {"ORDERS_CREATE": True, "APP_UNINSTALLED": True}
