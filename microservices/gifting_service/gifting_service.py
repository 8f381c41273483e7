"""
Gifting Service Business Logic

Campaign management, influencer claim submission, order sync with the
commerce platform, merchant usage and duplicate review.
"""

import logging
from typing import Any, Dict, List, Optional

from .campaign_rules import (
    filter_campaign_products,
    get_order_limit,
    normalize_product_id,
    should_block_duplicate_orders,
)
from .duplicate_review import DuplicateReviewWorkflow
from .eligibility import ORDER_LIMIT_MESSAGE, evaluate_claim
from .models import (
    Campaign,
    CampaignCreateRequest,
    ClaimAttempt,
    ClaimOutcome,
    ClaimRequest,
    ClaimResult,
    DuplicateAttempt,
    Order,
    OrderCreatePayload,
    OrderStatus,
    Product,
    Shop,
    UsageResponse,
    normalize_order_status,
)
from .plans import (
    USAGE_LIMIT_MESSAGE,
    get_next_plan,
    get_plan_limit,
    get_usage_percent,
    is_limit_reached,
    normalize_plan,
)
from .protocols import (
    CampaignNotFoundError,
    CampaignRepositoryProtocol,
    CampaignValidationError,
    CommercePlatformError,
    CommercePlatformProtocol,
    MerchantRepositoryProtocol,
    OrderNotFoundError,
    OrderRepositoryProtocol,
)
from .validators import normalize_number, sanitize_contact

logger = logging.getLogger(__name__)

DUPLICATE_REASON = "Duplicate influencer details"
PRODUCT_UNAVAILABLE_MESSAGE = "One or more selected gifts are no longer available."
DEFAULT_COUNTRY_CODE = "US"


# ====================
# Claim mapping helpers
# ====================

def format_phone_e164(claim: ClaimAttempt) -> str:
    digits = claim.contact.phone or ""
    if not digits:
        return ""
    dial_code = claim.contact.phone_country.dial_code if claim.contact.phone_country else ""
    return f"+{dial_code}{digits}"


def build_shipping_address(claim: ClaimAttempt) -> Dict[str, str]:
    """Shopify mailing address for a claim; the raw address is the address1 fallback"""
    structured = claim.structured_address
    contact = claim.contact
    country_code = (
        (structured.country_code if structured else "")
        or (contact.phone_country.code if contact.phone_country else "")
        or DEFAULT_COUNTRY_CODE
    )
    return {
        "firstName": contact.first_name,
        "lastName": contact.last_name,
        "address1": (structured.address1 if structured else "") or claim.address,
        "city": structured.city if structured else "",
        "province": structured.state if structured else "",
        "zip": structured.zip_code if structured else "",
        "country": structured.country if structured else "",
        "countryCode": country_code,
    }


def influencer_snapshot(claim: ClaimAttempt) -> Dict[str, Any]:
    """Contact and item snapshot stored on a duplicate attempt"""
    contact = claim.contact
    return {
        "name": contact.full_name,
        "firstName": contact.first_name,
        "lastName": contact.last_name,
        "email": contact.email,
        "phone": format_phone_e164(claim),
        "instagram": contact.instagram,
        "tiktok": contact.tiktok,
        "address": claim.address,
        "shippingDetails": claim.structured_address.model_dump() if claim.structured_address else None,
        "items": [product.model_dump() for product in claim.selected_products],
    }


def order_payload_from_claim(campaign: Campaign, claim: ClaimAttempt) -> OrderCreatePayload:
    contact = claim.contact
    return OrderCreatePayload(
        campaign_id=campaign.id,
        influencer_name=contact.full_name,
        influencer_email=contact.email,
        influencer_phone=format_phone_e164(claim) or None,
        influencer_handle=contact.instagram or contact.tiktok or "",
        shipping_address=claim.structured_address.model_dump() if claim.structured_address else claim.address,
        items=[product.model_dump() for product in claim.selected_products],
        custom_answer=contact.custom_answer or None,
        terms_consent=contact.consent_primary if campaign.show_consent_checkbox else None,
        marketing_opt_in=contact.marketing_opt_in if campaign.email_opt_in else None,
    )


class GiftingService:
    """Gifting service business logic layer"""

    def __init__(
        self,
        campaign_repository: CampaignRepositoryProtocol,
        order_repository: OrderRepositoryProtocol,
        merchant_repository: MerchantRepositoryProtocol,
        commerce_platform: Optional[CommercePlatformProtocol] = None,
        default_plan: str = "FREE",
    ):
        self.campaign_repository = campaign_repository
        self.order_repository = order_repository
        self.merchant_repository = merchant_repository
        self.commerce_platform = commerce_platform
        self.default_plan = default_plan
        self.duplicate_review = DuplicateReviewWorkflow(order_repository)

    # ====================
    # Campaigns
    # ====================

    async def get_campaign(self, slug: str) -> Campaign:
        campaign = await self.campaign_repository.get_campaign_by_slug(slug)
        if not campaign:
            raise CampaignNotFoundError(f"Campaign not found: {slug}")
        return campaign

    async def list_active_campaigns(self) -> List[Campaign]:
        return await self.campaign_repository.list_active_campaigns()

    async def create_campaign(self, request: CampaignCreateRequest) -> Campaign:
        """
        Create a campaign after checking its numeric settings.

        Blank values mean unlimited; anything else must be a positive number.
        """
        for field in ("item_limit", "max_cart_value", "order_limit_per_link"):
            raw = getattr(request, field)
            if raw is None or (isinstance(raw, str) and not raw.strip()):
                continue
            value = normalize_number(raw)
            if value is None or value <= 0:
                raise CampaignValidationError(f"{field} must be a positive number")

        if await self.campaign_repository.get_campaign_by_slug(request.slug, active_only=False):
            raise CampaignValidationError(f"Campaign slug already in use: {request.slug}")

        campaign = await self.campaign_repository.create_campaign(request)
        logger.info(f"Campaign created: {campaign.id} ({campaign.slug})")
        return campaign

    async def archive_campaign(self, campaign_id: str) -> None:
        if not await self.campaign_repository.archive_campaign(campaign_id):
            raise CampaignNotFoundError(f"Campaign not found: {campaign_id}")
        logger.info(f"Campaign archived: {campaign_id}")

    async def get_campaign_products(self, slug: str) -> List[Product]:
        """Catalog products offered by the campaign"""
        campaign = await self.get_campaign(slug)
        if not self.commerce_platform:
            raise CommercePlatformError("Commerce platform is not configured")
        products = await self.commerce_platform.list_products()
        return filter_campaign_products(campaign, products)

    # ====================
    # Merchant usage
    # ====================

    async def _get_shop(self, shop: str) -> Shop:
        record = await self.merchant_repository.get_shop(shop)
        return record or Shop(shop=shop, active_plan=self.default_plan)

    async def get_usage(self, shop: str) -> UsageResponse:
        record = await self._get_shop(shop)
        plan = normalize_plan(record.active_plan)
        next_plan = get_next_plan(plan)
        return UsageResponse(
            shop=shop,
            plan=plan.value,
            total_claims=record.total_claims_count,
            limit=get_plan_limit(plan),
            usage_percent=get_usage_percent(record.total_claims_count, plan),
            limit_reached=is_limit_reached(record.total_claims_count, plan),
            next_plan=next_plan.value if next_plan else None,
        )

    async def increment_claims(self, shop: str, delta: int = 1) -> UsageResponse:
        await self.merchant_repository.increment_claims(shop, delta)
        return await self.get_usage(shop)

    # ====================
    # Claims
    # ====================

    async def resolve_claim_products(self, campaign: Campaign, product_ids: List[str]) -> Optional[List[Product]]:
        """
        Catalog products for the requested ids.

        Only products the campaign offers and that are still for sale are
        resolved. Returns None when any requested id is not one of them.
        """
        requested = list(dict.fromkeys(normalize_product_id(pid) for pid in product_ids if pid))
        if not requested:
            return []
        if not self.commerce_platform:
            raise CommercePlatformError("Commerce platform is not configured")

        offered = {
            normalize_product_id(product.id): product
            for product in filter_campaign_products(campaign, await self.commerce_platform.list_products())
            if product.available_for_sale is not False
        }
        resolved = []
        for product_id in requested:
            product = offered.get(product_id)
            if product is None:
                logger.info(f"Product {product_id} is not offered by campaign {campaign.id}")
                return None
            resolved.append(product)
        return resolved

    async def check_duplicate(self, campaign: Campaign, claim: ClaimAttempt) -> bool:
        """Whether the claim matches a prior order; store failures count as no match"""
        contact = claim.contact
        try:
            return await self.order_repository.find_by_campaign_and_identity(
                campaign.id,
                email=contact.email or None,
                instagram=contact.instagram or None,
                tiktok=contact.tiktok or None,
            )
        except Exception as e:
            logger.warning(f"Duplicate check failed for campaign {campaign.id}, allowing claim: {e}")
            return False

    async def _reserve_claim(self, campaign: Campaign, shop: Optional[Shop]) -> Optional[str]:
        """Take the campaign and merchant claim slots; the rejection reason when either is full"""
        if not await self.campaign_repository.reserve_claim_slot(campaign.id, get_order_limit(campaign)):
            return ORDER_LIMIT_MESSAGE
        if shop is not None:
            limit = get_plan_limit(normalize_plan(shop.active_plan))
            if await self.merchant_repository.reserve_claim(shop.shop, limit) is None:
                await self.campaign_repository.increment_claims_count(campaign.id, -1)
                return USAGE_LIMIT_MESSAGE
        return None

    async def _release_claim(self, campaign: Campaign) -> None:
        await self.campaign_repository.increment_claims_count(campaign.id, -1)
        if campaign.shop:
            await self.merchant_repository.increment_claims(campaign.shop, -1)

    async def submit_claim(self, slug: str, request: ClaimRequest) -> ClaimResult:
        """
        Validate and commit an influencer claim.

        Rejections come back as a result, not an exception. A duplicate is
        recorded for merchant review instead of becoming an order. Commerce
        platform failures propagate after the order row has been written,
        and the claim is not counted.
        """
        campaign = await self.get_campaign(slug)

        products = await self.resolve_claim_products(campaign, request.product_ids)
        if products is None:
            return ClaimResult(outcome=ClaimOutcome.REJECTED, reason=PRODUCT_UNAVAILABLE_MESSAGE)

        claim = ClaimAttempt(
            selected_products=products,
            contact=request.contact,
            address=request.address,
            structured_address=request.structured_address,
            shipping_country=request.shipping_country,
        )
        shop = await self._get_shop(campaign.shop) if campaign.shop else None
        usage_limit_reached = shop is not None and is_limit_reached(shop.total_claims_count, shop.active_plan)

        verdict = evaluate_claim(campaign, claim, usage_limit_reached=usage_limit_reached)
        if not verdict.allowed:
            logger.info(f"Claim rejected for campaign {campaign.id}: {verdict.reason}")
            return ClaimResult(outcome=ClaimOutcome.REJECTED, reason=verdict.reason)

        claim = claim.model_copy(update={"contact": sanitize_contact(claim.contact)})

        if should_block_duplicate_orders(campaign) and await self.check_duplicate(campaign, claim):
            attempt = await self.order_repository.insert_duplicate_attempt(
                campaign.id, influencer_snapshot(claim), DUPLICATE_REASON
            )
            logger.info(f"Duplicate claim diverted to review: {attempt.id} (campaign {campaign.id})")
            return ClaimResult(outcome=ClaimOutcome.DUPLICATE, reason=DUPLICATE_REASON, duplicate_attempt=attempt)

        rejection = await self._reserve_claim(campaign, shop)
        if rejection:
            logger.info(f"Claim rejected at commit for campaign {campaign.id}: {rejection}")
            return ClaimResult(outcome=ClaimOutcome.REJECTED, reason=rejection)

        platform_order = None
        try:
            order = await self.order_repository.create_order(order_payload_from_claim(campaign, claim))
            logger.info(f"Order saved: {order.id} for campaign {campaign.id}")

            variant_ids = [p.variant_id for p in claim.selected_products if p.variant_id]
            if variant_ids:
                platform_order = await self.commerce_platform.create_draft_order_or_order(
                    variant_ids=variant_ids,
                    email=claim.contact.email,
                    shipping_address=build_shipping_address(claim),
                    influencer_info={
                        "name": claim.contact.full_name,
                        "email": claim.contact.email,
                        "handle": claim.contact.instagram or claim.contact.tiktok or "",
                    },
                    order_id=order.id,
                )
        except Exception:
            await self._release_claim(campaign)
            raise

        if platform_order:
            synced = await self.order_repository.mark_order_synced(order.id, platform_order.id, platform_order.name)
            order = synced or order
        else:
            logger.warning(f"Order {order.id} not sent to commerce platform: no variant IDs")

        return ClaimResult(outcome=ClaimOutcome.ACCEPTED, order=order, platform_order=platform_order)

    # ====================
    # Orders
    # ====================

    async def get_order(self, order_id: str) -> Order:
        order = await self.order_repository.get_order(order_id)
        if not order:
            raise OrderNotFoundError(f"Order not found: {order_id}")
        return order

    async def list_orders(
        self,
        campaign_id: Optional[str] = None,
        status: Optional[OrderStatus] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Order]:
        return await self.order_repository.list_orders(campaign_id=campaign_id, status=status, limit=limit, offset=offset)

    async def update_order_status(self, shopify_order_id: str, status: Optional[str]) -> int:
        """Apply a platform status event to the linked orders"""
        normalized = normalize_order_status(status)
        updated = await self.order_repository.update_status_by_shopify_id(shopify_order_id, normalized)
        logger.info(f"Platform order {shopify_order_id} -> {normalized.value} ({updated} orders)")
        return updated

    async def register_webhooks(self, app_url: Optional[str] = None) -> Dict[str, bool]:
        if not self.commerce_platform:
            raise CommercePlatformError("Commerce platform is not configured")
        return await self.commerce_platform.register_webhooks(app_url)

    # ====================
    # Duplicate review
    # ====================

    async def list_duplicate_attempts(self, campaign_id: Optional[str] = None, limit: int = 50) -> List[DuplicateAttempt]:
        return await self.duplicate_review.list_pending(campaign_id=campaign_id, limit=limit)

    async def accept_duplicate(self, attempt_id: str) -> Order:
        return await self.duplicate_review.accept(attempt_id)

    async def decline_duplicate(self, attempt_id: str) -> None:
        await self.duplicate_review.decline(attempt_id)
