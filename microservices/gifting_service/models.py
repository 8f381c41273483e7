"""
Gifting Service Data Models

Pydantic models for gifting campaigns, influencer claims, orders and
duplicate-claim review.
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Dict, Any, Union, Literal
from datetime import datetime
from enum import Enum


# Campaign numeric settings may arrive as numbers or strings from the builder
NumberLike = Optional[Union[int, float, str]]


class CampaignStatus(str, Enum):
    """Campaign status enumeration"""
    ACTIVE = "active"
    ARCHIVED = "archived"


class OrderStatus(str, Enum):
    """Order status enumeration"""
    PENDING = "pending"
    DRAFT_CREATED = "draft_created"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    CANCELLED = "cancelled"


class DuplicateDecision(str, Enum):
    """Review decision stored on a duplicate attempt"""
    PENDING = "pending"
    ACCEPTED = "accepted"


class ClaimOutcome(str, Enum):
    """Result of a claim submission"""
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    DUPLICATE = "duplicate"


# Legacy status strings written by older platform syncs
_LEGACY_ORDER_STATUS = {
    "synced": OrderStatus.DRAFT_CREATED,
    "fulfilled": OrderStatus.SHIPPED,
}


def normalize_order_status(status: Optional[str]) -> OrderStatus:
    """Map a stored or platform status string onto OrderStatus"""
    if not status:
        return OrderStatus.PENDING
    value = str(status).strip().lower()
    if value in _LEGACY_ORDER_STATUS:
        return _LEGACY_ORDER_STATUS[value]
    try:
        return OrderStatus(value)
    except ValueError:
        return OrderStatus.PENDING


# ====================
# Verdicts
# ====================

class Allowed(BaseModel):
    """Rule outcome: the claim may proceed"""
    model_config = {"frozen": True}

    allowed: Literal[True] = True
    reason: Literal[""] = ""


class Rejected(BaseModel):
    """Rule outcome: the claim is refused with a user-facing reason"""
    model_config = {"frozen": True}

    allowed: Literal[False] = False
    reason: str


Verdict = Union[Allowed, Rejected]

ALLOWED = Allowed()


# ====================
# Catalog
# ====================

class Product(BaseModel):
    """Canonical catalog entry produced at the commerce platform edge"""
    id: str
    title: str = ""
    price: Optional[Union[float, str]] = None
    variant_id: Optional[str] = None
    image: str = ""
    status: Optional[str] = None
    available_for_sale: Optional[bool] = None
    inventory_quantity: Optional[int] = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        return str(v) if v is not None else v


# ====================
# Campaign
# ====================

class CampaignSettings(BaseModel):
    """Merchant-configurable claim rules and form options"""
    item_limit: NumberLike = 1
    max_cart_value: NumberLike = None
    order_limit_per_link: NumberLike = None
    block_duplicate_orders: bool = False
    shipping_zone: str = ""
    restricted_countries: Union[str, List[str], None] = ""

    show_phone_field: bool = False
    show_instagram_field: bool = False
    show_tiktok_field: bool = False
    ask_custom_question: bool = False
    custom_question_label: str = ""
    custom_question_required: bool = False

    show_consent_checkbox: bool = False
    terms_consent_text: str = ""
    require_second_consent: bool = False
    second_consent_text: str = ""
    email_opt_in: bool = False
    email_consent_text: str = ""

    show_sold_out: bool = True
    hide_inactive_products: bool = True
    brand_name: str = ""
    submit_button_text: str = ""
    link_to_store: str = ""


# Settings persisted in the campaign's JSON config column
CAMPAIGN_CONFIG_FIELDS = tuple(CampaignSettings.model_fields.keys())


class Campaign(CampaignSettings):
    """Gifting campaign as read from the campaign store"""
    id: str
    slug: str
    name: str = ""
    shop: Optional[str] = None
    merchant_id: Optional[str] = None
    welcome_message: Optional[str] = None
    brand_color: Optional[str] = None
    status: CampaignStatus = CampaignStatus.ACTIVE
    claims_count: NumberLike = 0
    selected_product_ids: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        return str(v) if v is not None else v


# ====================
# Claim attempt
# ====================

class PhoneCountry(BaseModel):
    """Dial country selected for the phone field"""
    code: str = "US"
    name: str = ""
    dial_code: str = "1"
    min_length: Optional[int] = None
    max_length: Optional[int] = None


class ShippingAddress(BaseModel):
    """Structured address returned by the address lookup"""
    address1: str = ""
    address2: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    country: str = ""
    country_code: str = ""
    formatted_address: str = ""


class ContactFields(BaseModel):
    """Influencer contact details submitted with a claim"""
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    phone_country: Optional[PhoneCountry] = None
    instagram: str = ""
    tiktok: str = ""
    custom_answer: str = ""
    consent_primary: bool = False
    consent_secondary: bool = False
    marketing_opt_in: bool = False

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()


class ClaimAttempt(BaseModel):
    """Prospective claim evaluated before any order is written"""
    selected_products: List[Product] = Field(default_factory=list)
    contact: ContactFields = Field(default_factory=ContactFields)
    address: str = ""
    structured_address: Optional[ShippingAddress] = None
    shipping_country: str = ""

    @property
    def country(self) -> str:
        """Shipping country, falling back to the structured address"""
        if self.shipping_country:
            return self.shipping_country
        if self.structured_address:
            return self.structured_address.country
        return ""


# ====================
# Orders
# ====================

class Order(BaseModel):
    """Committed claim"""
    id: str
    campaign_id: str
    influencer_name: str = ""
    influencer_email: Optional[str] = None
    influencer_phone: Optional[str] = None
    influencer_handle: Optional[str] = None
    shipping_address: Optional[Union[Dict[str, Any], str]] = None
    items: List[Dict[str, Any]] = Field(default_factory=list)
    status: OrderStatus = OrderStatus.PENDING
    shopify_order_id: Optional[str] = None
    shopify_order_number: Optional[str] = None
    custom_answer: Optional[str] = None
    terms_consent: Optional[bool] = None
    marketing_opt_in: Optional[bool] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("id", "campaign_id", mode="before")
    @classmethod
    def coerce_ids(cls, v):
        return str(v) if v is not None else v

    @field_validator("status", mode="before")
    @classmethod
    def coerce_status(cls, v):
        return normalize_order_status(v)


class OrderCreatePayload(BaseModel):
    """Fields written when an order row is created"""
    campaign_id: str
    influencer_name: str = ""
    influencer_email: Optional[str] = None
    influencer_phone: Optional[str] = None
    influencer_handle: str = ""
    shipping_address: Optional[Union[Dict[str, Any], str]] = None
    items: List[Dict[str, Any]] = Field(default_factory=list)
    custom_answer: Optional[str] = None
    terms_consent: Optional[bool] = None
    marketing_opt_in: Optional[bool] = None


class DuplicateAttempt(BaseModel):
    """Claim diverted to merchant review because it matched a prior order"""
    id: str
    campaign_id: str
    influencer_info: Dict[str, Any] = Field(default_factory=dict)
    reason: str = "Duplicate influencer details"
    decision: DuplicateDecision = DuplicateDecision.PENDING
    created_at: Optional[datetime] = None

    @field_validator("id", "campaign_id", mode="before")
    @classmethod
    def coerce_ids(cls, v):
        return str(v) if v is not None else v


class Shop(BaseModel):
    """Merchant usage record"""
    shop: str
    active_plan: str = "FREE"
    total_claims_count: int = 0
    plan_started_at: Optional[datetime] = None


class PlatformOrderResult(BaseModel):
    """Draft order or order created on the commerce platform"""
    id: str
    name: Optional[str] = None
    mode: str = "draft"


# ====================
# Request Models
# ====================

class CampaignCreateRequest(CampaignSettings):
    """Create campaign request"""
    name: str = Field(..., min_length=1, max_length=255)
    slug: str = Field(..., min_length=1, max_length=120)
    shop: Optional[str] = None
    merchant_id: Optional[str] = None
    welcome_message: Optional[str] = None
    brand_color: Optional[str] = None
    selected_product_ids: List[str] = Field(default_factory=list)


class ClaimRequest(BaseModel):
    """
    Submit claim request

    Products are referenced by id only; prices and variants are resolved
    from the catalog on the server.
    """
    product_ids: List[str] = Field(default_factory=list)
    contact: ContactFields = Field(default_factory=ContactFields)
    address: str = ""
    structured_address: Optional[ShippingAddress] = None
    shipping_country: str = ""

    @field_validator("product_ids", mode="before")
    @classmethod
    def coerce_product_ids(cls, v):
        if v is None:
            return []
        return [str(pid) for pid in v]


class OrderStatusUpdateRequest(BaseModel):
    """Platform order status event"""
    shopify_order_id: str = Field(..., min_length=1)
    status: str


class ClaimsIncrementRequest(BaseModel):
    """Merchant claims counter increment"""
    delta: int = Field(default=1)


# ====================
# Response Models
# ====================

class ClaimResult(BaseModel):
    """Outcome of a claim submission"""
    outcome: ClaimOutcome
    reason: Optional[str] = None
    order: Optional[Order] = None
    duplicate_attempt: Optional[DuplicateAttempt] = None
    platform_order: Optional[PlatformOrderResult] = None


class CampaignListResponse(BaseModel):
    campaigns: List[Campaign]
    count: int


class ProductListResponse(BaseModel):
    products: List[Product]
    count: int


class OrderListResponse(BaseModel):
    orders: List[Order]
    count: int


class DuplicateAttemptListResponse(BaseModel):
    attempts: List[DuplicateAttempt]
    count: int


class UsageResponse(BaseModel):
    """Merchant plan usage"""
    shop: str
    plan: str
    total_claims: int
    limit: Optional[int] = None
    usage_percent: float = 0.0
    limit_reached: bool = False
    next_plan: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    service: str
    port: int
    version: str
    dependencies: Dict[str, str] = Field(default_factory=dict)


class ReadinessResponse(BaseModel):
    """Readiness check response"""
    ready: bool
    checks: Dict[str, bool] = Field(default_factory=dict)
    details: Dict[str, str] = Field(default_factory=dict)


class LivenessResponse(BaseModel):
    """Liveness check response"""
    alive: bool
    uptime_seconds: float
