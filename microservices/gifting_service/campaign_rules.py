"""
Gifting Service Campaign Rules

Per-rule evaluators over a campaign configuration. Every function is pure:
business refusals come back as ``Rejected`` verdicts, never as exceptions.
"""

import math
import re
from typing import Iterable, List, Optional, Sequence, Set, Union

from .models import ALLOWED, Campaign, Product, Rejected, Verdict
from .validators import normalize_country_name, normalize_number

WORLDWIDE_ZONE = "World"
ACTIVE_PRODUCT_STATUS = "ACTIVE"


# ====================
# Item limit
# ====================

def get_item_limit(campaign: Campaign) -> int:
    limit = normalize_number(campaign.item_limit)
    if not limit or limit <= 0:
        return 1
    return max(1, math.floor(limit))


def can_add_item(campaign: Campaign, selected_count: int) -> bool:
    """Whether one more product may be picked; refusals are silent"""
    return selected_count + 1 <= get_item_limit(campaign)


def check_item_count(campaign: Campaign, items: Sequence[Product]) -> Verdict:
    """Server-side recheck of a submitted selection"""
    if not items:
        return Rejected(reason="Please select a gift to continue.")
    limit = get_item_limit(campaign)
    if len(items) > limit:
        noun = "gift" if limit == 1 else "gifts"
        return Rejected(reason=f"You can select up to {limit} {noun}.")
    return ALLOWED


# ====================
# Cart value
# ====================

def get_max_cart_value(campaign: Campaign) -> Optional[float]:
    max_value = normalize_number(campaign.max_cart_value)
    return max_value if max_value and max_value > 0 else None


def _price_value(price: Union[float, str, None]) -> float:
    if price is None:
        return 0.0
    if isinstance(price, str):
        digits = re.sub(r"[^0-9.]", "", price)
        if not digits:
            return 0.0
        try:
            numeric = float(digits)
        except ValueError:
            return 0.0
    else:
        numeric = float(price)
    return numeric if math.isfinite(numeric) else 0.0


def get_selected_total(items: Iterable[Product]) -> float:
    return sum(_price_value(item.price) for item in items)


def is_max_cart_exceeded(campaign: Campaign, items: Sequence[Product]) -> bool:
    max_value = get_max_cart_value(campaign)
    if not max_value:
        return False
    return get_selected_total(items) > max_value


def format_cart_limit(campaign: Campaign) -> str:
    """Cap as shown to the influencer, e.g. "$50" or "$49.5" """
    max_value = get_max_cart_value(campaign)
    if max_value is None:
        return "the limit"
    if float(max_value).is_integer():
        return f"${int(max_value)}"
    return f"${max_value:g}"


def check_cart_value(campaign: Campaign, items: Sequence[Product]) -> Verdict:
    if is_max_cart_exceeded(campaign, items):
        return Rejected(reason=f"Selected gifts exceed {format_cart_limit(campaign)}.")
    return ALLOWED


# ====================
# Shipping region
# ====================

def parse_restricted_countries(value: Union[str, Iterable[str], None]) -> Set[str]:
    if not value:
        return set()
    entries = value.split(",") if isinstance(value, str) else value
    return {normalize_country_name(entry) for entry in entries if normalize_country_name(entry)}


def is_country_allowed(campaign: Campaign, country_name: Optional[str]) -> Verdict:
    """
    Shipping-region admissibility for a destination country.

    Restricted countries are refused first, including under the worldwide
    zone. A zone other than "World" then only admits its own country. An
    unknown (empty) country is allowed so the check can run once it is known.
    """
    if not country_name:
        return ALLOWED

    normalized = normalize_country_name(country_name)
    if normalized in parse_restricted_countries(campaign.restricted_countries):
        return Rejected(reason=f"Sorry, this campaign does not ship to {country_name}.")

    zone = campaign.shipping_zone
    if zone and zone != WORLDWIDE_ZONE and normalize_country_name(zone) != normalized:
        return Rejected(reason=f"Sorry, this campaign is only available in {zone}.")

    return ALLOWED


# ====================
# Order-count cap
# ====================

def get_order_limit(campaign: Campaign) -> Optional[int]:
    limit = normalize_number(campaign.order_limit_per_link)
    return math.floor(limit) if limit and limit > 0 else None


def is_order_limit_reached(campaign: Campaign) -> bool:
    limit = get_order_limit(campaign)
    if not limit:
        return False
    raw = campaign.claims_count if campaign.claims_count is not None else 0
    try:
        count = float(raw)
    except (TypeError, ValueError):
        return False
    if not math.isfinite(count):
        return False
    return count >= limit


def check_order_limit(campaign: Campaign) -> Verdict:
    if is_order_limit_reached(campaign):
        return Rejected(reason="This campaign has reached its order limit.")
    return ALLOWED


# ====================
# Duplicate policy
# ====================

def should_block_duplicate_orders(campaign: Campaign) -> bool:
    return bool(campaign.block_duplicate_orders)


# ====================
# Product eligibility
# ====================

def normalize_product_id(value) -> str:
    """Reduce a platform gid (gid://shopify/Product/123) to its trailing id"""
    text = str(value or "").strip()
    if text.startswith("gid://"):
        return text.rsplit("/", 1)[-1]
    return text


def filter_campaign_products(campaign: Campaign, products: Iterable[Product]) -> List[Product]:
    """Products offered by the campaign, honouring its inactive/sold-out options"""
    selected = {normalize_product_id(pid) for pid in campaign.selected_product_ids}
    offered = []
    for product in products:
        if normalize_product_id(product.id) not in selected:
            continue
        if campaign.hide_inactive_products and product.status and product.status != ACTIVE_PRODUCT_STATUS:
            continue
        if not campaign.show_sold_out and product.available_for_sale is False:
            continue
        offered.append(product)
    return offered
