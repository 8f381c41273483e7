"""
Shopify Admin API Client for Gifting Service

Commerce platform adapter: catalog fetch, draft order / order creation and
webhook registration over the Admin GraphQL API. Product payloads are
normalized here, once, into the canonical Product model.
"""

import httpx
import logging
from typing import Optional, Dict, Any, List
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from core.config.shopify_config import ShopifyConfig, ORDER_MODE_ORDER
from ..models import PlatformOrderResult, Product
from ..protocols import CommercePlatformError

logger = logging.getLogger(__name__)


ORDER_TAG = "Gifty-Influencer-Claim"
ORDER_NOTE_TITLE = "Gifty Influencer Fulfillment"
GIFT_DISCOUNT = {"title": "Influencer Gift", "value": 100, "valueType": "PERCENTAGE"}

WEBHOOK_TOPICS = {
    "APP_UNINSTALLED": "/webhooks/app/uninstalled",
    "FULFILLMENTS_CREATE": "/webhooks/fulfillment-created",
    "DRAFT_ORDERS_DELETE": "/webhooks/draft-order-deleted",
    "ORDERS_CANCELLED": "/webhooks/order-cancelled",
    "ORDERS_CREATE": "/webhooks/order-created",
}

PRODUCTS_QUERY = """
query getProducts($first: Int!) {
  products(first: $first) {
    edges {
      node {
        id
        title
        status
        featuredImage { url altText }
        variants(first: 1) {
          edges {
            node { id legacyResourceId price availableForSale inventoryQuantity }
          }
        }
      }
    }
  }
}
"""

DRAFT_ORDER_CREATE = """
mutation draftOrderCreate($input: DraftOrderInput!) {
  draftOrderCreate(input: $input) {
    draftOrder { id name }
    userErrors { message field }
  }
}
"""

ORDER_CREATE = """
mutation orderCreate($input: OrderInput!) {
  orderCreate(input: $input) {
    order { id name }
    userErrors { message field }
  }
}
"""

WEBHOOK_SUBSCRIPTION_CREATE = """
mutation webhookSubscriptionCreate($topic: WebhookSubscriptionTopic!, $webhookSubscription: WebhookSubscriptionInput!) {
  webhookSubscriptionCreate(topic: $topic, webhookSubscription: $webhookSubscription) {
    webhookSubscription { id }
    userErrors { message field }
  }
}
"""


# ====================
# Payload helpers
# ====================

def normalize_product_node(node: Dict[str, Any]) -> Optional[Product]:
    """Map a products(edges.node) payload to Product; None when it has no variant"""
    edges = ((node or {}).get("variants") or {}).get("edges") or []
    variant = edges[0].get("node") if edges else None
    if not variant:
        return None

    legacy_id = variant.get("legacyResourceId")
    available = variant.get("availableForSale")
    return Product(
        id=str(legacy_id if legacy_id is not None else variant.get("id")),
        variant_id=variant.get("id"),
        title=node.get("title") or "",
        price=variant.get("price"),
        image=(node.get("featuredImage") or {}).get("url") or "",
        status=node.get("status") or "ACTIVE",
        available_for_sale=True if available is None else available,
        inventory_quantity=variant.get("inventoryQuantity"),
    )


def sanitize_shipping_address(address: Optional[Dict[str, Any]]) -> Optional[Dict[str, str]]:
    """Reduce an address record to Shopify's MailingAddressInput fields"""
    if not address:
        return None
    country = address.get("country") or ""
    country_code = address.get("countryCode") or (
        country if isinstance(country, str) and len(country) == 2 else ""
    )
    return {
        "address1": address.get("address1") or address.get("line1") or "",
        "address2": address.get("address2") or address.get("line2") or "",
        "city": address.get("city") or "",
        "province": address.get("province") or address.get("state") or "",
        "provinceCode": address.get("provinceCode") or "",
        "country": country,
        "countryCode": country_code,
        "zip": address.get("zip") or address.get("postalCode") or "",
        "firstName": address.get("firstName") or "",
        "lastName": address.get("lastName") or "",
        "phone": address.get("phone") or "",
        "company": address.get("company") or "",
    }


def build_order_note(influencer_info: Optional[Dict[str, Any]], order_id: Optional[str] = None) -> str:
    info = influencer_info or {}
    parts = [ORDER_NOTE_TITLE]
    if info.get("name"):
        parts.append(f"Name: {info['name']}")
    if info.get("handle"):
        parts.append(f"Handle: {info['handle']}")
    if info.get("email"):
        parts.append(f"Email: {info['email']}")
    if order_id:
        parts.append(f"SupabaseOrderId:{order_id}")
    return " | ".join(parts)


def build_order_input(
    variant_ids: List[str],
    email: str,
    shipping_address: Optional[Dict[str, Any]],
    influencer_info: Optional[Dict[str, Any]] = None,
    order_id: Optional[str] = None,
    draft: bool = True,
) -> Dict[str, Any]:
    order_input = {
        "email": email,
        "note": build_order_note(influencer_info, order_id),
        "lineItems": [{"variantId": variant_id, "quantity": 1} for variant_id in variant_ids],
        "shippingAddress": sanitize_shipping_address(shipping_address),
        "tags": [ORDER_TAG],
    }
    if draft:
        order_input["appliedDiscount"] = dict(GIFT_DISCOUNT)
    return order_input


class ShopifyClient:
    """Client for the Shopify Admin GraphQL API"""

    def __init__(self, config: ShopifyConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self.client = httpx.AsyncClient(
            timeout=config.timeout_seconds,
            headers={
                "Content-Type": "application/json",
                "X-Shopify-Access-Token": config.access_token,
            },
            transport=transport,
        )
        logger.info(f"ShopifyClient initialized for shop: {config.shop_domain or '<unset>'}")

    async def close(self):
        await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, max=8),
        retry=retry_if_exception_type(httpx.TransportError),
        reraise=True,
    )
    async def _post_graphql(self, query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        response = await self.client.post(
            self.config.graphql_url,
            json={"query": query, "variables": variables},
        )
        response.raise_for_status()
        return response.json()

    async def _graphql(self, query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        if not self.config.is_configured:
            raise CommercePlatformError("Shopify shop domain or access token is not configured.")
        try:
            payload = await self._post_graphql(query, variables)
        except httpx.HTTPStatusError as e:
            logger.error(f"Shopify request failed: {e.response.status_code}")
            raise CommercePlatformError(f"Shopify request failed with status {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error(f"Error calling Shopify: {e}")
            raise CommercePlatformError(f"Shopify request failed: {e}") from e

        if payload.get("errors"):
            logger.error(f"Shopify GraphQL errors: {payload['errors']}")
            raise CommercePlatformError(f"GraphQL errors: {payload['errors']}")
        return payload.get("data") or {}

    async def list_products(self, first: int = 50) -> List[Product]:
        data = await self._graphql(PRODUCTS_QUERY, {"first": first})
        edges = (data.get("products") or {}).get("edges") or []
        products = []
        for edge in edges:
            product = normalize_product_node(edge.get("node") or {})
            if product:
                products.append(product)
        return products

    async def create_draft_order_or_order(
        self,
        variant_ids: List[str],
        email: str,
        shipping_address: Optional[Dict[str, Any]],
        influencer_info: Optional[Dict[str, Any]] = None,
        order_id: Optional[str] = None,
    ) -> PlatformOrderResult:
        if not variant_ids:
            raise CommercePlatformError("Missing Shopify variant ID for this product.")

        is_order = self.config.order_mode == ORDER_MODE_ORDER
        order_input = build_order_input(
            variant_ids, email, shipping_address, influencer_info, order_id, draft=not is_order
        )
        mutation, root, node_key = (
            (ORDER_CREATE, "orderCreate", "order")
            if is_order
            else (DRAFT_ORDER_CREATE, "draftOrderCreate", "draftOrder")
        )

        data = await self._graphql(mutation, {"input": order_input})
        result = data.get(root) or {}
        user_errors = result.get("userErrors") or []
        if user_errors:
            message = user_errors[0].get("message") or "Unknown error"
            logger.error(f"Shopify {root} rejected: {user_errors}")
            raise CommercePlatformError(message)

        created = result.get(node_key)
        if not created:
            raise CommercePlatformError("Draft order response missing")

        logger.info(f"Shopify {node_key} created: {created.get('name')} for order {order_id}")
        return PlatformOrderResult(
            id=created["id"],
            name=created.get("name"),
            mode=ORDER_MODE_ORDER if is_order else "draft",
        )

    async def register_webhooks(self, app_url: Optional[str] = None) -> Dict[str, bool]:
        base_url = (app_url or self.config.app_url or "").rstrip("/")
        if not base_url:
            raise CommercePlatformError("App URL is required to register webhooks.")

        results = {}
        for topic, path in WEBHOOK_TOPICS.items():
            variables = {
                "topic": topic,
                "webhookSubscription": {"callbackUrl": f"{base_url}{path}", "format": "JSON"},
            }
            try:
                data = await self._graphql(WEBHOOK_SUBSCRIPTION_CREATE, variables)
            except CommercePlatformError as e:
                logger.warning(f"Webhook registration failed for {topic}: {e}")
                results[topic] = False
                continue
            user_errors = (data.get("webhookSubscriptionCreate") or {}).get("userErrors") or []
            if user_errors:
                logger.warning(f"Webhook registration rejected for {topic}: {user_errors}")
            results[topic] = not user_errors
        return results
