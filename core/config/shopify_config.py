#!/usr/bin/env python3
"""Shopify Admin API configuration

Credentials and behaviour for the commerce platform client.
"""
import os
from dataclasses import dataclass


def _float(val: str, default: float) -> float:
    try:
        return float(val) if val else default
    except ValueError:
        return default


def normalize_shop_domain(value: str) -> str:
    """Strip protocol and stray slashes from a shop domain"""
    v = (value or "").strip()
    if v.lower().startswith("https://"):
        v = v[8:]
    elif v.lower().startswith("http://"):
        v = v[7:]
    return v.strip().strip("/")


ORDER_MODE_DRAFT = "draft"
ORDER_MODE_ORDER = "order"


@dataclass
class ShopifyConfig:
    """Shopify Admin GraphQL settings"""

    shop_domain: str = ""
    access_token: str = ""
    api_version: str = "2025-01"

    # "draft" creates a 100% discounted draft order, "order" creates a real order
    order_mode: str = ORDER_MODE_DRAFT

    timeout_seconds: float = 30.0

    # Public URL of this service, used as the webhook callback base
    app_url: str = ""

    @property
    def graphql_url(self) -> str:
        return f"https://{self.shop_domain}/admin/api/{self.api_version}/graphql.json"

    @property
    def is_configured(self) -> bool:
        return bool(self.shop_domain and self.access_token)

    @classmethod
    def from_env(cls) -> 'ShopifyConfig':
        """Load Shopify configuration from environment variables"""
        mode = os.getenv("SHOPIFY_ORDER_MODE", ORDER_MODE_DRAFT).strip().lower()
        return cls(
            shop_domain=normalize_shop_domain(os.getenv("SHOPIFY_SHOP_DOMAIN", "")),
            access_token=os.getenv("SHOPIFY_ACCESS_TOKEN", ""),
            api_version=os.getenv("SHOPIFY_API_VERSION", "2025-01"),
            order_mode=ORDER_MODE_ORDER if mode == ORDER_MODE_ORDER else ORDER_MODE_DRAFT,
            timeout_seconds=_float(os.getenv("SHOPIFY_TIMEOUT", "30"), 30.0),
            app_url=os.getenv("SHOPIFY_APP_URL", "").rstrip("/"),
        )
