"""
Gifting Service Clients Module

HTTP clients for external platforms
"""

from .shopify_client import ShopifyClient

__all__ = [
    "ShopifyClient",
]
