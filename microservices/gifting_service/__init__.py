"""
Gifting Service

Influencer gifting microservice providing:
- Campaign configuration and public claim links
- Claim eligibility validation (item, cart, region, order caps, contact fields)
- Duplicate claim detection and merchant review
- Shopify draft order creation and status sync
- Merchant plan usage tracking

Port: 8260
"""

__version__ = "1.0.0"
__service__ = "gifting_service"
