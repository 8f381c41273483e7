"""
Gifting Service Routes Registry

Defines service metadata and the public route table.
"""

SERVICE_METADATA = {
    "service_name": "gifting_service",
    "version": "1.0.0",
    "tags": ["gifting", "influencer", "shopify", "v1"],
    "capabilities": ["campaign_management", "claim_validation", "duplicate_review", "usage_tracking"],
}

ROUTES = [
    {"path": "/health", "methods": ["GET"], "description": "Health check"},
    {"path": "/health/ready", "methods": ["GET"], "description": "Readiness check"},
    {"path": "/health/live", "methods": ["GET"], "description": "Liveness check"},
    {"path": "/api/v1/gifting/campaigns", "methods": ["GET", "POST"], "description": "List active / create campaigns"},
    {"path": "/api/v1/gifting/campaigns/{slug}", "methods": ["GET"], "description": "Get campaign by slug"},
    {"path": "/api/v1/gifting/campaigns/{slug}/products", "methods": ["GET"], "description": "Products offered by a campaign"},
    {"path": "/api/v1/gifting/campaigns/{campaign_id}/archive", "methods": ["POST"], "description": "Archive campaign"},
    {"path": "/api/v1/gifting/campaigns/{slug}/claims", "methods": ["POST"], "description": "Submit influencer claim"},
    {"path": "/api/v1/gifting/orders", "methods": ["GET"], "description": "List orders"},
    {"path": "/api/v1/gifting/orders/{order_id}", "methods": ["GET"], "description": "Get order"},
    {"path": "/api/v1/gifting/orders/status", "methods": ["POST"], "description": "Apply platform order status"},
    {"path": "/api/v1/gifting/duplicates", "methods": ["GET"], "description": "List pending duplicate attempts"},
    {"path": "/api/v1/gifting/duplicates/{attempt_id}/accept", "methods": ["POST"], "description": "Accept duplicate attempt"},
    {"path": "/api/v1/gifting/duplicates/{attempt_id}/decline", "methods": ["POST"], "description": "Decline duplicate attempt"},
    {"path": "/api/v1/gifting/shops/{shop}/usage", "methods": ["GET"], "description": "Merchant plan usage"},
    {"path": "/api/v1/gifting/shops/{shop}/claims", "methods": ["POST"], "description": "Increment merchant claims"},
    {"path": "/api/v1/gifting/webhooks/register", "methods": ["POST"], "description": "Register platform webhooks"},
]


def get_route_summary():
    """Route metadata for service discovery"""
    return {
        "route_count": str(len(ROUTES)),
        "routes": ",".join([r["path"] for r in ROUTES]),
        "api_version": "v1",
        "base_path": "/api/v1/gifting",
    }


__all__ = ["SERVICE_METADATA", "ROUTES", "get_route_summary"]
