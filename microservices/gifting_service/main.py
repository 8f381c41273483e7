"""
Gifting Service Main Application

FastAPI application for influencer gifting campaigns and claims.
Port: 8260
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse

from core.config import settings

from .factory import GiftingServiceFactory
from .models import (
    Campaign,
    CampaignCreateRequest,
    CampaignListResponse,
    ClaimRequest,
    ClaimResult,
    ClaimsIncrementRequest,
    DuplicateAttemptListResponse,
    HealthResponse,
    LivenessResponse,
    Order,
    OrderListResponse,
    OrderStatus,
    OrderStatusUpdateRequest,
    ProductListResponse,
    ReadinessResponse,
    UsageResponse,
)
from .protocols import (
    CampaignNotFoundError,
    CampaignValidationError,
    CommercePlatformError,
    DuplicateAttemptNotFoundError,
    DuplicateAttemptResolvedError,
    GiftingServiceError,
    OrderNotFoundError,
)
from .routes_registry import SERVICE_METADATA, get_route_summary

# Configure logging
settings.logging.configure()
logger = logging.getLogger(__name__)

# Service configuration
SERVICE_NAME = SERVICE_METADATA["service_name"]
SERVICE_PORT = settings.port
SERVICE_VERSION = SERVICE_METADATA["version"]

# Track startup time for uptime calculation
startup_time = time.time()

# Global factory instance
factory: Optional[GiftingServiceFactory] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    global factory

    logger.info(f"Starting {SERVICE_NAME} on port {SERVICE_PORT}")
    logger.info(f"Routes: {get_route_summary()['routes']}")

    factory = GiftingServiceFactory(settings)
    await factory.initialize()

    yield

    logger.info(f"Shutting down {SERVICE_NAME}")
    await factory.close()


# Create FastAPI application
app = FastAPI(
    title="Gifting Service",
    description="Influencer gifting campaigns, claim validation and duplicate review",
    version=SERVICE_VERSION,
    lifespan=lifespan,
)


# ====================
# Exception Handlers
# ====================


def _error(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


@app.exception_handler(CampaignNotFoundError)
async def campaign_not_found_handler(request: Request, exc: CampaignNotFoundError):
    return _error(status.HTTP_404_NOT_FOUND, exc)


@app.exception_handler(OrderNotFoundError)
async def order_not_found_handler(request: Request, exc: OrderNotFoundError):
    return _error(status.HTTP_404_NOT_FOUND, exc)


@app.exception_handler(DuplicateAttemptNotFoundError)
async def duplicate_not_found_handler(request: Request, exc: DuplicateAttemptNotFoundError):
    return _error(status.HTTP_404_NOT_FOUND, exc)


@app.exception_handler(DuplicateAttemptResolvedError)
async def duplicate_resolved_handler(request: Request, exc: DuplicateAttemptResolvedError):
    return _error(status.HTTP_409_CONFLICT, exc)


@app.exception_handler(CampaignValidationError)
async def validation_error_handler(request: Request, exc: CampaignValidationError):
    return _error(status.HTTP_422_UNPROCESSABLE_ENTITY, exc)


@app.exception_handler(CommercePlatformError)
async def commerce_platform_handler(request: Request, exc: CommercePlatformError):
    logger.error(f"Commerce platform error: {exc}")
    return _error(status.HTTP_502_BAD_GATEWAY, exc)


@app.exception_handler(GiftingServiceError)
async def gifting_error_handler(request: Request, exc: GiftingServiceError):
    return _error(status.HTTP_400_BAD_REQUEST, exc)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch-all exception handler"""
    logger.exception(f"Unhandled exception: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error", "type": type(exc).__name__},
    )


# ====================
# Dependencies
# ====================


def get_service():
    """Get gifting service from factory"""
    if not factory:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service not initialized",
        )
    return factory.service


# ====================
# Health Endpoints
# ====================


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Health check endpoint"""
    dependencies = {}

    if factory:
        try:
            db_healthy = await factory.campaign_repository.health_check()
            dependencies["postgres"] = "healthy" if db_healthy else "unhealthy"
        except Exception:
            dependencies["postgres"] = "unhealthy"
        dependencies["shopify"] = "configured" if factory.shopify_client else "not_configured"

    return HealthResponse(
        status="healthy",
        service=SERVICE_NAME,
        port=SERVICE_PORT,
        version=SERVICE_VERSION,
        dependencies=dependencies,
    )


@app.get("/health/ready", response_model=ReadinessResponse, tags=["Health"])
async def readiness_check():
    """Readiness check endpoint"""
    checks = {}
    details = {}

    if factory:
        try:
            db_healthy = await factory.campaign_repository.health_check()
            checks["database"] = db_healthy
            details["database"] = "Connected" if db_healthy else "Connection failed"
        except Exception as e:
            checks["database"] = False
            details["database"] = str(e)

        checks["shopify"] = True  # Optional
        details["shopify"] = "Configured" if factory.shopify_client else "Not configured (optional)"
    else:
        checks["factory"] = False
        details["factory"] = "Factory not initialized"

    ready = all(checks.get(k, False) for k in ["database"])

    return ReadinessResponse(ready=ready, checks=checks, details=details)


@app.get("/health/live", response_model=LivenessResponse, tags=["Health"])
async def liveness_check():
    """Liveness check endpoint"""
    return LivenessResponse(alive=True, uptime_seconds=time.time() - startup_time)


# ====================
# Campaign Endpoints
# ====================


@app.get("/api/v1/gifting/campaigns", response_model=CampaignListResponse, tags=["Campaigns"])
async def list_campaigns(service=Depends(get_service)):
    """List campaigns that are not archived"""
    campaigns = await service.list_active_campaigns()
    return CampaignListResponse(campaigns=campaigns, count=len(campaigns))


@app.post(
    "/api/v1/gifting/campaigns",
    response_model=Campaign,
    status_code=status.HTTP_201_CREATED,
    tags=["Campaigns"],
)
async def create_campaign(request: CampaignCreateRequest, service=Depends(get_service)):
    return await service.create_campaign(request)


@app.get("/api/v1/gifting/campaigns/{slug}", response_model=Campaign, tags=["Campaigns"])
async def get_campaign(slug: str, service=Depends(get_service)):
    """Get an active campaign by its public slug"""
    return await service.get_campaign(slug)


@app.get("/api/v1/gifting/campaigns/{slug}/products", response_model=ProductListResponse, tags=["Campaigns"])
async def get_campaign_products(slug: str, service=Depends(get_service)):
    """Catalog products offered by a campaign"""
    products = await service.get_campaign_products(slug)
    return ProductListResponse(products=products, count=len(products))


@app.post("/api/v1/gifting/campaigns/{campaign_id}/archive", tags=["Campaigns"])
async def archive_campaign(campaign_id: str, service=Depends(get_service)):
    await service.archive_campaign(campaign_id)
    return {"archived": True, "campaign_id": campaign_id}


# ====================
# Claim Endpoints
# ====================


@app.post("/api/v1/gifting/campaigns/{slug}/claims", response_model=ClaimResult, tags=["Claims"])
async def submit_claim(slug: str, request: ClaimRequest, service=Depends(get_service)):
    """
    Submit an influencer claim

    Business rejections and duplicates are returned with status 200 and an
    `outcome` of `rejected` or `duplicate`.
    """
    return await service.submit_claim(slug, request)


# ====================
# Order Endpoints
# ====================


@app.get("/api/v1/gifting/orders", response_model=OrderListResponse, tags=["Orders"])
async def list_orders(
    campaign_id: Optional[str] = Query(None, description="Filter by campaign"),
    status_filter: Optional[OrderStatus] = Query(None, alias="status", description="Filter by status"),
    limit: int = Query(50, ge=1, le=200, description="Page size"),
    offset: int = Query(0, ge=0, description="Page offset"),
    service=Depends(get_service),
):
    orders = await service.list_orders(campaign_id=campaign_id, status=status_filter, limit=limit, offset=offset)
    return OrderListResponse(orders=orders, count=len(orders))


@app.get("/api/v1/gifting/orders/{order_id}", response_model=Order, tags=["Orders"])
async def get_order(order_id: str, service=Depends(get_service)):
    return await service.get_order(order_id)


@app.post("/api/v1/gifting/orders/status", tags=["Orders"])
async def update_order_status(request: OrderStatusUpdateRequest, service=Depends(get_service)):
    """Apply a platform order status event"""
    updated = await service.update_order_status(request.shopify_order_id, request.status)
    return {"updated": updated}


@app.post("/api/v1/gifting/webhooks/register", tags=["Orders"])
async def register_webhooks(
    app_url: Optional[str] = Query(None, description="Callback base URL, defaults to SHOPIFY_APP_URL"),
    service=Depends(get_service),
):
    results = await service.register_webhooks(app_url)
    return {"results": results}


# ====================
# Duplicate Review Endpoints
# ====================


@app.get("/api/v1/gifting/duplicates", response_model=DuplicateAttemptListResponse, tags=["Duplicates"])
async def list_duplicates(
    campaign_id: Optional[str] = Query(None, description="Filter by campaign"),
    limit: int = Query(50, ge=1, le=200),
    service=Depends(get_service),
):
    attempts = await service.list_duplicate_attempts(campaign_id=campaign_id, limit=limit)
    return DuplicateAttemptListResponse(attempts=attempts, count=len(attempts))


@app.post("/api/v1/gifting/duplicates/{attempt_id}/accept", response_model=Order, tags=["Duplicates"])
async def accept_duplicate(attempt_id: str, service=Depends(get_service)):
    """Accept a duplicate attempt, creating its order"""
    return await service.accept_duplicate(attempt_id)


@app.post("/api/v1/gifting/duplicates/{attempt_id}/decline", tags=["Duplicates"])
async def decline_duplicate(attempt_id: str, service=Depends(get_service)):
    await service.decline_duplicate(attempt_id)
    return {"declined": True, "attempt_id": attempt_id}


# ====================
# Merchant Usage Endpoints
# ====================


@app.get("/api/v1/gifting/shops/{shop}/usage", response_model=UsageResponse, tags=["Usage"])
async def get_usage(shop: str, service=Depends(get_service)):
    return await service.get_usage(shop)


@app.post("/api/v1/gifting/shops/{shop}/claims", response_model=UsageResponse, tags=["Usage"])
async def increment_claims(shop: str, request: ClaimsIncrementRequest, service=Depends(get_service)):
    """Increment the merchant claims counter"""
    return await service.increment_claims(shop, request.delta)


# ====================
# Main Entry Point
# ====================


def main():
    """Run the service"""
    import uvicorn

    uvicorn.run(
        "microservices.gifting_service.main:app",
        host=settings.host,
        port=SERVICE_PORT,
        reload=settings.debug,
        log_level=settings.logging.log_level.lower(),
    )


if __name__ == "__main__":
    main()
