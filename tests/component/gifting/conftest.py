"""
Component Test Fixtures for Gifting Service

Wires GiftingService to the in-memory mocks.
"""

from unittest.mock import MagicMock, patch

import pytest

from microservices.gifting_service.gifting_service import GiftingService
from tests.component.gifting.mocks import (
    MockCampaignRepository,
    MockCommercePlatform,
    MockMerchantRepository,
    MockOrderRepository,
)
from tests.contracts.gifting.data_contract import GiftingTestDataFactory


@pytest.fixture
def campaign_repo():
    return MockCampaignRepository()


@pytest.fixture
def order_repo():
    return MockOrderRepository()


@pytest.fixture
def merchant_repo():
    return MockMerchantRepository()


@pytest.fixture
def platform():
    products = [
        GiftingTestDataFactory.make_product("1001", price="25.00"),
        GiftingTestDataFactory.make_product("1002", price="40.00", status="DRAFT"),
        GiftingTestDataFactory.make_product("1003", price="15.00", available_for_sale=False),
        GiftingTestDataFactory.make_product("2000", price="5.00"),
    ]
    return MockCommercePlatform(products=products)


@pytest.fixture
def service(campaign_repo, order_repo, merchant_repo, platform):
    return GiftingService(
        campaign_repository=campaign_repo,
        order_repository=order_repo,
        merchant_repository=merchant_repo,
        commerce_platform=platform,
    )


@pytest.fixture
def campaign(campaign_repo):
    """Active campaign on a shop with free-plan usage"""
    return campaign_repo.set_campaign(GiftingTestDataFactory.make_campaign(slug="summer-gifting"))


@pytest.fixture
def client(service, campaign_repo):
    """FastAPI test client bound to the mocked service, lifespan skipped"""
    from fastapi.testclient import TestClient

    mock_factory = MagicMock()
    mock_factory.service = service
    mock_factory.campaign_repository = campaign_repo
    mock_factory.shopify_client = None

    with patch("microservices.gifting_service.main.factory", mock_factory):
        from microservices.gifting_service.main import app

        yield TestClient(app, raise_server_exceptions=False)
