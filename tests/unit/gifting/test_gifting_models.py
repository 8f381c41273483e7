"""
Unit Tests for Gifting Models

Status normalization, verdict immutability, id coercion and derived
properties.
"""

import pytest
from pydantic import ValidationError

from microservices.gifting_service.models import (
    ALLOWED,
    CAMPAIGN_CONFIG_FIELDS,
    Campaign,
    ClaimAttempt,
    ClaimRequest,
    ContactFields,
    OrderStatus,
    Rejected,
    ShippingAddress,
    normalize_order_status,
)
from microservices.gifting_service.routes_registry import ROUTES, SERVICE_METADATA, get_route_summary
from tests.contracts.gifting.data_contract import GiftingTestDataFactory

pytestmark = [pytest.mark.unit]


class TestOrderStatus:

    @pytest.mark.parametrize("raw,expected", [
        (None, OrderStatus.PENDING),
        ("", OrderStatus.PENDING),
        ("synced", OrderStatus.DRAFT_CREATED),
        ("fulfilled", OrderStatus.SHIPPED),
        ("SHIPPED", OrderStatus.SHIPPED),
        ("cancelled", OrderStatus.CANCELLED),
        ("mystery", OrderStatus.PENDING),
    ])
    def test_normalize_order_status(self, raw, expected):
        assert normalize_order_status(raw) == expected

    def test_order_model_normalizes_status(self):
        order = GiftingTestDataFactory.make_order(status="synced")
        assert order.status == OrderStatus.DRAFT_CREATED

    def test_claim_request_ids_are_strings(self):
        request = ClaimRequest(product_ids=[1001, "gid://shopify/Product/1002"])
        assert request.product_ids == ["1001", "gid://shopify/Product/1002"]
        assert ClaimRequest(product_ids=None).product_ids == []

    def test_claim_request_ignores_client_products(self):
        request = ClaimRequest.model_validate({"product_ids": ["1001"], "selected_products": [{"id": "1001", "price": "0"}]})
        assert not hasattr(request, "selected_products")


class TestVerdicts:

    def test_allowed_singleton(self):
        assert ALLOWED.allowed is True
        assert ALLOWED.reason == ""

    def test_rejected_is_frozen(self):
        verdict = Rejected(reason="nope")
        assert verdict.allowed is False
        with pytest.raises(ValidationError):
            verdict.reason = "changed"


class TestCampaignModel:

    def test_ids_coerced_to_str(self):
        campaign = Campaign(id=42, slug="x")
        assert campaign.id == "42"
        assert campaign.item_limit == 1
        assert campaign.show_sold_out is True

    def test_config_fields_exclude_identity(self):
        assert "item_limit" in CAMPAIGN_CONFIG_FIELDS
        assert "block_duplicate_orders" in CAMPAIGN_CONFIG_FIELDS
        assert "id" not in CAMPAIGN_CONFIG_FIELDS
        assert "slug" not in CAMPAIGN_CONFIG_FIELDS


class TestClaimModels:

    def test_full_name(self):
        assert ContactFields(first_name="Ava", last_name="").full_name == "Ava"

    def test_country_prefers_explicit_value(self):
        claim = ClaimAttempt(shipping_country="Canada", structured_address=ShippingAddress(country="Mexico"))
        assert claim.country == "Canada"

    def test_country_falls_back(self):
        assert ClaimAttempt(structured_address=ShippingAddress(country="Mexico")).country == "Mexico"
        assert ClaimAttempt().country == ""


class TestRoutesRegistry:

    def test_route_summary(self):
        summary = get_route_summary()
        assert summary["base_path"] == "/api/v1/gifting"
        assert summary["route_count"] == str(len(ROUTES))
        assert "/api/v1/gifting/campaigns/{slug}/claims" in summary["routes"]

    def test_metadata(self):
        assert SERVICE_METADATA["service_name"] == "gifting_service"
