"""
Root conftest.py - Global fixtures and configuration for all test layers.

Test Layers:
    - component/: Component tests (mocked repositories and platform clients)
    - unit/     : Unit tests (pure functions, no I/O)
    - contracts/: Shared test data factories
"""
import os
import sys

import pytest

# Testing environment BEFORE any service imports
os.environ.setdefault("ENV", "testing")
os.environ.setdefault("ENVIRONMENT", "testing")

# Add project root to path
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)

from tests.contracts.gifting.data_contract import GiftingTestDataFactory


def pytest_configure(config):
    """Register markers shared by every layer"""
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
    config.addinivalue_line("markers", "component: marks tests as component tests")
    config.addinivalue_line("markers", "api: marks tests as API endpoint tests")
    config.addinivalue_line("markers", "integration: marks tests needing real PostgreSQL/Shopify")


@pytest.fixture
def factory() -> GiftingTestDataFactory:
    """Provide the gifting test data factory"""
    return GiftingTestDataFactory()
