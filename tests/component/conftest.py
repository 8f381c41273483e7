"""
Component Test Layer Configuration

Structure:
    tests/component/
    └── gifting/     Service flows, duplicate review and API with in-memory mocks

Usage:
    pytest tests/component -v
    pytest tests/component -m api -v
"""
import os
import sys

# Set testing environment BEFORE any imports
os.environ["ENV"] = "testing"
os.environ["ENVIRONMENT"] = "testing"
os.environ.setdefault("SHOPIFY_SHOP_DOMAIN", "")
os.environ.setdefault("SHOPIFY_ACCESS_TOKEN", "")

# Add project root
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))
