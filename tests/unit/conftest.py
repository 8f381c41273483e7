"""
Unit Test Layer Configuration

Structure:
    tests/unit/
    └── gifting/     Pure rules, validators, eligibility, plans, payload builders

Usage:
    pytest tests/unit -v                 # All unit tests
    pytest tests/unit -m unit -v         # By marker
"""
import os
import sys

# Add project root
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))
