"""
Gifting Service Contract Module

This module contains:
- data_contract.py: test data factories for campaigns, claims, orders
  and duplicate attempts
"""
