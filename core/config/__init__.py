#!/usr/bin/env python3
"""Modular configuration system for the gifting platform

Configuration hierarchy:
- infra_config: PostgreSQL (Supabase) connection settings
- shopify_config: Shopify Admin API credentials and order mode
- logging_config: Logging configuration
- gifting_config: Platform settings combining the above
"""
import os
from dotenv import load_dotenv
from .logging_config import LoggingConfig
from .infra_config import InfraConfig
from .shopify_config import ShopifyConfig, normalize_shop_domain
from .gifting_config import GiftingConfig

# Load environment file based on ENV
env = os.getenv("ENV") or os.getenv("ENVIRONMENT", "development")
env_files = {
    "development": "deployment/environments/dev.env",
    "dev": "deployment/environments/dev.env",
    "testing": "deployment/environments/test.env",
    "test": "deployment/environments/test.env",
    "staging": "deployment/environments/staging.env",
    "production": "deployment/environments/production.env",
}
env_file = env_files.get(env, "deployment/environments/dev.env")
load_dotenv(env_file, override=False)

# Create global settings instance
settings = GiftingConfig.from_env()

def get_settings() -> GiftingConfig:
    """Get global settings instance"""
    return settings

def reload_settings() -> GiftingConfig:
    """Reload settings from environment"""
    global settings
    settings = GiftingConfig.from_env()
    return settings

__all__ = [
    # Main config
    'GiftingConfig',
    'get_settings',
    'reload_settings',
    'settings',
    # Sub-configs
    'LoggingConfig',
    'InfraConfig',
    'ShopifyConfig',
    'normalize_shop_domain',
]
