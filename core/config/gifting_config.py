#!/usr/bin/env python3
"""Gifting service main configuration

Combines all sub-configs for the influencer gifting platform.
"""
import os
from dataclasses import dataclass, field

from .infra_config import InfraConfig
from .logging_config import LoggingConfig
from .shopify_config import ShopifyConfig


def _bool(val: str) -> bool:
    return val.lower() == "true"

def _int(val: str, default: int) -> int:
    try:
        return int(val) if val else default
    except ValueError:
        return default


@dataclass
class GiftingConfig:
    """Main gifting platform configuration with all sub-configs"""

    # Environment
    environment: str = "development"
    debug: bool = False

    # Service settings
    host: str = "0.0.0.0"
    port: int = 8260

    # Plan assumed for shops without a stored plan
    default_plan: str = "FREE"

    # Sub-configurations
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    infrastructure: InfraConfig = field(default_factory=InfraConfig)
    shopify: ShopifyConfig = field(default_factory=ShopifyConfig)

    @classmethod
    def from_env(cls) -> 'GiftingConfig':
        """Load complete configuration from environment"""
        env = os.getenv("ENV") or os.getenv("ENVIRONMENT", "development")
        return cls(
            environment=env,
            debug=_bool(os.getenv("DEBUG", "true" if env == "development" else "false")),
            host=os.getenv("HOST", "0.0.0.0"),
            port=_int(os.getenv("SERVICE_PORT") or os.getenv("PORT", "8260"), 8260),
            default_plan=os.getenv("GIFTING_DEFAULT_PLAN", "FREE"),
            logging=LoggingConfig.from_env(),
            infrastructure=InfraConfig.from_env(),
            shopify=ShopifyConfig.from_env(),
        )
