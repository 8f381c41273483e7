#!/usr/bin/env python3
"""
Core Module for the Gifting Platform

Shared infrastructure components used by the microservices.

COMPONENTS:
    - config/: Environment-driven configuration (dotenv + dataclasses)
    - postgres_client.py: asyncpg-backed PostgreSQL client

USAGE:
    from core.config import get_settings
    from core.postgres_client import AsyncPostgresClient

    settings = get_settings()
    db = AsyncPostgresClient(dsn=settings.infrastructure.dsn)
"""
