"""
Gifting Service Plans

Billing plans and the merchant-level claim usage cap.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel


class PlanKey(str, Enum):
    """Billing plan identifiers"""
    FREE = "FREE"
    GROWTH = "GROWTH"
    UNLIMITED = "UNLIMITED"


class PlanDefinition(BaseModel):
    """Plan price and monthly claim allowance (None = unlimited)"""
    label: str
    price: int
    limit: Optional[int] = None


PLAN_DEFINITIONS = {
    PlanKey.FREE: PlanDefinition(label="Free", price=0, limit=5),
    PlanKey.GROWTH: PlanDefinition(label="Growth", price=69, limit=100),
    PlanKey.UNLIMITED: PlanDefinition(label="Unlimited", price=379, limit=None),
}

PLAN_ORDER = [PlanKey.FREE, PlanKey.GROWTH, PlanKey.UNLIMITED]

USAGE_LIMIT_MESSAGE = "This brand's gifting limit has been reached. Please contact them directly."


def normalize_plan(value) -> PlanKey:
    if not value:
        return PlanKey.FREE
    upper = str(value.value if isinstance(value, PlanKey) else value).strip().upper()
    try:
        return PlanKey(upper)
    except ValueError:
        return PlanKey.FREE


def get_plan_limit(plan) -> Optional[int]:
    return PLAN_DEFINITIONS[normalize_plan(plan)].limit


def is_limit_reached(total_claims: Optional[int], plan) -> bool:
    limit = get_plan_limit(plan)
    if limit is None:
        return False
    return (total_claims or 0) >= limit


def get_usage_percent(total_claims: Optional[int], plan) -> float:
    """Share of the plan allowance used, capped at 1.0"""
    limit = get_plan_limit(plan)
    if not limit:
        return 0.0
    return min((total_claims or 0) / limit, 1.0)


def get_next_plan(plan) -> Optional[PlanKey]:
    index = PLAN_ORDER.index(normalize_plan(plan))
    if index == len(PLAN_ORDER) - 1:
        return None
    return PLAN_ORDER[index + 1]
