"""
Duplicate Review Workflow

Merchant review of claims that were diverted because they matched a prior
order. An attempt is pending until a reviewer accepts it (an order is
created from the snapshot) or declines it (the attempt is discarded). Both
outcomes remove the attempt.

Each transition is guarded by the attempt's stored decision, so two
reviewers acting on the same attempt cannot both succeed: the loser gets
DuplicateAttemptResolvedError.
"""

import logging
from typing import Any, Dict, List, Optional

from .models import DuplicateAttempt, DuplicateDecision, Order, OrderCreatePayload
from .protocols import (
    DuplicateAttemptNotFoundError,
    DuplicateAttemptResolvedError,
    OrderRepositoryProtocol,
)

logger = logging.getLogger(__name__)


def order_payload_from_snapshot(attempt: DuplicateAttempt) -> OrderCreatePayload:
    """Map an attempt's influencer snapshot onto an order payload"""
    info: Dict[str, Any] = attempt.influencer_info or {}
    name = info.get("name") or f"{info.get('firstName') or ''} {info.get('lastName') or ''}".strip()
    return OrderCreatePayload(
        campaign_id=attempt.campaign_id,
        influencer_name=name,
        influencer_email=info.get("email"),
        influencer_phone=info.get("phone") or None,
        influencer_handle=info.get("instagram") or info.get("tiktok") or "",
        shipping_address=info.get("shippingDetails") or info.get("address"),
        items=info.get("items") or [],
    )


class DuplicateReviewWorkflow:
    """Accept / decline transitions over pending duplicate attempts"""

    def __init__(self, order_repository: OrderRepositoryProtocol):
        self.order_repository = order_repository

    async def list_pending(self, campaign_id: Optional[str] = None, limit: int = 50) -> List[DuplicateAttempt]:
        return await self.order_repository.list_duplicate_attempts(campaign_id=campaign_id, limit=limit)

    async def accept(self, attempt_id: str) -> Order:
        """
        Promote a pending attempt to an order.

        The attempt is claimed first (pending -> accepted); if order creation
        then fails the claim is released so the attempt can be reviewed again.
        """
        attempt = await self.order_repository.get_duplicate_attempt(attempt_id)
        if not attempt:
            raise DuplicateAttemptNotFoundError(f"Duplicate attempt not found: {attempt_id}")
        if attempt.decision != DuplicateDecision.PENDING:
            raise DuplicateAttemptResolvedError(f"Duplicate attempt already resolved: {attempt_id}")

        claimed = await self.order_repository.set_duplicate_decision(
            attempt_id, expected=DuplicateDecision.PENDING, decision=DuplicateDecision.ACCEPTED
        )
        if not claimed:
            raise DuplicateAttemptResolvedError(f"Duplicate attempt already resolved: {attempt_id}")

        try:
            order = await self.order_repository.create_order(order_payload_from_snapshot(attempt))
        except Exception:
            logger.error(f"Order creation failed for duplicate attempt {attempt_id}, releasing it")
            await self.order_repository.set_duplicate_decision(
                attempt_id, expected=DuplicateDecision.ACCEPTED, decision=DuplicateDecision.PENDING
            )
            raise

        deleted = await self.order_repository.delete_duplicate_attempt(
            attempt_id, expected_decision=DuplicateDecision.ACCEPTED
        )
        if not deleted:
            logger.warning(f"Accepted duplicate attempt {attempt_id} was already removed")

        logger.info(f"Duplicate attempt {attempt_id} accepted as order {order.id}")
        return order

    async def decline(self, attempt_id: str) -> None:
        """Discard a pending attempt without creating an order"""
        deleted = await self.order_repository.delete_duplicate_attempt(
            attempt_id, expected_decision=DuplicateDecision.PENDING
        )
        # Zero rows means another reviewer got there first
        if not deleted:
            raise DuplicateAttemptResolvedError(f"Duplicate attempt already resolved: {attempt_id}")
        logger.info(f"Duplicate attempt {attempt_id} declined")
