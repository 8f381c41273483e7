"""
Gifting Service Eligibility Evaluator

Composes the campaign rules and field validators into the gating decisions
of the claim flow: product selection, contact-field readiness and the final
submit verdict. Pure and synchronous; safe to call from any surface.
"""

from typing import Dict, List, Optional, Sequence

from pydantic import BaseModel, Field

from .campaign_rules import (
    check_cart_value,
    check_item_count,
    check_order_limit,
    format_cart_limit,
    get_item_limit,
    get_max_cart_value,
    get_selected_total,
    is_country_allowed,
    is_max_cart_exceeded,
    is_order_limit_reached,
)
from .models import ALLOWED, Campaign, ClaimAttempt, ContactFields, Product, Rejected, ShippingAddress, Verdict
from .plans import USAGE_LIMIT_MESSAGE
from .validators import is_valid_email_address, is_valid_social_handle, phone_error

MIN_ADDRESS_LENGTH = 10

FIELD_ERRORS_MESSAGE = "Please fix highlighted fields before submitting."
ADDRESS_MESSAGE = "Please enter a complete address to continue."
CONSENT_MESSAGE = "Please accept the consent terms to continue."
ORDER_LIMIT_MESSAGE = "This campaign has reached its order limit."


class SelectionState(BaseModel):
    """Selection gating derived from the campaign and the current picks"""
    item_limit: int
    selected_total: float
    max_cart_value: Optional[float] = None
    order_limit_reached: bool = False
    max_cart_exceeded: bool = False

    @property
    def selection_blocked(self) -> bool:
        return self.order_limit_reached or self.max_cart_exceeded


class SelectionChange(BaseModel):
    """Result of toggling one product in the picker"""
    selected_ids: List[str] = Field(default_factory=list)
    error: Optional[str] = None


def evaluate_selection(campaign: Campaign, selected_products: Sequence[Product]) -> SelectionState:
    return SelectionState(
        item_limit=get_item_limit(campaign),
        selected_total=get_selected_total(selected_products),
        max_cart_value=get_max_cart_value(campaign),
        order_limit_reached=is_order_limit_reached(campaign),
        max_cart_exceeded=is_max_cart_exceeded(campaign, selected_products),
    )


def selection_notice(state: SelectionState, campaign: Campaign) -> Optional[str]:
    if state.order_limit_reached:
        return ORDER_LIMIT_MESSAGE
    if state.max_cart_exceeded and state.max_cart_value:
        return f"Selected gifts exceed {format_cart_limit(campaign)}."
    return None


def toggle_selection(
    campaign: Campaign,
    offered: Sequence[Product],
    selected_ids: Sequence[str],
    product_id: str,
) -> SelectionChange:
    """
    Add or remove a product from the selection.

    Removing always succeeds. Adding past the item limit is refused without a
    message; adding past the cart cap is refused with one.
    """
    current = list(selected_ids)
    if product_id in current:
        return SelectionChange(selected_ids=[pid for pid in current if pid != product_id])

    if len(current) >= get_item_limit(campaign):
        return SelectionChange(selected_ids=current)

    candidate = current + [product_id]
    items = [p for p in offered if p.id in candidate]
    if is_max_cart_exceeded(campaign, items):
        return SelectionChange(
            selected_ids=current,
            error=f"Selected gifts exceed {format_cart_limit(campaign)}.",
        )
    return SelectionChange(selected_ids=candidate)


# ====================
# Contact fields
# ====================

def validate_contact_fields(campaign: Campaign, contact: ContactFields) -> Dict[str, str]:
    """Field name -> error message for every enabled field that fails"""
    errors = {}
    if not is_valid_email_address(contact.email):
        errors["email"] = "Please enter a valid email address."
    if campaign.show_phone_field:
        message = phone_error(contact.phone, contact.phone_country)
        if message:
            errors["phone"] = message
    if campaign.show_instagram_field and not is_valid_social_handle(contact.instagram):
        errors["instagram"] = "Instagram handle must include letters or numbers."
    if campaign.show_tiktok_field and not is_valid_social_handle(contact.tiktok):
        errors["tiktok"] = "TikTok handle must include letters or numbers."
    return errors


def contact_fields_complete(campaign: Campaign, contact: ContactFields) -> bool:
    return not validate_contact_fields(campaign, contact)


def is_address_valid(address: Optional[str], structured: Optional[ShippingAddress]) -> bool:
    if structured:
        return True
    if not address:
        return False
    return len(address.strip()) >= MIN_ADDRESS_LENGTH


def is_consent_missing(campaign: Campaign, contact: ContactFields) -> bool:
    if not campaign.show_consent_checkbox:
        return False
    if not contact.consent_primary:
        return True
    return bool(campaign.require_second_consent) and not contact.consent_secondary


def is_custom_question_answered(campaign: Campaign, contact: ContactFields) -> bool:
    if not campaign.ask_custom_question or not campaign.custom_question_required:
        return True
    return bool((contact.custom_answer or "").strip())


# ====================
# Submit
# ====================

def evaluate_claim(campaign: Campaign, claim: ClaimAttempt, usage_limit_reached: bool = False) -> Verdict:
    """
    Final submit verdict; the first failing check decides the message.

    Order: merchant usage cap, order limit, item count, cart value, shipping
    country, contact fields, address, consent, custom question. The duplicate check
    runs afterwards in the service since it needs the order store.
    """
    if usage_limit_reached:
        return Rejected(reason=USAGE_LIMIT_MESSAGE)

    verdict = check_order_limit(campaign)
    if not verdict.allowed:
        return verdict

    verdict = check_item_count(campaign, claim.selected_products)
    if not verdict.allowed:
        return verdict

    verdict = check_cart_value(campaign, claim.selected_products)
    if not verdict.allowed:
        return verdict

    verdict = is_country_allowed(campaign, claim.country)
    if not verdict.allowed:
        return verdict

    if validate_contact_fields(campaign, claim.contact):
        return Rejected(reason=FIELD_ERRORS_MESSAGE)

    if not is_address_valid(claim.address, claim.structured_address):
        return Rejected(reason=ADDRESS_MESSAGE)

    if is_consent_missing(campaign, claim.contact):
        return Rejected(reason=CONSENT_MESSAGE)

    if not is_custom_question_answered(campaign, claim.contact):
        return Rejected(reason=FIELD_ERRORS_MESSAGE)

    return ALLOWED
