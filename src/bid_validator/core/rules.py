"""
Placement policy rules.

Each rule is a pure check of one ad against one request slot. A rule
returns None when the ad complies and the matching RejectionReason when
it does not. Rules are evaluated in RULES order and evaluation stops at
the first failure.
"""

from enum import Enum
from typing import Callable, Optional
from urllib.parse import urlsplit

from bid_validator.core.metadata import Metadata
from bid_validator.models.bidding import Ad, AdSlot

# Creative attribute codes with policy meaning beyond plain exclusion
CREATIVE_FLASH = 34
CREATIVE_SSL = 47
CREATIVE_NON_SSL = 48
CREATIVE_NON_FLASH = 50

SECURE_SCHEMES = frozenset({"https"})


class RejectionReason(str, Enum):
    """Why a bid or ad was removed from the response."""

    # Slot and deal matching
    UNMATCHED_SLOT = "unmatched_slot"
    DEAL_MISMATCH = "deal_mismatch"
    DEAL_REQUIRED = "deal_required"
    NO_SLOTS = "no_slots"

    # Policy rules
    EXCLUDED_ATTRIBUTE = "excluded_attribute"
    EXCLUDED_PRODUCT_CATEGORY = "excluded_product_category"
    EXCLUDED_SENSITIVE_CATEGORY = "excluded_sensitive_category"
    VENDOR_NOT_ALLOWED = "vendor_not_allowed"
    RESTRICTED_CATEGORY_NOT_ALLOWED = "restricted_category_not_allowed"
    FLASH_NOT_DECLARED = "flash_not_declared"
    SSL_NOT_COMPLIANT = "ssl_not_compliant"


Rule = Callable[[AdSlot, Ad, Metadata], Optional[RejectionReason]]


def check_excluded_attribute(
    slot: AdSlot, ad: Ad, metadata: Metadata
) -> Optional[RejectionReason]:
    if ad.attribute & slot.excluded_attribute:
        return RejectionReason.EXCLUDED_ATTRIBUTE
    return None


def check_excluded_product_category(
    slot: AdSlot, ad: Ad, metadata: Metadata
) -> Optional[RejectionReason]:
    if ad.category & slot.excluded_product_category:
        return RejectionReason.EXCLUDED_PRODUCT_CATEGORY
    return None


def check_excluded_sensitive_category(
    slot: AdSlot, ad: Ad, metadata: Metadata
) -> Optional[RejectionReason]:
    """Ad categories are decoded to sensitive codes before comparison."""
    if not slot.excluded_sensitive_category:
        return None
    if metadata.sensitive_categories_of(ad.category) & slot.excluded_sensitive_category:
        return RejectionReason.EXCLUDED_SENSITIVE_CATEGORY
    return None


def check_allowed_vendor(
    slot: AdSlot, ad: Ad, metadata: Metadata
) -> Optional[RejectionReason]:
    """Empty whitelist allows every vendor."""
    if slot.allowed_vendor_type and not ad.vendor_type <= slot.allowed_vendor_type:
        return RejectionReason.VENDOR_NOT_ALLOWED
    return None


def check_allowed_restricted_category(
    slot: AdSlot, ad: Ad, metadata: Metadata
) -> Optional[RejectionReason]:
    """Empty whitelist allows every restricted category."""
    if (
        slot.allowed_restricted_category
        and not ad.restricted_category <= slot.allowed_restricted_category
    ):
        return RejectionReason.RESTRICTED_CATEGORY_NOT_ALLOWED
    return None


def check_flash(slot: AdSlot, ad: Ad, metadata: Metadata) -> Optional[RejectionReason]:
    """Flash-free slots need an explicit non-flash declaration; silence means flash."""
    if CREATIVE_FLASH in slot.excluded_attribute and CREATIVE_NON_FLASH not in ad.attribute:
        return RejectionReason.FLASH_NOT_DECLARED
    return None


def check_ssl(slot: AdSlot, ad: Ad, metadata: Metadata) -> Optional[RejectionReason]:
    """SSL-only slots need the SSL declaration and https click-through URLs."""
    if CREATIVE_NON_SSL not in slot.excluded_attribute:
        return None
    if CREATIVE_SSL not in ad.attribute:
        return RejectionReason.SSL_NOT_COMPLIANT
    if not all(is_secure_url(url) for url in ad.click_through_url):
        return RejectionReason.SSL_NOT_COMPLIANT
    return None


def is_secure_url(url: str) -> bool:
    return urlsplit(url.strip()).scheme.lower() in SECURE_SCHEMES


RULES: tuple[Rule, ...] = (
    check_excluded_attribute,
    check_excluded_product_category,
    check_excluded_sensitive_category,
    check_allowed_vendor,
    check_allowed_restricted_category,
    check_flash,
    check_ssl,
)


def evaluate_rules(
    slot: AdSlot,
    ad: Ad,
    metadata: Metadata,
    rules: tuple[Rule, ...] = RULES,
) -> Optional[RejectionReason]:
    """Run rules in order; return the first failure or None if all pass."""
    for rule in rules:
        reason = rule(slot, ad, metadata)
        if reason is not None:
            return reason
    return None
