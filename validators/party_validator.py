"""
Party count validation.

Validates:
- Gender breakdown vs reported party total mismatches
- Headcount signal missing entirely
- Rebooked placeholders still carrying headcount
"""

import logging

from config import STATUS_REBOOKED

logger = logging.getLogger(__name__)


def check_party_total_mismatch(men, women, total, order_ref=None):
    """
    Check if an extracted gender breakdown disagrees with the party total.

    Args:
        men: Extracted men count
        women: Extracted women count
        total: Trusted party total (None means nothing to compare)
        order_ref: Booking reference for the message

    Returns:
        str: Error message if mismatch, empty string otherwise
    """
    if total is None or men + women == total:
        return ""

    ref_msg = f" for booking {order_ref}" if order_ref else ""
    error = (
        f"Gender breakdown ({men} men, {women} women) does not match "
        f"party total ({total}){ref_msg}; rescaled"
    )
    logger.warning(error)
    return error


def check_missing_headcount(order):
    """
    Check if a non-rebooked order ended up with no headcount at all.

    Args:
        order: UnifiedOrder

    Returns:
        str: Error message if headcount is zero, empty string otherwise
    """
    if order.status == STATUS_REBOOKED or order.headcount > 0:
        return ""

    error = f"No party size found for booking {order.platform_booking_id or order.id}"
    logger.warning(error)
    return error


def check_rebooked_zeroed(order):
    """
    Check that a rebooked placeholder carries no headcount or add-ons.

    Args:
        order: UnifiedOrder

    Returns:
        str: Error message if anything is non-zero, empty string otherwise
    """
    if order.status != STATUS_REBOOKED:
        return ""

    if order.quantity == 0 and order.headcount == 0 and order.extras.is_empty():
        return ""

    error = f"Rebooked booking {order.platform_booking_id or order.id} still carries headcount"
    logger.error(error)
    return error
