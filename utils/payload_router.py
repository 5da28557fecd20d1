"""
Payload Router

Identifies which channel shape a raw payload has:
1. Storefront order (order with line items)
2. Parsed reservation email event
3. Persisted booking row (Booking or its record mapping)
"""

import logging
from enum import Enum

from models import Booking, BOOKING_FIELD_ALIASES

logger = logging.getLogger(__name__)


class PayloadKind(Enum):
    """Enumeration of supported payload shapes."""
    STOREFRONT_ORDER = "storefront_order"
    RESERVATION_EMAIL = "reservation_email"
    BOOKING_ROW = "booking_row"


# Keys that only a persisted booking row carries
_BOOKING_ROW_KEYS = {
    alias.lower()
    for attribute, aliases in BOOKING_FIELD_ALIASES.items()
    if attribute not in ('id', 'platform', 'status', 'platform_booking_id')
    for alias in aliases
}


def detect_payload_kind(payload):
    """
    Determine the shape of a raw payload.

    Args:
        payload: Booking instance or untyped mapping

    Returns:
        PayloadKind

    Raises:
        TypeError: If payload is neither a Booking nor a mapping
        ValueError: If the mapping matches no known shape
    """
    if isinstance(payload, Booking):
        return PayloadKind.BOOKING_ROW

    if not isinstance(payload, dict):
        raise TypeError(f"Payload must be a Booking or a mapping, got {type(payload).__name__}")

    keys = {str(key).lower() for key in payload.keys()}

    if 'items' in keys and isinstance(payload.get('items'), list):
        return PayloadKind.STOREFRONT_ORDER

    if 'bookingfields' in keys or 'booking_fields' in keys:
        return PayloadKind.RESERVATION_EMAIL

    if keys & _BOOKING_ROW_KEYS:
        return PayloadKind.BOOKING_ROW

    raise ValueError(f"Unrecognised payload shape with keys: {sorted(keys)}")
