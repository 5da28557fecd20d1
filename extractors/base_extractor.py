"""
Base extractor class defining the interface for all order extractors.
"""

import logging
from abc import ABC, abstractmethod

from config import STATUS_REBOOKED, UNKNOWN_PRODUCT_NAME
from models import OrderExtras, UnifiedOrder
from utils.normalization import is_missing, normalize_status, platform_key
from utils.product_name import derive_product_identity

logger = logging.getLogger(__name__)


class BaseExtractor(ABC):
    """
    Abstract base class for all channel order extractors.

    Each extractor must implement:
    - extract_order: Turn one channel payload into a UnifiedOrder (or None)
    - get_platform_types: Return list of channel names this extractor handles
    - can_handle: Tell whether a raw payload has this extractor's shape
    """

    @abstractmethod
    def extract_order(self, payload, timezone, **kwargs):
        """
        Build a unified manifest line from a channel payload.

        Args:
            payload: Channel payload (Booking, storefront order, email event)
            timezone: IANA zone name of the business
            **kwargs: Extractor-specific options

        Returns:
            UnifiedOrder, or None if no pickup moment could be resolved
        """
        pass

    @abstractmethod
    def get_platform_types(self):
        """
        Get list of channel names this extractor handles.

        Returns:
            list: List of channel name strings
        """
        pass

    @abstractmethod
    def can_handle(self, payload):
        """
        Check whether this extractor understands the payload shape.

        Args:
            payload: Raw payload

        Returns:
            bool
        """
        pass

    def build_customer_name(self, first_name=None, last_name=None, email=None, phone=None, fallback_ref=None):
        """
        Build a display name for the lead guest.

        Fallback chain: "First Last", email, phone, "Booking #<ref>".

        Example:
            (None, None, "anna@example.com") -> "anna@example.com"
        """
        parts = [str(part).strip() for part in (first_name, last_name) if not is_missing(part)]
        if parts:
            return ' '.join(parts)
        if not is_missing(email):
            return str(email).strip()
        if not is_missing(phone):
            return str(phone).strip()
        return f"Booking #{fallback_ref}"

    def assemble_order(self, order_id, platform_booking_id, platform, status, moment,
                       breakdown, extras, name_sources, raw_product_id=None,
                       fallback_product_name=UNKNOWN_PRODUCT_NAME, fallback_quantity=None,
                       customer_name='', customer_phone=None):
        """
        Assemble a UnifiedOrder from already-extracted pieces.

        Applies the rules shared by every channel:
        - Product key/label derivation with fallbacks
        - Quantity = reconciled headcount; the fallback quantity is only used
          when no party total was known and the breakdown is empty
        - Rebooked orders carry no headcount, quantity or add-ons
        - Channels outside get_platform_types() are logged, not rejected

        Args:
            order_id: Unified order id
            platform_booking_id: Channel booking reference
            platform: Channel name
            status: Raw status string
            moment: Resolved PickupMoment
            breakdown: {'men': int, 'women': int}
            extras: OrderExtras
            name_sources: Candidate product names, most trusted first
            raw_product_id: Channel-native product id
            fallback_product_name: Display name when no label can be derived
            fallback_quantity: Quantity when the breakdown is empty and no
                party total was known (None when a total was known)
            customer_name: Lead guest display name
            customer_phone: Lead guest phone

        Returns:
            UnifiedOrder
        """
        status = normalize_status(status)
        if platform_key(platform) not in self.get_platform_types():
            logger.warning(f"[{order_id}] Channel '{platform}' is not one of {self.get_platform_types()}")

        product_id, label = derive_product_identity(
            name_sources, raw_product_id, platform, platform_booking_id or order_id
        )

        men = breakdown.get('men', 0)
        women = breakdown.get('women', 0)
        quantity = men + women
        if quantity == 0 and fallback_quantity:
            quantity = fallback_quantity
        extras = extras.copy() if extras is not None else OrderExtras()

        if status == STATUS_REBOOKED:
            logger.debug(f"[{order_id}] Rebooked, zeroing headcount and add-ons")
            men = women = quantity = 0
            extras = OrderExtras()

        return UnifiedOrder(
            id=str(order_id),
            platform_booking_id=platform_booking_id,
            product_id=product_id,
            product_name=label or fallback_product_name,
            date=moment.local_date(),
            timeslot=moment.local_time(),
            quantity=quantity,
            men_count=men,
            women_count=women,
            customer_name=customer_name,
            platform=platform,
            status=status,
            pickup_date_time=moment.utc_iso(),
            customer_phone=customer_phone,
            extras=extras,
        )
