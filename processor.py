"""
Main manifest processor.

Orchestrates the complete manifest workflow:
1. Route each payload to the matching extractor
2. Transform bookings/orders into unified orders
3. Filter by date range, product and timeslot
4. Aggregate into manifest groups and a summary
5. Collect data-quality issues
"""

import logging

import pandas as pd

from config import DEFAULT_BUSINESS_TIMEZONE
from extractors import BookingRowExtractor, ReservationEmailExtractor, StorefrontExtractor
from manifest import aggregate_manifest as build_manifest, collect_products, filter_orders
from utils.payload_router import PayloadKind, detect_payload_kind
from validators import check_manifest_totals, check_missing_headcount, check_rebooked_zeroed

logger = logging.getLogger(__name__)

_EXTRACTORS = {
    PayloadKind.STOREFRONT_ORDER: StorefrontExtractor(),
    PayloadKind.RESERVATION_EMAIL: ReservationEmailExtractor(),
    PayloadKind.BOOKING_ROW: BookingRowExtractor(),
}


def validate_timezone(timezone):
    """
    Check that a timezone name is usable.

    Args:
        timezone: IANA zone name

    Returns:
        str: The same name

    Raises:
        ValueError: If the zone is unknown
    """
    if not isinstance(timezone, str) or not timezone.strip():
        raise ValueError(f"Timezone must be a non-empty zone name, got {timezone!r}")
    try:
        pd.Timestamp(0, tz=timezone)
    except (KeyError, ValueError, TypeError) as e:
        raise ValueError(f"Unknown timezone: {timezone}") from e
    return timezone


def get_extractor(payload):
    """Extractor for a payload's shape (raises TypeError/ValueError on bad input)."""
    return _EXTRACTORS[detect_payload_kind(payload)]


def transform(payload, timezone=DEFAULT_BUSINESS_TIMEZONE, item=None):
    """
    Transform one booking or channel order into a UnifiedOrder.

    Args:
        payload: Booking, booking record mapping, storefront order or
            reservation-email event
        timezone: IANA zone name of the business
        item: For storefront orders, the line item to transform
            (defaults to the first one)

    Returns:
        UnifiedOrder, or None if no pickup moment can be resolved

    Raises:
        TypeError: If payload is not a Booking or mapping
        ValueError: If the payload shape or timezone is not recognised

    Example:
        transform({'id': 1, 'experienceStartAt': '2024-06-01T18:45:00Z'}, 'Europe/Warsaw')
    """
    validate_timezone(timezone)
    extractor = get_extractor(payload)
    if isinstance(extractor, StorefrontExtractor):
        return extractor.extract_order(payload, timezone, item=item)
    return extractor.extract_order(payload, timezone)


def transform_many(payloads, timezone=DEFAULT_BUSINESS_TIMEZONE):
    """
    Transform many payloads, expanding storefront orders to every line item.

    Payloads without a resolvable pickup moment are dropped.

    Returns:
        list: UnifiedOrder objects, in input order
    """
    validate_timezone(timezone)
    orders = []
    for payload in payloads:
        extractor = get_extractor(payload)
        if isinstance(extractor, StorefrontExtractor):
            orders.extend(extractor.extract_orders(payload, timezone))
            continue
        order = extractor.extract_order(payload, timezone)
        if order is not None:
            orders.append(order)
    return orders


def aggregate_manifest(orders, timezone=DEFAULT_BUSINESS_TIMEZONE):
    """
    Aggregate unified orders into a manifest.

    Returns:
        ManifestResult
    """
    validate_timezone(timezone)
    return build_manifest(orders, timezone)


class ManifestProcessor:
    """
    Main processor building a manifest from booking rows, storefront orders
    and reservation-email events.
    """

    def __init__(self, bookings=None, storefront_orders=None, reservation_events=None,
                 timezone=DEFAULT_BUSINESS_TIMEZONE):
        """
        Initialize processor with data.

        Args:
            bookings: Booking objects or record mappings
            storefront_orders: Storefront order mappings
            reservation_events: Parsed reservation-email events
            timezone: IANA zone name, fixed for the whole run
        """
        self.bookings = list(bookings or [])
        self.storefront_orders = list(storefront_orders or [])
        self.reservation_events = list(reservation_events or [])
        self.timezone = validate_timezone(timezone)

        self.booking_extractor = BookingRowExtractor()
        self.storefront_extractor = StorefrontExtractor()
        self.email_extractor = ReservationEmailExtractor()

        self.issues = []

        logger.info(
            f"Processor ready: {len(self.bookings)} bookings, "
            f"{len(self.storefront_orders)} storefront orders, "
            f"{len(self.reservation_events)} reservation events ({self.timezone})"
        )

    def process(self, date=None, date_from=None, date_to=None, product_id=None, time=None):
        """
        Execute the complete manifest process.

        Args:
            date: Single 'YYYY-MM-DD' day to keep
            date_from: Range start 'YYYY-MM-DD' (inclusive)
            date_to: Range end 'YYYY-MM-DD' (inclusive)
            product_id: Product key to keep
            time: 'HH:MM' timeslot to keep

        Returns:
            dict: {
                'orders': list of UnifiedOrder,
                'products': list of UnifiedProduct,
                'manifest': ManifestResult,
                'issues': list of {'order': str, 'message': str}
            }
        """
        logger.info("Starting manifest process...")
        self.issues = []

        # Step 1: Transform every source
        orders = self._transform_all()

        # Step 2: Filter
        orders = self._filter_by_range(orders, date_from, date_to)
        orders = filter_orders(orders, date=date, product_id=product_id, time=time)
        logger.info(f"{len(orders)} orders after filtering")

        # Step 3: Per-order checks
        for order in orders:
            for error in (check_missing_headcount(order), check_rebooked_zeroed(order)):
                if error:
                    self._add_issue(order.platform_booking_id or order.id, error)

        # Step 4: Aggregate
        result = build_manifest(orders, self.timezone)

        # Step 5: Reconcile
        for error in check_manifest_totals(result, orders):
            self._add_issue('manifest', error)

        logger.info(f"Manifest process complete: {len(self.issues)} issues")

        return {
            'orders': orders,
            'products': collect_products(orders),
            'manifest': result,
            'issues': list(self.issues),
        }

    def _transform_all(self):
        orders = []

        for booking in self.bookings:
            order = self.booking_extractor.extract_order(booking, self.timezone)
            self._keep_or_report(orders, order, booking)

        for event in self.reservation_events:
            order = self.email_extractor.extract_order(event, self.timezone)
            self._keep_or_report(orders, order, event)

        for storefront_order in self.storefront_orders:
            extracted = self.storefront_extractor.extract_orders(storefront_order, self.timezone)
            if not extracted:
                self._add_issue(self._payload_ref(storefront_order), "No line item with a pickup moment")
            orders.extend(extracted)

        logger.info(f"Transformed {len(orders)} orders")
        return orders

    def _keep_or_report(self, orders, order, payload):
        if order is None:
            self._add_issue(self._payload_ref(payload), "No pickup moment, left out of the manifest")
        else:
            orders.append(order)

    @staticmethod
    def _payload_ref(payload):
        if isinstance(payload, dict):
            for key in ('platformBookingId', 'platform_booking_id', 'id', 'orderNumber'):
                if payload.get(key) is not None:
                    return str(payload[key])
            return 'unknown'
        return str(getattr(payload, 'platform_booking_id', None) or getattr(payload, 'id', 'unknown'))

    @staticmethod
    def _filter_by_range(orders, date_from, date_to):
        if not date_from and not date_to:
            return orders
        return [
            order for order in orders
            if (not date_from or order.date >= date_from) and (not date_to or order.date <= date_to)
        ]

    def _add_issue(self, ref, message):
        self.issues.append({'order': str(ref), 'message': message})
