"""
Storefront Order Extractor.

Handles online-store orders, where one order carries several line items and
booking details are scattered across:
- Line item options (selectedOptions/options) and their selections
- Checkout fields (orderExtraFields list, extraFields mapping)
- Order/item level pickupTime

Each line item becomes its own UnifiedOrder.
"""

import logging

from .base_extractor import BaseExtractor
from config import STOREFRONT_PLATFORM, UNKNOWN_PRODUCT_NAME
from models import OrderExtras
from utils.addon_detector import detect_addon_kind, inspect_addon_entry
from utils.normalization import (
    as_list, get_field_value, is_missing, parse_optional_count, parse_quantity,
)
from utils.party_breakdown import extract_party_breakdown, gender_of_label, is_party_total_label
from utils.pickup_resolver import resolve_pickup_moment

logger = logging.getLogger(__name__)

PICKUP_FIELD_KEY = 'ecwid_order_pickup_time'


def get_item_options(item):
    """selectedOptions when present, else options."""
    options = as_list(get_field_value(item, 'selectedOptions'))
    if options:
        return [option for option in options if isinstance(option, dict)]
    return [option for option in as_list(get_field_value(item, 'options')) if isinstance(option, dict)]


def get_selection_name(selection):
    name = get_field_value(selection, 'name', 'selectionTitle')
    return str(name).strip() if not is_missing(name) else None


def get_selection_value(selection):
    return get_field_value(selection, 'value', 'selectionTitle')


def get_order_extra_fields(order):
    """(label, value) pairs from the orderExtraFields list."""
    entries = []
    for field in as_list(get_field_value(order, 'orderExtraFields')):
        if not isinstance(field, dict):
            continue
        label = get_field_value(field, 'name', 'title', 'id')
        entries.append((label, field.get('value')))
    return entries


def get_extra_fields(order):
    """(key, value) pairs from the extraFields mapping."""
    extra_fields = get_field_value(order, 'extraFields')
    if not isinstance(extra_fields, dict):
        return []
    return list(extra_fields.items())


class StorefrontExtractor(BaseExtractor):
    """
    Extractor for storefront (Ecwid) orders.
    """

    def get_platform_types(self):
        return [STOREFRONT_PLATFORM]

    def can_handle(self, payload):
        return isinstance(payload, dict) and isinstance(get_field_value(payload, 'items'), list)

    def extract_orders(self, order, timezone):
        """
        Extract one UnifiedOrder per line item.

        Line items without a resolvable pickup moment are skipped.

        Args:
            order: Storefront order mapping
            timezone: IANA zone name

        Returns:
            list: UnifiedOrder objects
        """
        if not isinstance(order, dict):
            raise TypeError(f"Storefront order must be a mapping, got {type(order).__name__}")

        results = []
        for index, item in enumerate(as_list(get_field_value(order, 'items'))):
            if not isinstance(item, dict):
                continue
            unified = self.extract_order(order, timezone, item=item, index=index)
            if unified is not None:
                results.append(unified)

        logger.debug(f"[{order.get('id')}] Extracted {len(results)} line items")
        return results

    def extract_order(self, payload, timezone, item=None, index=0):
        """
        Extract a single line item of a storefront order.

        Args:
            payload: Storefront order mapping
            timezone: IANA zone name
            item: Line item mapping (defaults to the first item)
            index: Position of the item, used in fallback ids

        Returns:
            UnifiedOrder or None
        """
        order = payload
        if not isinstance(order, dict):
            raise TypeError(f"Storefront order must be a mapping, got {type(order).__name__}")

        if item is None:
            items = [entry for entry in as_list(get_field_value(order, 'items')) if isinstance(entry, dict)]
            if not items:
                logger.warning(f"Storefront order {order.get('id')} has no line items")
                return None
            item = items[0]

        order_id = get_field_value(order, 'id', 'orderNumber')
        item_ref = get_field_value(item, 'id', 'productId')
        unified_id = f"{order_id}-{item_ref if item_ref is not None else index}"

        moment = resolve_pickup_moment(self.collect_pickup_candidates(order, item), timezone, unified_id)
        if moment is None:
            logger.warning(f"[{unified_id}] No pickup moment found, skipping line item")
            return None

        trusted_totals = self.collect_party_totals(order, item)
        fallback_quantity = parse_quantity(get_field_value(item, 'quantity'))
        status = get_field_value(order, 'status', 'paymentStatus')

        breakdown = extract_party_breakdown(
            self.collect_party_entries(order, item),
            totals=trusted_totals,
            fallback_total=fallback_quantity,
            status=status,
            order_ref=unified_id,
        )

        person = get_field_value(order, 'shippingPerson') or get_field_value(order, 'billingPerson') or {}
        customer_name = self.build_customer_name(
            get_field_value(person, 'name'),
            None,
            get_field_value(order, 'email'),
            get_field_value(person, 'phone'),
            order_id,
        )

        return self.assemble_order(
            order_id=unified_id,
            platform_booking_id=str(order_id) if order_id is not None else None,
            platform=STOREFRONT_PLATFORM,
            status=status,
            moment=moment,
            breakdown=breakdown,
            extras=self.collect_extras(order, item),
            name_sources=[get_field_value(item, 'name')],
            raw_product_id=get_field_value(item, 'productId', 'sku'),
            fallback_product_name=get_field_value(item, 'name') or UNKNOWN_PRODUCT_NAME,
            fallback_quantity=None if trusted_totals else fallback_quantity,
            customer_name=customer_name,
            customer_phone=get_field_value(person, 'phone'),
        )

    def collect_pickup_candidates(self, order, item):
        """
        Candidate pickup values in priority order.

        1. order.pickupTime, item.pickupTime, extraFields pickup key
        2. option values, then their selections
        3. orderExtraFields
        4. remaining extraFields
        """
        extra_fields = get_field_value(order, 'extraFields')
        candidates = [
            ('pickupTime', get_field_value(order, 'pickupTime')),
            ('itemPickupTime', get_field_value(item, 'pickupTime')),
            ('extraPickupTime', get_field_value(extra_fields, PICKUP_FIELD_KEY)),
        ]

        for option in get_item_options(item):
            candidates.append((get_field_value(option, 'name'), option.get('value')))
            for selection in as_list(option.get('selections')):
                if isinstance(selection, dict):
                    candidates.append((get_selection_name(selection), get_selection_value(selection)))

        candidates.extend(get_order_extra_fields(order))
        candidates.extend(
            (key, value) for key, value in get_extra_fields(order) if key != PICKUP_FIELD_KEY
        )
        return [(label, value) for label, value in candidates if not is_missing(value)]

    def collect_party_entries(self, order, item):
        """
        Labeled values that may carry a gender breakdown.

        A non-gendered selection under a gendered option is skipped, as is a
        selection repeating its option's value, so nothing is counted twice.
        extraFields only contribute keys that name a gender.
        """
        entries = []
        for option in get_item_options(item):
            option_label = get_field_value(option, 'name')
            option_value = option.get('value')
            option_gender = gender_of_label(option_label)
            if not is_missing(option_value):
                entries.append((option_label, option_value))

            for selection in as_list(option.get('selections')):
                if not isinstance(selection, dict):
                    continue
                selection_label = get_selection_name(selection)
                selection_value = get_selection_value(selection)
                if is_missing(selection_value):
                    continue
                if str(selection_value).strip() == str(option_value).strip():
                    continue
                if gender_of_label(selection_label) or not option_gender:
                    entries.append((selection_label, selection_value))

        entries.extend(get_order_extra_fields(order))
        entries.extend(
            (key, value) for key, value in get_extra_fields(order) if gender_of_label(key)
        )
        return entries

    def collect_party_totals(self, order, item):
        """Counts from fields reporting the whole party ("Participants", "Pax")."""
        totals = []
        entries = [
            (get_field_value(option, 'name'), option.get('value')) for option in get_item_options(item)
        ]
        entries.extend(get_order_extra_fields(order))
        for label, value in entries:
            if is_party_total_label(label):
                count = parse_optional_count(value)
                if count is not None:
                    totals.append(count)
        return totals

    def collect_extras(self, order, item):
        """Add-on quantities from options, selections and checkout fields."""
        extras = OrderExtras()
        for option in get_item_options(item):
            option_name = get_field_value(option, 'name')
            selections = [entry for entry in as_list(option.get('selections')) if isinstance(entry, dict)]
            if not selections:
                inspect_addon_entry(extras, option_name, option.get('value'))
                continue

            for selection in selections:
                selection_value = get_selection_value(selection)
                if is_missing(selection_value):
                    continue
                selection_label = get_selection_name(selection)
                kind = inspect_addon_entry(extras, selection_label or option_name, selection_value)
                if (kind is None and selection_label and option_name
                        and option_name != selection_label and detect_addon_kind(selection_label) is None):
                    inspect_addon_entry(extras, option_name, selection_value)

        for label, value in get_order_extra_fields(order):
            inspect_addon_entry(extras, label, value)
        for key, value in get_extra_fields(order):
            inspect_addon_entry(extras, key, value)
        return extras

