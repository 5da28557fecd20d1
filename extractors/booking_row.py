"""
Booking Row Extractor.

Handles persisted Booking rows (or their record mappings).

Party and add-on figures come from:
- Structured party size columns (total, adults, children)
- The addons snapshot captured at booking time:
  partyBreakdown {men, women}, addons [{label, rawValue, quantity, category}],
  extras {tshirts, cocktails, photos}
"""

import re
import logging
from datetime import datetime

import pandas as pd

from .base_extractor import BaseExtractor
from config import ADDON_CATEGORIES, BOOKING_PLATFORMS, UNASSIGNED_PRODUCT_NAME
from models import Booking, OrderExtras
from utils.addon_detector import inspect_addon_entry, normalize_snapshot_extras
from utils.normalization import as_list, get_field_value, parse_quantity
from utils.party_breakdown import best_known_total, extract_party_breakdown
from utils.pickup_resolver import resolve_pickup_moment

logger = logging.getLogger(__name__)

_NAIVE_ISO_DATETIME = re.compile(r'^\d{4}-\d{2}-\d{2}[T ]\d{1,2}:\d{2}(?::\d{2}(?:\.\d{1,9})?)?$')


def _as_utc(value):
    """
    Stored start instants without an offset are UTC.

    Covers naive datetimes (Excel cells) and ISO strings without 'Z' or an
    offset (CSV/JSON exports). Anything else is passed on untouched.

    Example:
        "2024-06-01 18:45:00" -> Timestamp('2024-06-01 18:45:00+0000', tz='UTC')
    """
    try:
        if isinstance(value, (datetime, pd.Timestamp)):
            stamp = pd.Timestamp(value)
            if not pd.isna(stamp) and stamp.tzinfo is None:
                return stamp.tz_localize('UTC')
        elif isinstance(value, str) and _NAIVE_ISO_DATETIME.match(value.strip()):
            return pd.Timestamp(value.strip(), tz='UTC')
    except (ValueError, OverflowError):
        logger.debug(f"Start instant {value} could not be read as UTC")
    return value


def _as_date(value):
    """Spreadsheet date columns arrive as midnight timestamps; keep only the day."""
    if isinstance(value, datetime) and not pd.isna(value):
        return value.date()
    return value


def snapshot_addon_rows(snapshot):
    """addons rows of a snapshot as dicts."""
    if not isinstance(snapshot, dict):
        return []
    return [row for row in as_list(snapshot.get('addons')) if isinstance(row, dict)]


def addon_row_value(row):
    """quantity when present, else rawValue."""
    quantity = get_field_value(row, 'quantity')
    return quantity if quantity is not None else get_field_value(row, 'rawValue', 'value')


class BookingRowExtractor(BaseExtractor):
    """
    Extractor for persisted booking rows from any reservation channel.
    """

    def get_platform_types(self):
        return list(BOOKING_PLATFORMS)

    def can_handle(self, payload):
        return isinstance(payload, Booking)

    def to_booking(self, payload):
        """Accept a Booking or a record mapping."""
        if isinstance(payload, Booking):
            return payload
        return Booking.from_dict(payload)

    def extract_order(self, payload, timezone, **kwargs):
        """
        Convert a persisted booking row into a UnifiedOrder.

        Args:
            payload: Booking or record mapping
            timezone: IANA zone name

        Returns:
            UnifiedOrder, or None if the booking has no knowable pickup moment

        Raises:
            TypeError: If payload is neither a Booking nor a mapping
        """
        booking = self.to_booking(payload)
        order_ref = booking.platform_booking_id or booking.id
        snapshot = booking.addons_snapshot if isinstance(booking.addons_snapshot, dict) else {}

        moment = resolve_pickup_moment(self.collect_pickup_candidates(booking, snapshot), timezone, order_ref)
        if moment is None:
            logger.warning(f"[{order_ref}] No experience date or start time, booking left out")
            return None

        breakdown = extract_party_breakdown(
            self.collect_party_entries(snapshot),
            totals=[
                booking.party_size_total,
                best_known_total(None, booking.party_size_adults, booking.party_size_children),
            ],
            fallback_total=booking.party_size_adults,
            status=booking.status,
            order_ref=order_ref,
        )

        customer_name = self.build_customer_name(
            booking.guest_first_name,
            booking.guest_last_name,
            booking.guest_email,
            booking.guest_phone,
            booking.id,
        )

        return self.assemble_order(
            order_id=booking.id if booking.id is not None else order_ref,
            platform_booking_id=booking.platform_booking_id,
            platform=booking.platform,
            status=booking.status,
            moment=moment,
            breakdown=breakdown,
            extras=self.collect_extras(snapshot),
            name_sources=[booking.product_name],
            raw_product_id=booking.product_id,
            fallback_product_name=booking.product_name or UNASSIGNED_PRODUCT_NAME,
            customer_name=customer_name,
            customer_phone=booking.guest_phone,
        )

    def collect_pickup_candidates(self, booking, snapshot):
        return [
            ('experienceStartAt', _as_utc(booking.experience_start_at)),
            ('experienceDate', _as_date(booking.experience_date)),
            ('snapshotPickupTime', get_field_value(snapshot, 'pickupTime', 'pickup_time')),
            ('snapshotTime', get_field_value(snapshot, 'time', 'timeslot')),
        ]

    def collect_party_entries(self, snapshot):
        """
        Labeled party values from the snapshot.

        partyBreakdown already summarizes the addon rows, so the rows are only
        read when it is absent.
        """
        breakdown = get_field_value(snapshot, 'partyBreakdown', 'party_breakdown')
        if isinstance(breakdown, dict):
            return [
                ('men', breakdown.get('men')),
                ('women', breakdown.get('women')),
            ]

        entries = []
        for row in snapshot_addon_rows(snapshot):
            entries.append((get_field_value(row, 'label', 'name'), addon_row_value(row)))
        return entries

    def collect_extras(self, snapshot):
        """
        Add-on counts: the snapshot's extras when present, else detected from rows.
        """
        extras = normalize_snapshot_extras(snapshot)
        if extras is not None:
            return extras

        extras = OrderExtras()
        for row in snapshot_addon_rows(snapshot):
            category = get_field_value(row, 'category')
            label = get_field_value(row, 'label', 'name')
            if category in ADDON_CATEGORIES:
                quantity = parse_quantity(addon_row_value(row))
                if quantity > 0:
                    extras.add(category, quantity)
                continue
            inspect_addon_entry(extras, label, addon_row_value(row))
        return extras
