"""
Reservation Email Extractor.

Handles parsed reservation-email events, as produced by the channel email
parsers:
    {platform, platformBookingId, status, bookingFields: {...},
     addons: [{platformAddonName, quantity, metadata}]}

The event is folded into a Booking and then handled like a booking row.
"""

import copy
import logging

from .booking_row import BookingRowExtractor
from models import Booking
from utils.normalization import as_list, get_field_value, is_missing

logger = logging.getLogger(__name__)


class ReservationEmailExtractor(BookingRowExtractor):
    """
    Extractor for parsed reservation-email events.
    """

    def can_handle(self, payload):
        return isinstance(payload, dict) and isinstance(
            get_field_value(payload, 'bookingFields', 'booking_fields'), dict
        )

    def to_booking(self, payload):
        """
        Fold an email event into a Booking.

        Event-level platform/platformBookingId/status win over the same keys
        inside bookingFields. Event addons are added to the snapshot rows only
        when the snapshot has neither rows nor extras of its own.

        Raises:
            TypeError: If payload is not a mapping
        """
        if isinstance(payload, Booking):
            return payload
        if not isinstance(payload, dict):
            raise TypeError(f"Reservation event must be a mapping, got {type(payload).__name__}")

        fields = get_field_value(payload, 'bookingFields', 'booking_fields')
        record = dict(fields) if isinstance(fields, dict) else {}

        for key in ('platform', 'platformBookingId', 'status'):
            value = get_field_value(payload, key)
            if value is not None:
                record[key] = value

        if is_missing(record.get('id')):
            record['id'] = f"{record.get('platform', 'unknown')}-{record.get('platformBookingId')}"

        booking = Booking.from_dict(record)

        addon_rows = self.event_addon_rows(payload)
        if addon_rows:
            snapshot = copy.deepcopy(booking.addons_snapshot) if booking.addons_snapshot else {}
            if not snapshot.get('addons') and not snapshot.get('extras'):
                snapshot['addons'] = addon_rows
                logger.debug(f"[{booking.platform_booking_id}] Using {len(addon_rows)} event add-on rows")
            booking.addons_snapshot = snapshot

        return booking

    def event_addon_rows(self, payload):
        """Event addons as snapshot-style rows {label, quantity, category}."""
        rows = []
        for addon in as_list(get_field_value(payload, 'addons')):
            if not isinstance(addon, dict):
                continue
            metadata = get_field_value(addon, 'metadata') or {}
            rows.append({
                'label': get_field_value(addon, 'platformAddonName', 'name', 'label'),
                'quantity': get_field_value(addon, 'quantity'),
                'category': get_field_value(metadata, 'category'),
                'rawValue': get_field_value(metadata, 'rawValue'),
            })
        return rows
