"""
Record types shared by the extractors and the manifest aggregator.

Booking is the read-only persisted row handed to us by the persistence layer.
Everything else (UnifiedOrder, ManifestGroup, ManifestSummary) is derived,
recomputed on every call and never stored.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import pandas as pd

from config import BOOKING_STATUSES, UNKNOWN_TIMESLOT

logger = logging.getLogger(__name__)


# Booking attribute -> accepted source keys (camelCase wire names first)
BOOKING_FIELD_ALIASES = {
    'id': ['id', 'bookingId', 'booking_id'],
    'platform': ['platform', 'channel'],
    'platform_booking_id': ['platformBookingId', 'platform_booking_id'],
    'status': ['status'],
    'experience_date': ['experienceDate', 'experience_date'],
    'experience_start_at': ['experienceStartAt', 'experience_start_at'],
    'party_size_adults': ['partySizeAdults', 'party_size_adults'],
    'party_size_children': ['partySizeChildren', 'party_size_children'],
    'party_size_total': ['partySizeTotal', 'party_size_total'],
    'addons_snapshot': ['addonsSnapshot', 'addons_snapshot'],
    'guest_first_name': ['guestFirstName', 'guest_first_name'],
    'guest_last_name': ['guestLastName', 'guest_last_name'],
    'guest_email': ['guestEmail', 'guest_email'],
    'guest_phone': ['guestPhone', 'guest_phone'],
    'product_id': ['productId', 'product_id'],
    'product_name': ['productName', 'product_name'],
    'product_variant': ['productVariant', 'product_variant'],
}

INTEGER_FIELDS = {'party_size_adults', 'party_size_children', 'party_size_total'}


def _clean_value(value):
    """Turn NaN/NaT/blank strings into None, leave everything else alone."""
    if value is None:
        return None
    if isinstance(value, (list, dict)):
        return value
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        return value
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _to_int(value):
    if value is None or isinstance(value, bool):
        return None
    try:
        number = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return None
    return number if number >= 0 else None


def _to_snapshot(value):
    if isinstance(value, dict):
        return value
    if isinstance(value, str):
        try:
            decoded = json.loads(value)
        except ValueError:
            logger.debug(f"addonsSnapshot is not valid JSON: {value[:60]}")
            return None
        return decoded if isinstance(decoded, dict) else None
    return None


@dataclass
class Booking:
    """
    Persisted booking row, consumed read-only.

    Any of the party size fields may be missing or disagree with each other;
    addons_snapshot is free-form JSON captured at booking time, typically
    holding 'partyBreakdown', 'addons' and 'extras' keys.
    """

    id: Any = None
    platform: str = 'unknown'
    platform_booking_id: Optional[str] = None
    status: str = 'unknown'
    experience_date: Any = None
    experience_start_at: Any = None
    party_size_adults: Optional[int] = None
    party_size_children: Optional[int] = None
    party_size_total: Optional[int] = None
    addons_snapshot: Optional[Dict[str, Any]] = None
    guest_first_name: Optional[str] = None
    guest_last_name: Optional[str] = None
    guest_email: Optional[str] = None
    guest_phone: Optional[str] = None
    product_id: Any = None
    product_name: Optional[str] = None
    product_variant: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Booking":
        """
        Create a Booking from a row/record mapping.

        Accepts camelCase (API/ORM) or snake_case (export) keys. Unknown keys
        are ignored; unusable values become None.

        Args:
            data: Mapping with booking attributes

        Returns:
            Booking instance

        Raises:
            TypeError: If data is not a mapping
        """
        if not isinstance(data, dict):
            raise TypeError(f"Booking record must be a mapping, got {type(data).__name__}")

        values = {}
        for attribute, aliases in BOOKING_FIELD_ALIASES.items():
            for alias in aliases:
                if alias in data:
                    values[attribute] = _clean_value(data[alias])
                    break

        for attribute in INTEGER_FIELDS:
            if attribute in values:
                values[attribute] = _to_int(values[attribute])

        if 'addons_snapshot' in values:
            values['addons_snapshot'] = _to_snapshot(values['addons_snapshot'])

        for attribute in ('platform', 'status'):
            if values.get(attribute) is None:
                values.pop(attribute, None)
            else:
                values[attribute] = str(values[attribute])

        if values.get('platform_booking_id') is not None:
            values['platform_booking_id'] = str(values['platform_booking_id'])

        return cls(**values)


@dataclass
class OrderExtras:
    tshirts: int = 0
    cocktails: int = 0
    photos: int = 0

    def add(self, kind, quantity):
        setattr(self, kind, getattr(self, kind) + quantity)

    def merge(self, other: "OrderExtras"):
        self.tshirts += other.tshirts
        self.cocktails += other.cocktails
        self.photos += other.photos

    def is_empty(self):
        return self.tshirts == 0 and self.cocktails == 0 and self.photos == 0

    def copy(self):
        return OrderExtras(self.tshirts, self.cocktails, self.photos)

    def to_dict(self):
        return {'tshirts': self.tshirts, 'cocktails': self.cocktails, 'photos': self.photos}


@dataclass
class PickupMoment:
    """Resolved pickup instant in the business timezone."""

    moment: pd.Timestamp
    has_time: bool = True

    def local_date(self):
        return self.moment.strftime('%Y-%m-%d')

    def local_time(self):
        return self.moment.strftime('%H:%M') if self.has_time else UNKNOWN_TIMESLOT

    def utc_iso(self):
        if not self.has_time:
            return None
        return format_utc_iso(self.moment)


def format_utc_iso(moment):
    """Format a tz-aware timestamp as 'YYYY-MM-DDTHH:MM:SS.000Z'."""
    return pd.Timestamp(moment).tz_convert('UTC').strftime('%Y-%m-%dT%H:%M:%S.000Z')


@dataclass
class UnifiedOrder:
    """Canonical manifest line derived from one booking or storefront line item."""

    id: str
    platform_booking_id: Optional[str]
    product_id: str
    product_name: str
    date: str
    timeslot: str
    quantity: int
    men_count: int
    women_count: int
    customer_name: str
    platform: str
    status: str = 'unknown'
    pickup_date_time: Optional[str] = None
    customer_phone: Optional[str] = None
    extras: OrderExtras = field(default_factory=OrderExtras)

    @property
    def headcount(self):
        return self.men_count + self.women_count

    def to_dict(self):
        return {
            'id': self.id,
            'platformBookingId': self.platform_booking_id,
            'productId': self.product_id,
            'productName': self.product_name,
            'date': self.date,
            'timeslot': self.timeslot,
            'quantity': self.quantity,
            'menCount': self.men_count,
            'womenCount': self.women_count,
            'customerName': self.customer_name,
            'customerPhone': self.customer_phone,
            'platform': self.platform,
            'pickupDateTime': self.pickup_date_time,
            'extras': self.extras.to_dict(),
            'status': self.status,
        }


@dataclass
class UnifiedProduct:
    id: str
    name: str
    platform: str

    def to_dict(self):
        return {'id': self.id, 'name': self.name, 'platform': self.platform}


@dataclass
class PlatformBreakdownEntry:
    platform: str
    total_people: int = 0
    men: int = 0
    women: int = 0
    order_count: int = 0

    def to_dict(self):
        return {
            'platform': self.platform,
            'totalPeople': self.total_people,
            'men': self.men,
            'women': self.women,
            'orderCount': self.order_count,
        }


@dataclass
class ManifestGroup:
    """All orders sharing (product_id, date, time)."""

    product_id: str
    product_name: str
    date: str
    time: str
    total_people: int = 0
    men: int = 0
    women: int = 0
    extras: OrderExtras = field(default_factory=OrderExtras)
    orders: List[UnifiedOrder] = field(default_factory=list)
    platform_breakdown: List[PlatformBreakdownEntry] = field(default_factory=list)

    def to_dict(self):
        return {
            'productId': self.product_id,
            'productName': self.product_name,
            'date': self.date,
            'time': self.time,
            'totalPeople': self.total_people,
            'men': self.men,
            'women': self.women,
            'extras': self.extras.to_dict(),
            'orders': [order.to_dict() for order in self.orders],
            'platformBreakdown': [entry.to_dict() for entry in self.platform_breakdown],
        }


def _seeded_status_counts():
    return {status: 0 for status in BOOKING_STATUSES}


@dataclass
class ManifestSummary:
    total_people: int = 0
    men: int = 0
    women: int = 0
    total_orders: int = 0
    extras: OrderExtras = field(default_factory=OrderExtras)
    platform_breakdown: List[PlatformBreakdownEntry] = field(default_factory=list)
    status_counts: Dict[str, int] = field(default_factory=_seeded_status_counts)

    def to_dict(self):
        return {
            'totalPeople': self.total_people,
            'men': self.men,
            'women': self.women,
            'totalOrders': self.total_orders,
            'extras': self.extras.to_dict(),
            'platformBreakdown': [entry.to_dict() for entry in self.platform_breakdown],
            'statusCounts': dict(self.status_counts),
        }


@dataclass
class ManifestResult:
    groups: List[ManifestGroup]
    summary: ManifestSummary

    def to_dict(self):
        return {
            'manifest': [group.to_dict() for group in self.groups],
            'summary': self.summary.to_dict(),
        }

