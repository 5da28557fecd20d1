"""
Add-on detection.

Classifies option/field labels into the fixed add-on categories
(tshirts, cocktails, photos) and sums their quantities. Unrecognized labels
are ignored; a keyword must match a whole word (plural allowed), so
"guaranteed" or "teenagers" never count as a tee.
"""

import re
import logging

from config import ADDON_KEYWORDS
from models import OrderExtras
from utils.normalization import is_missing, parse_quantity

logger = logging.getLogger(__name__)

_ADDON_PATTERNS = [
    (kind, [re.compile(r'(?<![a-z])' + re.escape(keyword) + r's?(?![a-z])') for keyword in keywords])
    for kind, keywords in ADDON_KEYWORDS.items()
]


def detect_addon_kind(label):
    """
    Classify a label into an add-on category.

    Args:
        label: Option/field label or value text

    Returns:
        str: 'tshirts', 'cocktails', 'photos', or None

    Example:
        "T-Shirt (Size L)" -> "tshirts"
        "Welcome drinks" -> "cocktails"
        "Teenagers" -> None
        "Meeting point" -> None
    """
    if is_missing(label) or not isinstance(label, str):
        return None
    normalized = label.lower()
    for kind, patterns in _ADDON_PATTERNS:
        if any(pattern.search(normalized) for pattern in patterns):
            return kind
    return None


def inspect_addon_entry(extras, label, value):
    """
    Add one label/value pair to the running extras.

    The label is tried first; if it does not classify and the value is a
    string, the value is classified instead and its embedded number is used.

    Args:
        extras: OrderExtras to update in place
        label: Option/field label (may be None)
        value: Option/field value

    Returns:
        str: Matched category, or None
    """
    kind = detect_addon_kind(label)
    if kind is None and isinstance(value, str):
        kind = detect_addon_kind(value)
    if kind is None:
        return None

    quantity = parse_quantity(value)
    if quantity > 0:
        extras.add(kind, quantity)
    return kind


def extract_addon_counts(entries):
    """
    Sum add-on quantities across labeled entries.

    Args:
        entries: Iterable of (label, value) pairs

    Returns:
        OrderExtras
    """
    extras = OrderExtras()
    for label, value in entries:
        inspect_addon_entry(extras, label, value)
    return extras


def normalize_snapshot_extras(snapshot):
    """
    Read pre-computed extras from a booking's addons snapshot.

    Args:
        snapshot: addonsSnapshot dict (or anything else)

    Returns:
        OrderExtras, or None if the snapshot carries no 'extras' mapping
    """
    if not isinstance(snapshot, dict):
        return None
    raw = snapshot.get('extras')
    if not isinstance(raw, dict):
        return None
    return OrderExtras(
        tshirts=parse_quantity(raw.get('tshirts')),
        cocktails=parse_quantity(raw.get('cocktails')),
        photos=parse_quantity(raw.get('photos')),
    )
