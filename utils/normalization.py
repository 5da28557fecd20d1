"""
Data normalization utilities.

Handles normalization of:
- Option/field labels (lowercasing, tokenising, keyword matching)
- Quantities embedded in free text
- Time-of-day strings (converting to hour/minute)
- Booking statuses and channel keys
- Case-insensitive field access on untyped payloads
"""

import re
import math
import logging

import pandas as pd

from config import (
    BOOKING_STATUSES, STATUS_ALIASES, STATUS_UNKNOWN, UNKNOWN_PLATFORM,
)

logger = logging.getLogger(__name__)

_TOKEN_SPLIT = re.compile(r'[^a-z0-9]+')
_FIRST_INTEGER = re.compile(r'\d+')
_MERIDIEM = re.compile(r'\b([ap])\s*\.?\s*m\b\.?', re.IGNORECASE)


def is_missing(value):
    """
    Check whether a payload value carries no signal.

    None, NaN/NaT and blank strings are missing; 0 and False are not.
    """
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, dict, tuple, set)):
        return False
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def normalize_label(value):
    """
    Normalize an option/field label for keyword matching.

    Args:
        value: Raw label (any type)

    Returns:
        str: Lowercased, stripped label, or None if empty

    Example:
        "  Men (18+) " -> "men (18+)"
    """
    if is_missing(value):
        return None
    label = str(value).strip().lower()
    return label or None


def tokenize_label(value):
    """Split a label into lowercase alphanumeric tokens."""
    label = normalize_label(value)
    if not label:
        return []
    return [token for token in _TOKEN_SPLIT.split(label) if token]


def includes_keyword(label, keywords):
    """
    Check whether any token of the label is one of the keywords.

    Token-wise so that "women" never matches the "men" keyword.

    Example:
        includes_keyword("Number of Men", {"men"}) -> True
        includes_keyword("Women", {"men"}) -> False
    """
    return any(token in keywords for token in tokenize_label(label))


def parse_quantity(value):
    """
    Parse a quantity permissively.

    - int/float: used as-is (floored; negatives, NaN and infinity become 0)
    - str: first embedded integer ("2 x T-Shirt" -> 2)
    - anything else: 0

    Args:
        value: Raw payload value

    Returns:
        int: Non-negative quantity
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        if (isinstance(value, float) and not math.isfinite(value)) or value < 0:
            return 0
        return int(value)
    if isinstance(value, str):
        match = _FIRST_INTEGER.search(value)
        return int(match.group(0)) if match else 0
    return 0


def parse_optional_count(value):
    """Like parse_quantity, but returns None when the value carries no number."""
    if is_missing(value) or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return None
        return int(value) if value >= 0 else None
    match = _FIRST_INTEGER.search(str(value))
    return int(match.group(0)) if match else None


def normalize_meridiem(value):
    """Rewrite 'p.m.' / 'P M' style suffixes as 'pm'."""
    return _MERIDIEM.sub(lambda m: f"{m.group(1).lower()}m", value)


def parse_time_of_day(time_value):
    """
    Parse a bare time of day into (hour, minute).

    Handles multiple input formats:
    - HH:MM / H:MM
    - HH:MM:SS (seconds dropped)
    - 12-hour format with AM/PM

    Args:
        time_value: Time string

    Returns:
        tuple: (hour, minute), or None if parsing fails

    Example:
        "8:45 pm" -> (20, 45)
        "09:05:00" -> (9, 5)
    """
    if is_missing(time_value):
        return None

    time_str = normalize_meridiem(str(time_value).strip()).upper()

    am_pm_match = re.match(r'^(\d{1,2}):(\d{2})(?::\d{2})?\s*(AM|PM)$', time_str)
    if am_pm_match:
        hours = int(am_pm_match.group(1))
        minutes = int(am_pm_match.group(2))
        period = am_pm_match.group(3)
        if not 1 <= hours <= 12 or minutes > 59:
            return None
        if period == 'PM' and hours != 12:
            hours += 12
        elif period == 'AM' and hours == 12:
            hours = 0
        return hours, minutes

    match = re.match(r'^(\d{1,2}):(\d{2})(?::\d{2})?$', time_str)
    if match:
        hours = int(match.group(1))
        minutes = int(match.group(2))
        if 0 <= hours <= 23 and 0 <= minutes <= 59:
            return hours, minutes

    return None


def normalize_status(status):
    """
    Map a raw status string onto the known booking statuses.

    Example:
        "Canceled" -> "cancelled"
        "whatever" -> "unknown"
    """
    label = normalize_label(status)
    if not label:
        return STATUS_UNKNOWN
    label = STATUS_ALIASES.get(label, label)
    label = label.replace('-', '_').replace(' ', '_')
    return label if label in BOOKING_STATUSES else STATUS_UNKNOWN


def platform_key(platform):
    """Case-insensitive merge key for a channel label."""
    label = normalize_label(platform)
    return label or UNKNOWN_PLATFORM


def get_field_value(payload, *possible_names):
    """
    Get a value from a dict using case-insensitive key lookup.

    Args:
        payload: Untyped mapping (anything else yields None)
        *possible_names: Possible key variations, tried in order

    Returns:
        Value of the first matching key that is not missing, or None

    Example:
        get_field_value(order, 'pickupTime', 'pickup_time')
    """
    if not isinstance(payload, dict):
        return None
    key_map = {str(key).lower(): key for key in payload.keys()}
    for name in possible_names:
        actual_key = key_map.get(name.lower())
        if actual_key is not None and not is_missing(payload[actual_key]):
            return payload[actual_key]
    return None


def compact_key(name):
    """
    Reduce a column/field name to lowercase alphanumerics.

    Example:
        "Experience Start At" -> "experiencestartat"
        "experience_start_at" -> "experiencestartat"
    """
    return re.sub(r'[^a-z0-9]', '', str(name).lower())


def standardize_column_names(df):
    """
    Create a header-style-insensitive column mapping for a DataFrame.

    Args:
        df: pandas DataFrame

    Returns:
        dict: Mapping from compact column names to actual column names

    Example:
        {"partysizetotal": "Party Size Total", "productname": "productName"}
    """
    column_map = {}
    for col in df.columns:
        column_map.setdefault(compact_key(col), col)
    return column_map


def as_list(value):
    """Return value if it is a list, dropping falsy entries; otherwise []."""
    if isinstance(value, (list, tuple)):
        return [entry for entry in value if entry]
    return []
