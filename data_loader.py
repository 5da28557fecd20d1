"""
Data loading utilities.

Handles:
- Loading booking exports (Excel, CSV or JSON) into Booking objects
- Loading storefront order dumps (JSON)
- Loading parsed reservation-email events (JSON)
- Resolving the manifest date range
"""

import json
import logging
import os
from datetime import datetime

import pandas as pd

from models import Booking, BOOKING_FIELD_ALIASES
from utils.normalization import compact_key, is_missing, standardize_column_names

logger = logging.getLogger(__name__)

DATE_FORMAT = '%Y-%m-%d'

SUPPORTED_BOOKING_EXTENSIONS = ('.xlsx', '.xls', '.csv', '.json')


def _read_booking_frame(filepath):
    extension = os.path.splitext(filepath)[1].lower()
    if extension in ('.xlsx', '.xls'):
        return pd.read_excel(filepath)
    if extension == '.csv':
        return pd.read_csv(filepath)
    if extension == '.json':
        return pd.read_json(filepath, orient='records', convert_dates=False, dtype=False)
    raise ValueError(
        f"Unsupported booking file type '{extension}', expected one of {SUPPORTED_BOOKING_EXTENSIONS}"
    )


def load_bookings(filepath):
    """
    Load a booking export with header-style-insensitive column handling.

    Expected columns (camelCase, snake_case or spaced headers):
    - id, platform, platformBookingId, status
    - experienceDate and/or experienceStartAt
    - partySizeAdults, partySizeChildren, partySizeTotal, addonsSnapshot
    - guestFirstName, guestLastName, guestEmail, guestPhone
    - productId, productName, productVariant

    Args:
        filepath: Path to .xlsx/.xls/.csv/.json file

    Returns:
        list: Booking objects

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If the file type is unsupported or critical columns are missing
    """
    if not os.path.exists(filepath):
        raise FileNotFoundError(f"Bookings file not found: {filepath}")

    logger.info(f"Loading bookings from: {filepath}")

    df = _read_booking_frame(filepath)

    logger.info(f"Loaded {len(df)} rows from bookings file")
    logger.info(f"Original columns: {list(df.columns)}")

    column_map = standardize_column_names(df)

    # Attribute -> actual column
    attribute_columns = {}
    for attribute, aliases in BOOKING_FIELD_ALIASES.items():
        for alias in aliases:
            actual = column_map.get(compact_key(alias))
            if actual is not None:
                attribute_columns[attribute] = actual
                break

    # Check for critical columns
    missing_columns = []
    if 'id' not in attribute_columns:
        missing_columns.append('id')
    if 'experience_date' not in attribute_columns and 'experience_start_at' not in attribute_columns:
        missing_columns.append('experienceDate or experienceStartAt')

    if missing_columns:
        logger.error(f"Missing critical columns in bookings file: {missing_columns}")
        logger.error(f"Available columns: {list(df.columns)}")
        raise ValueError(f"Missing critical columns: {missing_columns}")

    bookings = []
    for record in df.to_dict('records'):
        row = {
            attribute: record.get(column)
            for attribute, column in attribute_columns.items()
        }
        bookings.append(Booking.from_dict(row))

    logger.info(f"Successfully loaded {len(bookings)} bookings")

    return bookings


def _load_json_records(filepath, label, wrapper_keys):
    if not os.path.exists(filepath):
        raise FileNotFoundError(f"{label} file not found: {filepath}")

    logger.info(f"Loading {label.lower()} from: {filepath}")

    with open(filepath, 'r', encoding='utf-8') as f:
        try:
            data = json.load(f)
        except ValueError as e:
            raise ValueError(f"{label} file is not valid JSON: {e}") from e

    if isinstance(data, dict):
        for key in wrapper_keys:
            if isinstance(data.get(key), list):
                data = data[key]
                break
        else:
            raise ValueError(f"{label} file must hold a list or one of {list(wrapper_keys)}")

    if not isinstance(data, list):
        raise ValueError(f"{label} file must hold a list of records")

    records = [entry for entry in data if isinstance(entry, dict)]
    if len(records) != len(data):
        logger.warning(f"Skipped {len(data) - len(records)} non-object entries in {filepath}")

    logger.info(f"Successfully loaded {len(records)} {label.lower()}")
    return records


def load_storefront_orders(filepath):
    """
    Load a storefront order dump.

    Accepts a JSON list of orders or the API page shape {"items": [...]}.

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If the file is not a list/page of orders
    """
    return _load_json_records(filepath, 'Storefront orders', ('items', 'orders'))


def load_reservation_events(filepath):
    """
    Load parsed reservation-email events from a JSON list or {"events": [...]}.

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If the file is not a list of events
    """
    return _load_json_records(filepath, 'Reservation events', ('events',))


def normalize_date(value):
    """
    Normalize a user-supplied date to 'YYYY-MM-DD'.

    Args:
        value: Date string (ISO or anything pandas can read), date or None

    Returns:
        str, or None if missing or unparseable

    Example:
        "01 June 2024" -> "2024-06-01"
    """
    if is_missing(value):
        return None
    if isinstance(value, datetime):
        return value.strftime(DATE_FORMAT)
    try:
        parsed = pd.to_datetime(value, format='ISO8601') if isinstance(value, str) else pd.Timestamp(value)
    except (ValueError, TypeError):
        try:
            parsed = pd.to_datetime(value, dayfirst=True)
        except (ValueError, TypeError):
            logger.warning(f"Could not parse date: {value}")
            return None
    if pd.isna(parsed):
        return None
    return parsed.strftime(DATE_FORMAT)


def resolve_date_range(date=None, pickup_from=None, pickup_to=None):
    """
    Resolve the requested manifest dates.

    A single date wins over a range. A one-sided range collapses to that
    single day, and a range end before its start is swapped.

    Args:
        date: Single day
        pickup_from: Range start
        pickup_to: Range end

    Returns:
        tuple: (start, end) as 'YYYY-MM-DD' strings or None

    Raises:
        ValueError: If a supplied date cannot be parsed
    """
    if not is_missing(date):
        day = normalize_date(date)
        if day is None:
            raise ValueError(f"Invalid date provided: {date}")
        return day, day

    start = normalize_date(pickup_from)
    end = normalize_date(pickup_to)
    if not is_missing(pickup_from) and start is None:
        raise ValueError(f"Invalid start date provided: {pickup_from}")
    if not is_missing(pickup_to) and end is None:
        raise ValueError(f"Invalid end date provided: {pickup_to}")

    if start and not end:
        end = start
    elif end and not start:
        start = end

    if start and end and end < start:
        logger.warning(f"Date range end {end} is before start {start}, swapping")
        start, end = end, start

    return start, end
