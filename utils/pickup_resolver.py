"""
Pickup moment resolution.

Turns a bag of candidate date/time values drawn from channel payload fields
into the single instant a guest is expected, in the business timezone.

Candidates are tried per value in priority order (most explicit first):
1. ISO date-time with explicit offset or Zulu marker (trusted verbatim)
2. Bare ISO date-time / ISO date (local to the business timezone)
3. Strict format templates (see STRICT_DATETIME_FORMATS)
4. Loose scan for an embedded 'YYYY-MM-DD HH:MM' when no offset is present

Nothing is ever guessed: a value that matches none of the above is dropped,
and if no candidate resolves the result is None rather than "now".
"""

import re
import logging
from datetime import date, datetime

import pandas as pd

from config import (
    TIMEZONE_NAME_TOKENS, TRIVIALLY_INVALID_VALUES, MONTH_TOKENS,
    STRICT_DATETIME_FORMATS, TIME_OF_DAY_PATTERN, ISO_OFFSET_PATTERN,
    ISO_LOCAL_DATETIME_PATTERN, ISO_DATE_PATTERN, EMBEDDED_DATETIME_PATTERN,
    OFFSET_TOKEN_PATTERN,
)
from models import PickupMoment
from utils.normalization import is_missing, normalize_meridiem, parse_time_of_day

logger = logging.getLogger(__name__)

_TZ_TOKENS = re.compile(r'\b(?:' + '|'.join(TIMEZONE_NAME_TOKENS) + r')\b', re.IGNORECASE)
_HOURS_TOKENS = re.compile(r'\b(?:hrs?|hours?|godz\.?)\b', re.IGNORECASE)
_REVIEW_PREFIX = re.compile(r'^(?:written|reviewed)(?:\s+on)?\s*:?\s*', re.IGNORECASE)
_MONTH_TOKEN = re.compile(r'\b(?:' + '|'.join(MONTH_TOKENS) + r')', re.IGNORECASE)
_TIME_OF_DAY = re.compile(TIME_OF_DAY_PATTERN, re.IGNORECASE)
_ISO_OFFSET = re.compile(ISO_OFFSET_PATTERN)
_ISO_LOCAL_DATETIME = re.compile(ISO_LOCAL_DATETIME_PATTERN)
_ISO_DATE = re.compile(ISO_DATE_PATTERN)
_EMBEDDED_DATETIME = re.compile(EMBEDDED_DATETIME_PATTERN)
_OFFSET_TOKEN = re.compile(OFFSET_TOKEN_PATTERN, re.IGNORECASE)


def sanitize_time_token(value):
    """
    Clean a raw date/time string before parsing.

    - Strips timezone names (CEST, CET, BST, GMT, UTC) and 'hrs'/'hours'
    - Strips 'Written'/'Reviewed' prefixes copied from review widgets
    - Normalizes 'p.m.' style meridiem markers to 'pm'
    - Collapses whitespace

    Example:
        "Written 01/06/2024 20:45 CEST" -> "01/06/2024 20:45"
    """
    text = str(value)
    text = _REVIEW_PREFIX.sub('', text.strip())
    text = _TZ_TOKENS.sub(' ', text)
    text = _HOURS_TOKENS.sub(' ', text)
    text = normalize_meridiem(text)
    text = re.sub(r'\s+', ' ', text)
    return text.strip(' ,;')


def is_trivially_invalid(value):
    """True for 'n/a', 'none', 'no' and similar placeholders."""
    return str(value).strip().lower() in TRIVIALLY_INVALID_VALUES


def looks_date_like(value):
    """Only strings with a digit or a month-name token are worth parsing."""
    text = str(value)
    return bool(re.search(r'\d', text) or _MONTH_TOKEN.search(text))


def _finalize(moment, timezone):
    """Convert to the business zone and drop seconds (None outside the supported range)."""
    try:
        return moment.tz_convert(timezone).replace(second=0, microsecond=0, nanosecond=0)
    except (ValueError, OverflowError):
        logger.debug(f"Moment {moment} is outside the supported date range")
        return None


def _localize(naive, timezone):
    """Interpret a naive wall-clock value in the business zone (None if out of range)."""
    try:
        stamp = pd.Timestamp(naive).as_unit('ns')
        if stamp.tzinfo is not None:
            return _finalize(stamp, timezone)
        localized = stamp.tz_localize(timezone, ambiguous=True, nonexistent='shift_forward')
    except (ValueError, OverflowError):
        logger.debug(f"Value {naive} is outside the supported date range")
        return None
    return _finalize(localized, timezone)


def _condense_offset(value):
    """
    Rewrite "2024-06-01 20:45 +0200" as "2024-06-01T20:45+02:00".
    """
    condensed = re.sub(r'\s+', ' ', value.strip()).replace(' ', 'T', 1)
    condensed = re.sub(r'\s?([+\-]\d{2})(\d{2})$', r'\1:\2', condensed)
    condensed = re.sub(r'\s([+\-]\d{2}:\d{2}|Z)$', r'\1', condensed, flags=re.IGNORECASE)
    if condensed.endswith('z'):
        condensed = condensed[:-1] + 'Z'
    return condensed


def _parse_with_offset(value, timezone):
    condensed = _condense_offset(value)
    if not _ISO_OFFSET.match(condensed):
        return None
    try:
        stamp = pd.Timestamp(condensed).as_unit('ns')
    except (ValueError, TypeError, OverflowError):
        return None
    if pd.isna(stamp) or stamp.tzinfo is None:
        return None
    return _finalize(stamp, timezone)


def _with_flag(moment, has_time):
    return (moment, has_time) if moment is not None else None


def _parse_iso_local(value, timezone):
    """Returns (moment, has_time) or None."""
    if _ISO_LOCAL_DATETIME.match(value):
        try:
            return _with_flag(_localize(datetime.fromisoformat(value), timezone), True)
        except ValueError:
            return None
    if _ISO_DATE.match(value):
        try:
            return _with_flag(_localize(datetime.strptime(value, '%Y-%m-%d'), timezone), False)
        except ValueError:
            return None
    return None


def _parse_strict(value, timezone):
    for fmt, has_time in STRICT_DATETIME_FORMATS:
        try:
            parsed = datetime.strptime(value, fmt)
        except ValueError:
            continue
        return _with_flag(_localize(parsed, timezone), has_time)
    return None


def _parse_embedded(value, timezone):
    match = _EMBEDDED_DATETIME.search(value)
    if not match:
        return None
    try:
        parsed = datetime.strptime(f"{match.group(1)} {match.group(2)}", '%Y-%m-%d %H:%M')
    except ValueError:
        return None
    return _with_flag(_localize(parsed, timezone), True)


def _parse_native(value, timezone):
    """datetime/date/Timestamp candidates."""
    if isinstance(value, (datetime, pd.Timestamp)):
        if pd.isna(value):
            return None
        return _with_flag(_localize(value, timezone), True)
    if isinstance(value, date):
        return _with_flag(_localize(datetime(value.year, value.month, value.day), timezone), False)
    return None


def parse_candidate(value, timezone):
    """
    Resolve one candidate value.

    Args:
        value: String, datetime, date or pandas Timestamp
        timezone: IANA zone name of the business

    Returns:
        tuple: (pd.Timestamp in timezone, has_time), or None if unparseable
    """
    if is_missing(value):
        return None

    if isinstance(value, (datetime, date, pd.Timestamp)):
        return _parse_native(value, timezone)

    if isinstance(value, (int, float, bool)):
        return None

    raw = str(value).strip()
    if is_trivially_invalid(raw) or not looks_date_like(raw):
        return None

    sanitized = sanitize_time_token(raw)
    variants = [raw] if sanitized == raw or not sanitized else [raw, sanitized]

    for variant in variants:
        moment = _parse_with_offset(variant, timezone)
        if moment is not None:
            return moment, True

    for variant in variants:
        parsed = _parse_iso_local(variant, timezone)
        if parsed:
            return parsed

    for variant in variants:
        parsed = _parse_strict(variant, timezone)
        if parsed:
            return parsed

    has_offset = any(_OFFSET_TOKEN.search(variant) for variant in variants)
    if not has_offset:
        for variant in variants:
            parsed = _parse_embedded(variant, timezone)
            if parsed:
                return parsed

    return None


def normalize_timestamp(value, timezone):
    """
    Resolve a single value to a minute-precision instant in the business zone.

    Args:
        value: Candidate value
        timezone: IANA zone name

    Returns:
        pd.Timestamp or None

    Example:
        ("2024-06-01 20:45", "Europe/Warsaw") -> Timestamp('2024-06-01 20:45:00+0200')
        ("n/a", "Europe/Warsaw") -> None
    """
    parsed = parse_candidate(value, timezone)
    return parsed[0] if parsed else None


def extract_time_of_day(value):
    """Return a sanitized 'HH:MM[ am|pm]' string if value is a bare time, else None."""
    if is_missing(value) or not isinstance(value, str):
        return None
    sanitized = sanitize_time_token(value)
    if sanitized and _TIME_OF_DAY.match(sanitized):
        return sanitized
    return None


def resolve_pickup_moment(candidates, timezone, order_ref=None):
    """
    Pick the authoritative pickup moment from prioritized candidates.

    Rules:
    - The earliest candidate that resolved to a full date and time wins
    - Otherwise the first bare time of day is attached to the first
      candidate that resolved to a date only
    - Otherwise the first date-only candidate is returned with has_time=False
    - Otherwise None

    Args:
        candidates: Iterable of (label, value) pairs in priority order
        timezone: IANA zone name
        order_ref: Reference used in log messages

    Returns:
        PickupMoment or None
    """
    moments = []
    dates_only = []
    times_only = []

    for label, value in candidates:
        parsed = parse_candidate(value, timezone)
        if parsed:
            moment, has_time = parsed
            if has_time:
                moments.append(moment)
            else:
                dates_only.append(moment)
            continue

        time_text = extract_time_of_day(value)
        if time_text and time_text not in times_only:
            logger.debug(f"[{order_ref}] Bare time '{time_text}' found in '{label}'")
            times_only.append(time_text)

    if moments:
        return PickupMoment(min(moments), has_time=True)

    if dates_only and times_only:
        hour_minute = parse_time_of_day(times_only[0])
        if hour_minute is not None:
            base = dates_only[0]
            wall_clock = datetime(base.year, base.month, base.day, hour_minute[0], hour_minute[1])
            attached = _localize(wall_clock, timezone)
            if attached is not None:
                return PickupMoment(attached, has_time=True)

    if dates_only:
        return PickupMoment(dates_only[0], has_time=False)

    if times_only:
        logger.debug(f"[{order_ref}] Only bare times {times_only} found, no date to attach them to")
    else:
        logger.debug(f"[{order_ref}] No pickup moment candidates resolved")
    return None
