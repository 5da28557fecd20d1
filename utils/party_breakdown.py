"""
Party breakdown extraction.

Derives men/women counts from option labels and free text, then reconciles
them against any independently reported party total.

Reconciliation policy (largest remainder):
- Each bucket gets the floor of its proportional share of the total
- Leftover units go to the bucket with the larger fractional share
  (ties go to men), so the pair always sums to the total exactly
"""

import re
import logging
from fractions import Fraction

from config import (
    MEN_LABELS, WOMEN_LABELS, PARTY_TOTAL_LABELS,
    MEN_TEXT_PATTERN, WOMEN_TEXT_PATTERN, STATUS_REBOOKED,
)
from utils.normalization import (
    includes_keyword, is_missing, normalize_status, parse_optional_count,
)
from validators.party_validator import check_party_total_mismatch

logger = logging.getLogger(__name__)

_MEN_TEXT = re.compile(MEN_TEXT_PATTERN, re.IGNORECASE)
_WOMEN_TEXT = re.compile(WOMEN_TEXT_PATTERN, re.IGNORECASE)


def _count_matches(text, pattern):
    return sum(int(match.group(1)) for match in pattern.finditer(text))


def extract_counts_from_text(raw):
    """
    Scan free text for "N men" / "N women" phrases.

    Args:
        raw: Free-text value

    Returns:
        dict: {'men': int, 'women': int}

    Example:
        "2 guys and 3 girls" -> {'men': 2, 'women': 3}
    """
    if is_missing(raw) or not isinstance(raw, str):
        return {'men': 0, 'women': 0}
    return {
        'men': _count_matches(raw, _MEN_TEXT),
        'women': _count_matches(raw, _WOMEN_TEXT),
    }


def gender_of_label(label):
    """Return 'men', 'women' or None for an option/field label."""
    if includes_keyword(label, MEN_LABELS):
        return 'men'
    if includes_keyword(label, WOMEN_LABELS):
        return 'women'
    return None


def is_party_total_label(label):
    """True if the label reports the whole party size ("Participants", "Pax")."""
    return includes_keyword(label, PARTY_TOTAL_LABELS)


def collect_gender_counts(entries):
    """
    Accumulate gendered counts from labeled entries.

    A label matching a keyword set contributes its embedded number to that
    bucket; any other label only contributes through free-text scanning.

    Args:
        entries: Iterable of (label, value) pairs

    Returns:
        tuple: ({'men': int, 'women': int}, has_signal)
    """
    totals = {'men': 0, 'women': 0}
    has_signal = False

    for label, value in entries:
        if is_missing(value):
            continue

        bucket = gender_of_label(label)
        if bucket:
            count = parse_optional_count(value)
            if count is not None:
                totals[bucket] += count
                has_signal = True
                continue

        extracted = extract_counts_from_text(value)
        if extracted['men'] or extracted['women']:
            totals['men'] += extracted['men']
            totals['women'] += extracted['women']
            has_signal = True

    return totals, has_signal


def best_known_total(explicit_total=None, adults=None, children=None):
    """
    Choose the most trustworthy party total.

    The explicit total wins; otherwise adults + children when either is known.

    Example:
        best_known_total(None, 3, 1) -> 4
        best_known_total(5, 3, 1) -> 5
    """
    if explicit_total is not None and explicit_total >= 0:
        return explicit_total
    if adults is None and children is None:
        return None
    return (adults or 0) + (children or 0)


def rescale_to_total(men, women, total):
    """
    Rescale a men/women pair so it sums to total (largest remainder).

    Args:
        men: Extracted men count
        women: Extracted women count
        total: Trusted party total

    Returns:
        dict: {'men': int, 'women': int} with men + women == total

    Example:
        (3, 2, 10) -> {'men': 6, 'women': 4}
        (1, 1, 3) -> {'men': 2, 'women': 1}
    """
    if total <= 0:
        return {'men': 0, 'women': 0}

    current = men + women
    if current <= 0:
        return {'men': total, 'women': 0}

    share_men = Fraction(men * total, current)
    share_women = Fraction(women * total, current)
    scaled_men = int(share_men)
    scaled_women = int(share_women)

    remainder = total - scaled_men - scaled_women
    if remainder > 0:
        if share_men - scaled_men >= share_women - scaled_women:
            scaled_men += remainder
        else:
            scaled_women += remainder

    return {'men': scaled_men, 'women': scaled_women}


def extract_party_breakdown(entries, totals=(), fallback_total=None, status=None, order_ref=None):
    """
    Derive a reconciled men/women breakdown.

    Args:
        entries: Iterable of (label, value) pairs from options and fields
        totals: Independently reported party totals, most trusted first
        fallback_total: Headcount to use when there is no gendered signal and
            no trusted total (e.g. storefront line quantity, adult count)
        status: Booking status; 'rebooked' always yields zeros
        order_ref: Reference used in log messages

    Returns:
        dict: {'men': int, 'women': int}
    """
    if normalize_status(status) == STATUS_REBOOKED:
        return {'men': 0, 'women': 0}

    counts, has_signal = collect_gender_counts(entries)

    trusted_total = next(
        (total for total in totals if total is not None and total >= 0),
        None,
    )

    if trusted_total is None:
        if has_signal:
            return counts
        if fallback_total:
            return {'men': fallback_total, 'women': 0}
        return {'men': 0, 'women': 0}

    if not has_signal:
        return {'men': trusted_total, 'women': 0}

    if check_party_total_mismatch(counts['men'], counts['women'], trusted_total, order_ref):
        return rescale_to_total(counts['men'], counts['women'], trusted_total)

    return counts
