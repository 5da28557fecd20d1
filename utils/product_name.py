"""
Product name canonicalization.

Reservation channels decorate product names with booking noise
("New booking #123 ... Created by ..."). This module recovers:
- A display label (known canonical product, or the most product-like segment)
- A stable grouping key (sorted, de-duplicated non-stopword tokens)
"""

import re
import html
import logging

from config import (
    PRODUCT_CANONICAL_PATTERNS, PRODUCT_NAME_STOPWORDS, EXPERIENCE_KEYWORDS,
    PRODUCT_TRUNCATE_MARKERS,
)
from utils.normalization import is_missing

logger = logging.getLogger(__name__)

_CANONICAL_PATTERNS = [
    (canonical, [re.compile(pattern, re.IGNORECASE) for pattern in patterns])
    for canonical, patterns in PRODUCT_CANONICAL_PATTERNS.items()
]

_KNOWN_PRODUCT_PATTERNS = [
    re.compile(r'(?:tour|product)\s+name\s*:?\s*(.+)$', re.IGNORECASE),
    re.compile(r'(?:booking|order)\s+#?[^\s]+\s+(.+)$', re.IGNORECASE),
    re.compile(r'customers?:\s*(?:[^A-Za-z0-9]+)?(.+)$', re.IGNORECASE),
]

_SEGMENT_SPLIT = re.compile(r'(?:####|\n|\r| {2,}|--+|==+|\|)+')


def sanitize_product_source(value):
    """
    Strip channel decoration from a raw product name.

    - Decodes HTML entities
    - Removes '#' runs, status prefixes, "New order", "Booking note:"
    - Collapses whitespace

    Example:
        "Rebooked: Krawl Through Krakow &amp; Shots" -> "Krawl Through Krakow & Shots"
    """
    text = html.unescape(str(value)).replace('\xa0', ' ')
    text = re.sub(r'&raquo;?|»', ' ', text, flags=re.IGNORECASE)
    text = re.sub(r'#+', ' ', text)
    text = re.sub(r'(?:Cancelled|Canceled|Rebooked)\s*:?', ' ', text, flags=re.IGNORECASE)
    text = re.sub(r'New\s+order', ' ', text, flags=re.IGNORECASE)
    text = re.sub(r'Booking\s+note:?', ' ', text, flags=re.IGNORECASE)
    text = re.sub(r'View on FareHarbor', ' ', text, flags=re.IGNORECASE)
    text = re.sub(r'[ \t]+', ' ', text)
    return text.strip()


def truncate_at_markers(value):
    """Cut a segment at the first trailing marker such as 'Created by'."""
    result = value
    for marker in PRODUCT_TRUNCATE_MARKERS:
        index = result.lower().find(marker)
        if index > 0:
            result = result[:index].strip()
    return result.strip()


def split_candidate_segments(value):
    segments = [truncate_at_markers(segment.strip()) for segment in _SEGMENT_SPLIT.split(value)]
    return [segment for segment in segments if segment]


def score_segment(segment):
    """Longer segments and experience keywords ("pub crawl", "tour") score higher."""
    score = min(len(segment), 80) / 80
    lower = segment.lower()
    for keyword in EXPERIENCE_KEYWORDS:
        if keyword in lower:
            score += 5
    return score


def pick_likely_product_segment(segments):
    if not segments:
        return None
    return max(segments, key=score_segment)


def match_canonical_product(value):
    """Return the canonical product label whose pattern matches, or None."""
    for canonical, patterns in _CANONICAL_PATTERNS:
        if any(pattern.search(value) for pattern in patterns):
            return canonical
    return None


def match_known_product_patterns(value):
    for pattern in _KNOWN_PRODUCT_PATTERNS:
        match = pattern.search(value)
        if match and match.group(1):
            hit = truncate_at_markers(match.group(1).strip())
            if hit:
                return hit
    return None


def canonicalize_product_label(raw):
    """
    Recover a display label from a noisy product name.

    Args:
        raw: Raw product name (any type)

    Returns:
        str: Canonical or cleaned label, or None if nothing usable

    Example:
        "NEW BOOKING: New Year's Eve Crawl with open bar" -> "NYE Pub Crawl"
        "Tour name: Sunset Kayak Created by Anna" -> "Sunset Kayak"
    """
    if is_missing(raw):
        return None
    sanitized = sanitize_product_source(raw)
    if not sanitized:
        return None

    canonical = match_canonical_product(sanitized)
    if canonical:
        return canonical

    pattern_hit = match_known_product_patterns(sanitized)
    if pattern_hit:
        return pattern_hit

    chosen = pick_likely_product_segment(split_candidate_segments(sanitized))
    return (chosen or sanitized).strip() or None


def tokenize_product_name(source):
    if is_missing(source):
        return []
    text = sanitize_product_source(source).lower()
    tokens = re.sub(r'[^a-z0-9\s]', ' ', text).split()
    return [token for token in tokens if token not in PRODUCT_NAME_STOPWORDS]


def canonicalize_product_key_from_label(raw):
    """
    Build a stable grouping key from a product label.

    Example:
        "Krawl Through Krakow Pub Crawl" -> "crawl-krakow-krawl-pub-through"
    """
    tokens = tokenize_product_name(raw)
    if not tokens:
        return None
    return '-'.join(sorted(set(tokens)))


def canonicalize_product_label_from_sources(sources):
    """First non-empty label among sources, tried in order."""
    for source in sources:
        label = canonicalize_product_label(source)
        if label:
            return label
    return None


def derive_product_identity(name_sources, raw_product_id=None, platform=None, booking_ref=None):
    """
    Derive the (product_id, label) pair used to group manifest lines.

    Fallback chain for the key:
    1. Tokens of the canonicalized product label
    2. The raw product identifier
    3. A synthetic '<platform>-<booking ref>' key

    Args:
        name_sources: Candidate product names, most trusted first
        raw_product_id: Channel-native numeric/string product id
        platform: Channel name
        booking_ref: Booking reference

    Returns:
        tuple: (product_id, label or None)
    """
    label = canonicalize_product_label_from_sources(name_sources)
    key = canonicalize_product_key_from_label(label) if label else None

    if not key and not is_missing(raw_product_id):
        key = str(raw_product_id).strip()

    if not key:
        key = f"{platform or 'unknown'}-{booking_ref}"
        logger.debug(f"No product name or id for {key}, using synthetic product key")

    return key, label
