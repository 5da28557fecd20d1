"""
Utility functions for payload normalization and interpretation.
"""

from .normalization import (
    is_missing,
    normalize_label,
    parse_quantity,
    parse_time_of_day,
    normalize_status,
    get_field_value,
    standardize_column_names
)

from .pickup_resolver import normalize_timestamp, resolve_pickup_moment

from .party_breakdown import extract_party_breakdown, best_known_total, rescale_to_total

from .addon_detector import detect_addon_kind, inspect_addon_entry, extract_addon_counts

from .product_name import (
    canonicalize_product_label,
    canonicalize_product_key_from_label,
    derive_product_identity
)

from .payload_router import detect_payload_kind, PayloadKind

__all__ = [
    'is_missing',
    'normalize_label',
    'parse_quantity',
    'parse_time_of_day',
    'normalize_status',
    'get_field_value',
    'standardize_column_names',
    'normalize_timestamp',
    'resolve_pickup_moment',
    'extract_party_breakdown',
    'best_known_total',
    'rescale_to_total',
    'detect_addon_kind',
    'inspect_addon_entry',
    'extract_addon_counts',
    'canonicalize_product_label',
    'canonicalize_product_key_from_label',
    'derive_product_identity',
    'detect_payload_kind',
    'PayloadKind'
]
