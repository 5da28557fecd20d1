"""
Unified order extraction modules.

Different extractors for different channel payload shapes:
- StorefrontExtractor: Online-store orders with line items
- BookingRowExtractor: Persisted booking rows
- ReservationEmailExtractor: Parsed reservation-email events
"""

from .base_extractor import BaseExtractor
from .storefront import StorefrontExtractor
from .booking_row import BookingRowExtractor
from .reservation_email import ReservationEmailExtractor

__all__ = [
    'BaseExtractor',
    'StorefrontExtractor',
    'BookingRowExtractor',
    'ReservationEmailExtractor'
]
