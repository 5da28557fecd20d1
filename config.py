"""
Configuration constants for the booking manifest engine.

This module contains all static configuration data including:
- Sales channel and booking status definitions
- Business timezone default
- Keyword tables for party breakdown and add-on detection
- Date/time parsing templates
- Canonical product name patterns
"""

import os


# =======================
# BUSINESS TIMEZONE
# =======================

# Default only; every resolver/aggregator call receives the timezone explicitly
DEFAULT_BUSINESS_TIMEZONE = os.getenv("BUSINESS_TIMEZONE", "Europe/Warsaw")


# =======================
# SALES CHANNELS
# =======================

BOOKING_PLATFORMS = [
    'fareharbor',
    'ecwid',
    'viator',
    'getyourguide',
    'freetour',
    'xperiencepoland',
    'airbnb',
    'manual',
    'unknown',
]

STOREFRONT_PLATFORM = 'ecwid'
UNKNOWN_PLATFORM = 'unknown'


# =======================
# BOOKING STATUSES
# =======================

BOOKING_STATUSES = [
    'pending',
    'confirmed',
    'amended',
    'rebooked',
    'cancelled',
    'completed',
    'no_show',
    'unknown',
]

STATUS_REBOOKED = 'rebooked'
STATUS_UNKNOWN = 'unknown'

# Spellings seen in channel payloads
STATUS_ALIASES = {
    'canceled': 'cancelled',
    'no-show': 'no_show',
    'noshow': 'no_show',
    'no show': 'no_show',
    'rebook': 'rebooked',
    'amendment': 'amended',
    'modified': 'amended',
    'paid': 'confirmed',
    'awaiting_payment': 'pending',
}


# =======================
# MANIFEST DISPLAY
# =======================

UNKNOWN_TIMESLOT = '--:--'
UNASSIGNED_PRODUCT_NAME = 'Unassigned product'
UNKNOWN_PRODUCT_NAME = 'Unknown product'


# =======================
# PARTY BREAKDOWN KEYWORDS
# =======================

MEN_LABELS = {'men', 'man', 'male', 'males', 'boys', 'boy', 'gents', 'gent', 'guys', 'guy'}
WOMEN_LABELS = {'women', 'woman', 'female', 'females', 'girls', 'girl', 'ladies', 'lady'}

# Labels of fields reporting the overall party size
PARTY_TOTAL_LABELS = {'participants', 'people', 'persons', 'pax', 'guests', 'travelers', 'travellers'}

# Free-text "3 men, 2 women" scanning
MEN_TEXT_PATTERN = r'(\d+)\s*(?:men|man|boys?|males?|guys|gents)\b'
WOMEN_TEXT_PATTERN = r'(\d+)\s*(?:women|woman|girls?|females?|ladies)\b'


# =======================
# ADD-ON KEYWORDS
# =======================

# Checked in order; first category with a keyword hit wins
ADDON_KEYWORDS = {
    'tshirts': ['t-shirt', 'tshirt', 't shirt', 'shirt', 'tee'],
    'cocktails': ['cocktail', 'drink'],
    'photos': ['photo', 'picture'],
}

ADDON_CATEGORIES = list(ADDON_KEYWORDS.keys())


# =======================
# DATE/TIME PARSING
# =======================

# Tokens removed before parsing
TIMEZONE_NAME_TOKENS = ['CEST', 'CET', 'BST', 'GMT', 'UTC']

TRIVIALLY_INVALID_VALUES = {
    'no', 'n/a', 'na', 'null', 'none', 'brak', 'nie', 'false', 'invalid', 'undefined', 'nan',
}

# English and Polish month abbreviations
MONTH_TOKENS = [
    'jan', 'feb', 'mar', 'apr', 'may', 'jun', 'jul', 'aug', 'sep', 'oct', 'nov', 'dec',
    'sty', 'lut', 'kwi', 'maj', 'cze', 'lip', 'sie', 'wrz', 'paz', 'lis', 'gru',
]

# (format, has_time); tried in order, 4-digit years before 2-digit years
STRICT_DATETIME_FORMATS = [
    ('%Y-%m-%d %H:%M:%S', True),
    ('%Y-%m-%d %H:%M', True),
    ('%Y/%m/%d %H:%M', True),
    ('%d/%m/%Y %H:%M', True),
    ('%d-%m-%Y %H:%M', True),
    ('%d.%m.%Y %H:%M', True),
    ('%d/%m/%y %H:%M', True),
    ('%d-%m-%y %H:%M', True),
    ('%A, %d %B %Y %H:%M', True),
    ('%a, %d %b %Y %H:%M', True),
    ('%A, %d %B %Y', False),
    ('%d %B %Y', False),
    ('%d/%m/%Y', False),
    ('%d-%m-%Y', False),
    ('%d.%m.%Y', False),
    ('%Y/%m/%d', False),
    ('%d/%m/%y', False),
    ('%d-%m-%y', False),
]

TIME_OF_DAY_PATTERN = r'^(?:[01]?\d|2[0-3]):[0-5]\d(?:\s?(?:am|pm))?$'
ISO_OFFSET_PATTERN = r'^\d{4}-\d{2}-\d{2}T\d{1,2}:\d{2}(?::\d{2}(?:\.\d{1,6})?)?(?:Z|[+\-]\d{2}:\d{2})$'
ISO_LOCAL_DATETIME_PATTERN = r'^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}(?::\d{2}(?:\.\d{1,6})?)?$'
ISO_DATE_PATTERN = r'^\d{4}-\d{2}-\d{2}$'
EMBEDDED_DATETIME_PATTERN = r'(\d{4}-\d{2}-\d{2})[ T](\d{2}:\d{2})'
OFFSET_TOKEN_PATTERN = r'(?:[+\-]\d{2}:?\d{2}|Z)$'


# =======================
# PRODUCT NAMES
# =======================

PRODUCT_NAME_STOPWORDS = {
    'new', 'booking', 'order', 'for', 'the', 'this', 'a', 'an', 'and', 'with',
    'details', 'reservation', 'cancelled', 'canceled', 'rebooked', 'view',
    'fareharbor', 'reference', 'number', 'id', 'customer', 'customers',
    'created', 'by', 'at', 'from', 'via', 'info', 'change', 'amended',
    'amendment', 'confirmation', 'note',
}

# Canonical label -> patterns (case-insensitive)
PRODUCT_CANONICAL_PATTERNS = {
    'Krawl Through Krakow Pub Crawl': [
        r'krawl through krakow',
        r'pub crawl krawl through',
        r'krakow:\s*pub crawl',
        r'pub crawl\s+1h\s+open\s+bar',
    ],
    'NYE Pub Crawl': [
        r"new\s*year'?s?\s*eve",
        r'\bnye\b',
    ],
    'Food Tour': [r'food tour'],
    'Bottomless Brunch': [r'bottomless brunch', r'brunch\s+with\s+3-course'],
    'Go-Karting': [r'go[-\s]?kart', r'karting'],
    'Private Pub Crawl': [r'private\s+pub\s+crawl', r'private\s+krawl'],
    'Krawl Through Kazimierz': [
        r'krawl\s+through\s+kazimierz',
        r'kazimierz\s*-\s*1\s*hour\s*open\s*bar',
        r'kazimierz\s+.*pro\s+guide',
    ],
}

# Segments mentioning these score higher when picking a product name from noise
EXPERIENCE_KEYWORDS = [
    'pub crawl', 'crawl', 'tour', 'experience', 'brunch', 'bar crawl',
    'open bar', 'vip', 'entry', 'shots', 'food', 'tasting',
]

PRODUCT_TRUNCATE_MARKERS = [
    'created by', 'created at', 'cancelled by', 'cancelled at', 'due',
    'name:', 'email:', 'phone:',
]
