import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]

if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from models import OrderExtras, UnifiedOrder  # noqa: E402

TZ = "Europe/Warsaw"


@pytest.fixture
def tz():
    return TZ


@pytest.fixture
def storefront_order():
    return {
        "id": "SO-1001",
        "pickupTime": "2024-06-01 20:45",
        "email": "anna@example.com",
        "shippingPerson": {"name": "Anna Nowak", "phone": "+48 600 100 200"},
        "items": [
            {
                "id": 1,
                "productId": 555,
                "name": "Krawl Through Krakow Pub Crawl",
                "quantity": 5,
                "selectedOptions": [
                    {"name": "Men", "value": "3"},
                    {"name": "Women", "value": "2"},
                    {"name": "T-Shirt (Size L)", "value": "2"},
                ],
            }
        ],
    }


@pytest.fixture
def booking_record():
    return {
        "id": 11,
        "platform": "viator",
        "platformBookingId": "BR-11",
        "status": "confirmed",
        "experienceDate": "2024-06-01",
        "experienceStartAt": "2024-06-01T18:45:00.000Z",
        "partySizeTotal": 10,
        "addonsSnapshot": {
            "partyBreakdown": {"men": 3, "women": 2},
            "extras": {"tshirts": 1, "cocktails": 4, "photos": 0},
        },
        "guestFirstName": "Jan",
        "guestLastName": "Kowalski",
        "guestPhone": "+48 500 000 000",
        "productName": "Krawl Through Krakow",
    }


@pytest.fixture
def reservation_event():
    return {
        "platform": "getyourguide",
        "platformBookingId": "GYG-77",
        "status": "confirmed",
        "bookingFields": {
            "experienceStartAt": "2024-06-01T18:45:00Z",
            "partySizeTotal": 2,
            "productName": "Tour name: Krawl Through Kazimierz Created by Partner",
            "guestFirstName": "Jo",
        },
        "addons": [{"platformAddonName": "Photo package", "quantity": 1}],
    }


@pytest.fixture
def make_order():
    def _make(**overrides):
        values = dict(
            id="1",
            platform_booking_id="REF-1",
            product_id="crawl-krakow-krawl-pub-through",
            product_name="Krawl Through Krakow Pub Crawl",
            date="2024-06-01",
            timeslot="20:45",
            quantity=2,
            men_count=1,
            women_count=1,
            customer_name="Guest",
            platform="viator",
            status="confirmed",
            pickup_date_time="2024-06-01T18:45:00.000Z",
            extras=OrderExtras(),
        )
        values.update(overrides)
        return UnifiedOrder(**values)

    return _make
