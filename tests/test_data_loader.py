import json

import pandas as pd
import pytest

from data_loader import (
    load_bookings,
    load_reservation_events,
    load_storefront_orders,
    normalize_date,
    resolve_date_range,
)
from processor import transform


def test_load_bookings_from_csv_with_spaced_headers(tmp_path):
    path = tmp_path / "bookings.csv"
    pd.DataFrame([
        {
            "ID": 1,
            "Platform": "viator",
            "Platform Booking Id": "BR-1",
            "Experience Start At": "2024-06-01T18:45:00Z",
            "Party Size Total": 4,
            "Addons Snapshot": json.dumps({"partyBreakdown": {"men": 2, "women": 2}}),
            "Product Name": "Food Tour",
        },
        {
            "ID": 2,
            "Platform": "airbnb",
            "Platform Booking Id": "BR-2",
            "Experience Start At": None,
            "Party Size Total": None,
            "Addons Snapshot": None,
            "Product Name": None,
        },
    ]).to_csv(path, index=False)

    bookings = load_bookings(str(path))

    assert len(bookings) == 2
    first, second = bookings
    assert first.platform_booking_id == "BR-1"
    assert first.party_size_total == 4
    assert first.addons_snapshot == {"partyBreakdown": {"men": 2, "women": 2}}
    assert second.experience_start_at is None
    assert second.party_size_total is None
    assert second.addons_snapshot is None


def test_load_bookings_from_json(tmp_path):
    path = tmp_path / "bookings.json"
    path.write_text(json.dumps([
        {"id": 7, "experienceDate": "2024-06-01", "addonsSnapshot": {"extras": {"photos": 1}}},
    ]))

    bookings = load_bookings(str(path))

    assert bookings[0].id == 7
    assert bookings[0].experience_date == "2024-06-01"
    assert bookings[0].addons_snapshot == {"extras": {"photos": 1}}


def test_load_bookings_requires_id_and_date_columns(tmp_path):
    path = tmp_path / "bookings.csv"
    pd.DataFrame([{"Platform": "viator", "Product Name": "Food Tour"}]).to_csv(path, index=False)

    with pytest.raises(ValueError, match="Missing critical columns"):
        load_bookings(str(path))


def test_load_bookings_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_bookings(str(tmp_path / "missing.csv"))

    unsupported = tmp_path / "bookings.txt"
    unsupported.write_text("id\n1\n")
    with pytest.raises(ValueError, match="Unsupported"):
        load_bookings(str(unsupported))


def test_load_storefront_orders_page_shape(tmp_path):
    path = tmp_path / "orders.json"
    path.write_text(json.dumps({"total": 1, "items": [{"id": "SO-1", "items": []}, "junk"]}))

    orders = load_storefront_orders(str(path))

    assert orders == [{"id": "SO-1", "items": []}]


def test_load_reservation_events(tmp_path):
    path = tmp_path / "events.json"
    path.write_text(json.dumps({"events": [{"platform": "viator", "bookingFields": {}}]}))

    assert load_reservation_events(str(path))[0]["platform"] == "viator"

    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps({"something": []}))
    with pytest.raises(ValueError):
        load_reservation_events(str(bad))


def test_normalize_date():
    assert normalize_date("2024-06-01") == "2024-06-01"
    assert normalize_date("01 June 2024") == "2024-06-01"
    assert normalize_date(None) is None


@pytest.mark.parametrize(
    "args, expected",
    [
        (("2024-06-01", "2024-01-01", "2024-12-31"), ("2024-06-01", "2024-06-01")),
        ((None, "2024-06-01", "2024-06-03"), ("2024-06-01", "2024-06-03")),
        ((None, "2024-06-03", "2024-06-01"), ("2024-06-01", "2024-06-03")),
        ((None, "2024-06-02", None), ("2024-06-02", "2024-06-02")),
        ((None, None, "2024-06-02"), ("2024-06-02", "2024-06-02")),
        ((None, None, None), (None, None)),
    ],
)
def test_resolve_date_range(args, expected):
    assert resolve_date_range(*args) == expected


def test_resolve_date_range_rejects_garbage():
    with pytest.raises(ValueError):
        resolve_date_range("not a date")


def test_csv_start_without_offset_matches_excel(tmp_path, tz):
    frame = pd.DataFrame([{"id": 1, "experienceStartAt": "2024-06-01 18:45:00", "partySizeTotal": 2}])
    csv_path = tmp_path / "bookings.csv"
    xlsx_path = tmp_path / "bookings.xlsx"
    frame.to_csv(csv_path, index=False)
    frame.assign(experienceStartAt=pd.to_datetime(frame["experienceStartAt"])).to_excel(xlsx_path, index=False)

    from_csv = transform(load_bookings(str(csv_path))[0], tz)
    from_xlsx = transform(load_bookings(str(xlsx_path))[0], tz)

    assert from_csv.timeslot == from_xlsx.timeslot == "20:45"
    assert from_csv.pickup_date_time == from_xlsx.pickup_date_time == "2024-06-01T18:45:00.000Z"
