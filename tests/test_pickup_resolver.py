from datetime import date, datetime, timedelta

import pytest

from models import format_utc_iso
from utils.pickup_resolver import (
    normalize_timestamp,
    parse_candidate,
    resolve_pickup_moment,
    sanitize_time_token,
)

TZ = "Europe/Warsaw"


def test_local_wall_clock_string_is_read_in_business_timezone():
    moment = normalize_timestamp("2024-06-01 20:45", TZ)

    assert moment.strftime("%Y-%m-%d %H:%M") == "2024-06-01 20:45"
    assert moment.utcoffset() == timedelta(hours=2)
    assert format_utc_iso(moment) == "2024-06-01T18:45:00.000Z"


@pytest.mark.parametrize(
    "value",
    [
        "2024-06-01T18:45:00Z",
        "2024-06-01T18:45:00.000Z",
        "2024-06-01T20:45:00+02:00",
        "2024-06-01 20:45 +0200",
    ],
)
def test_explicit_offsets_are_trusted(value):
    moment = normalize_timestamp(value, TZ)

    assert moment.strftime("%Y-%m-%d %H:%M") == "2024-06-01 20:45"


@pytest.mark.parametrize(
    "value",
    [
        "01/06/2024 20:45",
        "01.06.2024 20:45",
        "01-06-2024 20:45",
        "Written 01/06/2024 20:45 CEST",
        "Saturday, 01 June 2024 20:45",
    ],
)
def test_strict_templates(value):
    moment = normalize_timestamp(value, TZ)

    assert moment is not None
    assert moment.strftime("%Y-%m-%d %H:%M") == "2024-06-01 20:45"


def test_seconds_are_dropped():
    moment = normalize_timestamp("2024-06-01 20:45:59", TZ)

    assert moment.second == 0
    assert moment.strftime("%H:%M") == "20:45"


def test_embedded_datetime_is_found_in_free_text():
    moment = normalize_timestamp("Pickup on 2024-06-01 20:45 at the Old Town", TZ)

    assert moment.strftime("%Y-%m-%d %H:%M") == "2024-06-01 20:45"


@pytest.mark.parametrize(
    "value",
    [None, "", "   ", "n/a", "no", "brak", "none", "tomorrow evening", "Size L", 3, True],
)
def test_values_without_a_date_signal_resolve_to_none(value):
    assert normalize_timestamp(value, TZ) is None


def test_resolver_never_invents_a_moment():
    candidates = [("notes", "see you soon"), ("size", "L"), ("pickup", "n/a"), ("time", "20:45")]

    assert resolve_pickup_moment(candidates, TZ) is None


def test_naive_datetime_is_local_and_aware_datetime_is_converted():
    naive = normalize_timestamp(datetime(2024, 6, 1, 20, 45), TZ)
    assert naive.strftime("%H:%M") == "20:45"

    aware = normalize_timestamp(datetime.fromisoformat("2024-06-01T18:45:00+00:00"), TZ)
    assert aware.strftime("%H:%M") == "20:45"


def test_date_objects_are_date_only_candidates():
    moment, has_time = parse_candidate(date(2024, 6, 1), TZ)

    assert has_time is False
    assert moment.strftime("%Y-%m-%d") == "2024-06-01"


def test_earliest_full_moment_wins():
    candidates = [
        ("pickupTime", "2024-06-01 21:00"),
        ("option", "2024-06-01 20:45"),
    ]

    moment = resolve_pickup_moment(candidates, TZ)

    assert moment.has_time is True
    assert moment.local_time() == "20:45"


def test_bare_time_is_attached_to_date_only_candidate():
    candidates = [
        ("Date", "2024-06-01"),
        ("Time", "8:45 pm"),
    ]

    moment = resolve_pickup_moment(candidates, TZ)

    assert moment.local_date() == "2024-06-01"
    assert moment.local_time() == "20:45"
    assert moment.utc_iso() == "2024-06-01T18:45:00.000Z"


def test_date_only_resolution_has_unknown_time():
    moment = resolve_pickup_moment([("experienceDate", "2024-06-01")], TZ)

    assert moment.has_time is False
    assert moment.local_date() == "2024-06-01"
    assert moment.local_time() == "--:--"
    assert moment.utc_iso() is None


def test_timezone_is_a_parameter():
    moment = normalize_timestamp("2024-06-01T18:45:00Z", "America/New_York")

    assert moment.strftime("%H:%M") == "14:45"


def test_sanitize_time_token():
    assert sanitize_time_token("Written 01/06/2024 20:45 CEST") == "01/06/2024 20:45"
    assert sanitize_time_token("8:45 P.M.") == "8:45 pm"


@pytest.mark.parametrize(
    "value",
    ["31/12/9999 23:59", "ref 3000-01-01 10:00", "01/01/0001 10:00", "9999-12-31T23:59:00Z", datetime(9999, 12, 31)],
)
def test_dates_outside_supported_range_resolve_to_none(value):
    assert normalize_timestamp(value, TZ) is None


def test_out_of_range_placeholder_does_not_hide_real_pickup():
    candidates = [("Valid until", "31/12/9999 23:59"), ("Date", "2024-06-01"), ("Time", "20:45")]

    moment = resolve_pickup_moment(candidates, TZ)

    assert moment.local_date() == "2024-06-01"
    assert moment.local_time() == "20:45"
