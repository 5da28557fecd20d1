import pytest

from extractors import BookingRowExtractor, ReservationEmailExtractor, StorefrontExtractor
from models import Booking
from processor import (
    ManifestProcessor,
    aggregate_manifest,
    get_extractor,
    transform,
    transform_many,
    validate_timezone,
)
from utils.payload_router import PayloadKind, detect_payload_kind


def test_payloads_are_routed_by_shape(storefront_order, booking_record, reservation_event):
    assert detect_payload_kind(storefront_order) is PayloadKind.STOREFRONT_ORDER
    assert detect_payload_kind(reservation_event) is PayloadKind.RESERVATION_EMAIL
    assert detect_payload_kind(booking_record) is PayloadKind.BOOKING_ROW
    assert detect_payload_kind(Booking()) is PayloadKind.BOOKING_ROW

    assert isinstance(get_extractor(storefront_order), StorefrontExtractor)
    assert isinstance(get_extractor(reservation_event), ReservationEmailExtractor)
    assert type(get_extractor(booking_record)) is BookingRowExtractor


def test_unusable_payloads_are_rejected(tz):
    with pytest.raises(TypeError):
        transform(42, tz)
    with pytest.raises(ValueError):
        transform({"foo": 1}, tz)


def test_invalid_timezone_is_rejected(booking_record):
    with pytest.raises(ValueError):
        transform(booking_record, "Mars/Olympus_Mons")
    with pytest.raises(ValueError):
        validate_timezone("")
    with pytest.raises(ValueError):
        ManifestProcessor(timezone="Not/AZone")


def test_transform_returns_none_without_pickup(tz):
    assert transform({"id": 1, "partySizeTotal": 2}, tz) is None


def test_transform_is_idempotent(booking_record, storefront_order, tz):
    assert transform(booking_record, tz) == transform(booking_record, tz)
    assert transform(storefront_order, tz) == transform(storefront_order, tz)


def test_transform_many_expands_line_items(storefront_order, booking_record, reservation_event, tz):
    storefront_order["items"].append({"id": 2, "name": "Food Tour", "quantity": 2})

    payloads = [storefront_order, booking_record, reservation_event, {"id": 9, "partySizeTotal": 1}]

    orders = transform_many(payloads, tz)

    assert [order.id for order in orders] == ["SO-1001-1", "SO-1001-2", "11", "getyourguide-GYG-77"]


def test_aggregate_manifest_from_transformed_orders(storefront_order, booking_record, tz):
    orders = transform_many([storefront_order, booking_record], tz)

    result = aggregate_manifest(orders, tz)

    assert len(result.groups) == 1
    group = result.groups[0]
    assert group.total_people == 15
    assert (group.men, group.women) == (9, 6)
    assert group.extras.to_dict() == {"tshirts": 3, "cocktails": 4, "photos": 0}
    assert {entry.platform for entry in group.platform_breakdown} == {"ecwid", "viator"}


class TestManifestProcessor:
    def test_process_builds_manifest_and_reports_issues(
        self, storefront_order, booking_record, reservation_event, tz
    ):
        processor = ManifestProcessor(
            bookings=[booking_record, {"id": 50, "platformBookingId": "BR-50"}],
            storefront_orders=[storefront_order, {"id": "SO-9", "items": [{"id": 1, "name": "Food Tour"}]}],
            reservation_events=[reservation_event],
            timezone=tz,
        )

        outcome = processor.process()

        assert len(outcome["orders"]) == 3
        assert outcome["manifest"].summary.total_people == 17
        assert {issue["order"] for issue in outcome["issues"]} == {"BR-50", "SO-9"}
        assert {product.id for product in outcome["products"]} == {
            "crawl-krakow-krawl-pub-through",
            "kazimierz-krawl-through",
        }

    def test_date_range_and_product_filters(self, booking_record, tz):
        later = dict(booking_record, id=12, experienceStartAt="2024-06-03T18:45:00Z")
        processor = ManifestProcessor(bookings=[booking_record, later], timezone=tz)

        in_range = processor.process(date_from="2024-06-02", date_to="2024-06-05")
        by_date = processor.process(date="2024-06-01")
        by_product = processor.process(product_id="nothing-matches")

        assert [order.id for order in in_range["orders"]] == ["12"]
        assert [order.id for order in by_date["orders"]] == ["11"]
        assert by_product["orders"] == []
        assert by_product["manifest"].summary.total_orders == 0

    def test_missing_headcount_is_reported(self, tz):
        processor = ManifestProcessor(
            bookings=[{"id": 5, "platformBookingId": "BR-5", "experienceStartAt": "2024-06-01T18:45:00Z"}],
            timezone=tz,
        )

        outcome = processor.process()

        assert outcome["issues"] == [{"order": "BR-5", "message": "No party size found for booking BR-5"}]
