import json

from openpyxl import load_workbook

from main import build_manifest_rows, main, save_manifest_to_excel
from processor import ManifestProcessor


def _outcome(storefront_order, booking_record, tz):
    processor = ManifestProcessor(
        bookings=[booking_record, {"id": 50, "platformBookingId": "BR-50"}],
        storefront_orders=[storefront_order],
        timezone=tz,
    )
    return processor.process()


def test_manifest_rows_follow_groups(storefront_order, booking_record, tz):
    outcome = _outcome(storefront_order, booking_record, tz)

    df, group_ranges = build_manifest_rows(outcome["manifest"])

    assert len(df) == 2
    assert group_ranges == [(2, 3)]
    assert list(df["Group Total"]) == [15, 15]
    assert set(df["Platform"]) == {"ecwid", "viator"}


def test_excel_workbook_has_all_sheets(storefront_order, booking_record, tz, tmp_path):
    outcome = _outcome(storefront_order, booking_record, tz)
    output = tmp_path / "manifest.xlsx"

    save_manifest_to_excel(outcome["manifest"], outcome["issues"], str(output))

    wb = load_workbook(output)
    assert wb.sheetnames == ["Manifest", "Summary", "Issues"]
    manifest = wb["Manifest"]
    assert manifest["A1"].value == "Date"
    assert manifest["A2"].value == "2024-06-01"
    assert manifest["B2"].value == "20:45"
    assert "A2:A3" in {str(cell_range) for cell_range in manifest.merged_cells.ranges}
    summary = wb["Summary"]
    assert summary["A2"].value == "Total people"
    assert summary["B2"].value == 15
    issues = wb["Issues"]
    assert issues["A2"].value == "BR-50"


def test_main_writes_json(tmp_path, monkeypatch, booking_record, storefront_order):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "bookings.json").write_text(json.dumps([booking_record]))
    (tmp_path / "orders.json").write_text(json.dumps([storefront_order]))

    code = main([
        "--bookings", "bookings.json",
        "--orders", "orders.json",
        "--date", "2024-06-01",
        "--timezone", "Europe/Warsaw",
        "--json",
        "--output", "out.json",
    ])

    assert code == 0
    data = json.loads((tmp_path / "out.json").read_text())
    assert data["summary"]["totalPeople"] == 15
    assert data["manifest"][0]["time"] == "20:45"
    assert len(data["orders"]) == 2


def test_main_reports_missing_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    assert main(["--orders", "nope.json"]) == 1


def test_main_reports_bad_date(tmp_path, monkeypatch, storefront_order):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "orders.json").write_text(json.dumps([storefront_order]))

    assert main(["--orders", "orders.json", "--date", "someday"]) == 2
