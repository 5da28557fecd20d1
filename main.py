"""
Booking Manifest - Main Entry Point

Builds the operational manifest (who is coming, when, for which product)
from booking exports, storefront order dumps and parsed reservation emails.

Features:
- Channel-specific extractors (storefront, booking rows, reservation emails)
- Pickup moment resolution in the business timezone
- Men/women breakdown reconciled against party totals
- Add-on (t-shirt, cocktail, photo) counting
- Formatted Excel or JSON output

Usage:
    python main.py --bookings bookings.xlsx [--orders orders.json] [--date 2024-06-01]
"""

import argparse
import json
import logging
import os
import sys
from pathlib import Path

import pandas as pd

from config import DEFAULT_BUSINESS_TIMEZONE, ADDON_CATEGORIES
from data_loader import (
    load_bookings, load_storefront_orders, load_reservation_events, resolve_date_range,
)
from processor import ManifestProcessor

logger = logging.getLogger(__name__)

MANIFEST_COLUMNS = [
    'Date', 'Time', 'Product', 'Group Total', 'Order', 'Booking Ref', 'Customer',
    'Phone', 'Platform', 'Status', 'Men', 'Women', 'Quantity',
    'T-Shirts', 'Cocktails', 'Photos',
]

# Columns shared by every order of a manifest group
GROUP_COLUMNS = [('Date', 'center'), ('Time', 'center'), ('Product', 'left'), ('Group Total', 'center')]

ADDON_HEADERS = {'tshirts': 'T-Shirts', 'cocktails': 'Cocktails', 'photos': 'Photos'}


def configure_logging(log_file='manifest.log', level=logging.INFO):
    """Log to file and console."""
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler()
        ]
    )


def get_next_available_filename(base_filename):
    """
    Get the next available filename by appending a number if file exists.

    Args:
        base_filename: Base filename (e.g., 'manifest.xlsx')

    Returns:
        str: Available filename (e.g., 'manifest_1.xlsx')

    Example:
        If manifest.xlsx exists -> returns manifest_1.xlsx
        If manifest_1.xlsx exists -> returns manifest_2.xlsx
    """
    if not os.path.exists(base_filename):
        return base_filename

    base_path = Path(base_filename)
    name_without_ext = base_path.stem
    extension = base_path.suffix
    directory = base_path.parent if base_path.parent.name else Path('.')

    counter = 1
    while True:
        new_filename = directory / f"{name_without_ext}_{counter}{extension}"
        if not new_filename.exists():
            return str(new_filename)
        counter += 1


def build_manifest_rows(result):
    """
    Flatten a ManifestResult into one row per order.

    Returns:
        tuple: (DataFrame, list of (start_row, end_row) sheet ranges per group)
    """
    rows = []
    group_ranges = []
    next_row = 2  # row 1 is the header

    for group in result.groups:
        start_row = next_row
        for order in group.orders:
            rows.append({
                'Date': group.date,
                'Time': group.time,
                'Product': group.product_name,
                'Group Total': group.total_people,
                'Order': order.id,
                'Booking Ref': order.platform_booking_id or '',
                'Customer': order.customer_name,
                'Phone': order.customer_phone or '',
                'Platform': order.platform,
                'Status': order.status,
                'Men': order.men_count,
                'Women': order.women_count,
                'Quantity': order.quantity,
                'T-Shirts': order.extras.tshirts,
                'Cocktails': order.extras.cocktails,
                'Photos': order.extras.photos,
            })
            next_row += 1
        group_ranges.append((start_row, next_row - 1))

    return pd.DataFrame(rows, columns=MANIFEST_COLUMNS), group_ranges


def build_summary_rows(result):
    """Summary sheet rows: totals, add-ons, per-channel and per-status counts."""
    summary = result.summary
    rows = [
        ('Total people', summary.total_people),
        ('Men', summary.men),
        ('Women', summary.women),
        ('Orders', summary.total_orders),
        ('Manifest groups', len(result.groups)),
    ]
    for kind in ADDON_CATEGORIES:
        rows.append((ADDON_HEADERS.get(kind, kind), getattr(summary.extras, kind)))
    for entry in summary.platform_breakdown:
        rows.append((f"Platform: {entry.platform}", f"{entry.total_people} people / {entry.order_count} orders"))
    for status, count in summary.status_counts.items():
        rows.append((f"Status: {status}", count))
    return pd.DataFrame(rows, columns=['Metric', 'Value'])


def build_issue_rows(issues):
    return pd.DataFrame(
        [{'Order': issue['order'], 'Issue': issue['message']} for issue in issues],
        columns=['Order', 'Issue'],
    )


def _format_header(ws):
    from openpyxl.styles import PatternFill, Alignment, Font

    header_fill = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
    header_font = Font(bold=True, color="FFFFFF", size=11)
    header_alignment = Alignment(horizontal='center', vertical='center')

    for cell in ws[1]:
        if cell.value:
            cell.fill = header_fill
            cell.font = header_font
            cell.alignment = header_alignment

    ws.row_dimensions[1].height = 30
    ws.freeze_panes = 'A2'


def _auto_width(ws, df, minimum=10, maximum=50):
    for col_idx, col in enumerate(df.columns, 1):
        values = df[col].astype(str).apply(len)
        longest = values.max() if not values.empty else 0
        width = max(longest, len(str(col))) + 2
        col_letter = ws.cell(row=1, column=col_idx).column_letter
        ws.column_dimensions[col_letter].width = min(max(width, minimum), maximum)


def save_manifest_to_excel(result, issues, output_file):
    """
    Save a manifest to Excel with formatting.

    Features:
    - Manifest sheet: one row per order, group columns merged per group
    - Alternating group colors (gray/white)
    - Summary sheet with totals, channels and statuses
    - Issues sheet highlighted in yellow
    - Blue bold headers, frozen header row, auto-adjusted column widths

    Args:
        result: ManifestResult
        issues: List of {'order', 'message'} dicts
        output_file: Output file path
    """
    from openpyxl import load_workbook
    from openpyxl.styles import PatternFill, Alignment

    logger.info("Creating formatted Excel output...")

    manifest_df, group_ranges = build_manifest_rows(result)
    summary_df = build_summary_rows(result)
    issues_df = build_issue_rows(issues)

    with pd.ExcelWriter(output_file, engine='openpyxl') as writer:
        manifest_df.to_excel(writer, sheet_name='Manifest', index=False)
        summary_df.to_excel(writer, sheet_name='Summary', index=False)
        issues_df.to_excel(writer, sheet_name='Issues', index=False)

    wb = load_workbook(output_file)

    try:
        ws = wb['Manifest']
        col_indices = {cell.value: idx for idx, cell in enumerate(ws[1], 1) if cell.value}
        _format_header(ws)

        # Merge group columns
        for start_row, end_row in group_ranges:
            if end_row <= start_row:
                continue
            for column, alignment in GROUP_COLUMNS:
                col_idx = col_indices.get(column)
                if col_idx:
                    ws.merge_cells(start_row=start_row, start_column=col_idx,
                                   end_row=end_row, end_column=col_idx)
                    ws.cell(row=start_row, column=col_idx).alignment = Alignment(
                        horizontal=alignment, vertical='center')

        # Alternating group colors
        gray_fill = PatternFill(start_color="F0F0F0", end_color="F0F0F0", fill_type="solid")
        for group_idx, (start_row, end_row) in enumerate(group_ranges):
            if group_idx % 2 == 0:
                for row_idx in range(start_row, end_row + 1):
                    for col_idx in range(1, len(manifest_df.columns) + 1):
                        ws.cell(row=row_idx, column=col_idx).fill = gray_fill

        # Rebooked placeholders in light blue
        status_col = col_indices.get('Status')
        if status_col:
            light_blue_fill = PatternFill(start_color="89CFF0", end_color="89CFF0", fill_type="solid")
            for row_idx in range(2, ws.max_row + 1):
                if ws.cell(row=row_idx, column=status_col).value == 'rebooked':
                    ws.cell(row=row_idx, column=status_col).fill = light_blue_fill

        _auto_width(ws, manifest_df)

        summary_ws = wb['Summary']
        _format_header(summary_ws)
        _auto_width(summary_ws, summary_df, minimum=16)

        issues_ws = wb['Issues']
        _format_header(issues_ws)
        yellow_fill = PatternFill(start_color="FFFF00", end_color="FFFF00", fill_type="solid")
        for row_idx in range(2, issues_ws.max_row + 1):
            for col_idx in range(1, len(issues_df.columns) + 1):
                issues_ws.cell(row=row_idx, column=col_idx).fill = yellow_fill
        _auto_width(issues_ws, issues_df, maximum=80)

        wb.save(output_file)
        logger.info("Applied Excel formatting: merged groups, colors, auto-widths, freeze panes")

    except (KeyError, ValueError, AttributeError) as e:
        logger.warning(f"Could not apply Excel formatting: {e}")
        logger.info("Basic Excel file saved without formatting")


def save_manifest_to_json(outcome, output_file):
    """
    Save orders, products, manifest and issues as JSON (camelCase keys).
    """
    payload = outcome['manifest'].to_dict()
    payload['orders'] = [order.to_dict() for order in outcome['orders']]
    payload['products'] = [product.to_dict() for product in outcome['products']]
    payload['issues'] = outcome['issues']

    with open(output_file, 'w', encoding='utf-8') as f:
        json.dump(payload, f, indent=2, ensure_ascii=False)
    logger.info(f"JSON manifest written to {output_file}")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Build a booking manifest")
    parser.add_argument('--bookings', help="Booking export (.xlsx, .xls, .csv or .json)")
    parser.add_argument('--orders', help="Storefront order dump (.json)")
    parser.add_argument('--events', help="Parsed reservation-email events (.json)")
    parser.add_argument('--date', help="Single day (YYYY-MM-DD)")
    parser.add_argument('--from', dest='date_from', help="Range start (YYYY-MM-DD)")
    parser.add_argument('--to', dest='date_to', help="Range end (YYYY-MM-DD)")
    parser.add_argument('--product', help="Product key to keep")
    parser.add_argument('--time', help="Timeslot to keep (HH:MM)")
    parser.add_argument('--timezone', default=DEFAULT_BUSINESS_TIMEZONE,
                        help=f"Business timezone (default {DEFAULT_BUSINESS_TIMEZONE})")
    parser.add_argument('--output', default=None, help="Output file (default manifest.xlsx / manifest.json)")
    parser.add_argument('--json', action='store_true', help="Write JSON instead of Excel")
    args = parser.parse_args(argv)
    if not (args.bookings or args.orders or args.events):
        parser.error("at least one of --bookings, --orders or --events is required")
    return args


def main(argv=None):
    """Main entry point for manifest generation."""
    args = parse_args(argv)
    configure_logging()

    logger.info("=" * 80)
    logger.info("Booking Manifest - Starting")
    logger.info("=" * 80)

    try:
        # Step 1: Load data
        logger.info("STEP 1: Loading Data Files")
        bookings = load_bookings(args.bookings) if args.bookings else []
        orders = load_storefront_orders(args.orders) if args.orders else []
        events = load_reservation_events(args.events) if args.events else []

        start, end = resolve_date_range(args.date, args.date_from, args.date_to)
        if start:
            logger.info(f"Date range: {start} to {end}")

        # Step 2: Build manifest
        logger.info("STEP 2: Building Manifest")
        processor = ManifestProcessor(bookings, orders, events, timezone=args.timezone)
        outcome = processor.process(
            date_from=start, date_to=end, product_id=args.product, time=args.time,
        )

        # Step 3: Report
        summary = outcome['manifest'].summary
        logger.info("STEP 3: Processing Complete")
        logger.info(f"Orders: {summary.total_orders}, people: {summary.total_people} "
                    f"({summary.men} men, {summary.women} women)")
        if outcome['issues']:
            logger.info(f"Issues: {len(outcome['issues'])}")
            for issue in outcome['issues']:
                logger.info(f"  {issue['order']}: {issue['message']}")

        # Step 4: Save
        base_output_file = args.output or ('manifest.json' if args.json else 'manifest.xlsx')
        output_file = get_next_available_filename(base_output_file)
        if output_file != base_output_file:
            logger.info(f"{base_output_file} already exists, using: {output_file}")

        if args.json:
            save_manifest_to_json(outcome, output_file)
        else:
            save_manifest_to_excel(outcome['manifest'], outcome['issues'], output_file)

        logger.info(f"OUTPUT FILE: {os.path.abspath(output_file)}")
        logger.info("Process completed successfully!")
        return 0

    except FileNotFoundError as e:
        logger.error(f"File not found: {e}")
        return 1
    except ValueError as e:
        logger.error(f"Invalid input: {e}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
