"""
Example usage of the Booking Manifest engine.

This script demonstrates how to use the engine programmatically
without running main.py.
"""

from data_loader import load_bookings, load_storefront_orders
from processor import ManifestProcessor, aggregate_manifest, transform, transform_many


def example_single_storefront_order():
    """
    Example 1: Transform one storefront order in memory.
    """
    print("\n" + "="*80)
    print("Example 1: Single storefront order")
    print("="*80)

    order = {
        'id': 'SO-1001',
        'pickupTime': '2024-06-01 20:45',
        'shippingPerson': {'name': 'Anna Nowak', 'phone': '+48 600 100 200'},
        'items': [{
            'id': 1,
            'productId': 555,
            'name': 'Krawl Through Krakow Pub Crawl',
            'quantity': 5,
            'selectedOptions': [
                {'name': 'Men', 'value': '3'},
                {'name': 'Women', 'value': '2'},
                {'name': 'T-Shirt (Size L)', 'value': '2'},
            ],
        }],
    }

    unified = transform(order, timezone='Europe/Warsaw')
    print(f"\n{unified.date} {unified.timeslot} {unified.product_name}")
    print(f"Men: {unified.men_count}, Women: {unified.women_count}, T-shirts: {unified.extras.tshirts}")

    return unified


def example_booking_rows():
    """
    Example 2: Aggregate persisted booking rows into a manifest.
    """
    print("\n" + "="*80)
    print("Example 2: Booking rows to manifest")
    print("="*80)

    bookings = [
        {
            'id': 1, 'platform': 'viator', 'platformBookingId': 'BR-1', 'status': 'confirmed',
            'experienceStartAt': '2024-06-01T18:45:00Z', 'partySizeTotal': 10,
            'addonsSnapshot': {'partyBreakdown': {'men': 3, 'women': 2}},
            'productName': 'Krawl Through Krakow', 'guestFirstName': 'Jan', 'guestLastName': 'Kowalski',
        },
        {
            'id': 2, 'platform': 'Viator', 'platformBookingId': 'BR-2', 'status': 'rebooked',
            'experienceStartAt': '2024-06-01T18:45:30Z', 'partySizeTotal': 4,
            'productName': 'Krawl Through Krakow',
        },
    ]

    orders = transform_many(bookings, timezone='Europe/Warsaw')
    result = aggregate_manifest(orders, timezone='Europe/Warsaw')

    for group in result.groups:
        print(f"\n{group.date} {group.time} {group.product_name}: "
              f"{group.total_people} people ({group.men} men, {group.women} women)")
    print(f"\nStatus counts: {result.summary.status_counts}")

    return result


def example_from_files():
    """
    Example 3: Full run from exported files, filtered to one day.
    """
    print("\n" + "="*80)
    print("Example 3: Files to manifest")
    print("="*80)

    bookings = load_bookings("path/to/bookings.xlsx")
    orders = load_storefront_orders("path/to/orders.json")

    processor = ManifestProcessor(bookings, orders, timezone='Europe/Warsaw')
    outcome = processor.process(date='2024-06-01')

    print(f"\nOrders: {len(outcome['orders'])}")
    print(f"Products: {[product.name for product in outcome['products']]}")
    if outcome['issues']:
        print("\nIssues:")
        for issue in outcome['issues']:
            print(f"  {issue['order']}: {issue['message']}")

    return outcome


if __name__ == "__main__":
    print("Booking Manifest - Example Usage")
    print("=" * 80)
    print("\nAvailable examples:")
    print("  1. example_single_storefront_order() - Transform one storefront order")
    print("  2. example_booking_rows() - Aggregate booking rows")
    print("  3. example_from_files() - Full run from exported files")
    print("\n" + "=" * 80)

    example_single_storefront_order()
    example_booking_rows()
    # Update the file paths before running:
    # example_from_files()
