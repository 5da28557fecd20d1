"""
Manifest consistency validation.

The aggregated manifest must reconcile with the orders it was built from:
group headcounts equal men + women, and grand totals equal the sum of
order headcounts and add-ons.
"""

import logging

from config import ADDON_CATEGORIES

logger = logging.getLogger(__name__)


def check_group_totals(group):
    """
    Check that a group's totals equal the sum of its orders.

    Args:
        group: ManifestGroup

    Returns:
        list: Error messages (empty if consistent)
    """
    errors = []
    label = f"{group.product_name} {group.date} {group.time}"

    if group.total_people != group.men + group.women:
        errors.append(f"{label}: total people {group.total_people} != men + women {group.men + group.women}")

    expected_people = sum(order.headcount for order in group.orders)
    if group.total_people != expected_people:
        errors.append(f"{label}: total people {group.total_people} != order headcount {expected_people}")

    for kind in ADDON_CATEGORIES:
        expected = sum(getattr(order.extras, kind) for order in group.orders)
        actual = getattr(group.extras, kind)
        if actual != expected:
            errors.append(f"{label}: {kind} {actual} != order sum {expected}")

    for error in errors:
        logger.error(error)
    return errors


def check_manifest_totals(result, orders):
    """
    Check a whole manifest against the orders it was built from.

    Args:
        result: ManifestResult
        orders: The UnifiedOrders passed to the aggregator

    Returns:
        list: Error messages (empty if consistent)
    """
    errors = []
    for group in result.groups:
        errors.extend(check_group_totals(group))

    expected_people = sum(order.headcount for order in orders)
    if result.summary.total_people != expected_people:
        error = f"Manifest total {result.summary.total_people} != order headcount {expected_people}"
        logger.error(error)
        errors.append(error)

    if result.summary.total_orders != len(orders):
        error = f"Manifest order count {result.summary.total_orders} != {len(orders)}"
        logger.error(error)
        errors.append(error)

    return errors
