"""
Manifest aggregation.

Groups unified orders into manifest lines keyed by
(product_id, date, display time) and folds them into a run summary.

The display time is recomputed from each order's UTC pickup instant in the
business timezone, so orders stored with different timeslot strings but
falling in the same local minute merge into one group.
"""

import logging
from dataclasses import replace

import pandas as pd

from config import BOOKING_STATUSES, STATUS_UNKNOWN, UNKNOWN_PLATFORM
from models import (
    ManifestGroup, ManifestResult, ManifestSummary, OrderExtras,
    PlatformBreakdownEntry, UnifiedProduct,
)
from utils.normalization import is_missing, platform_key

logger = logging.getLogger(__name__)


def display_time(order, timezone):
    """
    Local 'HH:MM' for an order in the business timezone.

    Falls back to the stored timeslot when the order has no pickup instant.

    Example:
        pickup_date_time "2024-06-01T18:45:00.000Z" in Europe/Warsaw -> "20:45"
    """
    if is_missing(order.pickup_date_time):
        return order.timeslot
    try:
        moment = pd.Timestamp(order.pickup_date_time)
    except (ValueError, TypeError):
        logger.warning(f"[{order.id}] Unreadable pickup instant {order.pickup_date_time}, using stored timeslot")
        return order.timeslot
    if moment.tzinfo is None:
        moment = moment.tz_localize('UTC')
    return moment.tz_convert(timezone).strftime('%H:%M')


def apply_platform_breakdown(breakdown, index, platform, men, women, order_count=1):
    """
    Add one order's (or one entry's) headcount to a per-channel breakdown.

    Entries merge by case-insensitive channel key; the first-seen label is kept.

    Args:
        breakdown: List of PlatformBreakdownEntry, updated in place
        index: Dict of channel key -> entry for the same list
        platform: Channel label
        men: Men count
        women: Women count
        order_count: Orders represented by this contribution
    """
    key = platform_key(platform)
    entry = index.get(key)
    if entry is None:
        label = platform if not is_missing(platform) else UNKNOWN_PLATFORM
        entry = PlatformBreakdownEntry(platform=str(label))
        index[key] = entry
        breakdown.append(entry)

    entry.men += men
    entry.women += women
    entry.total_people += men + women
    entry.order_count += order_count


def group_orders_for_manifest(orders, timezone):
    """
    Partition orders into manifest groups.

    Args:
        orders: Iterable of UnifiedOrder
        timezone: IANA zone name used for display times

    Returns:
        list: ManifestGroup objects sorted by (date, time, product name)
    """
    groups = {}
    breakdown_indexes = {}

    for order in orders:
        men = order.men_count or 0
        women = order.women_count or 0
        extras = order.extras if order.extras is not None else OrderExtras()
        time_label = display_time(order, timezone)
        normalized = replace(order, timeslot=time_label, extras=extras.copy())

        key = (order.product_id, order.date, time_label)
        group = groups.get(key)
        if group is None:
            group = ManifestGroup(
                product_id=order.product_id,
                product_name=order.product_name,
                date=order.date,
                time=time_label,
            )
            groups[key] = group
            breakdown_indexes[key] = {}

        group.men += men
        group.women += women
        group.total_people += men + women
        group.extras.merge(extras)
        group.orders.append(normalized)
        apply_platform_breakdown(group.platform_breakdown, breakdown_indexes[key], order.platform, men, women)

    result = sorted(
        groups.values(),
        key=lambda group: (group.date, group.time, (group.product_name or '').casefold()),
    )
    logger.debug(f"Grouped {sum(len(group.orders) for group in result)} orders into {len(result)} manifest groups")
    return result


def build_summary(groups):
    """
    Fold manifest groups into a run summary.

    Every known booking status is present in status_counts, zero when unseen.

    Args:
        groups: List of ManifestGroup

    Returns:
        ManifestSummary
    """
    summary = ManifestSummary()
    breakdown_index = {}

    for group in groups:
        summary.total_people += group.total_people
        summary.men += group.men
        summary.women += group.women
        summary.total_orders += len(group.orders)
        summary.extras.merge(group.extras)

        for entry in group.platform_breakdown:
            apply_platform_breakdown(
                summary.platform_breakdown, breakdown_index,
                entry.platform, entry.men, entry.women, entry.order_count,
            )

        for order in group.orders:
            status = order.status if order.status in BOOKING_STATUSES else STATUS_UNKNOWN
            summary.status_counts[status] += 1

    summary.platform_breakdown.sort(key=lambda entry: entry.platform.casefold())
    return summary


def aggregate_manifest(orders, timezone):
    """
    Group orders and summarize them.

    Args:
        orders: Iterable of UnifiedOrder
        timezone: IANA zone name

    Returns:
        ManifestResult
    """
    orders = list(orders)
    groups = group_orders_for_manifest(orders, timezone)
    summary = build_summary(groups)
    logger.info(
        f"Manifest built: {len(groups)} groups, {summary.total_orders} orders, "
        f"{summary.total_people} people"
    )
    return ManifestResult(groups=groups, summary=summary)


def filter_orders(orders, date=None, product_id=None, time=None):
    """
    Keep orders matching every given criterion.

    Args:
        orders: Iterable of UnifiedOrder
        date: 'YYYY-MM-DD' to keep
        product_id: Product key to keep
        time: 'HH:MM' timeslot to keep

    Returns:
        list: Matching orders
    """
    result = []
    for order in orders:
        if date and order.date != date:
            continue
        if product_id and order.product_id != product_id:
            continue
        if time and order.timeslot != time:
            continue
        result.append(order)
    return result


def collect_products(orders):
    """
    Distinct products across orders, first-seen name and channel kept.

    Returns:
        list: UnifiedProduct sorted by name
    """
    products = {}
    for order in orders:
        if order.product_id not in products:
            products[order.product_id] = UnifiedProduct(
                id=order.product_id,
                name=order.product_name,
                platform=order.platform,
            )
    return sorted(products.values(), key=lambda product: (product.name or '').casefold())
