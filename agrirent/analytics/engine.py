"""
Analytics aggregation engine.

Derives the fixed set of marketplace views from booking, item and user
snapshots. Every function in this module is pure: no I/O, no logging, no
clock reads. The evaluation time is always passed in explicitly.
"""

from collections.abc import Sequence
from datetime import datetime

from agrirent.analytics.grouping import (
    count_by,
    hour_of,
    hour_sort_key,
    month_of,
    most_frequent,
    normalize_key,
    top_n,
)
from agrirent.core.models import (
    AnalyticsReport,
    Booking,
    CategoryCount,
    HarvestMonth,
    HourBucket,
    Item,
    ItemCategory,
    ItemDemand,
    PriceTrend,
    RainyMonth,
    RegionalDemand,
    RegionIncome,
    RegionSupplyDemand,
    SeasonalSignals,
    ShortageEntry,
    User,
    UserRole,
)

SHORTAGE_LIMIT = 5
HOUR_WINDOW_LIMIT = 6
LOW_UTILIZATION_LIMIT = 10
TOP_DEMAND_LIMIT = 10
PRICE_TREND_LIMIT = 10
SUPPLY_DEMAND_LIMIT = 10
INCOME_LIMIT = 10
REGIONAL_DEMAND_LIMIT = 5

HARVEST_MONTHS = (9, 10, 11)
RAINY_MONTHS = (6, 7, 8)


def completed_bookings(bookings: Sequence[Booking]) -> list[Booking]:
    return [b for b in bookings if b.is_completed]


def revenue_summary(bookings: Sequence[Booking]) -> tuple[float, int, float]:
    """
    Revenue over completed bookings.

    Returns:
        (total_revenue, completed_count, avg_booking_value)
    """
    completed = completed_bookings(bookings)
    total = sum((b.final_price or 0.0) for b in completed)
    count = len(completed)
    avg = total / count if count > 0 else 0.0
    return float(total), count, avg


def most_booked_category(bookings: Sequence[Booking]) -> CategoryCount | None:
    """Most frequent category among completed bookings, first encountered on ties."""
    counts = count_by(completed_bookings(bookings), lambda b: normalize_key(b.item_category))
    winner = most_frequent(counts)
    if winner is None:
        return None
    return CategoryCount(category=winner[0], count=winner[1])


def shortage(bookings: Sequence[Booking], items: Sequence[Item]) -> list[ShortageEntry]:
    """(category, location) pairs where searching bookings outnumber available supply."""
    tallies: dict[tuple[str, str], list[int]] = {}
    for b in bookings:
        key = (normalize_key(b.item_category), normalize_key(b.location))
        tally = tallies.setdefault(key, [0, 0])
        if b.is_searching:
            tally[0] += 1
    for i in items:
        key = (normalize_key(i.category), normalize_key(i.location))
        tally = tallies.setdefault(key, [0, 0])
        if i.is_supply:
            tally[1] += 1

    entries = [
        ShortageEntry(
            category=category,
            location=location,
            searching=searching,
            available=available,
            gap=searching - available,
        )
        for (category, location), (searching, available) in tallies.items()
        if searching - available > 0
    ]
    return top_n(entries, key=lambda e: e.gap, n=SHORTAGE_LIMIT)


def high_demand_windows(bookings: Sequence[Booking]) -> list[HourBucket]:
    counts = count_by(bookings, lambda b: hour_of(b.start_time))
    buckets = [HourBucket(hour=hour, count=count) for hour, count in counts.items()]
    return top_n(buckets, key=lambda h: hour_sort_key(h.hour), n=HOUR_WINDOW_LIMIT, descending=False)


def item_booking_counts(bookings: Sequence[Booking]) -> dict[int, int]:
    """Bookings per item id; bookings without an item are not counted."""
    return count_by((b for b in bookings if b.item_id is not None), lambda b: b.item_id)


def low_utilization_items(bookings: Sequence[Booking], items: Sequence[Item]) -> list[Item]:
    counts = item_booking_counts(bookings)
    return [i for i in items if counts.get(i.id, 0) == 0][:LOW_UTILIZATION_LIMIT]


def top_demand_machines(bookings: Sequence[Booking], items: Sequence[Item]) -> list[ItemDemand]:
    counts = item_booking_counts(bookings)
    rows = [ItemDemand(item=i, count=counts.get(i.id, 0)) for i in items]
    return top_n(rows, key=lambda r: r.count, n=TOP_DEMAND_LIMIT)


def price_trends(bookings: Sequence[Booking], items: Sequence[Item]) -> list[PriceTrend]:
    """Average completed price per item, highest first."""
    sums: dict[int, list[float]] = {}
    for b in completed_bookings(bookings):
        if b.item_id is None or not b.final_price or b.final_price <= 0:
            continue
        acc = sums.setdefault(b.item_id, [0.0, 0])
        acc[0] += b.final_price
        acc[1] += 1

    names: dict[int, str] = {}
    for i in items:
        names.setdefault(i.id, i.name)

    rows = [
        PriceTrend(item_id=item_id, item_name=names.get(item_id), average_price=total / n, bookings=n)
        for item_id, (total, n) in sums.items()
    ]
    return top_n(rows, key=lambda r: r.average_price, n=PRICE_TREND_LIMIT)


def supply_vs_demand(bookings: Sequence[Booking], items: Sequence[Item]) -> list[RegionSupplyDemand]:
    regions: dict[str, list[int]] = {}
    for b in bookings:
        regions.setdefault(normalize_key(b.location), [0, 0])[0] += 1
    for i in items:
        tally = regions.setdefault(normalize_key(i.location), [0, 0])
        if i.is_supply:
            tally[1] += 1

    rows = [
        RegionSupplyDemand(region=region, demand=demand, supply=supply, gap=demand - supply)
        for region, (demand, supply) in regions.items()
    ]
    return top_n(rows, key=lambda r: r.gap, n=SUPPLY_DEMAND_LIMIT)


def income_by_region(bookings: Sequence[Booking]) -> list[RegionIncome]:
    totals: dict[str, float] = {}
    for b in completed_bookings(bookings):
        region = normalize_key(b.location)
        totals[region] = totals.get(region, 0.0) + (b.final_price or 0.0)

    rows = [RegionIncome(region=region, total=total) for region, total in totals.items()]
    return top_n(rows, key=lambda r: r.total, n=INCOME_LIMIT)


def seasonal_signals(bookings: Sequence[Booking], now: datetime) -> SeasonalSignals:
    """
    Harvest (Sep-Nov) and rainy (Jun-Aug) season counts.

    Undated bookings are bucketed into the month of ``now``; bookings whose
    date cannot be parsed fall outside every window.
    """
    keyed = ((month_of(b.date, now), normalize_key(b.item_category)) for b in bookings)
    counts = count_by((k for k in keyed if k[0] is not None), lambda k: k)
    tractors = ItemCategory.TRACTORS.value
    harvesters = ItemCategory.HARVESTERS.value

    harvest = [
        HarvestMonth(
            month=m,
            tractors=counts.get((m, tractors), 0),
            harvesters=counts.get((m, harvesters), 0),
        )
        for m in HARVEST_MONTHS
    ]
    rainy = [RainyMonth(month=m, tractors=counts.get((m, tractors), 0)) for m in RAINY_MONTHS]
    return SeasonalSignals(harvest=harvest, rainy=rainy)


def regional_demand(bookings: Sequence[Booking], items: Sequence[Item]) -> list[RegionalDemand]:
    booking_counts: dict[str, int] = {}
    item_counts: dict[str, int] = {}
    categories: dict[str, dict[str, int]] = {}
    for b in bookings:
        region = normalize_key(b.location)
        booking_counts[region] = booking_counts.get(region, 0) + 1
        item_counts.setdefault(region, 0)
        per_region = categories.setdefault(region, {})
        category = normalize_key(b.item_category)
        per_region[category] = per_region.get(category, 0) + 1
    for i in items:
        region = normalize_key(i.location)
        booking_counts.setdefault(region, 0)
        item_counts[region] = item_counts.get(region, 0) + 1

    rows = []
    for region, n_bookings in booking_counts.items():
        n_items = item_counts[region]
        score = n_bookings / n_items if n_items > 0 else float(n_bookings)
        top = most_frequent(categories.get(region, {}))
        rows.append(
            RegionalDemand(
                region=region,
                bookings=n_bookings,
                items=n_items,
                score=score,
                top_category=top[0] if top else None,
            )
        )
    return top_n(rows, key=lambda r: r.score, n=REGIONAL_DEMAND_LIMIT)


def compute_report(
    bookings: Sequence[Booking],
    items: Sequence[Item],
    users: Sequence[User],
    now: datetime,
) -> AnalyticsReport:
    """
    Compute every analytics view for one set of snapshots.

    Args:
        bookings: Booking snapshot, in record-source order
        items: Item snapshot, in record-source order
        users: User snapshot
        now: Evaluation time, used only for undated bookings

    Returns:
        A freshly allocated AnalyticsReport; empty inputs give zeroed views
    """
    total_revenue, completed_count, avg_value = revenue_summary(bookings)

    return AnalyticsReport(
        evaluated_at=now,
        total_revenue=total_revenue,
        total_completed_bookings=completed_count,
        avg_booking_value=avg_value,
        most_booked_category=most_booked_category(bookings),
        total_farmers=sum(1 for u in users if u.role == UserRole.FARMER),
        total_suppliers=sum(1 for u in users if u.role == UserRole.SUPPLIER),
        total_items=len(items),
        shortage=shortage(bookings, items),
        high_demand_windows=high_demand_windows(bookings),
        low_utilization_items=low_utilization_items(bookings, items),
        top_demand_machines=top_demand_machines(bookings, items),
        price_trends=price_trends(bookings, items),
        supply_vs_demand=supply_vs_demand(bookings, items),
        income_by_region=income_by_region(bookings),
        seasonal_signals=seasonal_signals(bookings, now),
        regional_demand=regional_demand(bookings, items),
    )


class AnalyticsEngine:
    """
    Object wrapper around compute_report.

    Holds no state between calls; safe to share across threads.
    """

    def compute(
        self,
        bookings: Sequence[Booking],
        items: Sequence[Item],
        users: Sequence[User],
        now: datetime,
    ) -> AnalyticsReport:
        return compute_report(bookings, items, users, now)
