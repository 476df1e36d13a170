"""
Violation trends in weekly or monthly buckets.
"""

from bisect import bisect_right
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, Iterable, List
import logging

from ppewatch.analytics.active_items import ActiveItems
from ppewatch.analytics.ppe_fields import NON_COMPLIANT

logger = logging.getLogger(__name__)

PERIODS = ("week", "month")


@dataclass(frozen=True)
class TrendBucket:
    """A half-open time window [start, end)."""
    label: str
    date_label: str
    start: datetime
    end: datetime


def start_of_week(moment: datetime) -> datetime:
    """Midnight of the Sunday on or before ``moment``."""
    day = moment.replace(hour=0, minute=0, second=0, microsecond=0)
    return day - timedelta(days=(day.weekday() + 1) % 7)


def start_of_month(moment: datetime) -> datetime:
    return moment.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def add_months(moment: datetime, months: int) -> datetime:
    """Shift the first day of a month by whole months."""
    index = moment.year * 12 + (moment.month - 1) + months
    return moment.replace(year=index // 12, month=index % 12 + 1, day=1)


def week_buckets(now: datetime, count: int = 5) -> List[TrendBucket]:
    """Weeks from the one ``count`` weeks ago up to the current one, oldest first."""
    first = start_of_week(now - timedelta(weeks=count))
    last = start_of_week(now)
    buckets = []
    start = first
    while start <= last:
        buckets.append(TrendBucket(
            label=f"Week {len(buckets) + 1}",
            date_label=f"{start:%b} {start.day}",
            start=start,
            end=start + timedelta(days=7),
        ))
        start = start + timedelta(days=7)
    return buckets


def month_buckets(now: datetime, count: int = 5) -> List[TrendBucket]:
    """Months from ``count`` months ago up to the current one, oldest first."""
    current = start_of_month(now)
    buckets = []
    for offset in range(-count, 1):
        start = add_months(current, offset)
        label = start.strftime("%b %Y")
        buckets.append(TrendBucket(label=label, date_label=label, start=start, end=add_months(start, 1)))
    return buckets


def _demo_value(period: str, index: int) -> int:
    """Synthetic decreasing count for an empty bucket."""
    factor = 6 - index
    if period == "week":
        return max(2, int(5 + factor * 0.8))
    return max(10, int(20 + factor * 3))


def build_trend(
    records: Iterable,
    active: ActiveItems,
    period: str = "week",
    now: datetime = None,
    buckets: int = 5,
    demo_mode: bool = False,
) -> List[Dict]:
    """
    Count violations per active PPE item in each bucket.
    
    Args:
        records: Compliance records; anything outside the buckets is ignored.
        active: The team's active PPE fields.
        period: One of PERIODS; anything else raises ValueError.
        now: Reference time, defaults to utcnow.
        buckets: How many periods to reach back before the current one.
        demo_mode: Fill empty buckets with synthetic numbers instead of zeros.
        
    Returns:
        One dict per bucket, oldest first:
        ``{"week": label, "date": label, "<item name lowercased>": count, ...}``
    """
    if period not in PERIODS:
        raise ValueError(f"Unknown trend period: {period}")
    now = now or datetime.utcnow()
    windows = week_buckets(now, buckets) if period == "week" else month_buckets(now, buckets)
    starts = [w.start for w in windows]
    
    counts = [dict.fromkeys(active.fields, 0) for _ in windows]
    seen = [0] * len(windows)
    
    for record in records:
        i = bisect_right(starts, record.timestamp) - 1
        if i < 0 or record.timestamp >= windows[i].end:
            continue
        seen[i] += 1
        compliances = record.compliances or {}
        for field_name in active.fields:
            if compliances.get(field_name) == NON_COMPLIANT:
                counts[i][field_name] += 1
    
    trend = []
    for i, window in enumerate(windows):
        point = {"week": window.label, "date": window.date_label}
        for field_name, display in active.display_names.items():
            key = display.lower()
            if seen[i] == 0 and demo_mode:
                point[key] = _demo_value(period, i)
            else:
                point[key] = counts[i][field_name]
        trend.append(point)
    
    logger.debug(f"Built {period} trend over {len(windows)} buckets, {sum(seen)} records")
    return trend


def trend_window_start(period: str, now: datetime, buckets: int = 5) -> datetime:
    """Start of the oldest bucket ``build_trend`` will report."""
    if period == "week":
        return start_of_week(now - timedelta(weeks=buckets))
    return add_months(start_of_month(now), -buckets)
