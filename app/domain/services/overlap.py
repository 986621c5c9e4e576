"""
OVERLAP CALCULATOR
Inclusive date-range intersection math

RULES:
✅ Inclusive on both ends: sharing a single day is an overlap
✅ Adjacent ranges (one ends the day before the other starts) do NOT overlap
✅ Pure functions, no side effects
"""

from typing import Iterable, List, Optional

from app.domain.models import Booking, Interval


def overlaps(a: Interval, b: Interval) -> bool:
    """True iff a.start <= b.end and a.end >= b.start"""
    return a.start <= b.end and a.end >= b.start


def intersection(a: Interval, b: Interval) -> Optional[Interval]:
    """Shared days of two intervals, or None when they do not overlap"""
    if not overlaps(a, b):
        return None
    return Interval(max(a.start, b.start), min(a.end, b.end))


def overlap_days(a: Interval, b: Interval) -> int:
    """Number of inclusive days shared by two intervals (0 if none)"""
    shared = intersection(a, b)
    return shared.days if shared else 0


def overlapping_bookings(
    bookings: Iterable[Booking],
    search_interval: Interval,
    exclude_campaign_id: Optional[str] = None,
) -> List[Booking]:
    """
    Bookings whose interval overlaps the search interval.

    Bookings owned by `exclude_campaign_id` are dropped so a campaign being
    edited never conflicts with itself.
    """
    return [
        booking
        for booking in bookings
        if overlaps(booking.interval, search_interval)
        and (exclude_campaign_id is None or booking.campaign_id != exclude_campaign_id)
    ]
