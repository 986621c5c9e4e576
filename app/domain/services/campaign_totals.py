"""
Campaign financial totals.

Single calculator for plan / campaign summaries and invoice schedules.
Every figure is built from per-line prorated amounts; nothing is ever
prorated on a summed monthly rate.
"""

import calendar
from datetime import date
from decimal import Decimal
from typing import List, Optional, Sequence

from app.domain.models import BillingPeriod, CampaignLine, CampaignTotals, Interval
from app.domain.services.pro_rata import (
    BILLING_CYCLE_DAYS,
    Number,
    discount,
    effective_monthly_rate,
    line_rent,
    profit,
    round_money,
    sum_amounts,
    to_decimal,
)

_ZERO = Decimal("0")

# Guard against runaway loops on corrupt dates (10 years of months)
MAX_BILLING_PERIODS = 120


def _month_end(day: date) -> date:
    return date(day.year, day.month, calendar.monthrange(day.year, day.month)[1])


def _next_month_start(day: date) -> date:
    if day.month == 12:
        return date(day.year + 1, 1, 1)
    return date(day.year, day.month + 1, 1)


def _is_full_calendar_month(interval: Interval) -> bool:
    return (
        interval.start.day == 1
        and interval.end == _month_end(interval.start)
    )


def billing_periods(period: Interval) -> List[BillingPeriod]:
    """
    Split a campaign period into calendar-month billing periods

    A period covering a whole calendar month bills as 30 days with factor 1;
    partial months bill their inclusive days with factor days / 30.
    Campaigns of 30 days or less form a single period.
    """
    if period.days <= BILLING_CYCLE_DAYS:
        return [
            BillingPeriod(
                month_key=period.start.strftime("%Y-%m"),
                interval=period,
                days=period.days,
                pro_rata_factor=round_money(Decimal(period.days) / BILLING_CYCLE_DAYS),
                is_first=True,
                is_last=True,
            )
        ]

    periods: List[BillingPeriod] = []
    cursor = period.start
    while cursor <= period.end and len(periods) < MAX_BILLING_PERIODS:
        slice_ = Interval(cursor, min(_month_end(cursor), period.end))
        if _is_full_calendar_month(slice_):
            days, factor = BILLING_CYCLE_DAYS, Decimal("1.00")
        else:
            days = slice_.days
            factor = round_money(Decimal(days) / BILLING_CYCLE_DAYS)
        periods.append(
            BillingPeriod(
                month_key=slice_.start.strftime("%Y-%m"),
                interval=slice_,
                days=days,
                pro_rata_factor=factor,
                is_first=not periods,
            )
        )
        cursor = _next_month_start(cursor)

    if periods:
        last = periods[-1]
        periods[-1] = BillingPeriod(
            month_key=last.month_key,
            interval=last.interval,
            days=last.days,
            pro_rata_factor=last.pro_rata_factor,
            is_first=last.is_first,
            is_last=True,
        )
    return periods


def compute_campaign_totals(
    lines: Sequence[CampaignLine],
    gst_percent: Number = None,
    manual_discount: Number = None,
) -> CampaignTotals:
    """
    Compute all financial totals of a campaign or plan

    Args:
        lines: Asset lines, each with its own booking interval
        gst_percent: Tax rate in percent (None → 0)
        manual_discount: Flat discount, clamped to [0, gross]

    Returns:
        CampaignTotals
    """
    display_cost = sum_amounts(line_rent(line) for line in lines)
    printing_cost = sum_amounts(to_decimal(line.printing_charges) for line in lines)
    mounting_cost = sum_amounts(to_decimal(line.mounting_charges) for line in lines)
    gross_amount = round_money(display_cost + printing_cost + mounting_cost)

    clamped_discount = min(max(to_decimal(manual_discount), _ZERO), gross_amount)
    taxable_amount = round_money(gross_amount - clamped_discount)

    gst = to_decimal(gst_percent)
    gst_amount = round_money(taxable_amount * gst / Decimal("100"))
    grand_total = round_money(taxable_amount + gst_amount)

    total_discount = sum_amounts(
        discount(
            line.card_rate if line.card_rate is not None else effective_monthly_rate(line),
            effective_monthly_rate(line),
            line.interval.days,
        ).amount
        for line in lines
    )
    total_profit = sum_amounts(
        profit(line.base_rate, effective_monthly_rate(line), line.interval.days).amount
        for line in lines
        if line.base_rate is not None
    )

    period: Optional[Interval] = None
    if lines:
        period = Interval(
            min(line.interval.start for line in lines),
            max(line.interval.end for line in lines),
        )

    return CampaignTotals(
        display_cost=display_cost,
        printing_cost=printing_cost,
        mounting_cost=mounting_cost,
        gross_amount=gross_amount,
        manual_discount_amount=round_money(clamped_discount),
        taxable_amount=taxable_amount,
        gst_percent=gst,
        gst_amount=gst_amount,
        grand_total=grand_total,
        total_discount=total_discount,
        total_profit=total_profit,
        period=period,
        duration_days=period.days if period else 0,
        total_assets=len(lines),
        billing_periods=tuple(billing_periods(period)) if period else (),
    )
