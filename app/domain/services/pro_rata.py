"""
PRO-RATA FINANCIAL ALLOCATOR
Convert monthly rates into amounts for an exact number of booked days

RESPONSIBILITIES:
- Prorate a monthly rate over an inclusive day count
- Derive discount (card vs negotiated) and profit (negotiated vs base)
- Line rent under the supported billing modes
- Rent attributable to a billing period

RULES (LOCKED):
✅ 1 month = 30 days, everywhere (BILLING_CYCLE_DAYS)
✅ Differences are taken on MONTHLY rates, then prorated once
✅ Missing / zero rates price at 0, never raise
✅ Percent of a zero reference is 0, never NaN / Infinity
✅ Totals are sums of per-line prorated figures
"""

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional, Union

from app.domain.models import (
    BillingMode,
    CampaignLine,
    Interval,
    ProRataResult,
    RateDelta,
)
from app.domain.services.overlap import overlap_days

BILLING_CYCLE_DAYS = 30

Number = Union[Decimal, int, float, str, None]

_CENT = Decimal("0.01")
_ZERO = Decimal("0")
_HUNDRED = Decimal("100")


def to_decimal(value: Number) -> Decimal:
    """Coerce a rate to Decimal; None and empty strings become 0"""
    if value is None or value == "":
        return _ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(value: Decimal) -> Decimal:
    return value.quantize(_CENT, rounding=ROUND_HALF_UP)


def daily_rate(monthly_rate: Number) -> Decimal:
    """Unrounded daily rate: monthly / 30"""
    return to_decimal(monthly_rate) / BILLING_CYCLE_DAYS


def pro_rata(monthly_rate: Number, days: int) -> Decimal:
    """
    Prorate a monthly rate over an inclusive day count

    Args:
        monthly_rate: Rate for a 30-day month (None / 0 → 0)
        days: Inclusive booked days

    Returns:
        Amount rounded to 2 dp
    """
    if days < 0:
        raise ValueError("Days must not be negative")
    rate = to_decimal(monthly_rate)
    if rate == _ZERO or days == 0:
        return round_money(_ZERO)
    # Multiply before dividing so 50000 over 180 days is exactly 300000.00
    return round_money(rate * days / BILLING_CYCLE_DAYS)


def percent_of(amount: Decimal, reference: Decimal) -> Decimal:
    """amount / reference * 100, with a zero reference giving 0"""
    if reference == _ZERO:
        return round_money(_ZERO)
    return round_money(amount / reference * _HUNDRED)


def discount(card_rate: Number, negotiated_rate: Number, days: int = BILLING_CYCLE_DAYS) -> RateDelta:
    """
    Discount granted against the card rate, prorated over `days`

    discount_amount = ProRata(card - negotiated, days)
    """
    card = to_decimal(card_rate)
    amount = pro_rata(card - to_decimal(negotiated_rate), days)
    return RateDelta(amount=amount, percent=percent_of(amount, pro_rata(card, days)))


def profit(base_rate: Number, negotiated_rate: Number, days: int = BILLING_CYCLE_DAYS) -> RateDelta:
    """
    Margin of the negotiated rate over the base (cost) rate, prorated over `days`

    profit_amount = ProRata(negotiated - base, days)
    """
    base = to_decimal(base_rate)
    amount = pro_rata(to_decimal(negotiated_rate) - base, days)
    return RateDelta(amount=amount, percent=percent_of(amount, pro_rata(base, days)))


def price_booking(
    monthly_rate: Number,
    interval: Interval,
    card_rate: Number = None,
    base_rate: Number = None,
) -> ProRataResult:
    """
    Full pricing of one booking

    Card rate defaults to the monthly rate (no discount). Without a base
    rate there is no cost basis, so profit reads 0 (as in campaign totals).
    """
    days = interval.days
    card = monthly_rate if card_rate is None else card_rate
    disc = discount(card, monthly_rate, days)
    if base_rate is None:
        prof = RateDelta(amount=round_money(_ZERO), percent=round_money(_ZERO))
    else:
        prof = profit(base_rate, monthly_rate, days)
    return ProRataResult(
        days=days,
        amount=pro_rata(monthly_rate, days),
        discount_amount=disc.amount,
        discount_percent=disc.percent,
        profit_amount=prof.amount,
        profit_percent=prof.percent,
    )


def effective_monthly_rate(line: CampaignLine) -> Decimal:
    """Negotiated rate, else card rate, else 0"""
    negotiated = to_decimal(line.negotiated_rate)
    if negotiated > _ZERO:
        return negotiated
    return to_decimal(line.card_rate)


def line_rent(line: CampaignLine) -> Decimal:
    """
    Rent of one campaign line under its billing mode

    PRORATA_30: (monthly / 30) × days
    FULL_MONTH: monthly × ceil(days / 30)
    DAILY: explicit daily rate × days (falls back to PRORATA_30 without one)
    """
    days = line.interval.days
    monthly = effective_monthly_rate(line)

    if line.billing_mode is BillingMode.FULL_MONTH:
        months = math.ceil(days / BILLING_CYCLE_DAYS)
        return round_money(monthly * months)

    if line.billing_mode is BillingMode.DAILY:
        explicit = to_decimal(line.daily_rate)
        if explicit > _ZERO:
            return round_money(explicit * days)

    return pro_rata(monthly, days)


def period_rent(monthly_rate: Number, booking: Interval, period: Interval) -> Decimal:
    """Rent of a booking attributable to one billing period (0 if disjoint)"""
    return pro_rata(monthly_rate, overlap_days(booking, period))


def sum_amounts(amounts: Iterable[Decimal], start: Optional[Decimal] = None) -> Decimal:
    total = start if start is not None else _ZERO
    for amount in amounts:
        total += amount
    return round_money(total)
