"""
Pricing API Routes
Pro-rata pricing of a single booking and campaign / plan totals
"""

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field
from datetime import date
from decimal import Decimal
from typing import List, Optional

from app.config import settings
from app.domain.models import BillingMode, CampaignLine, Interval, InvalidIntervalError
from app.domain.services.campaign_totals import compute_campaign_totals
from app.domain.services.pro_rata import price_booking

router = APIRouter()


def resolve_interval(start_date: date, end_date: date) -> Interval:
    try:
        return Interval(start_date, end_date)
    except InvalidIntervalError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


# -------------------------------------------------------------------
# Request / Response models
# -------------------------------------------------------------------

class ProRataRequest(BaseModel):
    """Price one booking"""
    monthly_rate: Optional[Decimal] = Field(None, description="Negotiated monthly rate in ₹")
    start_date: date
    end_date: date
    card_rate: Optional[Decimal] = Field(None, description="Monthly card rate (defaults to monthly_rate)")
    base_rate: Optional[Decimal] = Field(None, description="Monthly base / cost rate")


class ProRataResponse(BaseModel):
    days: int
    amount: float
    discount_amount: float
    discount_percent: float
    profit_amount: float
    profit_percent: float


class CampaignLineRequest(BaseModel):
    asset_id: str
    start_date: date
    end_date: date
    card_rate: Optional[Decimal] = None
    negotiated_rate: Optional[Decimal] = None
    base_rate: Optional[Decimal] = None
    printing_charges: Decimal = Decimal("0")
    mounting_charges: Decimal = Decimal("0")
    billing_mode: BillingMode = BillingMode.PRORATA_30
    daily_rate: Optional[Decimal] = None


class CampaignTotalsRequest(BaseModel):
    lines: List[CampaignLineRequest]
    gst_percent: Optional[Decimal] = Field(None, ge=0, le=100)
    manual_discount: Optional[Decimal] = Field(None, ge=0)


class BillingPeriodResponse(BaseModel):
    month_key: str
    start_date: str
    end_date: str
    days: int
    pro_rata_factor: float
    is_first: bool
    is_last: bool


class CampaignTotalsResponse(BaseModel):
    display_cost: float
    printing_cost: float
    mounting_cost: float
    gross_amount: float
    manual_discount_amount: float
    taxable_amount: float
    gst_percent: float
    gst_amount: float
    grand_total: float
    total_discount: float
    total_profit: float
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    duration_days: int
    total_assets: int
    billing_periods: List[BillingPeriodResponse]


# -------------------------------------------------------------------
# Routes
# -------------------------------------------------------------------

@router.post("/pro-rata", response_model=ProRataResponse)
async def pro_rata_price(body: ProRataRequest):
    """(monthly_rate / 30) × inclusive days, with discount and profit"""
    interval = resolve_interval(body.start_date, body.end_date)
    result = price_booking(body.monthly_rate, interval, card_rate=body.card_rate, base_rate=body.base_rate)
    return ProRataResponse(**result.to_dict())


@router.post("/campaign-totals", response_model=CampaignTotalsResponse)
async def campaign_totals(body: CampaignTotalsRequest):
    """Totals summed from each line's own prorated figures"""
    lines = [
        CampaignLine(
            asset_id=line.asset_id,
            interval=resolve_interval(line.start_date, line.end_date),
            card_rate=line.card_rate,
            negotiated_rate=line.negotiated_rate,
            base_rate=line.base_rate,
            printing_charges=line.printing_charges,
            mounting_charges=line.mounting_charges,
            billing_mode=line.billing_mode,
            daily_rate=line.daily_rate,
        )
        for line in body.lines
    ]
    gst = body.gst_percent if body.gst_percent is not None else Decimal(str(settings.DEFAULT_GST_PERCENT))
    totals = compute_campaign_totals(lines, gst_percent=gst, manual_discount=body.manual_discount)

    return CampaignTotalsResponse(
        display_cost=float(totals.display_cost),
        printing_cost=float(totals.printing_cost),
        mounting_cost=float(totals.mounting_cost),
        gross_amount=float(totals.gross_amount),
        manual_discount_amount=float(totals.manual_discount_amount),
        taxable_amount=float(totals.taxable_amount),
        gst_percent=float(totals.gst_percent),
        gst_amount=float(totals.gst_amount),
        grand_total=float(totals.grand_total),
        total_discount=float(totals.total_discount),
        total_profit=float(totals.total_profit),
        start_date=totals.period.start.isoformat() if totals.period else None,
        end_date=totals.period.end.isoformat() if totals.period else None,
        duration_days=totals.duration_days,
        total_assets=totals.total_assets,
        billing_periods=[
            BillingPeriodResponse(
                month_key=p.month_key,
                start_date=p.interval.start.isoformat(),
                end_date=p.interval.end.isoformat(),
                days=p.days,
                pro_rata_factor=float(p.pro_rata_factor),
                is_first=p.is_first,
                is_last=p.is_last,
            )
            for p in totals.billing_periods
        ],
    )
