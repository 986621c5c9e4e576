"""
Availability API Routes
Classify one asset, verify a selection, and build availability reports

Dates are ISO YYYY-MM-DD; both boundary days are part of the range.
"""

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession
from pydantic import BaseModel, Field
from datetime import date
from typing import Dict, List, Optional
import logging

from app.domain.models import AssetQuery, AvailabilityResult, Interval, InvalidIntervalError
from app.domain.services.availability_report import ReportEntry, build_availability_report
from app.domain.services.conflict_verifier import BatchConflictVerifier, VerificationFailure
from app.infrastructure.conflict_check.source_factory import reports_full_history
from app.infrastructure.db.database import get_db
from app.infrastructure.db.repositories.asset_repository import MediaAssetRepository

logger = logging.getLogger(__name__)
router = APIRouter()

MAX_CONCURRENCY = 50


# -------------------------------------------------------------------
# Helper utilities
# -------------------------------------------------------------------

def resolve_interval(start_date: date, end_date: date) -> Interval:
    try:
        return Interval(start_date, end_date)
    except InvalidIntervalError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


def get_verifier(request: Request) -> BatchConflictVerifier:
    verifier = getattr(request.app.state, "verifier", None)
    if verifier is None:
        raise HTTPException(status_code=503, detail="Availability engine not initialized")
    return verifier


# -------------------------------------------------------------------
# Request / Response models
# -------------------------------------------------------------------

class BookingResponse(BaseModel):
    asset_id: str
    campaign_id: str
    campaign_name: Optional[str] = None
    client_name: Optional[str] = None
    start_date: str
    end_date: str
    status: str


class AvailabilityResponse(BaseModel):
    asset_id: str
    state: str
    available_from: Optional[str] = None
    blocking_bookings: List[BookingResponse] = []
    from_intrinsic_status: bool = False
    error: Optional[str] = None


class ClassifyRequest(BaseModel):
    asset_id: str
    start_date: date
    end_date: date
    exclude_campaign_id: Optional[str] = None


class VerifyRequest(BaseModel):
    start_date: date
    end_date: date
    asset_ids: List[str] = Field(..., min_length=1)
    exclude_campaign_id: Optional[str] = None
    concurrency: Optional[int] = Field(None, ge=1, le=MAX_CONCURRENCY)


class FailureResponse(BaseModel):
    asset_id: str
    error: str


class VerifyResponse(BaseModel):
    results: Dict[str, AvailabilityResponse]
    failures: List[FailureResponse]
    batches: int
    unverified_count: int


class ReportRequest(BaseModel):
    start_date: date
    end_date: date
    city: Optional[str] = None
    media_type: Optional[str] = None
    exclude_campaign_id: Optional[str] = None


class ReportAsset(AvailabilityResponse):
    media_asset_code: Optional[str] = None
    city: Optional[str] = None
    area: Optional[str] = None
    media_type: Optional[str] = None
    card_rate: float = 0.0
    total_sqft: float = 0.0


class ReportSummaryResponse(BaseModel):
    total_assets: int
    available_count: int
    available_soon_count: int
    booked_count: int
    conflict_count: int
    unverified_count: int
    total_sqft_available: float
    potential_revenue: float


class ReportResponse(BaseModel):
    available_assets: List[ReportAsset]
    available_soon_assets: List[ReportAsset]
    booked_assets: List[ReportAsset]
    conflict_assets: List[ReportAsset]
    unverified_assets: List[ReportAsset]
    summary: ReportSummaryResponse
    search_params: dict


def to_response(result: AvailabilityResult) -> AvailabilityResponse:
    return AvailabilityResponse(**result.to_dict())


def to_report_asset(entry: ReportEntry) -> ReportAsset:
    asset = entry.asset
    return ReportAsset(
        **entry.result.to_dict(),
        media_asset_code=asset.media_asset_code,
        city=asset.city,
        area=asset.area,
        media_type=asset.media_type,
        card_rate=float(asset.monthly_card_rate),
        total_sqft=float(asset.total_sqft),
    )


# -------------------------------------------------------------------
# Routes
# -------------------------------------------------------------------

@router.post("/classify", response_model=AvailabilityResponse)
async def classify_asset(
    body: ClassifyRequest,
    db: AsyncSession = Depends(get_db),
    verifier: BatchConflictVerifier = Depends(get_verifier),
):
    """Availability of one asset for a date range"""
    interval = resolve_interval(body.start_date, body.end_date)

    asset = await MediaAssetRepository(db).get(body.asset_id)
    if asset is None:
        raise HTTPException(status_code=404, detail=f"Asset not found: {body.asset_id}")

    query = AssetQuery(
        asset_id=asset.id,
        search_interval=interval,
        exclude_campaign_id=body.exclude_campaign_id,
        intrinsic_status=asset.intrinsic_status if reports_full_history(verifier.source) else None,
    )
    report = await verifier.verify_batch([query], concurrency=1)
    return to_response(report.results[asset.id])


@router.post("/verify", response_model=VerifyResponse)
async def verify_assets(
    body: VerifyRequest,
    db: AsyncSession = Depends(get_db),
    verifier: BatchConflictVerifier = Depends(get_verifier),
):
    """
    Verify a selection of assets against one date range.

    Every requested asset gets a result; failed lookups come back as
    "unverified" and are listed under failures.
    """
    interval = resolve_interval(body.start_date, body.end_date)

    assets = await MediaAssetRepository(db).get_many(body.asset_ids)
    full_history = reports_full_history(verifier.source)
    statuses = {a.id: a.intrinsic_status for a in assets}

    queries = [
        AssetQuery(
            asset_id=asset_id,
            search_interval=interval,
            exclude_campaign_id=body.exclude_campaign_id,
            intrinsic_status=statuses[asset_id] if full_history else None,
        )
        for asset_id in body.asset_ids
        if asset_id in statuses
    ]
    report = await verifier.verify_batch(queries, concurrency=body.concurrency)

    # Unknown ids were never looked up
    for asset_id in body.asset_ids:
        if asset_id in statuses or asset_id in report.results:
            continue
        logger.warning(f"Asset {asset_id} not found; reported unverified")
        report.results[asset_id] = AvailabilityResult.unverified(asset_id, "asset not found")
        report.failures.append(VerificationFailure(asset_id=asset_id, error="asset not found"))

    return VerifyResponse(
        results={asset_id: to_response(r) for asset_id, r in report.results.items()},
        failures=[FailureResponse(asset_id=f.asset_id, error=f.error) for f in report.failures],
        batches=report.batches,
        unverified_count=len(report.unverified_ids),
    )


@router.post("/report", response_model=ReportResponse)
async def availability_report(
    body: ReportRequest,
    db: AsyncSession = Depends(get_db),
    verifier: BatchConflictVerifier = Depends(get_verifier),
):
    """Bucket every (filtered) asset by availability for a date range"""
    interval = resolve_interval(body.start_date, body.end_date)

    assets = await MediaAssetRepository(db).list(city=body.city, media_type=body.media_type)
    full_history = reports_full_history(verifier.source)
    queries = [
        AssetQuery(
            asset_id=asset.id,
            search_interval=interval,
            exclude_campaign_id=body.exclude_campaign_id,
            intrinsic_status=asset.intrinsic_status if full_history else None,
        )
        for asset in assets
    ]
    verification = await verifier.verify_batch(queries)
    report = build_availability_report(assets, verification.results, interval)

    logger.info(
        f"Availability report {interval.start}..{interval.end}: "
        f"{report.summary.available_count}/{report.summary.total_assets} available"
    )

    summary = report.summary
    return ReportResponse(
        available_assets=[to_report_asset(e) for e in report.available],
        available_soon_assets=[to_report_asset(e) for e in report.available_soon],
        booked_assets=[to_report_asset(e) for e in report.booked],
        conflict_assets=[to_report_asset(e) for e in report.conflict],
        unverified_assets=[to_report_asset(e) for e in report.unverified],
        summary=ReportSummaryResponse(
            total_assets=summary.total_assets,
            available_count=summary.available_count,
            available_soon_count=summary.available_soon_count,
            booked_count=summary.booked_count,
            conflict_count=summary.conflict_count,
            unverified_count=summary.unverified_count,
            total_sqft_available=float(summary.total_sqft_available),
            potential_revenue=float(summary.potential_revenue),
        ),
        search_params={
            "start_date": interval.start.isoformat(),
            "end_date": interval.end.isoformat(),
            "city": body.city,
            "media_type": body.media_type,
        },
    )
