"""
Availability report over a set of assets.

Groups batch verification results into display buckets for asset-selection
screens and vacant-media reports.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Sequence

from app.domain.models import Asset, AvailabilityResult, AvailabilityState, Interval


@dataclass(frozen=True)
class ReportEntry:
    asset: Asset
    result: AvailabilityResult


@dataclass
class AvailabilitySummary:
    total_assets: int = 0
    available_count: int = 0
    available_soon_count: int = 0
    booked_count: int = 0
    conflict_count: int = 0
    unverified_count: int = 0
    total_sqft_available: Decimal = Decimal("0")
    potential_revenue: Decimal = Decimal("0")


@dataclass
class AvailabilityReport:
    search_interval: Interval
    available: List[ReportEntry] = field(default_factory=list)
    available_soon: List[ReportEntry] = field(default_factory=list)
    booked: List[ReportEntry] = field(default_factory=list)
    conflict: List[ReportEntry] = field(default_factory=list)
    unverified: List[ReportEntry] = field(default_factory=list)
    summary: AvailabilitySummary = field(default_factory=AvailabilitySummary)


def build_availability_report(
    assets: Sequence[Asset],
    results: Dict[str, AvailabilityResult],
    search_interval: Interval,
) -> AvailabilityReport:
    """
    Bucket each asset by its availability state

    Assets missing from `results` are reported as unverified, never
    as available. Revenue and area only count cleanly available assets.
    """
    report = AvailabilityReport(search_interval=search_interval)
    buckets = {
        AvailabilityState.AVAILABLE: report.available,
        AvailabilityState.AVAILABLE_SOON: report.available_soon,
        AvailabilityState.BOOKED: report.booked,
        AvailabilityState.CONFLICT: report.conflict,
        AvailabilityState.UNVERIFIED: report.unverified,
    }

    seen = set()
    for asset in assets:
        if asset.id in seen:
            continue
        seen.add(asset.id)

        result = results.get(asset.id) or AvailabilityResult.unverified(asset.id, "no result")
        buckets[result.state].append(ReportEntry(asset=asset, result=result))

    summary = report.summary
    summary.total_assets = len(seen)
    summary.available_count = len(report.available)
    summary.available_soon_count = len(report.available_soon)
    summary.booked_count = len(report.booked)
    summary.conflict_count = len(report.conflict)
    summary.unverified_count = len(report.unverified)
    summary.total_sqft_available = sum(
        (entry.asset.total_sqft for entry in report.available), Decimal("0")
    )
    summary.potential_revenue = sum(
        (entry.asset.monthly_card_rate for entry in report.available), Decimal("0")
    )
    return report
