"""
Domain Models - Entities
Pure domain objects with no infrastructure dependencies
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional, Tuple

from app.utils.time import DateLike, add_days, parse_day


class InvalidIntervalError(ValueError):
    """Raised when an interval is built with start after end (or missing bounds)."""


class CampaignStatus(str, Enum):
    """Lifecycle status of the campaign owning a booking"""
    DRAFT = "Draft"
    UPCOMING = "Upcoming"
    RUNNING = "Running"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"

    @classmethod
    def parse(cls, value: str) -> "CampaignStatus":
        """Case-insensitive lookup ('running', 'Running', 'RUNNING')"""
        text = (value or "").strip().lower()
        for member in cls:
            if member.value.lower() == text:
                return member
        raise ValueError(f"Unknown campaign status: {value!r}")


# Campaign statuses whose bookings block availability
POLICY_RELEVANT_STATUSES = frozenset({
    CampaignStatus.DRAFT,
    CampaignStatus.UPCOMING,
    CampaignStatus.RUNNING,
})


class AssetStatus(str, Enum):
    """Denormalized status hint stored on the asset row"""
    AVAILABLE = "Available"
    BOOKED = "Booked"
    BLOCKED = "Blocked"
    MAINTENANCE = "Maintenance"
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, value: Optional[str]) -> "AssetStatus":
        text = (value or "").strip().lower()
        for member in cls:
            if member.value.lower() == text:
                return member
        return cls.UNKNOWN


class AvailabilityState(str, Enum):
    """
    Closed set of availability outcomes.

    UNVERIFIED is produced only by batch verification when a lookup failed
    or was cancelled; it never compares equal to AVAILABLE.
    """
    AVAILABLE = "available"
    AVAILABLE_SOON = "available_soon"
    BOOKED = "booked"
    CONFLICT = "conflict"
    UNVERIFIED = "unverified"


class BillingMode(str, Enum):
    """How a line item's rent is derived from its monthly rate"""
    PRORATA_30 = "PRORATA_30"
    FULL_MONTH = "FULL_MONTH"
    DAILY = "DAILY"


@dataclass(frozen=True)
class Interval:
    """
    Inclusive date range. Both boundary days count.

    Validated at construction: start after end is rejected, never swapped.
    """
    start: date
    end: date

    def __post_init__(self):
        if self.start is None or self.end is None:
            raise InvalidIntervalError("Interval requires both start and end")
        if self.start > self.end:
            raise InvalidIntervalError(
                f"Interval start {self.start.isoformat()} is after end {self.end.isoformat()}"
            )

    @classmethod
    def of(cls, start: DateLike, end: DateLike) -> "Interval":
        """Build from dates, datetimes or ISO strings"""
        try:
            return cls(parse_day(start), parse_day(end))
        except (TypeError, ValueError) as exc:
            if isinstance(exc, InvalidIntervalError):
                raise
            raise InvalidIntervalError(f"Invalid interval bounds: {start!r}..{end!r}") from exc

    @property
    def days(self) -> int:
        """Inclusive duration: (end - start) + 1"""
        return (self.end - self.start).days + 1

    def day_after(self) -> date:
        return add_days(self.end, 1)


@dataclass(frozen=True)
class Booking:
    """One asset committed to one campaign for an interval"""
    asset_id: str
    campaign_id: str
    interval: Interval
    campaign_status: CampaignStatus
    campaign_name: Optional[str] = None
    client_name: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "asset_id": self.asset_id,
            "campaign_id": self.campaign_id,
            "campaign_name": self.campaign_name,
            "client_name": self.client_name,
            "start_date": self.interval.start.isoformat(),
            "end_date": self.interval.end.isoformat(),
            "status": self.campaign_status.value,
        }


@dataclass(frozen=True)
class Asset:
    """Physical advertising site"""
    id: str
    monthly_card_rate: Decimal = Decimal("0")
    monthly_base_rate: Decimal = Decimal("0")
    intrinsic_status: AssetStatus = AssetStatus.AVAILABLE
    media_asset_code: Optional[str] = None
    city: Optional[str] = None
    area: Optional[str] = None
    media_type: Optional[str] = None
    total_sqft: Decimal = Decimal("0")

    def __post_init__(self):
        if not self.id:
            raise ValueError("Asset id cannot be empty")


@dataclass(frozen=True)
class AvailabilityResult:
    """
    Derived availability of one asset for one search interval.

    Recomputed on every query; never persisted.
    """
    asset_id: str
    state: AvailabilityState
    available_from: Optional[date] = None
    blocking_bookings: Tuple[Booking, ...] = ()
    from_intrinsic_status: bool = False
    error: Optional[str] = None

    @property
    def is_verified(self) -> bool:
        return self.state is not AvailabilityState.UNVERIFIED

    @property
    def is_available(self) -> bool:
        """Cleanly available: verified and no blocking booking"""
        return self.state is AvailabilityState.AVAILABLE

    @property
    def blocking_campaign_names(self) -> list[str]:
        return [b.campaign_name or b.campaign_id for b in self.blocking_bookings]

    @classmethod
    def unverified(cls, asset_id: str, error: Optional[str] = None) -> "AvailabilityResult":
        return cls(asset_id=asset_id, state=AvailabilityState.UNVERIFIED, error=error)

    def to_dict(self) -> dict:
        return {
            "asset_id": self.asset_id,
            "state": self.state.value,
            "available_from": self.available_from.isoformat() if self.available_from else None,
            "blocking_bookings": [b.to_dict() for b in self.blocking_bookings],
            "from_intrinsic_status": self.from_intrinsic_status,
            "error": self.error,
        }


@dataclass(frozen=True)
class AssetQuery:
    """One candidate for batch verification"""
    asset_id: str
    search_interval: Interval
    exclude_campaign_id: Optional[str] = None
    # Only consulted when the lookup returns no booking history at all
    intrinsic_status: Optional[AssetStatus] = None


@dataclass(frozen=True)
class RateDelta:
    """Prorated difference between two monthly rates"""
    amount: Decimal
    percent: Decimal


@dataclass(frozen=True)
class ProRataResult:
    """Prorated price of a booking; snapshot, never the source of truth"""
    days: int
    amount: Decimal
    discount_amount: Decimal
    discount_percent: Decimal
    profit_amount: Decimal
    profit_percent: Decimal

    def to_dict(self) -> dict:
        return {
            "days": self.days,
            "amount": float(self.amount),
            "discount_amount": float(self.discount_amount),
            "discount_percent": float(self.discount_percent),
            "profit_amount": float(self.profit_amount),
            "profit_percent": float(self.profit_percent),
        }


@dataclass(frozen=True)
class CampaignLine:
    """One asset line of a campaign or plan, priced independently"""
    asset_id: str
    interval: Interval
    card_rate: Optional[Decimal] = None
    negotiated_rate: Optional[Decimal] = None
    base_rate: Optional[Decimal] = None
    printing_charges: Decimal = Decimal("0")
    mounting_charges: Decimal = Decimal("0")
    billing_mode: BillingMode = BillingMode.PRORATA_30
    daily_rate: Optional[Decimal] = None


@dataclass(frozen=True)
class BillingPeriod:
    """Calendar-month slice of a campaign period"""
    month_key: str
    interval: Interval
    days: int
    pro_rata_factor: Decimal
    is_first: bool = False
    is_last: bool = False


@dataclass(frozen=True)
class CampaignTotals:
    """Financial totals of a campaign, summed from per-line figures"""
    display_cost: Decimal
    printing_cost: Decimal
    mounting_cost: Decimal
    gross_amount: Decimal
    manual_discount_amount: Decimal
    taxable_amount: Decimal
    gst_percent: Decimal
    gst_amount: Decimal
    grand_total: Decimal
    total_discount: Decimal
    total_profit: Decimal
    period: Optional[Interval]
    duration_days: int
    total_assets: int
    billing_periods: Tuple[BillingPeriod, ...] = field(default_factory=tuple)
