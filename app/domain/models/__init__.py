"""
Domain Models Package
Export all domain entities
"""

from .entities import (
    # Enums
    AssetStatus,
    AvailabilityState,
    BillingMode,
    CampaignStatus,

    # Constants
    POLICY_RELEVANT_STATUSES,

    # Errors
    InvalidIntervalError,

    # Entities
    Asset,
    AssetQuery,
    AvailabilityResult,
    BillingPeriod,
    Booking,
    CampaignLine,
    CampaignTotals,
    Interval,
    ProRataResult,
    RateDelta,
)

__all__ = [
    # Enums
    "AssetStatus",
    "AvailabilityState",
    "BillingMode",
    "CampaignStatus",

    # Constants
    "POLICY_RELEVANT_STATUSES",

    # Errors
    "InvalidIntervalError",

    # Entities
    "Asset",
    "AssetQuery",
    "AvailabilityResult",
    "BillingPeriod",
    "Booking",
    "CampaignLine",
    "CampaignTotals",
    "Interval",
    "ProRataResult",
    "RateDelta",
]
