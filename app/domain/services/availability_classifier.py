"""
AVAILABILITY CLASSIFIER
Reduce an asset's bookings to a single availability state

RESPONSIBILITIES:
- Keep only policy-relevant bookings (Draft / Upcoming / Running)
- Keep only bookings overlapping the search interval
- Map overlap count to AVAILABLE / BOOKED / AVAILABLE_SOON / CONFLICT
- Fall back to the asset's intrinsic status only when there is no booking
  history at all

RULES:
❌ No writes, no I/O
❌ Never pick a "winner" among multiple overlapping bookings
✅ Booking history beats the intrinsic status hint
✅ Deterministic for the same booking snapshot
"""

import logging
from typing import FrozenSet, Iterable, Optional

from app.domain.models import (
    POLICY_RELEVANT_STATUSES,
    Asset,
    AssetStatus,
    AvailabilityResult,
    AvailabilityState,
    Booking,
    CampaignStatus,
    Interval,
)
from app.domain.services.overlap import overlapping_bookings

logger = logging.getLogger(__name__)

DEFAULT_BLOCKING_INTRINSIC_STATUSES: FrozenSet[AssetStatus] = frozenset({
    AssetStatus.BOOKED,
    AssetStatus.BLOCKED,
    AssetStatus.MAINTENANCE,
})


class AvailabilityClassifier:
    """
    Availability Classifier
    Stateless; one instance can be shared across concurrent lookups
    """

    def __init__(
        self,
        policy_statuses: FrozenSet[CampaignStatus] = POLICY_RELEVANT_STATUSES,
        blocking_intrinsic_statuses: FrozenSet[AssetStatus] = DEFAULT_BLOCKING_INTRINSIC_STATUSES,
    ):
        self.policy_statuses = frozenset(policy_statuses)
        self.blocking_intrinsic_statuses = frozenset(blocking_intrinsic_statuses)

    def classify(
        self,
        asset: Asset,
        search_interval: Interval,
        bookings: Iterable[Booking],
        exclude_campaign_id: Optional[str] = None,
    ) -> AvailabilityResult:
        """
        Classify one asset for a search interval

        Args:
            asset: Asset being checked (intrinsic_status is a fallback hint)
            search_interval: Dates the caller wants to book
            bookings: The asset's booking history; non policy-relevant
                entries are filtered out here
            exclude_campaign_id: Campaign whose own bookings are ignored

        Returns:
            AvailabilityResult
        """
        return self.classify_bookings(
            asset_id=asset.id,
            search_interval=search_interval,
            bookings=bookings,
            exclude_campaign_id=exclude_campaign_id,
            intrinsic_status=asset.intrinsic_status,
        )

    def classify_bookings(
        self,
        asset_id: str,
        search_interval: Interval,
        bookings: Iterable[Booking],
        exclude_campaign_id: Optional[str] = None,
        intrinsic_status: Optional[AssetStatus] = None,
    ) -> AvailabilityResult:
        """Same as classify() for callers that only hold the asset id"""
        history = [b for b in bookings if b.campaign_status in self.policy_statuses]

        overlapping = sorted(
            overlapping_bookings(history, search_interval, exclude_campaign_id),
            key=lambda b: (b.interval.start, b.interval.end, b.campaign_id),
        )

        if not overlapping:
            if not history and intrinsic_status in self.blocking_intrinsic_statuses:
                logger.debug(
                    f"Asset {asset_id}: no booking history, using intrinsic status {intrinsic_status.value}"
                )
                return AvailabilityResult(
                    asset_id=asset_id,
                    state=AvailabilityState.BOOKED,
                    from_intrinsic_status=True,
                )
            return AvailabilityResult(asset_id=asset_id, state=AvailabilityState.AVAILABLE)

        if len(overlapping) >= 2:
            return AvailabilityResult(
                asset_id=asset_id,
                state=AvailabilityState.CONFLICT,
                blocking_bookings=tuple(overlapping),
            )

        booking = overlapping[0]
        if booking.interval.end <= search_interval.end:
            return AvailabilityResult(
                asset_id=asset_id,
                state=AvailabilityState.AVAILABLE_SOON,
                available_from=booking.interval.day_after(),
                blocking_bookings=(booking,),
            )

        return AvailabilityResult(
            asset_id=asset_id,
            state=AvailabilityState.BOOKED,
            blocking_bookings=(booking,),
        )


def classify(
    asset: Asset,
    search_interval: Interval,
    bookings: Iterable[Booking],
    exclude_campaign_id: Optional[str] = None,
) -> AvailabilityResult:
    """Module-level shortcut using the default policy"""
    return _default_classifier.classify(asset, search_interval, bookings, exclude_campaign_id)


_default_classifier = AvailabilityClassifier()
