"""
Booking Repository
Read access to campaign_asset rows as domain Bookings
"""

import logging
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import func, select
from typing import Dict, FrozenSet, Iterable, List, Optional

from app.infrastructure.db.models import CampaignAssetModel, CampaignModel
from app.domain.models import (
    POLICY_RELEVANT_STATUSES,
    Booking,
    CampaignStatus,
    Interval,
    InvalidIntervalError,
)

logger = logging.getLogger(__name__)


class BookingRepository:
    """Repository for asset bookings (read-only)"""

    def __init__(self, session: AsyncSession):
        """Initialize with database session"""
        self.session = session

    async def get_bookings(
        self,
        asset_id: str,
        status_filter: FrozenSet[CampaignStatus] = POLICY_RELEVANT_STATUSES,
    ) -> List[Booking]:
        """
        Get bookings of one asset whose campaign status is in the filter

        Args:
            asset_id: Media asset ID
            status_filter: Campaign statuses to include

        Returns:
            List of Booking ordered by start date
        """
        by_asset = await self.get_bookings_for_assets([asset_id], status_filter)
        return by_asset.get(asset_id, [])

    async def get_bookings_for_assets(
        self,
        asset_ids: Iterable[str],
        status_filter: FrozenSet[CampaignStatus] = POLICY_RELEVANT_STATUSES,
    ) -> Dict[str, List[Booking]]:
        """
        Get bookings for many assets in one query

        Args:
            asset_ids: Media asset IDs
            status_filter: Campaign statuses to include

        Returns:
            Dict of asset_id -> bookings (assets without bookings are absent)
        """
        ids = list(asset_ids)
        if not ids or not status_filter:
            return {}

        result = await self.session.execute(
            select(CampaignAssetModel, CampaignModel)
            .join(CampaignModel, CampaignAssetModel.campaign_id == CampaignModel.id)
            .where(
                CampaignAssetModel.asset_id.in_(ids),
                func.lower(CampaignModel.status).in_([s.value.lower() for s in status_filter]),
            )
            .order_by(CampaignAssetModel.asset_id, CampaignAssetModel.booking_start_date)
        )

        bookings: Dict[str, List[Booking]] = {}
        for row, campaign in result.all():
            booking = self._to_domain(row, campaign)
            if booking is not None:
                bookings.setdefault(booking.asset_id, []).append(booking)

        for items in bookings.values():
            items.sort(key=lambda b: (b.interval.start, b.interval.end))
        return bookings

    def _to_domain(
        self,
        model: CampaignAssetModel,
        campaign: CampaignModel,
    ) -> Optional[Booking]:
        """Convert row to domain, or None when dates are unusable"""
        start = model.booking_start_date or campaign.start_date
        end = model.booking_end_date or campaign.end_date
        if start is None or end is None:
            logger.warning(f"Booking {model.id} has no dates; skipped")
            return None

        try:
            interval = Interval(start, end)
        except InvalidIntervalError:
            logger.warning(f"Booking {model.id} ends before it starts ({start} > {end}); skipped")
            return None

        try:
            status = CampaignStatus.parse(campaign.status)
        except ValueError:
            logger.warning(f"Campaign {campaign.id} has unknown status {campaign.status!r}; skipped")
            return None

        return Booking(
            asset_id=model.asset_id,
            campaign_id=campaign.id,
            interval=interval,
            campaign_status=status,
            campaign_name=campaign.campaign_name or "Unnamed",
            client_name=campaign.client_name or "Unknown",
        )
