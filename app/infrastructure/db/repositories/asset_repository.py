"""
Media Asset Repository
Read access to media_asset rows
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from decimal import Decimal
from typing import Iterable, List, Optional

from app.infrastructure.db.models import MediaAssetModel
from app.domain.models import Asset, AssetStatus


class MediaAssetRepository:
    """Repository for MediaAsset (read-only)"""

    def __init__(self, session: AsyncSession):
        """Initialize with database session"""
        self.session = session

    async def get(self, asset_id: str) -> Optional[Asset]:
        """Get asset by ID"""
        result = await self.session.execute(
            select(MediaAssetModel).where(MediaAssetModel.id == asset_id)
        )
        model = result.scalar_one_or_none()
        return self._to_domain(model) if model else None

    async def get_many(self, asset_ids: Iterable[str]) -> List[Asset]:
        """Get assets by ID, in storage order; unknown IDs are skipped"""
        ids = list(asset_ids)
        if not ids:
            return []
        result = await self.session.execute(
            select(MediaAssetModel)
            .where(MediaAssetModel.id.in_(ids))
            .order_by(MediaAssetModel.id)
        )
        return [self._to_domain(m) for m in result.scalars().all()]

    async def list(
        self,
        city: Optional[str] = None,
        media_type: Optional[str] = None,
    ) -> List[Asset]:
        """
        List assets, optionally filtered

        Args:
            city: City filter ("all" or None means no filter)
            media_type: Media type filter ("all" or None means no filter)
        """
        query = select(MediaAssetModel)
        if city and city != "all":
            query = query.where(MediaAssetModel.city == city)
        if media_type and media_type != "all":
            query = query.where(MediaAssetModel.media_type == media_type)

        result = await self.session.execute(query.order_by(MediaAssetModel.id))
        return [self._to_domain(m) for m in result.scalars().all()]

    def _to_domain(self, model: MediaAssetModel) -> Asset:
        """Convert model to domain"""
        return Asset(
            id=model.id,
            monthly_card_rate=Decimal(str(model.card_rate or 0)),
            monthly_base_rate=Decimal(str(model.base_rate or 0)),
            intrinsic_status=AssetStatus.parse(model.status),
            media_asset_code=model.media_asset_code,
            city=model.city,
            area=model.area,
            media_type=model.media_type,
            total_sqft=Decimal(str(model.total_sqft or 0)),
        )
