"""
Database Models (SQLAlchemy ORM)
Read side of assets, campaigns and their bookings
"""

from sqlalchemy import (
    CheckConstraint, Column, Date, DateTime, ForeignKey, Index, Numeric, String,
)
from sqlalchemy.orm import relationship

from app.infrastructure.db.database import Base
from app.utils.time import now_naive


class MediaAssetModel(Base):
    """Outdoor media site"""
    __tablename__ = "media_asset"

    id = Column(String(64), primary_key=True)
    media_asset_code = Column(String(64), nullable=True, index=True)
    city = Column(String(100), nullable=True, index=True)
    area = Column(String(100), nullable=True)
    media_type = Column(String(50), nullable=True, index=True)
    card_rate = Column(Numeric(12, 2), nullable=False, default=0)
    base_rate = Column(Numeric(12, 2), nullable=False, default=0)
    total_sqft = Column(Numeric(10, 2), nullable=False, default=0)
    # Denormalized hint maintained by external processes
    status = Column(String(30), nullable=False, default="Available")
    created_at = Column(DateTime, nullable=False, default=now_naive)

    bookings = relationship("CampaignAssetModel", back_populates="asset")


class CampaignModel(Base):
    """Campaign owning one or more asset bookings"""
    __tablename__ = "campaign"

    id = Column(String(64), primary_key=True)
    campaign_name = Column(String(200), nullable=True)
    client_name = Column(String(200), nullable=True)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    status = Column(String(30), nullable=False, default="Draft", index=True)
    created_at = Column(DateTime, nullable=False, default=now_naive)

    assets = relationship("CampaignAssetModel", back_populates="campaign")


class CampaignAssetModel(Base):
    """One asset committed to one campaign (a booking)"""
    __tablename__ = "campaign_asset"

    id = Column(String(64), primary_key=True)
    campaign_id = Column(String(64), ForeignKey("campaign.id", ondelete="CASCADE"), nullable=False)
    asset_id = Column(String(64), ForeignKey("media_asset.id"), nullable=False)

    # Null falls back to the campaign's dates
    booking_start_date = Column(Date, nullable=True)
    booking_end_date = Column(Date, nullable=True)

    card_rate = Column(Numeric(12, 2), nullable=True)
    negotiated_rate = Column(Numeric(12, 2), nullable=True)
    printing_charges = Column(Numeric(12, 2), nullable=True)
    mounting_charges = Column(Numeric(12, 2), nullable=True)

    campaign = relationship("CampaignModel", back_populates="assets")
    asset = relationship("MediaAssetModel", back_populates="bookings")

    __table_args__ = (
        CheckConstraint(
            "booking_start_date IS NULL OR booking_end_date IS NULL "
            "OR booking_start_date <= booking_end_date",
            name="ck_campaign_asset_dates",
        ),
        Index("idx_campaign_asset_asset_dates", "asset_id", "booking_start_date", "booking_end_date"),
    )
