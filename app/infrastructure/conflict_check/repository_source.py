"""
Database-backed conflict source.
Opens one session per lookup so a batch can query concurrently.
"""

from __future__ import annotations

import logging
from typing import FrozenSet, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from app.domain.models import POLICY_RELEVANT_STATUSES, AssetQuery, Booking, CampaignStatus
from app.domain.services.conflict_verifier import ConflictCheckError
from app.infrastructure.db.repositories.booking_repository import BookingRepository

logger = logging.getLogger(__name__)


class RepositoryConflictSource:
    def __init__(
        self,
        session_factory: async_sessionmaker,
        status_filter: FrozenSet[CampaignStatus] = POLICY_RELEVANT_STATUSES,
    ):
        self.session_factory = session_factory
        self.status_filter = status_filter

    async def fetch_bookings(self, query: AssetQuery) -> List[Booking]:
        try:
            async with self.session_factory() as session:
                return await BookingRepository(session).get_bookings(query.asset_id, self.status_filter)
        except SQLAlchemyError as exc:
            raise ConflictCheckError(query.asset_id, f"booking query failed: {exc}") from exc
