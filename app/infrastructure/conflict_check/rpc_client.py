"""
Remote conflict-check client.
Calls the check_asset_conflict procedure through the PostgREST RPC gateway.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import date
from typing import List, Optional

import httpx

from app.domain.models import AssetQuery, Booking, CampaignStatus, Interval
from app.domain.services.conflict_verifier import ConflictCheckError
from app.utils.time import format_day

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConflictingCampaign:
    campaign_id: str
    campaign_name: Optional[str]
    client_name: Optional[str]
    start_date: date
    end_date: date
    status: CampaignStatus


@dataclass(frozen=True)
class ConflictCheckResult:
    has_conflict: bool
    conflicting_campaigns: List[ConflictingCampaign]


class ConflictRpcClient:
    def __init__(
        self,
        base_url: str,
        service_key: str,
        function_name: str = "check_asset_conflict",
        timeout_seconds: float = 15.0,
        retries: int = 2,
        backoff_base_seconds: float = 0.5,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not base_url:
            raise ValueError("Conflict RPC base URL missing")
        if not service_key:
            raise ValueError("Conflict RPC service key missing")
        self.base_url = base_url.rstrip("/")
        self.service_key = service_key
        self.function_name = function_name
        self.timeout_seconds = timeout_seconds
        self.retries = max(0, retries)
        self.backoff_base_seconds = backoff_base_seconds
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/rest/v1/rpc/{self.function_name}"

    def _headers(self) -> dict:
        return {
            "apikey": self.service_key,
            "Authorization": f"Bearer {self.service_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _get_client(self) -> httpx.AsyncClient:
        """One pooled client per instance, reopened after aclose()"""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self.timeout_seconds,
                headers=self._headers(),
                transport=self._transport,
            )
        return self._client

    async def _post_json(self, payload: dict) -> httpx.Response:
        return await self._get_client().post(self.endpoint, json=payload)

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def check_conflict(
        self,
        asset_id: str,
        start_date: date,
        end_date: date,
        exclude_campaign_id: Optional[str] = None,
    ) -> ConflictCheckResult:
        payload = {
            "p_asset_id": asset_id,
            "p_start_date": format_day(start_date),
            "p_end_date": format_day(end_date),
            "p_exclude_campaign_id": exclude_campaign_id,
        }

        last_error = "no attempt made"
        for attempt in range(self.retries + 1):
            if attempt:
                await asyncio.sleep(self.backoff_base_seconds * (2 ** (attempt - 1)))
            try:
                response = await self._post_json(payload)
            except httpx.HTTPError as exc:
                last_error = f"transport error: {exc}"
                logger.debug(f"Conflict RPC attempt {attempt + 1} for {asset_id} failed: {exc}")
                continue

            if response.status_code == 200:
                return self._parse(asset_id, response)

            last_error = f"HTTP {response.status_code}: {response.text[:200]}"
            logger.debug(f"Conflict RPC attempt {attempt + 1} for {asset_id}: {last_error}")
            # Client errors will not improve on retry
            if 400 <= response.status_code < 500 and response.status_code != 429:
                break

        raise ConflictCheckError(asset_id, last_error)

    def _parse(self, asset_id: str, response: httpx.Response) -> ConflictCheckResult:
        try:
            data = response.json()
        except ValueError as exc:
            raise ConflictCheckError(asset_id, "response is not JSON") from exc

        if not isinstance(data, dict) or "has_conflict" not in data:
            raise ConflictCheckError(asset_id, "response missing has_conflict")

        campaigns: List[ConflictingCampaign] = []
        for entry in data.get("conflicting_campaigns") or []:
            try:
                interval = Interval.of(entry["start_date"], entry["end_date"])
                campaigns.append(
                    ConflictingCampaign(
                        campaign_id=str(entry["campaign_id"]),
                        campaign_name=entry.get("campaign_name"),
                        client_name=entry.get("client_name"),
                        start_date=interval.start,
                        end_date=interval.end,
                        status=CampaignStatus.parse(entry.get("status") or ""),
                    )
                )
            except (KeyError, ValueError) as exc:
                raise ConflictCheckError(asset_id, f"malformed conflicting campaign: {exc}") from exc

        return ConflictCheckResult(has_conflict=bool(data["has_conflict"]), conflicting_campaigns=campaigns)

    async def fetch_bookings(self, query: AssetQuery) -> List[Booking]:
        result = await self.check_conflict(
            query.asset_id,
            query.search_interval.start,
            query.search_interval.end,
            query.exclude_campaign_id,
        )
        if result.has_conflict and not result.conflicting_campaigns:
            raise ConflictCheckError(query.asset_id, "conflict reported without campaign details")
        return [
            Booking(
                asset_id=query.asset_id,
                campaign_id=c.campaign_id,
                interval=Interval(c.start_date, c.end_date),
                campaign_status=c.status,
                campaign_name=c.campaign_name,
                client_name=c.client_name,
            )
            for c in result.conflicting_campaigns
        ]
