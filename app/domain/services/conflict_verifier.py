"""
BATCH CONFLICT VERIFIER
Check many assets against a date range with bounded concurrency

RESPONSIBILITIES:
- Split candidates into fixed-width batches (default 10)
- Run every lookup of a batch concurrently, wait for the whole batch,
  then start the next one
- Classify each asset from the bookings its lookup returned
- Turn failed / cancelled lookups into UNVERIFIED results and report them

RULES:
❌ No unbounded fan-out
❌ A failed lookup never aborts the batch or later batches
❌ A failed lookup is never reported as AVAILABLE
✅ Results keyed by asset id, independent of completion order
✅ Read-only: no writes, no locks
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Protocol

from app.domain.models import AssetQuery, AvailabilityResult, AvailabilityState, Booking
from app.domain.services.availability_classifier import AvailabilityClassifier

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 10


class ConflictCheckError(RuntimeError):
    """A booking lookup for one asset could not be completed"""

    def __init__(self, asset_id: str, message: str):
        super().__init__(f"Conflict check failed for asset {asset_id}: {message}")
        self.asset_id = asset_id


class ConflictSource(Protocol):
    """Protocol for per-asset booking lookups - ASYNC"""

    async def fetch_bookings(self, query: AssetQuery) -> List[Booking]:
        """
        Policy-relevant bookings that may block the query's interval.

        Raises ConflictCheckError when the lookup cannot be completed.
        """
        ...


@dataclass(frozen=True)
class VerificationFailure:
    """Error-channel entry for an asset that could not be verified"""
    asset_id: str
    error: str


@dataclass
class BatchVerification:
    """Outcome of one batch verification run"""
    results: Dict[str, AvailabilityResult] = field(default_factory=dict)
    failures: List[VerificationFailure] = field(default_factory=list)
    batches: int = 0
    cancelled: bool = False

    @property
    def unverified_ids(self) -> List[str]:
        return [
            asset_id for asset_id, result in self.results.items()
            if result.state is AvailabilityState.UNVERIFIED
        ]

    def by_state(self, state: AvailabilityState) -> List[AvailabilityResult]:
        return [r for r in self.results.values() if r.state is state]


class BatchConflictVerifier:
    """
    Batch Conflict Verifier - ASYNC
    Bounded, batch-sequential fan-out over a ConflictSource
    """

    def __init__(
        self,
        source: ConflictSource,
        classifier: Optional[AvailabilityClassifier] = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
        lookup_timeout: Optional[float] = None,
    ):
        if batch_size < 1:
            raise ValueError("Batch size must be at least 1")
        self.source = source
        self.classifier = classifier or AvailabilityClassifier()
        self.batch_size = batch_size
        self.lookup_timeout = lookup_timeout

    async def verify_one(self, query: AssetQuery) -> AvailabilityResult:
        """
        Look up and classify a single asset

        Raises whatever the source raises; batch callers convert that
        into an UNVERIFIED result.
        """
        lookup = self.source.fetch_bookings(query)
        if self.lookup_timeout:
            bookings = await asyncio.wait_for(lookup, timeout=self.lookup_timeout)
        else:
            bookings = await lookup
        return self.classifier.classify_bookings(
            asset_id=query.asset_id,
            search_interval=query.search_interval,
            bookings=bookings,
            exclude_campaign_id=query.exclude_campaign_id,
            intrinsic_status=query.intrinsic_status,
        )

    async def verify_batch(
        self,
        candidates: Iterable[AssetQuery],
        concurrency: Optional[int] = None,
        cancel_event: Optional[asyncio.Event] = None,
        on_failure: Optional[Callable[[VerificationFailure], None]] = None,
    ) -> BatchVerification:
        """
        Verify many assets

        Args:
            candidates: One query per asset; duplicate asset ids keep the first
            concurrency: Batch width (defaults to the verifier's batch size)
            cancel_event: When set, batches not yet started are skipped and
                their assets reported UNVERIFIED; in-flight lookups drain
            on_failure: Called for every failed lookup, in addition to the
                failures list on the returned report

        Returns:
            BatchVerification with exactly one result per distinct asset id
        """
        width = concurrency if concurrency is not None else self.batch_size
        if width < 1:
            raise ValueError("Concurrency must be at least 1")

        queries = self._dedupe(candidates)
        report = BatchVerification()

        for offset in range(0, len(queries), width):
            if cancel_event is not None and cancel_event.is_set():
                skipped = queries[offset:]
                logger.info(f"Verification cancelled; {len(skipped)} assets left unverified")
                for query in skipped:
                    report.results[query.asset_id] = AvailabilityResult.unverified(
                        query.asset_id, "verification cancelled"
                    )
                report.cancelled = True
                break

            batch = queries[offset:offset + width]
            report.batches += 1
            logger.debug(f"Batch {report.batches}: checking {len(batch)} assets")

            outcomes = await asyncio.gather(
                *(self.verify_one(query) for query in batch),
                return_exceptions=True,
            )

            for query, outcome in zip(batch, outcomes):
                if isinstance(outcome, AvailabilityResult):
                    report.results[query.asset_id] = outcome
                    continue

                error = self._describe(outcome)
                logger.warning(f"Asset {query.asset_id} could not be verified: {error}")
                failure = VerificationFailure(asset_id=query.asset_id, error=error)
                report.failures.append(failure)
                report.results[query.asset_id] = AvailabilityResult.unverified(query.asset_id, error)
                if on_failure is not None:
                    on_failure(failure)

        logger.info(
            f"Verified {len(report.results) - len(report.unverified_ids)}/{len(report.results)} "
            f"assets in {report.batches} batches"
        )
        return report

    @staticmethod
    def _dedupe(candidates: Iterable[AssetQuery]) -> List[AssetQuery]:
        seen = set()
        queries = []
        for query in candidates:
            if query.asset_id in seen:
                logger.debug(f"Duplicate candidate {query.asset_id} ignored")
                continue
            seen.add(query.asset_id)
            queries.append(query)
        return queries

    @staticmethod
    def _describe(outcome: BaseException) -> str:
        if isinstance(outcome, asyncio.TimeoutError):
            return "lookup timed out"
        if isinstance(outcome, asyncio.CancelledError):
            return "lookup cancelled"
        return str(outcome) or outcome.__class__.__name__
