"""
Unit Tests for AvailabilityClassifier
"""

from datetime import date

import pytest

from app.domain.models import (
    Asset,
    AssetStatus,
    AvailabilityState,
    Booking,
    CampaignStatus,
    Interval,
)
from app.domain.services.availability_classifier import AvailabilityClassifier, classify


def jan(day: int) -> date:
    return date(2026, 1, day)


def booking(campaign_id: str, start: date, end: date, status=CampaignStatus.RUNNING) -> Booking:
    return Booking(
        asset_id="A1",
        campaign_id=campaign_id,
        interval=Interval(start, end),
        campaign_status=status,
        campaign_name=f"Campaign {campaign_id}",
    )


@pytest.fixture
def asset():
    return Asset(id="A1")


@pytest.fixture
def january():
    return Interval(jan(1), jan(31))


class TestNoOverlap:
    def test_zero_bookings_available(self, asset, january):
        result = classify(asset, january, [])

        assert result.state is AvailabilityState.AVAILABLE
        assert result.available_from is None
        assert result.blocking_bookings == ()
        assert result.is_available

    def test_bookings_outside_window_available(self, asset):
        bookings = [booking("C1", jan(1), jan(10))]
        result = classify(asset, Interval(jan(11), jan(20)), bookings)

        assert result.state is AvailabilityState.AVAILABLE

    def test_intrinsic_status_used_without_history(self, january):
        asset = Asset(id="A1", intrinsic_status=AssetStatus.MAINTENANCE)
        result = classify(asset, january, [])

        assert result.state is AvailabilityState.BOOKED
        assert result.from_intrinsic_status is True
        assert result.blocking_bookings == ()

    def test_history_beats_intrinsic_status(self):
        # Stale "Booked" hint, but the only booking ended before the window
        asset = Asset(id="A1", intrinsic_status=AssetStatus.BOOKED)
        result = classify(asset, Interval(jan(20), jan(31)), [booking("C1", jan(1), jan(10))])

        assert result.state is AvailabilityState.AVAILABLE
        assert result.from_intrinsic_status is False

    def test_intrinsic_available_without_history(self, january):
        asset = Asset(id="A1", intrinsic_status=AssetStatus.AVAILABLE)
        assert classify(asset, january, []).state is AvailabilityState.AVAILABLE


class TestSingleOverlap:
    def test_booking_ending_inside_window_available_soon(self, asset, january):
        result = classify(asset, january, [booking("C1", date(2025, 12, 20), jan(15))])

        assert result.state is AvailabilityState.AVAILABLE_SOON
        assert result.available_from == jan(16)
        assert len(result.blocking_bookings) == 1
        assert not result.is_available

    def test_booking_ending_on_window_end_available_soon(self, asset, january):
        result = classify(asset, january, [booking("C1", jan(5), jan(31))])

        assert result.state is AvailabilityState.AVAILABLE_SOON
        assert result.available_from == date(2026, 2, 1)

    def test_booking_past_window_booked(self, asset, january):
        result = classify(asset, january, [booking("C1", jan(10), date(2026, 3, 31))])

        assert result.state is AvailabilityState.BOOKED
        assert result.available_from is None
        assert result.blocking_campaign_names == ["Campaign C1"]


class TestMultipleOverlaps:
    def test_two_overlaps_conflict(self, asset, january):
        bookings = [
            booking("C1", jan(1), jan(5)),
            booking("C2", jan(3), date(2026, 2, 28)),
        ]
        result = classify(asset, january, bookings)

        assert result.state is AvailabilityState.CONFLICT
        assert len(result.blocking_bookings) == 2
        assert result.available_from is None

    def test_conflict_regardless_of_end_dates(self, asset, january):
        bookings = [booking("C1", jan(1), jan(5)), booking("C2", jan(10), jan(12))]
        result = classify(asset, january, bookings)

        assert result.state is AvailabilityState.CONFLICT

    def test_blocking_bookings_sorted_by_start(self, asset, january):
        bookings = [booking("C2", jan(20), jan(25)), booking("C1", jan(2), jan(4))]
        result = classify(asset, january, bookings)

        assert [b.campaign_id for b in result.blocking_bookings] == ["C1", "C2"]


class TestPolicyAndExclusion:
    def test_cancelled_and_completed_never_block(self, asset, january):
        bookings = [
            booking("C1", jan(1), jan(31), status=CampaignStatus.CANCELLED),
            booking("C2", jan(1), jan(31), status=CampaignStatus.COMPLETED),
        ]
        result = classify(asset, january, bookings)

        assert result.state is AvailabilityState.AVAILABLE

    @pytest.mark.parametrize(
        "status",
        [CampaignStatus.DRAFT, CampaignStatus.UPCOMING, CampaignStatus.RUNNING],
    )
    def test_policy_relevant_statuses_block(self, asset, january, status):
        result = classify(asset, january, [booking("C1", jan(1), date(2026, 2, 10), status=status)])

        assert result.state is AvailabilityState.BOOKED

    def test_excluding_own_campaign_never_conflicts(self, asset, january):
        result = classify(asset, january, [booking("C1", jan(1), jan(31))], exclude_campaign_id="C1")

        assert result.state is AvailabilityState.AVAILABLE

    def test_exclusion_leaves_other_bookings(self, asset, january):
        bookings = [booking("C1", jan(1), jan(31)), booking("C2", jan(10), jan(20))]
        result = classify(asset, january, bookings, exclude_campaign_id="C1")

        assert result.state is AvailabilityState.AVAILABLE_SOON
        assert result.available_from == jan(21)

    def test_custom_policy(self, asset, january):
        classifier = AvailabilityClassifier(policy_statuses=frozenset({CampaignStatus.RUNNING}))
        bookings = [booking("C1", jan(1), jan(31), status=CampaignStatus.DRAFT)]

        assert classifier.classify(asset, january, bookings).state is AvailabilityState.AVAILABLE


def test_classification_is_deterministic(asset, january):
    bookings = [booking("C2", jan(3), jan(9)), booking("C1", jan(1), jan(5))]
    first = classify(asset, january, bookings)
    second = classify(asset, january, list(reversed(bookings)))

    assert first == second


def test_own_booking_counts_as_history_when_excluded(january):
    # Asset marked Booked only because of the campaign being edited
    asset = Asset(id="A1", intrinsic_status=AssetStatus.BOOKED)
    result = classify(asset, january, [booking("C1", jan(1), jan(31))], exclude_campaign_id="C1")

    assert result.state is AvailabilityState.AVAILABLE
    assert result.from_intrinsic_status is False
