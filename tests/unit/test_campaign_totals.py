"""
Unit Tests for campaign totals and billing periods
"""

from datetime import date
from decimal import Decimal

from app.domain.models import CampaignLine, Interval
from app.domain.services.campaign_totals import billing_periods, compute_campaign_totals
from app.domain.services.pro_rata import line_rent


def make_line(asset_id, start, end, **kwargs) -> CampaignLine:
    return CampaignLine(asset_id=asset_id, interval=Interval(start, end), **kwargs)


class TestComputeCampaignTotals:
    def test_single_line_totals(self):
        lines = [
            make_line(
                "A1", date(2026, 1, 1), date(2026, 1, 15),
                card_rate=Decimal("40000"),
                negotiated_rate=Decimal("30000"),
                base_rate=Decimal("20000"),
                printing_charges=Decimal("1000"),
                mounting_charges=Decimal("500"),
            )
        ]
        totals = compute_campaign_totals(lines, gst_percent=18, manual_discount=500)

        assert totals.display_cost == Decimal("15000.00")
        assert totals.printing_cost == Decimal("1000.00")
        assert totals.mounting_cost == Decimal("500.00")
        assert totals.gross_amount == Decimal("16500.00")
        assert totals.manual_discount_amount == Decimal("500.00")
        assert totals.taxable_amount == Decimal("16000.00")
        assert totals.gst_amount == Decimal("2880.00")
        assert totals.grand_total == Decimal("18880.00")
        assert totals.total_discount == Decimal("5000.00")
        assert totals.total_profit == Decimal("5000.00")
        assert totals.duration_days == 15
        assert totals.total_assets == 1

    def test_totals_are_sum_of_line_rents(self):
        # Different intervals per line: never prorate the summed monthly rate
        lines = [
            make_line("A1", date(2026, 1, 1), date(2026, 1, 10), negotiated_rate=Decimal("30000")),
            make_line("A2", date(2026, 1, 1), date(2026, 1, 30), negotiated_rate=Decimal("45000")),
        ]
        totals = compute_campaign_totals(lines)

        assert totals.display_cost == sum(line_rent(item) for item in lines)
        assert totals.display_cost == Decimal("55000.00")

    def test_period_spans_all_lines(self):
        lines = [
            make_line("A1", date(2026, 1, 5), date(2026, 1, 10)),
            make_line("A2", date(2026, 1, 1), date(2026, 1, 20)),
        ]
        totals = compute_campaign_totals(lines)

        assert totals.period == Interval(date(2026, 1, 1), date(2026, 1, 20))
        assert totals.duration_days == 20

    def test_manual_discount_clamped_to_gross(self):
        lines = [make_line("A1", date(2026, 1, 1), date(2026, 1, 30), negotiated_rate=Decimal("100"))]
        totals = compute_campaign_totals(lines, gst_percent=18, manual_discount=500)

        assert totals.manual_discount_amount == Decimal("100.00")
        assert totals.taxable_amount == Decimal("0.00")
        assert totals.grand_total == Decimal("0.00")

    def test_negative_manual_discount_ignored(self):
        lines = [make_line("A1", date(2026, 1, 1), date(2026, 1, 30), negotiated_rate=Decimal("100"))]
        totals = compute_campaign_totals(lines, manual_discount=-50)

        assert totals.manual_discount_amount == Decimal("0.00")
        assert totals.taxable_amount == Decimal("100.00")

    def test_profit_only_counts_lines_with_base_rate(self):
        lines = [
            make_line("A1", date(2026, 1, 1), date(2026, 1, 30),
                      negotiated_rate=Decimal("30000"), base_rate=Decimal("20000")),
            make_line("A2", date(2026, 1, 1), date(2026, 1, 30), negotiated_rate=Decimal("30000")),
        ]
        totals = compute_campaign_totals(lines)

        assert totals.total_profit == Decimal("10000.00")

    def test_no_lines(self):
        totals = compute_campaign_totals([])

        assert totals.grand_total == Decimal("0.00")
        assert totals.period is None
        assert totals.duration_days == 0
        assert totals.billing_periods == ()


class TestBillingPeriods:
    def test_short_campaign_single_period(self):
        periods = billing_periods(Interval(date(2026, 1, 20), date(2026, 2, 10)))

        assert len(periods) == 1
        assert periods[0].days == 22
        assert periods[0].is_first and periods[0].is_last

    def test_split_by_calendar_month(self):
        periods = billing_periods(Interval(date(2026, 1, 15), date(2026, 3, 10)))

        assert [p.month_key for p in periods] == ["2026-01", "2026-02", "2026-03"]
        assert [p.days for p in periods] == [17, 30, 10]
        assert [p.pro_rata_factor for p in periods] == [
            Decimal("0.57"), Decimal("1.00"), Decimal("0.33"),
        ]
        assert periods[0].is_first and not periods[0].is_last
        assert periods[-1].is_last and not periods[-1].is_first

    def test_full_31_day_month_bills_as_thirty(self):
        periods = billing_periods(Interval(date(2026, 1, 1), date(2026, 2, 28)))

        assert [p.days for p in periods] == [30, 30]
        assert all(p.pro_rata_factor == Decimal("1.00") for p in periods)

    def test_periods_cover_campaign_contiguously(self):
        period = Interval(date(2025, 11, 20), date(2026, 2, 3))
        periods = billing_periods(period)

        assert periods[0].interval.start == period.start
        assert periods[-1].interval.end == period.end
        for prev, nxt in zip(periods, periods[1:]):
            assert prev.interval.day_after() == nxt.interval.start
