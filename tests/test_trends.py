"""Tests for weekly and monthly violation trends."""

from datetime import datetime, timedelta

import pytest

from ppewatch.analytics.trends import (
    add_months, build_trend, month_buckets, start_of_week, trend_window_start, week_buckets,
)

# A Wednesday
NOW = datetime(2024, 3, 6, 12, 0)


class TestBuckets:

    def test_weeks_start_on_sunday(self):
        assert start_of_week(NOW) == datetime(2024, 3, 3)
        assert start_of_week(datetime(2024, 3, 3, 23, 59)) == datetime(2024, 3, 3)
        assert start_of_week(datetime(2024, 3, 2, 8, 0)) == datetime(2024, 2, 25)

    def test_six_week_buckets_oldest_first(self):
        buckets = week_buckets(NOW, 5)
        
        assert len(buckets) == 6
        assert [b.label for b in buckets] == [f"Week {i}" for i in range(1, 7)]
        assert buckets[0].date_label == "Jan 28"
        assert buckets[-1].date_label == "Mar 3"
        assert buckets[-1].end == datetime(2024, 3, 10)

    def test_month_buckets_cross_year(self):
        buckets = month_buckets(NOW, 5)
        
        assert [b.label for b in buckets] == [
            "Oct 2023", "Nov 2023", "Dec 2023", "Jan 2024", "Feb 2024", "Mar 2024",
        ]
        assert buckets[-1].end == datetime(2024, 4, 1)

    def test_add_months(self):
        assert add_months(datetime(2024, 1, 1), -1) == datetime(2023, 12, 1)
        assert add_months(datetime(2024, 11, 1), 3) == datetime(2025, 2, 1)

    def test_window_start_matches_first_bucket(self):
        assert trend_window_start("week", NOW) == week_buckets(NOW)[0].start
        assert trend_window_start("month", NOW) == month_buckets(NOW)[0].start


class TestBuildTrend:

    def test_counts_violations_per_active_item(self, make_record, hard_hat_and_vest):
        records = [
            make_record({"HardHatCompliance": "No", "VestCompliance": "No"}, timestamp=NOW),
            make_record({"HardHatCompliance": "No", "GlovesCompliance": "No"}, timestamp=NOW),
            make_record({"VestCompliance": "No"}, timestamp=datetime(2024, 2, 27)),
        ]
        
        trend = build_trend(records, hard_hat_and_vest, period="week", now=NOW)
        
        assert trend[-1] == {"week": "Week 6", "date": "Mar 3", "hard hat": 2, "vest": 1}
        assert trend[-2]["vest"] == 1
        assert trend[-2]["hard hat"] == 0

    def test_empty_buckets_report_zero(self, hard_hat_and_vest):
        trend = build_trend([], hard_hat_and_vest, period="month", now=NOW)
        
        assert len(trend) == 6
        assert all(point["hard hat"] == 0 and point["vest"] == 0 for point in trend)

    def test_records_outside_window_are_ignored(self, make_record, hard_hat_and_vest):
        old = make_record({"HardHatCompliance": "No"}, timestamp=NOW - timedelta(weeks=10))
        future = make_record({"HardHatCompliance": "No"}, timestamp=NOW + timedelta(weeks=2))
        
        trend = build_trend([old, future], hard_hat_and_vest, period="week", now=NOW)
        
        assert sum(point["hard hat"] for point in trend) == 0

    def test_demo_mode_only_fills_empty_buckets(self, make_record, hard_hat_and_vest):
        records = [make_record({"HardHatCompliance": "Yes", "VestCompliance": "Yes"}, timestamp=NOW)]
        
        trend = build_trend(records, hard_hat_and_vest, period="week", now=NOW, demo_mode=True)
        
        assert trend[-1]["hard hat"] == 0
        assert all(point["hard hat"] > 0 for point in trend[:-1])
        assert trend[0]["hard hat"] >= trend[-2]["hard hat"]

    def test_unknown_period(self, hard_hat_and_vest):
        with pytest.raises(ValueError):
            build_trend([], hard_hat_and_vest, period="quarter", now=NOW)

    def test_no_active_items(self, make_record):
        from ppewatch.analytics.active_items import resolve_active_items
        
        trend = build_trend([make_record({"HardHatCompliance": "No"}, timestamp=NOW)],
                            resolve_active_items([]), now=NOW)
        
        assert trend[0] == {"week": "Week 1", "date": "Jan 28"}
