"""Tests for repeat offender and high-risk zone ranking."""

from datetime import datetime, timedelta

from ppewatch.analytics.active_items import resolve_active_items
from ppewatch.analytics.ranker import (
    RiskThresholds, rank_high_risk_zones, rank_repeat_offenders, summarize_workers,
)

BOTH = {"HardHatCompliance": "No", "VestCompliance": "No"}
HARD_HAT = {"HardHatCompliance": "No", "VestCompliance": "Yes"}
VEST = {"HardHatCompliance": "Yes", "VestCompliance": "No"}
CLEAN = {"HardHatCompliance": "Yes", "VestCompliance": "Yes"}


class TestSummarizeWorkers:

    def test_three_violating_records_of_two_types(self, make_record, hard_hat_and_vest, filter_index):
        base = datetime(2024, 3, 6, 8, 0)
        records = [
            make_record(HARD_HAT, timestamp=base + timedelta(hours=2), filter_id="F2"),
            make_record(VEST, timestamp=base + timedelta(hours=1)),
            make_record(HARD_HAT, timestamp=base),
            make_record(CLEAN, timestamp=base + timedelta(hours=3)),
        ]
        summary = summarize_workers(records, hard_hat_and_vest, filter_index)["W1"]
        
        assert summary.violations == 3
        assert summary.violation_types == {"Hard Hat", "Vest"}
        assert summary.last_violation == base + timedelta(hours=2)
        assert summary.zone == "Loading Dock"
        
        entry = summary.to_dict()
        assert entry["violationTypes"] == ["Hard Hat", "Vest"]
        assert entry["lastViolationType"] == "Hard Hat"
        assert entry["workerId"] == entry["employeeId"] == "W1"

    def test_two_items_on_one_record_count_twice(self, make_record, hard_hat_and_vest, filter_index):
        summary = summarize_workers([make_record(BOTH)], hard_hat_and_vest, filter_index)["W1"]
        assert summary.violations == 2
        assert summary.to_dict()["lastViolationType"] == "Hard Hat, Vest"


class TestRankRepeatOffenders:

    def _records(self, make_record, counts):
        records = []
        for worker_id, count in counts:
            records.extend(make_record(HARD_HAT, worker_id=worker_id) for _ in range(count))
        return records

    def test_threshold_is_inclusive(self, make_record, hard_hat_and_vest, filter_index):
        records = self._records(make_record, [("W1", 9), ("W2", 10)])
        
        offenders = rank_repeat_offenders(records, hard_hat_and_vest, filter_index, min_violations=10)
        
        assert [o.worker_id for o in offenders] == ["W2"]

    def test_sort_is_stable_on_ties(self, make_record, hard_hat_and_vest, filter_index):
        records = self._records(make_record, [("W3", 2), ("W1", 2), ("W2", 2)])
        
        desc = rank_repeat_offenders(records, hard_hat_and_vest, filter_index, min_violations=1)
        asc = rank_repeat_offenders(
            records, hard_hat_and_vest, filter_index, min_violations=1, sort_order="asc"
        )
        
        assert [o.worker_id for o in desc] == ["W3", "W1", "W2"]
        assert [o.worker_id for o in asc] == ["W3", "W1", "W2"]

    def test_limit_applies_after_sorting(self, make_record, hard_hat_and_vest, filter_index):
        records = self._records(make_record, [("W1", 1), ("W2", 3), ("W3", 2)])
        
        offenders = rank_repeat_offenders(
            records, hard_hat_and_vest, filter_index, min_violations=1, limit=2
        )
        
        assert [o.worker_id for o in offenders] == ["W2", "W3"]

    def test_sort_by_name(self, make_record, hard_hat_and_vest, filter_index):
        records = self._records(make_record, [("b-worker", 3), ("A-worker", 1)])
        
        offenders = rank_repeat_offenders(
            records, hard_hat_and_vest, filter_index,
            min_violations=1, sort_by="name", sort_order="asc",
        )
        
        assert [o.worker_id for o in offenders] == ["A-worker", "b-worker"]

    def test_risk_levels(self, make_record, hard_hat_and_vest, filter_index):
        records = self._records(make_record, [("W1", 20), ("W2", 15), ("W3", 14)])
        
        offenders = rank_repeat_offenders(
            records, hard_hat_and_vest, filter_index, min_violations=1, limit=10
        )
        
        assert [(o.worker_id, o.risk_level) for o in offenders] == [
            ("W1", "high"), ("W2", "medium"), ("W3", "low"),
        ]

    def test_unknown_sort_key_sorts_by_violations(self, make_record, hard_hat_and_vest, filter_index):
        records = self._records(make_record, [("W1", 1), ("W2", 3)])
        
        offenders = rank_repeat_offenders(
            records, hard_hat_and_vest, filter_index, min_violations=1, sort_by="shoeSize"
        )
        
        assert [o.worker_id for o in offenders] == ["W2", "W1"]

    def test_custom_thresholds(self):
        thresholds = RiskThresholds(high=3, medium=2)
        assert thresholds.level(3) == "high"
        assert thresholds.level(2) == "medium"
        assert thresholds.level(1) == "low"

    def test_inactive_items_do_not_count(self, make_record, filter_index):
        active = resolve_active_items(["Vest"])
        records = self._records(make_record, [("W1", 5)])
        
        assert rank_repeat_offenders(records, active, filter_index, min_violations=1) == []


class TestRankHighRiskZones:

    def test_zone_threshold_and_order(self, make_record, hard_hat_and_vest, filter_index):
        records = (
            [make_record(BOTH, filter_id="F1") for _ in range(2)]
            + [make_record(CLEAN, filter_id="F1") for _ in range(2)]
            + [make_record(HARD_HAT, filter_id="F2") for _ in range(3)]
        )
        
        zones = rank_high_risk_zones(records, hard_hat_and_vest, filter_index, min_violations=3)
        
        # F1: 4 violations of 8 checks, F2: 3 violations of 6 checks
        assert [z.zone_name for z in zones] == ["Assembly", "Loading Dock"]
        assert zones[0].to_dict() == {
            "id": 1,
            "name": "Assembly",
            "location": "Plant A",
            "violations": 4,
            "complianceRate": 50,
        }

    def test_lowest_compliance_first(self, make_record, hard_hat_and_vest, filter_index):
        records = (
            [make_record(HARD_HAT, filter_id="F1") for _ in range(2)]
            + [make_record(BOTH, filter_id="F2") for _ in range(2)]
        )
        
        zones = rank_high_risk_zones(records, hard_hat_and_vest, filter_index, min_violations=1)
        
        assert [z.zone_name for z in zones] == ["Loading Dock", "Assembly"]
        assert [z.compliance_rate for z in zones] == [0, 50]

    def test_below_threshold_excluded(self, make_record, hard_hat_and_vest, filter_index):
        records = [make_record(HARD_HAT, filter_id="F1") for _ in range(2)]
        
        assert rank_high_risk_zones(records, hard_hat_and_vest, filter_index, min_violations=3) == []
        assert len(rank_high_risk_zones(records, hard_hat_and_vest, filter_index, min_violations=2)) == 1
