"""Tests for compliance aggregation."""

import pytest

from ppewatch.analytics.active_items import resolve_active_items
from ppewatch.analytics.aggregator import aggregate_compliance, percentage


def test_percentage_of_nothing_is_zero():
    assert percentage(0, 0) == 0.0
    assert percentage(3, 0) == 0.0
    assert percentage(1, 4) == 25.0


class TestAggregateCompliance:
    """Per-item and overall percentages."""

    def test_overall_is_weighted_by_checks(self, make_record):
        active = resolve_active_items(["Hard Hat", "Vest"])
        records = [
            make_record({"HardHatCompliance": "Yes", "VestCompliance": "Yes"}),
            make_record({"HardHatCompliance": "Yes", "VestCompliance": "No"}),
            make_record({"HardHatCompliance": "Yes"}),
            make_record({"HardHatCompliance": "No"}),
        ]
        tally = aggregate_compliance(records, active)
        
        assert tally.fields["HardHatCompliance"].ratio == 75.0
        assert tally.fields["VestCompliance"].ratio == 50.0
        # 4 of 6 checks, not the 62.5 mean of the two ratios
        assert tally.overall_ratio == pytest.approx(66.6667, rel=1e-4)

    def test_four_record_scenario(self, make_record, hard_hat_and_vest):
        records = [
            make_record({"HardHatCompliance": "Yes", "VestCompliance": "Yes"}),
            make_record({"HardHatCompliance": "No", "VestCompliance": "Yes"}),
            make_record({"HardHatCompliance": "Yes", "VestCompliance": "No"}),
            make_record({"HardHatCompliance": "No", "VestCompliance": "No"}),
        ]
        data = aggregate_compliance(records, hard_hat_and_vest).to_api()
        
        assert data["hardHat"] == 50.0
        assert data["vest"] == 50.0
        assert data["overall"] == 50.0

    def test_inactive_fields_are_ignored(self, make_record, hard_hat_and_vest):
        records = [
            make_record({"HardHatCompliance": "Yes", "GlovesCompliance": "No"}),
            make_record({"HardHatCompliance": "Yes", "GlovesCompliance": "No"}),
        ]
        data = aggregate_compliance(records, hard_hat_and_vest).to_api()
        
        assert data["hardHat"] == 100.0
        assert data["gloves"] == 0.0
        assert data["overall"] == 100.0

    def test_reactivating_restores_history(self, make_record):
        records = [make_record({"HardHatCompliance": "Yes", "GlovesCompliance": "No"})]
        
        without = aggregate_compliance(records, resolve_active_items(["Hard Hat"])).to_api()
        with_gloves = aggregate_compliance(records, resolve_active_items(["Hard Hat", "Gloves"])).to_api()
        
        assert without["overall"] == 100.0
        assert with_gloves["overall"] == 50.0
        assert with_gloves["gloves"] == 0.0

    def test_no_records_gives_all_zeros(self, hard_hat_and_vest):
        tally = aggregate_compliance([], hard_hat_and_vest)
        data = tally.to_api()
        
        assert set(tally.fields) == {"HardHatCompliance", "VestCompliance"}
        assert all(value == 0.0 for value in data.values())
        assert "steelToeBoots" in data

    def test_missing_compliances_mapping(self, make_record, hard_hat_and_vest):
        tally = aggregate_compliance([make_record(None)], hard_hat_and_vest)
        assert tally.records_seen == 1
        assert tally.total == 0
