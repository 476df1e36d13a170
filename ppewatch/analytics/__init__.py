"""
Compliance analytics package initialization.

Everything here is a pure function over already-fetched records.
"""

from ppewatch.analytics.active_items import ActiveItems, resolve_active_items
from ppewatch.analytics.aggregator import ComplianceTally, aggregate_compliance
from ppewatch.analytics.alerts import Alert, AlertStats, build_alert, build_alerts
from ppewatch.analytics.filter_info import FilterInfo, build_filter_index
from ppewatch.analytics.ranker import RiskThresholds, rank_repeat_offenders, rank_high_risk_zones
from ppewatch.analytics.trends import build_trend

__all__ = [
    "ActiveItems", "resolve_active_items", "ComplianceTally", "aggregate_compliance",
    "Alert", "AlertStats", "build_alert", "build_alerts", "FilterInfo",
    "build_filter_index", "RiskThresholds", "rank_repeat_offenders",
    "rank_high_risk_zones", "build_trend",
]
