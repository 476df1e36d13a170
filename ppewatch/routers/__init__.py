"""
Routers package initialization.
"""

from ppewatch.routers import compliance, alerts, dashboard, statuses, ppe_items

__all__ = ["compliance", "alerts", "dashboard", "statuses", "ppe_items"]
