"""
inventory_services -- orchestration over the pure engines.

    DuplicateScanService  background, last-write-wins duplicate reports
    DashboardService      synchronous dashboard view-model
"""

from inventory_services.dashboard import (
    DashboardService,
    DashboardSummary,
    PriceAnalyticsRow,
)
from inventory_services.duplicate_scan import DuplicateScanService, TriggerPolicy

__all__ = [
    "DashboardService",
    "DashboardSummary",
    "DuplicateScanService",
    "PriceAnalyticsRow",
    "TriggerPolicy",
]
