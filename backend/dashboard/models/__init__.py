from dashboard.models.client import Client
from dashboard.models.performance import PerformanceRecord
from dashboard.models.looker import LookerAdCreative
from dashboard.models.system import ImportHistory, LogEntry, Report

__all__ = [
    "Client",
    "PerformanceRecord",
    "LookerAdCreative",
    # Auxiliary
    "ImportHistory",
    "LogEntry",
    "Report",
]
