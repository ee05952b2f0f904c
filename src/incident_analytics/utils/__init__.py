from .exceptions import ConfigError, IncidentAnalyticsError, ReportFetchError, SnapshotBuildError
from .logger_config import setup_logger

__all__ = [
    "ConfigError",
    "IncidentAnalyticsError",
    "ReportFetchError",
    "SnapshotBuildError",
    "setup_logger",
]
