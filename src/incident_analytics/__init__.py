"""Analytics for incident reports: summary statistics, monthly trends and map points."""

from .config import AnalyticsConfig
from .location import LocationResolver, ResolvedLocation
from .models import AnalyticsSnapshot, MapPoint, MonthBucket, Report, Statistics
from .pipeline import ReportAnalyticsPipeline, build_snapshot
from .summary import StatisticsAggregator
from .trends import TrendBucketizer

__all__ = [
    'AnalyticsConfig',
    'AnalyticsSnapshot',
    'LocationResolver',
    'MapPoint',
    'MonthBucket',
    'Report',
    'ReportAnalyticsPipeline',
    'ResolvedLocation',
    'Statistics',
    'StatisticsAggregator',
    'TrendBucketizer',
    'build_snapshot',
]
