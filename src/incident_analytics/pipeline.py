"""Report analytics pipeline: raw report list -> AnalyticsSnapshot.

The only non-determinism lives in the injected random generator (fallback map
coordinates) and clock (reports without a timestamp). Fix both and the same
reports always give an equal snapshot.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Iterable, Optional

import numpy as np

from incident_analytics.config import AnalyticsConfig
from incident_analytics.location import LocationResolver
from incident_analytics.models import AnalyticsSnapshot, MapPoint, Report, as_reports
from incident_analytics.summary import StatisticsAggregator
from incident_analytics.trends import TrendBucketizer
from incident_analytics.utils.exceptions import SnapshotBuildError


logger = logging.getLogger(__name__)


class ReportAnalyticsPipeline:
    """
    Builds the statistics, monthly trends and map points for a report list.

    Design:
        - Runs three independent steps over the same decoded reports
          (statistics → trends → points).
        - Keeps no state between runs; each snapshot belongs to the caller.

    Public API:
        - run(reports): returns an AnalyticsSnapshot

    Example:
        >>> pipeline = ReportAnalyticsPipeline(resolver=LocationResolver(rng=np.random.default_rng(7)))
        >>> snapshot = pipeline.run(reports)
    """

    def __init__(
        self,
        resolver: Optional[LocationResolver] = None,
        aggregator: Optional[StatisticsAggregator] = None,
        bucketizer: Optional[TrendBucketizer] = None,
    ) -> None:
        self.resolver = resolver if resolver is not None else LocationResolver()
        self.aggregator = aggregator if aggregator is not None else StatisticsAggregator()
        self.bucketizer = bucketizer if bucketizer is not None else TrendBucketizer()

    @classmethod
    def from_config(
        cls,
        config: AnalyticsConfig,
        rng: Optional[np.random.Generator] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> 'ReportAnalyticsPipeline':
        """Pipeline whose fallback points scatter around the configured anchor."""
        resolver = LocationResolver(anchor=config.anchor, radius=config.jitter_radius, rng=rng)
        return cls(resolver=resolver, bucketizer=TrendBucketizer(clock=clock))

    def _build_point(self, report: Report) -> MapPoint:
        resolved = self.resolver.locate(report.location)
        return MapPoint(
            id=report.id,
            latitude=resolved.latitude,
            longitude=resolved.longitude,
            verified=report.is_verified,
            description=report.description,
            timestamp=report.timestamp,
            raw_location=report.location,
            source=resolved.source,
        )

    def run(self, reports: Optional[Iterable]) -> AnalyticsSnapshot:
        """
        Execute the full pipeline for one report list.

        Args:
            reports: Decoded report records (mappings, Report objects or
                objects with the report fields); None counts as empty

        Returns:
            AnalyticsSnapshot: Fresh statistics, trends and points

        Raises:
            SnapshotBuildError: Only on an internal bug; malformed report
                fields are degraded to defaults, never raised
        """
        try:
            items = as_reports(reports)
            logger.debug(f'Building analytics snapshot for {len(items)} reports')

            statistics = self.aggregator.aggregate(items)
            trends = self.bucketizer.bucketize(items)
            points = [self._build_point(report) for report in items]

            fallback_count = sum(1 for point in points if point.is_fallback)
            if fallback_count:
                logger.debug(f'{fallback_count} of {len(points)} map points use synthetic coordinates')
            logger.info(
                f'Built snapshot: {statistics.total_reports} reports, '
                f'{len(trends)} months, {len(points)} points'
            )
            return AnalyticsSnapshot(statistics=statistics, trends=trends, points=points)

        except Exception as e:
            logger.error(f'Snapshot build failed: {str(e)}')
            raise SnapshotBuildError(f'Snapshot build failed: {str(e)}') from e


def build_snapshot(
    reports: Optional[Iterable],
    rng: Optional[np.random.Generator] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> AnalyticsSnapshot:
    """One-shot helper: default anchor, optional pinned randomness and clock."""
    pipeline = ReportAnalyticsPipeline(
        resolver=LocationResolver(rng=rng),
        bucketizer=TrendBucketizer(clock=clock),
    )
    return pipeline.run(reports)
