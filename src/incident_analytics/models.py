"""Input and output records of the report analytics engine."""

from __future__ import annotations

import math
import re
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping

import numpy as np
import pandas as pd


REPORT_FIELDS = ('id', 'description', 'location', 'timestamp', 'verified', 'reward')

VERIFIED_STRINGS = {'true', '1', 'yes', 'y', 'verified'}

# Leading numeric prefix, the way a lenient float parse reads "10 ETH" as 10
_NUMBER_PREFIX = re.compile(r'^\s*[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?')

TREND_COLUMNS = ['month_key', 'month_label', 'total', 'verified', 'pending']
POINT_COLUMNS = ['id', 'latitude', 'longitude', 'verified', 'description', 'timestamp', 'raw_location', 'source']


def normalize_verified(value: Any) -> bool:
    """Map the many shapes a ``verified`` flag arrives in onto a bool."""
    if isinstance(value, (bool, np.bool_)):
        return bool(value)
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip().lower() in VERIFIED_STRINGS
    if isinstance(value, (int, float, np.integer, np.floating)):
        return bool(value == value and value != 0)
    return False


def coerce_reward(value: Any) -> float:
    """
    Read a reward as a non-negative float.

    Anything that can't be read as a finite, non-negative number counts as 0.
    """
    if value is None or isinstance(value, (bool, np.bool_)):
        return 0.0
    if isinstance(value, str):
        match = _NUMBER_PREFIX.match(value)
        if not match:
            return 0.0
        number = float(match.group(0))
    else:
        try:
            number = float(value)
        except (TypeError, ValueError, OverflowError):
            return 0.0
    if not math.isfinite(number) or number < 0:
        return 0.0
    return number


def as_reports(reports: Any) -> List[Report]:
    """Decode a raw report list; None counts as empty."""
    if reports is None:
        return []
    return [Report.from_record(r) for r in reports]


def _json_value(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    return value


@dataclass(frozen=True)
class Report:
    id: Any = None
    description: Any = None
    location: Any = None
    timestamp: Any = None
    verified: Any = None
    reward: Any = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_record(cls, record: Any) -> 'Report':
        """
        Decode one raw report without trusting its shape.

        Args:
            record: A mapping (decoded JSON), a Report, or any object with the
                report fields as attributes

        Returns:
            Report: Missing fields are None; unknown keys are kept in ``extra``
        """
        if isinstance(record, Report):
            return record
        if isinstance(record, Mapping):
            known = {name: record.get(name) for name in REPORT_FIELDS}
            extra = {k: v for k, v in record.items() if k not in REPORT_FIELDS}
            return cls(extra=extra, **known)
        known = {name: getattr(record, name, None) for name in REPORT_FIELDS}
        attrs = getattr(record, '__dict__', None) or {}
        extra = {k: v for k, v in attrs.items() if k not in REPORT_FIELDS}
        return cls(extra=extra, **known)

    @property
    def is_verified(self) -> bool:
        return normalize_verified(self.verified)

    @property
    def reward_value(self) -> float:
        return coerce_reward(self.reward)


@dataclass(frozen=True)
class Statistics:
    total_reports: int = 0
    verified_reports: int = 0
    pending_reports: int = 0
    total_reward: float = 0.0

    def formatted_reward(self) -> str:
        return f'{self.total_reward:.2f}'

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class MonthBucket:
    month_key: str
    month_label: str
    total: int
    verified: int
    pending: int

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class MapPoint:
    id: Any
    latitude: float
    longitude: float
    verified: bool
    description: Any = None
    timestamp: Any = None
    raw_location: Any = None
    source: str = 'fallback'

    @property
    def is_fallback(self) -> bool:
        # Synthetic coordinates are not ground truth
        return self.source == 'fallback'

    @property
    def status_label(self) -> str:
        return 'Verified' if self.verified else 'Under Investigation'

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'latitude': self.latitude,
            'longitude': self.longitude,
            'verified': self.verified,
            'description': self.description,
            'timestamp': _json_value(self.timestamp),
            'raw_location': self.raw_location,
            'source': self.source,
        }


@dataclass
class AnalyticsSnapshot:
    """
    Everything the dashboard views need for one report list.

    The summary cards read ``statistics``, the trend chart reads ``trends`` and
    the map reads ``points``; each can be used without touching the others.
    """
    statistics: Statistics = field(default_factory=Statistics)
    trends: List[MonthBucket] = field(default_factory=list)
    points: List[MapPoint] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'statistics': self.statistics.to_dict(),
            'trends': [bucket.to_dict() for bucket in self.trends],
            'points': [point.to_dict() for point in self.points],
        }

    def trends_frame(self) -> pd.DataFrame:
        return pd.DataFrame([bucket.to_dict() for bucket in self.trends], columns=TREND_COLUMNS)

    def points_frame(self) -> pd.DataFrame:
        return pd.DataFrame([point.to_dict() for point in self.points], columns=POINT_COLUMNS)

    def heatmap_points(self, intensity: float = 0.5) -> List[List[float]]:
        """Coordinates as ``[lat, lng, intensity]`` triples, one per point, unclustered."""
        return [[point.latitude, point.longitude, intensity] for point in self.points]
