"""Monthly trend series for the incident chart.

Reports are keyed by calendar month (``YYYY-MM``) of their timestamp and
counted in one grouping pass. A report whose timestamp is missing or can't be
parsed is counted in the current month, read once per call from the injected
clock.
"""

from __future__ import annotations

import logging
import math
import re
from datetime import datetime
from typing import Callable, Iterable, List, Optional

import numpy as np
import pandas as pd

from incident_analytics.models import MonthBucket, as_reports


logger = logging.getLogger(__name__)

MONTH_ABBR = ('Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun', 'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec')

# Epoch values at or above this are milliseconds, below it seconds
EPOCH_MS_THRESHOLD = 1e11

_NUMERIC = re.compile(r'[-+]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?')
_YEAR_ONLY = re.compile(r'\d{4}')

# pandas reads these as the wall clock; they must go through the injected clock
RELATIVE_WORDS = {'now', 'today', 'tomorrow', 'yesterday'}


def _from_epoch(value: float) -> pd.Timestamp:
    if not math.isfinite(value):
        raise ValueError(f'Non-finite epoch value {value}')
    unit = 'ms' if abs(value) >= EPOCH_MS_THRESHOLD else 's'
    return pd.Timestamp(value, unit=unit)


def parse_timestamp(value) -> Optional[pd.Timestamp]:
    """
    Read a report timestamp, or None when it is missing or unparseable.

    Accepts datetimes, ISO-like strings and Unix epoch numbers (seconds, or
    milliseconds for large values). Aware values are converted to naive UTC.
    """
    if value is None or isinstance(value, (bool, np.bool_)):
        return None
    try:
        if isinstance(value, (int, float, np.integer, np.floating)):
            ts = _from_epoch(float(value))
        elif isinstance(value, str):
            text = value.strip()
            if not text or text.lower() in RELATIVE_WORDS:
                return None
            if _NUMERIC.fullmatch(text) and not _YEAR_ONLY.fullmatch(text):
                ts = _from_epoch(float(text))
            else:
                ts = pd.Timestamp(text)
        else:
            ts = pd.Timestamp(value)
    except (ValueError, TypeError, OverflowError):
        return None
    if pd.isna(ts):
        return None
    if ts.tzinfo is not None:
        ts = ts.tz_convert('UTC').tz_localize(None)
    return ts


def month_key(ts: datetime) -> str:
    return f'{ts.year:04d}-{ts.month:02d}'


def format_month_label(key: str) -> str:
    """``'2024-01'`` -> ``'Jan 24'``. Display only; never used for ordering."""
    year, month = key.split('-')
    return f'{MONTH_ABBR[int(month) - 1]} {int(year) % 100:02d}'


class TrendBucketizer:
    """
    Groups reports into per-month total/verified/pending counts.

    Args:
        clock: Returns "now"; used for reports without a usable timestamp.
            Pin it in tests to make the output reproducible.
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None) -> None:
        self.clock = clock if clock is not None else datetime.now

    def _now(self) -> pd.Timestamp:
        value = self.clock()
        now = parse_timestamp(value)
        if now is None:
            logger.warning(f'Clock returned unusable value {value!r}; using the system time')
            now = pd.Timestamp.now()
        return now

    def bucketize(self, reports: Optional[Iterable]) -> List[MonthBucket]:
        items = as_reports(reports)
        if not items:
            return []

        now = None
        keys = []
        for report in items:
            ts = parse_timestamp(report.timestamp)
            if ts is None:
                if now is None:
                    now = self._now()
                ts = now
            keys.append(month_key(ts))

        if now is not None:
            logger.debug(f'Counted reports without a usable timestamp under {month_key(now)}')

        frame = pd.DataFrame({
            'month_key': keys,
            'verified': pd.Series([r.is_verified for r in items], dtype=int),
        })
        monthly = (
            frame.groupby('month_key', sort=True)['verified']
            .agg(total='size', verified='sum')
            .sort_index()
        )

        buckets = []
        for key, row in monthly.iterrows():
            total = int(row['total'])
            verified = int(row['verified'])
            buckets.append(MonthBucket(
                month_key=key,
                month_label=format_month_label(key),
                total=total,
                verified=verified,
                pending=total - verified,
            ))
        return buckets
