"""Summary-card statistics over a report list."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

import pandas as pd

from incident_analytics.models import Statistics, as_reports


logger = logging.getLogger(__name__)


class StatisticsAggregator:
    """Reduces reports to total/verified/pending counts and the summed reward."""

    def aggregate(self, reports: Optional[Iterable]) -> Statistics:
        items = as_reports(reports)
        if not items:
            return Statistics()

        verified = pd.Series([r.is_verified for r in items], dtype=bool)
        rewards = pd.Series([r.reward_value for r in items], dtype=float)

        total = len(items)
        n_verified = int(verified.sum())
        stats = Statistics(
            total_reports=total,
            verified_reports=n_verified,
            # complement, so the two counts always add up
            pending_reports=total - n_verified,
            total_reward=float(rewards.sum()),
        )
        logger.debug(f'Aggregated {total} reports: {n_verified} verified, reward {stats.total_reward}')
        return stats
