"""Runtime settings for the incident analytics tools.

Values come from the environment (a local ``.env`` file is honoured through
python-dotenv). Only the fetch client, the fallback anchor and logging are
configurable; the aggregation rules themselves are fixed.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from incident_analytics.utils.exceptions import ConfigError


DEFAULT_REPORTS_URL = 'http://localhost:8503/analyze/reports'

# Fallback coordinates are scattered around this point (Mumbai) when a report
# has no usable location text.
DEFAULT_ANCHOR = (19.0760, 72.8777)
DEFAULT_JITTER_RADIUS = 0.05


def _read_float(env: Mapping[str, str], key: str, default: float, low: Optional[float] = None, high: Optional[float] = None) -> float:
    raw = env.get(key)
    if raw is None or raw.strip() == '':
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f'{key} must be a number, got {raw!r}')
    if value != value:
        raise ConfigError(f'{key} must be a number, got {raw!r}')
    if low is not None and value < low:
        raise ConfigError(f'{key} must be >= {low}, got {value}')
    if high is not None and value > high:
        raise ConfigError(f'{key} must be <= {high}, got {value}')
    return value


def _read_int(env: Mapping[str, str], key: str, default: int, low: Optional[int] = None) -> int:
    raw = env.get(key)
    if raw is None or raw.strip() == '':
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f'{key} must be an integer, got {raw!r}')
    if low is not None and value < low:
        raise ConfigError(f'{key} must be >= {low}, got {value}')
    return value


@dataclass(frozen=True)
class AnalyticsConfig:
    reports_url: str = DEFAULT_REPORTS_URL
    request_timeout: float = 30.0
    request_retries: int = 3
    rate_limit: float = 1.0
    anchor_latitude: float = DEFAULT_ANCHOR[0]
    anchor_longitude: float = DEFAULT_ANCHOR[1]
    jitter_radius: float = DEFAULT_JITTER_RADIUS
    log_dir: Optional[str] = 'logs'

    @property
    def anchor(self) -> tuple[float, float]:
        return (self.anchor_latitude, self.anchor_longitude)

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> 'AnalyticsConfig':
        """
        Build the config from environment variables.

        Args:
            env: Mapping to read instead of ``os.environ``. When omitted, a
                ``.env`` file is loaded first.

        Returns:
            AnalyticsConfig: The parsed settings

        Raises:
            ConfigError: A variable is set but unparseable or out of range
        """
        if env is None:
            load_dotenv()
            env = os.environ

        url = (env.get('INCIDENT_REPORTS_URL') or '').strip() or DEFAULT_REPORTS_URL
        log_dir = env.get('INCIDENT_LOG_DIR', 'logs')

        return cls(
            reports_url=url,
            request_timeout=_read_float(env, 'INCIDENT_REQUEST_TIMEOUT', 30.0, low=0.001),
            request_retries=_read_int(env, 'INCIDENT_REQUEST_RETRIES', 3, low=1),
            rate_limit=_read_float(env, 'INCIDENT_RATE_LIMIT', 1.0, low=0.0),
            anchor_latitude=_read_float(env, 'INCIDENT_ANCHOR_LAT', DEFAULT_ANCHOR[0], low=-90.0, high=90.0),
            anchor_longitude=_read_float(env, 'INCIDENT_ANCHOR_LNG', DEFAULT_ANCHOR[1], low=-180.0, high=180.0),
            jitter_radius=_read_float(env, 'INCIDENT_JITTER_RADIUS', DEFAULT_JITTER_RADIUS, low=0.0),
            log_dir=log_dir.strip() or None,
        )
