"""Coordinate extraction from free-text report locations.

Reports carry whatever the reporter typed as a location. A fixed cascade of
matchers is tried in order and the first one that yields two finite numbers
wins. When none do, a synthetic point is scattered around the anchor so every
report still lands on the map; such points are tagged ``fallback`` and must
not be read as real positions.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Callable, List, NamedTuple, Optional, Sequence, Tuple

import numpy as np

from incident_analytics.config import DEFAULT_ANCHOR, DEFAULT_JITTER_RADIUS


logger = logging.getLogger(__name__)

Coordinate = Tuple[float, float]
Matcher = Callable[[str], Optional[Coordinate]]

FALLBACK_SOURCE = 'fallback'

# "19.0760, 72.8777" or "19.0760 72.8777"
DECIMAL_PAIR = re.compile(r'(?<![\d.])(-?\d+(?:\.\d+)?)[,\s]+(-?\d+(?:\.\d+)?)')

# 19°4'34"N, 72°52'40"E  (minutes and seconds optional)
_DMS_PART = r'(\d+(?:\.\d+)?)\s*°\s*(?:(\d+(?:\.\d+)?)\s*[\'′]\s*)?(?:(\d+(?:\.\d+)?)\s*["″]\s*)?'
DMS_PAIR = re.compile(r'(?<![\d.])' + _DMS_PART + r'([NS])[,\s]+' + _DMS_PART + r'([EW])', re.IGNORECASE)

# location: (40.7128, -74.0060)
LOCATION_OBJECT = re.compile(r'location:\s*\((-?\d+(?:\.\d+)?),\s*(-?\d+(?:\.\d+)?)\)')


class ResolvedLocation(NamedTuple):
    latitude: float
    longitude: float
    source: str

    @property
    def is_fallback(self) -> bool:
        return self.source == FALLBACK_SOURCE


def _finite_pair(lat: float, lng: float) -> Optional[Coordinate]:
    if math.isfinite(lat) and math.isfinite(lng):
        return (lat, lng)
    return None


def _dms_to_decimal(degrees: str, minutes: Optional[str], seconds: Optional[str], hemisphere: str) -> float:
    value = float(degrees) + float(minutes or 0) / 60 + float(seconds or 0) / 3600
    if hemisphere.upper() in ('S', 'W'):
        value = -value
    return value


def match_decimal_pair(text: str) -> Optional[Coordinate]:
    match = DECIMAL_PAIR.search(text)
    if not match:
        return None
    return _finite_pair(float(match.group(1)), float(match.group(2)))


def match_dms(text: str) -> Optional[Coordinate]:
    match = DMS_PAIR.search(text)
    if not match:
        return None
    lat_deg, lat_min, lat_sec, lat_hem, lng_deg, lng_min, lng_sec, lng_hem = match.groups()
    return _finite_pair(
        _dms_to_decimal(lat_deg, lat_min, lat_sec, lat_hem),
        _dms_to_decimal(lng_deg, lng_min, lng_sec, lng_hem),
    )


def match_location_object(text: str) -> Optional[Coordinate]:
    match = LOCATION_OBJECT.search(text)
    if not match:
        return None
    return _finite_pair(float(match.group(1)), float(match.group(2)))


# Priority order matters: first match wins, not best match
DEFAULT_MATCHERS: List[Tuple[str, Matcher]] = [
    ('decimal_pair', match_decimal_pair),
    ('dms', match_dms),
    ('location_object', match_location_object),
]


class LocationResolver:
    """
    Turns a location string into a (latitude, longitude) pair.

    Attributes:
        anchor (tuple): Centre of the synthetic fallback points
        radius (float): Max jitter in degrees applied independently to each axis
        rng (numpy.random.Generator): Randomness for the fallback jitter
        matchers (list): Ordered ``(name, matcher)`` pairs tried against the text

    Example:
        >>> resolver = LocationResolver(rng=np.random.default_rng(0))
        >>> resolver.resolve('19.0760, 72.8777')
        (19.076, 72.8777)
    """

    def __init__(
        self,
        anchor: Coordinate = DEFAULT_ANCHOR,
        radius: float = DEFAULT_JITTER_RADIUS,
        rng: Optional[np.random.Generator] = None,
        matchers: Optional[Sequence[Tuple[str, Matcher]]] = None,
    ) -> None:
        self.anchor = (float(anchor[0]), float(anchor[1]))
        self.radius = abs(float(radius))
        self.rng = rng if rng is not None else np.random.default_rng()
        self.matchers = list(matchers) if matchers is not None else list(DEFAULT_MATCHERS)

    def _fallback(self) -> ResolvedLocation:
        lat = self.anchor[0] + float(self.rng.uniform(-self.radius, self.radius))
        lng = self.anchor[1] + float(self.rng.uniform(-self.radius, self.radius))
        return ResolvedLocation(lat, lng, FALLBACK_SOURCE)

    def locate(self, location_text) -> ResolvedLocation:
        """
        Resolve a location string and report which matcher produced it.

        Args:
            location_text: Free text, possibly empty, None or not a string

        Returns:
            ResolvedLocation: The coordinate and the winning matcher's name, or
            ``fallback`` for a synthetic point
        """
        if isinstance(location_text, str) and location_text.strip():
            for name, matcher in self.matchers:
                pair = matcher(location_text)
                if pair is not None:
                    return ResolvedLocation(pair[0], pair[1], name)
            logger.debug(f'No coordinate pattern matched {location_text!r}; using fallback')
        return self._fallback()

    def resolve(self, location_text) -> Coordinate:
        resolved = self.locate(location_text)
        return (resolved.latitude, resolved.longitude)
