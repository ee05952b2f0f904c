"""
Incident Report Fetcher Module.

This module fetches the decoded incident report list from the analysis service
(the ML backend that enriches each on-chain report with its evidence
analysis) and turns it into an analytics snapshot.

Note:
    The service answers ``GET /analyze/reports`` with a JSON array of report
    objects. Some deployments wrap the array as ``{"reports": [...]}``; both
    shapes are accepted.
"""


import argparse
import json
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional

import numpy as np
import requests

from incident_analytics.config import AnalyticsConfig
from incident_analytics.pipeline import ReportAnalyticsPipeline
from incident_analytics.utils.exceptions import ConfigError, IncidentAnalyticsError, ReportFetchError
from incident_analytics.utils.logger_config import setup_logger


logger = logging.getLogger(__name__)


class ReportFetcher:
    """
    A class to fetch the incident report list from the analysis service.

    It implements retry with progressive backoff and waits longer when the
    service signals rate limiting.

    Attributes:
        url (str): Endpoint returning the report list
        timeout (float): Seconds to wait for each request
        retries (int): Number of attempts before giving up
        rate_limit (float): Base wait between attempts in seconds

    Example:
        >>> fetcher = ReportFetcher('http://localhost:8503/analyze/reports')
        >>> reports = fetcher.fetch()
    """

    def __init__(
        self,
        url: str,
        timeout: float = 30.0,
        retries: int = 3,
        rate_limit: float = 1.0,
        ) -> None:
        """
        Initalize the Fetcher with configs as mentioned in the class description
        """
        if retries < 1:
            raise ConfigError(f'retries must be at least 1, got {retries}')
        self.url = url
        self.timeout = timeout
        self.retries = retries
        self.rate_limit = rate_limit

    @classmethod
    def from_config(cls, config: AnalyticsConfig) -> 'ReportFetcher':
        return cls(
            url=config.reports_url,
            timeout=config.request_timeout,
            retries=config.request_retries,
            rate_limit=config.rate_limit,
        )

    @staticmethod
    def _extract_reports(payload) -> List[dict]:
        """
        Pull the report list out of a decoded response body.

        Raises:
            ReportFetchError: The body is neither a list nor ``{"reports": [...]}``
        """
        if isinstance(payload, list):
            return payload
        if isinstance(payload, dict) and isinstance(payload.get('reports'), list):
            return payload['reports']
        raise ReportFetchError(f'Unexpected payload shape from analysis service: {type(payload).__name__}')

    def _make_request(self) -> Optional[requests.Response]:
        """
        Make an HTTP request to the analysis service with retry logic.

        Returns:
            Optional[requests.Response]: Response object if successful, None otherwise

        Raises:
            ReportFetchError: Network errors on every attempt
        """
        for attempt in range(self.retries):
            try:
                logger.debug(f'Requesting: {self.url}')
                response = requests.get(self.url, timeout=self.timeout)

                if response.status_code == 200:
                    return response

                elif response.status_code == 429:  # Rate limit
                    wait_time = min((attempt + 1) * self.rate_limit * 2, 60)
                    logger.warning(f'Rate Limit Exceeded, waiting for {wait_time}s')
                    time.sleep(wait_time)
                else:
                    logger.error(f'Request failed with status {response.status_code}: {response.text}')
                    time.sleep(self.rate_limit * (attempt + 1))  # Progressive backoff

            except requests.exceptions.RequestException as e:
                logger.error(f'Network error (attempt {attempt + 1}): {str(e)}')
                if attempt == self.retries - 1:
                    raise ReportFetchError(f'Network error after {self.retries} attempts: {str(e)}')
                time.sleep(self.rate_limit * (attempt + 1))

        return None

    def fetch(self) -> List[dict]:
        """
        Fetch the current report list.

        Returns:
            List[dict]: Decoded report records, in service order

        Raises:
            ReportFetchError: The service is unreachable, keeps failing, or
                returns something other than a report list
        """
        response = self._make_request()
        if response is None:
            raise ReportFetchError(f'Failed to get reports from {self.url} after {self.retries} attempts')

        try:
            payload = response.json()
        except ValueError as e:
            logger.error(f'Analysis service returned invalid JSON: {str(e)}')
            raise ReportFetchError(f'Analysis service returned invalid JSON: {str(e)}')

        reports = self._extract_reports(payload)
        logger.info(f'Fetched {len(reports)} reports from {self.url}')
        return reports


def load_reports_file(path: str) -> List[dict]:
    """
    Read a saved report list (same shape as the service response) from disk.

    Raises:
        ReportFetchError: The file is missing or isn't a report list
    """
    file_path = Path(path)
    try:
        payload = json.loads(file_path.read_text(encoding='utf-8'))
    except (OSError, ValueError) as e:
        raise ReportFetchError(f'Could not read reports from {file_path}: {str(e)}')
    return ReportFetcher._extract_reports(payload)


def render_summary(snapshot) -> str:
    stats = snapshot.statistics
    lines = [
        f'Total Incidents      : {stats.total_reports}',
        f'Verified Cases       : {stats.verified_reports}',
        f'Under Investigation  : {stats.pending_reports}',
        f'Total Rewards (ETH)  : {stats.formatted_reward()}',
        '',
    ]
    if snapshot.trends:
        lines.append(snapshot.trends_frame().to_string(index=False))
    else:
        lines.append('No incident data available for trends visualization')
    fallback = sum(1 for point in snapshot.points if point.is_fallback)
    lines.append('')
    lines.append(f'Map points: {len(snapshot.points)} ({fallback} approximate)')
    return '\n'.join(lines)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Incident report analytics snapshot')
    parser.add_argument('--input', help='JSON file with a saved report list (skips the HTTP fetch)')
    parser.add_argument('--format', choices=['json', 'summary'], default='summary', help='Output format')
    parser.add_argument('--seed', type=int, default=None, help='Seed for approximate map coordinates')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main execution function: fetch (or load) reports and print a snapshot
    """
    args = _build_parser().parse_args(argv)

    try:
        config = AnalyticsConfig.from_env()
    except ConfigError as e:
        print(f'CRITICAL ERROR: fetch_reports : Config issue : {str(e)}', file=sys.stderr)
        return 1

    app_logger = setup_logger('incident_analytics', log_dir=config.log_dir, level=logging.INFO)

    try:
        if args.input:
            app_logger.info(f'Loading reports from {args.input}')
            reports = load_reports_file(args.input)
        else:
            app_logger.info(f'Fetching reports from {config.reports_url}')
            reports = ReportFetcher.from_config(config).fetch()

        rng = np.random.default_rng(args.seed)
        snapshot = ReportAnalyticsPipeline.from_config(config, rng=rng).run(reports)
    except IncidentAnalyticsError as e:
        app_logger.error(f'Snapshot could not be built: {str(e)}')
        return 1

    if args.format == 'json':
        print(json.dumps(snapshot.to_dict(), indent=2, default=str))
    else:
        print(render_summary(snapshot))
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
