#!/usr/bin/env python3
"""Smoke-check an analytics snapshot for a saved report list.

Runs the pipeline over a JSON report file, checks the count invariants and
prints the monthly trend table as CSV to stdout.

Usage:
    python scripts/smoke_summary.py path/to/reports.json
"""
from pathlib import Path
import sys

import numpy as np

ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT / 'src'
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from incident_analytics.data.fetch_reports import load_reports_file
from incident_analytics.pipeline import build_snapshot
from incident_analytics.utils.exceptions import IncidentAnalyticsError


def check_snapshot(snapshot, n_reports):
    problems = []
    stats = snapshot.statistics
    if stats.total_reports != n_reports:
        problems.append(f'total_reports={stats.total_reports} but {n_reports} reports were given')
    if stats.verified_reports + stats.pending_reports != stats.total_reports:
        problems.append('verified + pending != total')
    if sum(b.total for b in snapshot.trends) != stats.total_reports:
        problems.append('trend totals do not add up to total_reports')
    for bucket in snapshot.trends:
        if bucket.verified + bucket.pending != bucket.total:
            problems.append(f'{bucket.month_key}: verified + pending != total')
    keys = [b.month_key for b in snapshot.trends]
    if keys != sorted(set(keys)):
        problems.append('trend months are not strictly ascending')
    if len(snapshot.points) != n_reports:
        problems.append(f'{len(snapshot.points)} map points for {n_reports} reports')
    return problems


def main():
    if len(sys.argv) < 2:
        print('Usage: smoke_summary.py REPORTS_JSON', file=sys.stderr)
        return 2
    try:
        reports = load_reports_file(sys.argv[1])
    except IncidentAnalyticsError as e:
        print(str(e), file=sys.stderr)
        return 1
    if not reports:
        print('No reports found; nothing to report.', file=sys.stderr)
        return 2

    snapshot = build_snapshot(reports, rng=np.random.default_rng(0))
    problems = check_snapshot(snapshot, len(reports))
    for problem in problems:
        print('FAIL:', problem, file=sys.stderr)

    print(snapshot.trends_frame().to_csv(index=False), end='')
    return 1 if problems else 0

if __name__ == '__main__':
    raise SystemExit(main())
