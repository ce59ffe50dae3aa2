#!/usr/bin/env python3
"""
Statistics Cache Warmer
=======================

Precomputes the statistics a safety dashboard asks for on first load, so the
first viewer after a deploy, a restart or a bulk seed does not pay for the
aggregation queries. Entries stay warm until their TTL runs out or the next
violation create/delete evicts them.

Besides the fixed dashboard/time-series/ranking views, the per-employee
stats of the current top violators are warmed: those are the rows a
specialist clicks into from the ranking table.

    python -m scripts.warm_cache --base-url http://127.0.0.1:5001 --employees 10
"""

import argparse
import json
import sys
import time
import urllib.request
from concurrent.futures import ThreadPoolExecutor
from typing import List, NamedTuple

DEFAULT_BASE_URL = "http://127.0.0.1:5001"

STATIC_ENDPOINTS = [
    "/api/statistics/dashboard",
    "/api/statistics/time-series?days=7",
    "/api/statistics/time-series?days=30",
    "/api/statistics/ranking?limit=5",
    "/api/statistics/ranking?limit=10",
]

REQUEST_TIMEOUT_SECONDS = 30


class WarmResult(NamedTuple):
    endpoint: str
    seconds: float
    ok: bool


def _open(base_url: str, endpoint: str):
    req = urllib.request.Request(f"{base_url}{endpoint}")
    req.add_header("User-Agent", "ppe-safety-cache-warmer")
    return urllib.request.urlopen(req, timeout=REQUEST_TIMEOUT_SECONDS)


def warm_endpoint(base_url: str, endpoint: str) -> WarmResult:
    """Request one statistics view and report whether it answered 200."""
    started = time.perf_counter()
    ok = False
    try:
        with _open(base_url, endpoint) as resp:
            resp.read()
            ok = resp.status == 200
    except OSError as e:
        print(f"  {endpoint}: {e}", file=sys.stderr)
    return WarmResult(endpoint, time.perf_counter() - started, ok)


def top_violator_endpoints(base_url: str, count: int) -> List[str]:
    """
    Employee stats endpoints for the current top violators.

    Reads the monthly ranking; an unreachable server or an unexpected body
    yields no endpoints, and the static views are still warmed.
    """
    if count <= 0:
        return []
    try:
        with _open(base_url, f"/api/statistics/ranking?limit={count}") as resp:
            body = json.loads(resp.read())
        ranked = body["data"]["topViolators"]
    except (OSError, ValueError, KeyError, TypeError) as e:
        print(f"  could not read ranking: {e}", file=sys.stderr)
        return []
    return [f"/api/statistics/employee/{entry['employeeId']}" for entry in ranked]


def warm_all(base_url: str, endpoints: List[str], workers: int = 4) -> List[WarmResult]:
    with ThreadPoolExecutor(max_workers=workers) as executor:
        return list(executor.map(lambda ep: warm_endpoint(base_url, ep), endpoints))


def main():
    parser = argparse.ArgumentParser(description='Precompute dashboard statistics on a running server')
    parser.add_argument('--base-url', default=DEFAULT_BASE_URL, help='API base URL')
    parser.add_argument('--employees', type=int, default=10,
                        help='Also warm stats for this many top violators (0 to skip)')
    args = parser.parse_args()

    endpoints = STATIC_ENDPOINTS + top_violator_endpoints(args.base_url, args.employees)
    print(f"Warming {len(endpoints)} statistics views on {args.base_url}")

    results = warm_all(args.base_url, endpoints)
    for result in results:
        print(f"  {'ok  ' if result.ok else 'FAIL'} {result.seconds:6.2f}s  {result.endpoint}")

    failed = [r for r in results if not r.ok]
    print(f"{len(results) - len(failed)}/{len(results)} views warm")
    if failed:
        sys.exit(1)


if __name__ == "__main__":
    main()
