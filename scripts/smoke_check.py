"""Smoke check against a running schedule proxy.

Requests the same schedule twice; the second response should come from the
cache (same body, much faster). Also checks that a request without ``value``
is rejected with 400.

Run with: python scripts/smoke_check.py
Custom:   python scripts/smoke_check.py --base-url http://localhost:3000 --type group --value 501
"""

import argparse
import os
import sys
import time

import requests
from dotenv import load_dotenv

load_dotenv()

DEFAULT_BASE_URL = os.environ.get(
    "SCHEDULE_PROXY_URL", f"http://localhost:{os.environ.get('PORT', '3000')}"
)


def timed_get(base_url, params):
    """GET /api/schedule, returning (response, elapsed seconds)."""
    start = time.perf_counter()
    resp = requests.get(f"{base_url}/api/schedule", params=params, timeout=30)
    return resp, time.perf_counter() - start


def main():
    parser = argparse.ArgumentParser(description="Smoke check a running schedule proxy")
    parser.add_argument("--base-url", default=DEFAULT_BASE_URL)
    parser.add_argument("--type", default="group")
    parser.add_argument("--value", default="501")
    args = parser.parse_args()

    params = {"type": args.type, "value": args.value}
    failures = 0

    first, first_elapsed = timed_get(args.base_url, params)
    print(f"first:  {first.status_code} in {first_elapsed:.2f}s")
    second, second_elapsed = timed_get(args.base_url, params)
    print(f"second: {second.status_code} in {second_elapsed:.2f}s")

    if first.status_code != 200 or second.status_code != 200:
        print(f"  FAIL: expected 200, body: {second.text[:200]}")
        failures += 1
    elif first.content != second.content:
        print("  FAIL: cached response differs from the first response")
        failures += 1

    bad, _ = timed_get(args.base_url, {"type": args.type})
    print(f"missing value: {bad.status_code} {bad.text}")
    if bad.status_code != 400:
        print("  FAIL: expected 400")
        failures += 1

    print("OK" if not failures else f"{failures} check(s) failed")
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
