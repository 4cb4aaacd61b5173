"""Furnishop storefront load testing: Locust entry point.

Seed a catalogue first and export the variant ids it prints:

    python src/manage.py seed-catalogue
    export LOADTEST_VARIANT_IDS=<comma separated ids>

Usage:
    # Web UI:
    locust -f loadtests/locustfile.py --host http://localhost:8000

    # Headless (CI mode):
    locust -f loadtests/locustfile.py StorefrontUser --headless \
           -u 50 -r 5 -t 300s --csv=results/loadtest
"""

import logging
import time

import requests
from locust import events

from loadtests.data_generators import seeded_variant_ids
from loadtests.helpers.response import extract_error_detail
from loadtests.scenarios.storefront import StorefrontUser  # noqa: F401

logger = logging.getLogger("loadtest")


@events.request.add_listener
def on_request(request_type, name, response, exception, **_kw):
    """Log the API error body for every failed request."""
    if exception:
        logger.error("[EXCEPTION] %s %s: %s", request_type, name, exception)
    elif response is not None and response.status_code >= 400:
        detail = extract_error_detail(response)
        logger.error("[%s] %s %s: %s", response.status_code, request_type, name, detail)


@events.test_start.add_listener
def on_test_start(environment, **_kwargs):
    print(f"\n[LOADTEST] Started at {time.strftime('%H:%M:%S')}")
    print(f"[LOADTEST] Target host: {environment.host}")
    variant_count = len(seeded_variant_ids())
    if not variant_count:
        print("[LOADTEST] LOADTEST_VARIANT_IDS is empty; journeys will stop immediately")
    else:
        print(f"[LOADTEST] Seeded variants: {variant_count}")
    print()


@events.test_stop.add_listener
def on_test_stop(environment, **_kwargs):
    print(f"\n[LOADTEST] Stopped at {time.strftime('%H:%M:%S')}")
    if not environment.host:
        return
    try:
        resp = requests.get(f"{environment.host.rstrip('/')}/health", timeout=5)
        print(f"[LOADTEST] Health after run: {resp.status_code} {resp.text[:200]}\n")
    except requests.RequestException as e:
        print(f"[LOADTEST] Health check failed: {e}\n")
