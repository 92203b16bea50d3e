"""Health / diagnostics endpoints.

  * GET /health          -> Combined status + uptime summary.
  * GET /health/live     -> Always 200 while the process serves requests.
  * GET /health/ready    -> 200 only if the Redis store answers PING.
"""

from __future__ import annotations

import time
from typing import Dict, Any, Tuple
from flask import Blueprint, current_app, jsonify
from util.route_builder import RouteBuilder
from util.store import StoreError

START_TIME = time.time()

bp = Blueprint("health", __name__)
__all__ = ["bp"]


def _uptime_payload() -> Dict[str, Any]:
    now = time.time()
    uptime_s = int(now - START_TIME)
    return {
        "uptimeSeconds": uptime_s,
        "processStart": int(START_TIME),
        "now": int(now),
    }


def _check_store() -> Tuple[bool, Dict[str, str]]:
    store = current_app.extensions.get("user_store")
    if store is None:
        return False, {"redis": "unconfigured"}
    try:
        store.ping()
    except StoreError as e:
        current_app.logger.warning("Readiness check failed: %r", e.__cause__)
        return False, {"redis": f"error:{type(e.__cause__).__name__}"}
    return True, {"redis": "ok"}


def health():
    """Aggregate liveness + readiness + uptime in one call."""
    ready_ok, checks = _check_store()
    status = "ok" if ready_ok else "degraded"
    payload = {"status": status, "live": "ok", "ready": ready_ok, "checks": checks, **_uptime_payload()}
    return jsonify(payload), (200 if ready_ok else 503)


def liveness():  # no external calls
    return jsonify({"status": "ok", **_uptime_payload()})


def readiness():
    ready_ok, checks = _check_store()
    code = 200 if ready_ok else 503
    return jsonify({"status": "ok" if ready_ok else "degraded", "ready": ready_ok, "checks": checks}), code


RouteBuilder(bp) \
    .route("/health") \
    .methods("GET") \
    .handler(health) \
    .build()

RouteBuilder(bp) \
    .route("/health/live") \
    .methods("GET") \
    .handler(liveness) \
    .build()

RouteBuilder(bp) \
    .route("/health/ready") \
    .methods("GET") \
    .handler(readiness) \
    .build()
