from __future__ import annotations

from flask import Blueprint, Response
from prometheus_client import Counter, generate_latest

metrics_blueprint = Blueprint("metrics_bp", __name__)

CONTENT_TYPE_LATEST = "text/plain; version=0.0.4; charset=utf-8"

UPSTREAM_CALLS = Counter(
    "artsyhub_upstream_calls_total",
    "Artsy API calls issued by the backend, by operation and outcome.",
    ["operation", "outcome"],
)
FAVORITE_CHANGES = Counter(
    "artsyhub_favorite_changes_total",
    "Favorite additions and removals.",
    ["action"],
)
ENRICHMENT_RESULTS = Counter(
    "artsyhub_favorite_enrichment_total",
    "Outcome of Artsy lookups used to backfill favorite details.",
    ["outcome"],
)
TOKEN_REFRESHES = Counter(
    "artsyhub_token_refreshes_total",
    "Artsy xapp token fetches, by outcome.",
    ["outcome"],
)
AUTH_EVENTS = Counter(
    "artsyhub_auth_events_total",
    "Registration, login and account deletion events.",
    ["event"],
)


def record_upstream_call(operation: str, outcome: str) -> None:
    UPSTREAM_CALLS.labels(operation=operation, outcome=outcome).inc()


def record_favorite_change(action: str) -> None:
    FAVORITE_CHANGES.labels(action=action).inc()


def record_enrichment(outcome: str) -> None:
    ENRICHMENT_RESULTS.labels(outcome=outcome).inc()


def record_token_refresh(outcome: str) -> None:
    TOKEN_REFRESHES.labels(outcome=outcome).inc()


def record_auth_event(event: str) -> None:
    AUTH_EVENTS.labels(event=event).inc()


@metrics_blueprint.route("/metrics")
def metrics_endpoint() -> Response:
    return Response(generate_latest(), mimetype=CONTENT_TYPE_LATEST)
