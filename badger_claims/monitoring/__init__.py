"""Monitoring infrastructure for the claim service"""
from badger_claims.monitoring.sentry_config import init_sentry, capture_exception, set_request_context
from badger_claims.monitoring.prometheus_metrics import (
    metrics,
    track_request,
    track_claim,
    track_eligibility_failure,
    track_authorization_issued,
    track_nonce_collision,
    track_weather_lookup,
    track_retry,
)

__all__ = [
    "init_sentry",
    "capture_exception",
    "set_request_context",
    "metrics",
    "track_request",
    "track_claim",
    "track_eligibility_failure",
    "track_authorization_issued",
    "track_nonce_collision",
    "track_weather_lookup",
    "track_retry",
]
