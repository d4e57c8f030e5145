"""Prometheus metrics definitions and helpers"""
import logging
import time
from contextlib import contextmanager

from prometheus_client import Counter, Histogram

from badger_claims.config import ENABLE_PROMETHEUS

logger = logging.getLogger(__name__)


class PrometheusMetrics:
    """Container for all Prometheus metrics"""

    def __init__(self, enabled: bool = ENABLE_PROMETHEUS):
        if not enabled:
            logger.info("Prometheus metrics disabled")
            self._enabled = False
            return

        try:
            # HTTP Request Metrics
            self.http_requests_total = Counter(
                'http_requests_total',
                'Total HTTP requests',
                ['method', 'endpoint', 'status']
            )

            self.http_request_duration_seconds = Histogram(
                'http_request_duration_seconds',
                'HTTP request latency',
                ['method', 'endpoint'],
                buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0]
            )

            self.http_errors_total = Counter(
                'http_errors_total',
                'Total HTTP errors',
                ['method', 'endpoint', 'error_type']
            )

            # Claim Metrics
            self.claims_total = Counter(
                'claims_total',
                'Claim requests by chain and outcome',
                ['chain', 'outcome']
            )

            self.eligibility_failures_total = Counter(
                'eligibility_failures_total',
                'Ineligible claims by rule type',
                ['rule_type']
            )

            self.authorizations_issued_total = Counter(
                'authorizations_issued_total',
                'Signed claim authorizations issued',
                ['chain']
            )

            self.nonce_collisions_total = Counter(
                'nonce_collisions_total',
                'Generated nonces that were already recorded'
            )

            # External provider Metrics
            self.weather_lookups_total = Counter(
                'weather_lookups_total',
                'Weather oracle lookups by result',
                ['status']
            )

            self.retries_total = Counter(
                'retries_total',
                'Retried external calls',
                ['operation']
            )

            self._enabled = True
            logger.info("Prometheus metrics initialized")

        except Exception as e:
            logger.error(f"Failed to initialize Prometheus metrics: {e}", exc_info=True)
            self._enabled = False

    @property
    def enabled(self) -> bool:
        """Check if metrics are enabled"""
        return self._enabled


# Global metrics instance
metrics = PrometheusMetrics()


@contextmanager
def track_request(method: str, endpoint: str):
    """
    Track HTTP request metrics

    The caller may update `status` and `endpoint` on the yielded dict once
    the response is known.
    """
    result = {"status": 500, "endpoint": endpoint}
    if not metrics.enabled:
        yield result
        return

    start_time = time.time()

    try:
        yield result
    except Exception as e:
        metrics.http_errors_total.labels(
            method=method,
            endpoint=result["endpoint"],
            error_type=type(e).__name__
        ).inc()
        raise
    finally:
        duration = time.time() - start_time
        metrics.http_request_duration_seconds.labels(
            method=method,
            endpoint=result["endpoint"]
        ).observe(duration)

        metrics.http_requests_total.labels(
            method=method,
            endpoint=result["endpoint"],
            status=result["status"]
        ).inc()


def track_claim(chain: str, outcome: str):
    """Track a finished claim request (outcome: authorized, ineligible, not_found, ...)"""
    if not metrics.enabled:
        return
    metrics.claims_total.labels(chain=chain, outcome=outcome).inc()


def track_eligibility_failure(rule_type: str):
    if not metrics.enabled:
        return
    metrics.eligibility_failures_total.labels(rule_type=rule_type).inc()


def track_authorization_issued(chain: str):
    if not metrics.enabled:
        return
    metrics.authorizations_issued_total.labels(chain=chain).inc()


def track_nonce_collision():
    if not metrics.enabled:
        return
    metrics.nonce_collisions_total.inc()


def track_weather_lookup(status: str):
    """Track weather oracle result (match, mismatch, error, timeout, unsupported)"""
    if not metrics.enabled:
        return
    metrics.weather_lookups_total.labels(status=status).inc()


def track_retry(operation: str):
    if not metrics.enabled:
        return
    metrics.retries_total.labels(operation=operation).inc()
