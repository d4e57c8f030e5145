"""Resilience patterns for external provider calls"""

from badger_claims.resilience.retry import retry_with_backoff, with_retry, is_retryable_error

__all__ = [
    "retry_with_backoff",
    "with_retry",
    "is_retryable_error",
]
