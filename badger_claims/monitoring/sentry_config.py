"""Sentry configuration and helpers"""
import logging
from typing import Any

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration

from badger_claims.config import ENABLE_SENTRY, SENTRY_DSN, SENTRY_ENVIRONMENT, SENTRY_TRACES_SAMPLE_RATE

logger = logging.getLogger(__name__)


def init_sentry() -> bool:
    """
    Initialize Sentry SDK with FastAPI integration

    Returns:
        True if Sentry was initialized
    """
    if not ENABLE_SENTRY:
        logger.info("Sentry monitoring disabled")
        return False

    if not SENTRY_DSN:
        logger.warning("Sentry enabled but SENTRY_DSN not configured")
        return False

    try:
        sentry_sdk.init(
            dsn=SENTRY_DSN,
            environment=SENTRY_ENVIRONMENT,
            traces_sample_rate=SENTRY_TRACES_SAMPLE_RATE,
            integrations=[
                FastApiIntegration(transaction_style="endpoint"),
                LoggingIntegration(
                    level=logging.INFO,
                    event_level=logging.ERROR
                ),
            ],
            # Signing keys never leave the process; keep request bodies out too
            send_default_pii=False,
        )

        logger.info(
            f"Sentry initialized: environment={SENTRY_ENVIRONMENT}, "
            f"sample_rate={SENTRY_TRACES_SAMPLE_RATE}"
        )
        return True
    except Exception as e:
        logger.error(f"Failed to initialize Sentry: {e}", exc_info=True)
        return False


def set_request_context(request_id: str, operation: str) -> None:
    """Set request context for Sentry events"""
    if not ENABLE_SENTRY:
        return

    try:
        sentry_sdk.set_tag("request_id", request_id)
        sentry_sdk.set_tag("operation", operation)
    except Exception as e:
        logger.error(f"Failed to set request context: {e}")


def capture_exception(exception: Exception, **extra_context: Any) -> None:
    """Capture exception with custom context"""
    if not ENABLE_SENTRY:
        return

    try:
        for key, value in extra_context.items():
            sentry_sdk.set_tag(key, str(value))

        sentry_sdk.capture_exception(exception)
    except Exception as e:
        logger.error(f"Failed to capture exception in Sentry: {e}")
