"""
Standardized exception hierarchy for the claim authorization service
Provides rich context, consistent logging, HTTP status mapping and
user-friendly error messages
"""

from datetime import datetime, timezone
from typing import Optional, Dict, Any
from uuid import uuid4
import logging

import httpx
import redis

logger = logging.getLogger(__name__)


class BadgeClaimError(Exception):
    """
    Base exception for all claim service errors

    Provides:
    - Automatic timestamping
    - Request ID for tracing
    - User-friendly messages
    - Structured context
    - HTTP status code for the API layer
    - Automatic logging

    Example:
        raise BadgeClaimError(
            message="Failed to sign authorization",
            subject="0xabc...",
            operation="issue_authorization",
            context={"achievement_id": "RAINY_DAY_2025"}
        )
    """

    status_code: int = 500
    log_level: int = logging.ERROR

    def __init__(
        self,
        message: str,
        subject: Optional[str] = None,
        request_id: Optional[str] = None,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        user_message: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.subject = subject
        self.request_id = request_id or str(uuid4())
        self.operation = operation
        self.context = context or {}
        self.cause = cause
        self.user_message = user_message or "An error occurred. Please try again."
        self.timestamp = datetime.now(timezone.utc)

        # Auto-log on creation
        self._log_error()

    def _log_error(self) -> None:
        """Log error with full context"""
        log_data = {
            "error_type": self.__class__.__name__,
            "error_message": self.message,  # Avoid conflict with logging's 'message' field
            "request_id": self.request_id,
            "subject": self.subject,
            "operation": self.operation,
            "error_context": self.context,
            "timestamp": self.timestamp.isoformat()
        }

        if self.cause:
            log_data["cause"] = str(self.cause)
            logger.log(
                self.log_level,
                f"{self.__class__.__name__}: {self.message}",
                extra=log_data,
                exc_info=self.cause
            )
        else:
            logger.log(self.log_level, f"{self.__class__.__name__}: {self.message}", extra=log_data)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize exception for API responses"""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "user_message": self.user_message,
            "request_id": self.request_id,
            "timestamp": self.timestamp.isoformat()
        }


# ==========================================
# Client Errors (Claim Input)
# ==========================================

class ValidationError(BadgeClaimError):
    """
    Raised when claim input fails validation

    Examples:
    - Invalid wallet address
    - Missing achievement ID
    - Non-numeric coordinates
    """

    status_code = 400
    log_level = logging.WARNING

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        **kwargs
    ):
        self.field = field
        self.value = value
        super().__init__(
            message=message,
            user_message=message,
            context={"field": field, "value": value},
            **kwargs
        )


class NotFoundError(BadgeClaimError):
    """Requested achievement does not exist"""

    status_code = 404
    log_level = logging.WARNING

    def __init__(
        self,
        message: str = "Achievement not found",
        record_type: Optional[str] = "Achievement",
        record_id: Optional[str] = None,
        **kwargs
    ):
        self.record_type = record_type
        self.record_id = record_id
        super().__init__(
            message=message,
            user_message=f"{record_type or 'Record'} not found",
            context={"record_type": record_type, "record_id": record_id},
            **kwargs
        )


class IneligibleError(BadgeClaimError):
    """An eligibility rule failed; the reason is shown to the claimant verbatim"""

    status_code = 403
    log_level = logging.INFO

    def __init__(
        self,
        reason: str,
        achievement_id: Optional[str] = None,
        rule_type: Optional[str] = None,
        **kwargs
    ):
        self.reason = reason
        self.achievement_id = achievement_id
        self.rule_type = rule_type
        super().__init__(
            message=reason,
            user_message=reason,
            context={"achievement_id": achievement_id, "rule_type": rule_type},
            **kwargs
        )


class AlreadyAuthorizedError(BadgeClaimError):
    """An unexpired authorization was already issued for this wallet and achievement"""

    status_code = 409
    log_level = logging.INFO

    def __init__(self, achievement_id: str, **kwargs):
        self.achievement_id = achievement_id
        super().__init__(
            message=f"Outstanding authorization exists for {achievement_id}",
            user_message=(
                "An authorization for this achievement was already issued to this wallet. "
                "Submit it on-chain or wait for it to expire."
            ),
            context={"achievement_id": achievement_id},
            **kwargs
        )


# ==========================================
# Configuration Errors
# ==========================================

class ConfigurationError(BadgeClaimError):
    """Signer, contract or program configuration is invalid or missing"""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        **kwargs
    ):
        self.config_key = config_key
        kwargs.setdefault("user_message", message)
        super().__init__(
            message=message,
            context={"config_key": config_key},
            **kwargs
        )


# ==========================================
# Replay / Verifier Errors
# ==========================================

class ReplayError(BadgeClaimError):
    """
    Base class for authorization redemption failures

    Raised by the verifier models with the same revert reason the deployed
    contract or program reports.
    """

    status_code = 409
    log_level = logging.WARNING
    revert_reason: str = "Authorization rejected"

    def __init__(self, message: Optional[str] = None, **kwargs):
        message = message or self.revert_reason
        kwargs.setdefault("user_message", message)
        super().__init__(message=message, **kwargs)


class SignatureExpiredError(ReplayError):
    """Authorization deadline has passed"""
    revert_reason = "Signature expired"


class NonceAlreadyUsedError(ReplayError):
    """Nonce was already issued or redeemed"""
    revert_reason = "Nonce already used"


class AlreadyClaimedError(ReplayError):
    """Subject already holds this achievement"""
    revert_reason = "Already claimed this achievement"


class InvalidSignatureError(ReplayError):
    """Signature does not verify against the registered signer"""
    revert_reason = "Invalid signature"


class MaxSupplyReachedError(ReplayError):
    """Test badge supply exhausted"""
    revert_reason = "Test NFT max supply reached"


class UnauthorizedError(ReplayError):
    """Admin operation attempted by a non-owner"""

    status_code = 403
    revert_reason = "Unauthorized: Only admin can perform this action"


# ==========================================
# Internal Errors
# ==========================================

class InternalError(BadgeClaimError):
    """Unexpected failure inside the service (nonce collision, store outage)"""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("user_message", "Internal server error")
        super().__init__(message=message, **kwargs)


# ==========================================
# External API Errors
# ==========================================

class ExternalAPIError(BadgeClaimError):
    """
    Base class for external API failures
    """

    status_code = 502

    def __init__(
        self,
        message: str,
        service: Optional[str] = None,
        status_code: Optional[int] = None,
        **kwargs
    ):
        self.service = service
        self.upstream_status = status_code
        kwargs.setdefault(
            "user_message",
            f"We're having trouble connecting to {service or 'an external service'}. Please try again later."
        )
        super().__init__(
            message=message,
            context={"service": service, "status_code": status_code},
            **kwargs
        )


class WeatherAPIError(ExternalAPIError):
    """Weather provider error"""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message=message,
            service="Weather provider",
            **kwargs
        )


# ==========================================
# Helper Functions
# ==========================================

def wrap_external_exception(
    error: Exception,
    operation: str,
    subject: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None
) -> BadgeClaimError:
    """
    Wrap external exceptions (httpx, redis, etc.) into our exception hierarchy

    Args:
        error: Original exception
        operation: What operation was being performed
        subject: Wallet or pubkey if applicable
        context: Additional context

    Returns:
        Appropriate BadgeClaimError subclass

    Example:
        try:
            await client.set(key, "1", nx=True)
        except redis.RedisError as e:
            raise wrap_external_exception(e, operation="mark_nonce_used")
    """
    # HTTP errors
    if isinstance(error, httpx.TimeoutException):
        return ExternalAPIError(
            message=f"API request timed out: {str(error)}",
            subject=subject,
            operation=operation,
            cause=error
        )
    elif isinstance(error, httpx.HTTPStatusError):
        return ExternalAPIError(
            message=f"API returned error: {error.response.status_code}",
            status_code=error.response.status_code,
            subject=subject,
            operation=operation,
            cause=error
        )

    # Store errors
    elif isinstance(error, redis.RedisError):
        return InternalError(
            message=f"Nonce store unavailable during {operation}: {str(error)}",
            subject=subject,
            operation=operation,
            context=context,
            cause=error
        )

    # Generic fallback
    else:
        return InternalError(
            message=f"{operation} failed: {str(error)}",
            subject=subject,
            operation=operation,
            context=context,
            cause=error
        )
