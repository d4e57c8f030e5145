"""
ClaimService - Claim Orchestration

Input validation, achievement lookup, eligibility, advisory duplicate
check and authorization issuance for both chains.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from badger_claims.achievements.registry import AchievementRegistry
from badger_claims.eligibility.evaluator import EligibilityEvaluator
from badger_claims.eligibility.geo import is_valid_coordinate
from badger_claims.exceptions import (
    AlreadyAuthorizedError,
    BadgeClaimError,
    ConfigurationError,
    IneligibleError,
    NotFoundError,
    ValidationError,
)
from badger_claims.guards.claim_guard import ClaimGuard
from badger_claims.models.claim import ClaimAuthorization, ClaimContext
from badger_claims.monitoring.prometheus_metrics import track_claim, track_eligibility_failure
from badger_claims.services.authorization_service import AuthorizationIssuer
from badger_claims.utils.datetime_helpers import now_utc

logger = logging.getLogger(__name__)

# Exception type -> claims_total outcome label
OUTCOMES = (
    (ValidationError, "invalid"),
    (NotFoundError, "not_found"),
    (IneligibleError, "ineligible"),
    (AlreadyAuthorizedError, "duplicate"),
    (ConfigurationError, "misconfigured"),
)


def outcome_for(error: BadgeClaimError) -> str:
    for error_type, outcome in OUTCOMES:
        if isinstance(error, error_type):
            return outcome
    return "error"


def _coerce_coordinate(value: Any) -> Optional[float]:
    if value is None:
        return None
    # bool is an int subclass; reject it along with strings
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError("Invalid coordinates", field="coordinates", value=value)
    return float(value)


class ClaimService:
    """
    Service for claim requests.

    Responsibilities:
    - Reject malformed input before any work is done
    - Resolve the achievement and evaluate its rules
    - Refuse a second outstanding authorization (advisory)
    - Issue the signed authorization through the chain's issuer
    """

    def __init__(
        self,
        registry: AchievementRegistry,
        evaluator: EligibilityEvaluator,
        issuers: Dict[str, AuthorizationIssuer],
        claim_guard: Optional[ClaimGuard] = None,
        clock: Callable[[], datetime] = now_utc
    ):
        self.registry = registry
        self.evaluator = evaluator
        self.issuers = issuers
        self.claim_guard = claim_guard
        self.clock = clock
        logger.debug("ClaimService initialized")

    async def claim(
        self,
        chain: str,
        subject: Any,
        achievement_id: Any,
        lat: Any = None,
        lng: Any = None,
        event_code: Optional[str] = None,
        require_location: bool = False
    ) -> ClaimAuthorization:
        """
        Process a claim and return a signed authorization.

        Args:
            chain: Issuer key ("evm" or "solana")
            subject: Wallet address or public key as sent by the client
            achievement_id: Catalog id
            lat, lng: Claimant coordinates in decimal degrees
            event_code: Code for event achievements
            require_location: Reject the request when coordinates are missing

        Raises:
            ValidationError (400), NotFoundError (404), IneligibleError (403),
            AlreadyAuthorizedError (409), ConfigurationError / InternalError (500)
        """
        try:
            authorization = await self._claim(
                chain, subject, achievement_id, lat, lng, event_code, require_location
            )
        except BadgeClaimError as e:
            track_claim(chain, outcome_for(e))
            raise

        track_claim(chain, "authorized")
        return authorization

    async def _claim(
        self,
        chain: str,
        subject: Any,
        achievement_id: Any,
        lat: Any,
        lng: Any,
        event_code: Optional[str],
        require_location: bool
    ) -> ClaimAuthorization:
        issuer = self.issuers.get(chain)
        if issuer is None:
            raise ConfigurationError(f"No issuer configured for chain '{chain}'", operation="claim")

        subject = issuer.backend.normalize_subject(subject)

        if not achievement_id or not isinstance(achievement_id, str):
            raise ValidationError("Achievement ID is required", field="achievementId", value=achievement_id)

        lat = _coerce_coordinate(lat)
        lng = _coerce_coordinate(lng)
        if lat is None or lng is None:
            if require_location:
                raise ValidationError("Invalid coordinates", field="coordinates")
            lat = lng = None
        elif not is_valid_coordinate(lat, lng):
            raise ValidationError("Invalid coordinates", field="coordinates", value=[lat, lng])

        issuer.backend.require_ready()

        achievement = self.registry.get_by_id(achievement_id)

        context = ClaimContext(lat=lat, lng=lng, event_code=event_code, now=self.clock())
        result = await self.evaluator.evaluate(achievement, context)
        if not result.eligible:
            track_eligibility_failure(result.rule_type or "unknown")
            raise IneligibleError(
                result.reason,
                achievement_id=achievement.id,
                rule_type=result.rule_type,
                subject=subject,
                operation="claim"
            )

        authorization = await issuer.issue(subject, achievement)

        # Test badges may be minted repeatedly by the same wallet
        if self.claim_guard is not None and not achievement.is_test:
            await self.claim_guard.reserve(authorization.subject_address, achievement.id, authorization.deadline)

        return authorization
