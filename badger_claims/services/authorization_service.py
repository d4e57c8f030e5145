"""
AuthorizationIssuer - Signed Claim Authorizations

Turns an eligible claim into a single-use, time-bounded authorization the
chain verifier accepts exactly once.
"""

import logging
from datetime import datetime
from typing import Callable

from badger_claims.exceptions import InternalError, NonceAlreadyUsedError
from badger_claims.guards.nonce_guard import NonceGuard
from badger_claims.models.achievement import Achievement
from badger_claims.models.claim import ClaimAuthorization
from badger_claims.monitoring.prometheus_metrics import track_authorization_issued, track_nonce_collision
from badger_claims.signing.backends import ChainBackend
from badger_claims.utils.datetime_helpers import now_utc, unix_seconds

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300
MAX_NONCE_ATTEMPTS = 2


class AuthorizationIssuer:
    """
    Issues authorizations for one chain backend.

    Responsibilities:
    - Fresh nonce per authorization, recorded before it is returned
    - Deadline of now + ttl (unix seconds)
    - Canonical message via the backend encoder, signed by the backend signer
    """

    def __init__(
        self,
        backend: ChainBackend,
        nonce_guard: NonceGuard,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        clock: Callable[[], datetime] = now_utc
    ):
        self.backend = backend
        self.nonce_guard = nonce_guard
        self.ttl_seconds = ttl_seconds
        self.clock = clock

    async def issue(self, subject: str, achievement: Achievement) -> ClaimAuthorization:
        """
        Sign an authorization for `subject` to mint `achievement`.

        Args:
            subject: Wallet address or public key (validated by the backend)
            achievement: Achievement the subject was found eligible for

        Returns:
            ClaimAuthorization with hex nonce and signature

        Raises:
            ConfigurationError: Signer or verifier not configured
            ValidationError: Malformed subject
            InternalError: Nonce collision on every attempt
        """
        self.backend.require_ready()
        encoder = self.backend.encoder
        signer = self.backend.signer

        subject = encoder.normalize_subject(subject)
        deadline = unix_seconds(self.clock()) + self.ttl_seconds

        for attempt in range(MAX_NONCE_ATTEMPTS):
            nonce = self.nonce_guard.issue()
            message = encoder.encode(subject, achievement, nonce, deadline)
            signature = signer.sign(message)

            # Recorded only once the authorization is fully built
            try:
                await self.nonce_guard.mark_used(nonce)
            except NonceAlreadyUsedError:
                track_nonce_collision()
                logger.warning(f"Nonce collision on attempt {attempt + 1}, regenerating")
                continue

            track_authorization_issued(self.backend.name)
            logger.info(
                f"Authorization issued: chain={self.backend.name} achievement={achievement.id} "
                f"subject={subject} deadline={deadline}"
            )
            return ClaimAuthorization(
                achievement_id=achievement.id,
                subject_address=subject,
                nonce=self._hex(nonce),
                deadline=deadline,
                signature=self._hex(signature),
                chain=self.backend.name,
            )

        raise InternalError(
            "Nonce collision, please retry",
            subject=subject,
            operation="issue_authorization",
            user_message="Nonce collision, please retry"
        )

    def _hex(self, value: bytes) -> str:
        # EVM clients expect 0x-prefixed hex; the Solana client takes bare hex
        if self.backend.name == "evm":
            return "0x" + value.hex()
        return value.hex()
