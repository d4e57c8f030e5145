"""
Advisory claim guard

Refuses a second authorization for the same (subject, achievement) while an
earlier one is still unexpired. This is a courtesy pre-check: the
on-chain verifier's per-account claim record is the real authority, and
reservations lapse at the authorization deadline so an unminted claim can
be requested again.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Callable, Dict, Tuple

from redis.exceptions import RedisError

from badger_claims.exceptions import AlreadyAuthorizedError, wrap_external_exception
from badger_claims.guards.redis_client import RedisConnection
from badger_claims.utils.datetime_helpers import now_utc, unix_seconds

logger = logging.getLogger(__name__)

CLAIM_KEY_PREFIX = "badger:claim:"


class ClaimGuard(ABC):

    @abstractmethod
    async def reserve(self, subject: str, achievement_id: str, until: int) -> None:
        """
        Reserve the pair until the unix deadline `until`

        Raises:
            AlreadyAuthorizedError: If an unexpired reservation exists
        """

    async def close(self) -> None:
        return None


class InMemoryClaimGuard(ClaimGuard):

    def __init__(self, clock: Callable[[], int] = lambda: unix_seconds(now_utc())):
        self._reservations: Dict[Tuple[str, str], int] = {}
        self._lock = asyncio.Lock()
        self._clock = clock

    async def reserve(self, subject: str, achievement_id: str, until: int) -> None:
        key = (subject, achievement_id)
        async with self._lock:
            now = self._clock()
            self._prune(now)
            if key in self._reservations:
                raise AlreadyAuthorizedError(achievement_id, subject=subject, operation="reserve_claim")
            self._reservations[key] = until

    def _prune(self, now: int) -> None:
        expired = [key for key, expires in self._reservations.items() if expires < now]
        for key in expired:
            del self._reservations[key]

    def __len__(self) -> int:
        return len(self._reservations)


class RedisClaimGuard(ClaimGuard):
    """Reservations as `SET key 1 NX EXAT deadline`"""

    def __init__(self, connection: RedisConnection):
        self.connection = connection

    @staticmethod
    def key_for(subject: str, achievement_id: str) -> str:
        return f"{CLAIM_KEY_PREFIX}{subject}:{achievement_id}"

    async def reserve(self, subject: str, achievement_id: str, until: int) -> None:
        try:
            created = await self.connection.client.set(
                self.key_for(subject, achievement_id), "1", nx=True, exat=until
            )
        except RedisError as e:
            raise wrap_external_exception(e, operation="reserve_claim", subject=subject)

        if not created:
            raise AlreadyAuthorizedError(achievement_id, subject=subject, operation="reserve_claim")
