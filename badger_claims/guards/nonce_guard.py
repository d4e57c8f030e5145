"""
Nonce / replay guard

Every issued authorization carries a fresh 32-byte nonce that is recorded
before the authorization leaves the service. Check-and-mark is atomic, so
two concurrent requests can never be handed the same nonce.
"""

import asyncio
import logging
import secrets
from abc import ABC, abstractmethod
from typing import Optional, Set

from redis.exceptions import RedisError

from badger_claims.exceptions import NonceAlreadyUsedError, wrap_external_exception
from badger_claims.guards.redis_client import RedisConnection

logger = logging.getLogger(__name__)

NONCE_BYTES = 32
NONCE_KEY_PREFIX = "badger:nonce:"


class NonceGuard(ABC):
    """Issues nonces and remembers every nonce that was handed out"""

    def issue(self) -> bytes:
        """32 cryptographically random bytes"""
        return secrets.token_bytes(NONCE_BYTES)

    @abstractmethod
    async def mark_used(self, nonce: bytes) -> None:
        """
        Record the nonce

        Raises:
            NonceAlreadyUsedError: If the nonce was already recorded
        """

    @abstractmethod
    async def is_used(self, nonce: bytes) -> bool:
        ...

    async def close(self) -> None:
        return None


class InMemoryNonceGuard(NonceGuard):
    """
    Per-process nonce set

    State is lost on restart and not shared between workers; use
    RedisNonceGuard for anything beyond tests and local demos.
    """

    def __init__(self):
        self._used: Set[bytes] = set()
        self._lock = asyncio.Lock()
        logger.warning("Using in-memory nonce store - replay state is lost on restart")

    async def mark_used(self, nonce: bytes) -> None:
        async with self._lock:
            if nonce in self._used:
                raise NonceAlreadyUsedError(operation="mark_nonce_used")
            self._used.add(nonce)

    async def is_used(self, nonce: bytes) -> bool:
        async with self._lock:
            return nonce in self._used

    def __len__(self) -> int:
        return len(self._used)


class RedisNonceGuard(NonceGuard):
    """
    Durable nonce set shared by every worker

    `SET key 1 NX` is the atomic check-and-mark. Without a TTL the set grows
    monotonically; a TTL longer than the authorization lifetime is safe
    because the verifier rejects expired authorizations anyway.
    """

    def __init__(self, connection: RedisConnection, ttl_seconds: Optional[int] = None):
        self.connection = connection
        self.ttl_seconds = ttl_seconds

    @staticmethod
    def key_for(nonce: bytes) -> str:
        return f"{NONCE_KEY_PREFIX}{nonce.hex()}"

    async def mark_used(self, nonce: bytes) -> None:
        try:
            created = await self.connection.client.set(
                self.key_for(nonce), "1", nx=True, ex=self.ttl_seconds
            )
        except RedisError as e:
            raise wrap_external_exception(e, operation="mark_nonce_used")

        if not created:
            raise NonceAlreadyUsedError(operation="mark_nonce_used")

    async def is_used(self, nonce: bytes) -> bool:
        try:
            return bool(await self.connection.client.exists(self.key_for(nonce)))
        except RedisError as e:
            raise wrap_external_exception(e, operation="is_nonce_used")

    async def close(self) -> None:
        await self.connection.close()
