"""Replay protection: single-use nonces and advisory claim reservations"""

from badger_claims.guards.claim_guard import ClaimGuard, InMemoryClaimGuard, RedisClaimGuard
from badger_claims.guards.nonce_guard import InMemoryNonceGuard, NonceGuard, RedisNonceGuard
from badger_claims.guards.redis_client import RedisConnection

__all__ = [
    "ClaimGuard",
    "InMemoryClaimGuard",
    "RedisClaimGuard",
    "NonceGuard",
    "InMemoryNonceGuard",
    "RedisNonceGuard",
    "RedisConnection",
]
