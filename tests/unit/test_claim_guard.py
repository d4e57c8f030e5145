"""Unit tests for the advisory claim guard"""
import pytest
from unittest.mock import AsyncMock, MagicMock

from badger_claims.exceptions import AlreadyAuthorizedError
from badger_claims.guards.claim_guard import InMemoryClaimGuard, RedisClaimGuard
from badger_claims.guards.redis_client import RedisConnection


@pytest.mark.asyncio
async def test_second_reservation_refused(clock):
    guard = InMemoryClaimGuard(clock=clock.unix)
    until = clock.unix() + 300

    await guard.reserve("0xAbC", "RAINY_DAY_2025", until)

    with pytest.raises(AlreadyAuthorizedError):
        await guard.reserve("0xAbC", "RAINY_DAY_2025", until)


@pytest.mark.asyncio
async def test_other_pairs_unaffected(clock):
    guard = InMemoryClaimGuard(clock=clock.unix)
    until = clock.unix() + 300

    await guard.reserve("0xabc", "RAINY_DAY_2025", until)
    await guard.reserve("0xabc", "SNOW_DAY_2025", until)
    await guard.reserve("0xdef", "RAINY_DAY_2025", until)


@pytest.mark.asyncio
async def test_reservation_lapses_after_deadline(clock):
    guard = InMemoryClaimGuard(clock=clock.unix)
    await guard.reserve("0xabc", "RAINY_DAY_2025", clock.unix() + 300)

    clock.advance(301)

    await guard.reserve("0xabc", "RAINY_DAY_2025", clock.unix() + 300)


@pytest.mark.asyncio
async def test_redis_reservation_uses_deadline():
    client = MagicMock()
    client.set = AsyncMock(return_value=True)
    guard = RedisClaimGuard(RedisConnection(client=client))

    await guard.reserve("0xAbC", "RAINY_DAY_2025", 1744740300)

    client.set.assert_awaited_once_with(
        "badger:claim:0xAbC:RAINY_DAY_2025", "1", nx=True, exat=1744740300
    )


@pytest.mark.asyncio
async def test_redis_existing_reservation():
    client = MagicMock()
    client.set = AsyncMock(return_value=None)
    guard = RedisClaimGuard(RedisConnection(client=client))

    with pytest.raises(AlreadyAuthorizedError):
        await guard.reserve("0xabc", "RAINY_DAY_2025", 1744740300)


@pytest.mark.asyncio
async def test_solana_keys_are_case_sensitive(clock):
    guard = InMemoryClaimGuard(clock=clock.unix)
    until = clock.unix() + 300

    await guard.reserve("AbCdEfGhJkLmNpQrStUvWxYz23456789", "RAINY_DAY_2025", until)
    await guard.reserve("abcdefGhJkLmNpQrStUvWxYz23456789", "RAINY_DAY_2025", until)


def test_redis_keys_keep_subject_case():
    assert RedisClaimGuard.key_for("AbCd", "RAINY_DAY_2025") != RedisClaimGuard.key_for("abcd", "RAINY_DAY_2025")


@pytest.mark.asyncio
async def test_expired_reservations_pruned(clock):
    guard = InMemoryClaimGuard(clock=clock.unix)
    await guard.reserve("0xabc", "RAINY_DAY_2025", clock.unix() + 300)
    await guard.reserve("0xdef", "SNOW_DAY_2025", clock.unix() + 300)

    clock.advance(301)
    await guard.reserve("0x123", "RAINY_DAY_2025", clock.unix() + 300)

    assert len(guard) == 1
