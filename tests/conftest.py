"""Global test fixtures and utilities for claim service tests"""
import asyncio
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple

import base58
import httpx
import pytest
from eth_account import Account
from nacl.signing import SigningKey

from badger_claims.achievements.registry import load_default_registry
from badger_claims.api.middleware import limiter
from badger_claims.eligibility.event_codes import EventCodeRegistry
from badger_claims.eligibility.weather import WeatherOracle
from badger_claims.guards.claim_guard import InMemoryClaimGuard
from badger_claims.guards.nonce_guard import InMemoryNonceGuard
from badger_claims.services.container import ServiceContainer
from badger_claims.signing.backends import build_evm_backend, build_solana_backend
from badger_claims.utils.datetime_helpers import unix_seconds
from badger_claims.verifier.evm import EvmAchievementsVerifier
from badger_claims.verifier.solana import SolanaAchievementsVerifier


# ============================================================================
# Keys & Addresses
# ============================================================================

EVM_SIGNER_KEY = "0x" + "4c" * 32
CONTRACT_ADDRESS = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
CONTRACT_OWNER_KEY = "0x" + "0a" * 32
USER_KEY = "0x" + "2b" * 32

SOLANA_SIGNER_SEED = bytes(range(1, 33))
PROGRAM_ID = base58.b58encode(bytes([7] * 32)).decode()
USER_SEED = bytes([9] * 32)

# 13:00 in Madison (CDT), a weekday afternoon
FIXED_NOW = datetime(2025, 4, 15, 18, 0, 0, tzinfo=timezone.utc)

# Inside the Madison bounding box
MADISON = (43.07, -89.40)
MORGRIDGE = (43.0722, -89.4050)


@pytest.fixture
def evm_signer_key():
    return EVM_SIGNER_KEY


@pytest.fixture
def evm_signer_address():
    return Account.from_key(EVM_SIGNER_KEY).address


@pytest.fixture
def contract_address():
    return CONTRACT_ADDRESS


@pytest.fixture
def owner_address():
    return Account.from_key(CONTRACT_OWNER_KEY).address


@pytest.fixture
def user_wallet():
    return Account.from_key(USER_KEY).address


@pytest.fixture
def solana_signer_secret():
    """base58 of the 64-byte secret key (seed || pubkey), as solana-keygen writes it"""
    key = SigningKey(SOLANA_SIGNER_SEED)
    return base58.b58encode(SOLANA_SIGNER_SEED + bytes(key.verify_key)).decode()


@pytest.fixture
def solana_signer_pubkey():
    return base58.b58encode(bytes(SigningKey(SOLANA_SIGNER_SEED).verify_key)).decode()


@pytest.fixture
def program_id():
    return PROGRAM_ID


@pytest.fixture
def user_pubkey():
    return base58.b58encode(bytes(SigningKey(USER_SEED).verify_key)).decode()


@pytest.fixture
def madison():
    return MADISON


@pytest.fixture
def morgridge():
    return MORGRIDGE


# ============================================================================
# Clock & Weather Doubles
# ============================================================================

class FrozenClock:
    """Settable clock shared by the service and the verifier models"""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def unix(self) -> int:
        return unix_seconds(self.now)

    def advance(self, seconds: int) -> None:
        self.now = self.now + timedelta(seconds=seconds)


class FakeWeatherOracle(WeatherOracle):
    """Answers every supported condition with `holds`, or raises `error`"""

    def __init__(
        self,
        holds: bool = True,
        error: Optional[Exception] = None,
        delay: float = 0.0,
        unsupported: Tuple[str, ...] = ("aurora",)
    ):
        self.holds = holds
        self.error = error
        self.delay = delay
        self.unsupported = unsupported
        self.calls: List[Tuple[str, float, float]] = []

    def supports(self, condition: str) -> bool:
        return condition not in self.unsupported

    async def check(self, condition, lat, lng, when):
        self.calls.append((condition, lat, lng))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.holds


@pytest.fixture
def clock():
    return FrozenClock(FIXED_NOW)


@pytest.fixture
def weather_oracle():
    return FakeWeatherOracle(holds=True)


# ============================================================================
# Services
# ============================================================================

@pytest.fixture
def registry():
    return load_default_registry()


@pytest.fixture
def evm_backend(evm_signer_key, contract_address):
    return build_evm_backend(evm_signer_key, "localhost", contract_address)


@pytest.fixture
def solana_backend(solana_signer_secret, program_id):
    return build_solana_backend(solana_signer_secret, "devnet", program_id)


@pytest.fixture
def nonce_guard():
    return InMemoryNonceGuard()


@pytest.fixture
def container(registry, evm_backend, solana_backend, nonce_guard, weather_oracle, clock):
    """Fully configured container with in-memory guards and a frozen clock"""
    return ServiceContainer(
        registry=registry,
        backends={"evm": evm_backend, "solana": solana_backend},
        nonce_guard=nonce_guard,
        claim_guard=InMemoryClaimGuard(clock=clock.unix),
        weather_oracle=weather_oracle,
        event_codes=EventCodeRegistry(),
        clock=clock,
    )


@pytest.fixture
def evm_verifier(evm_signer_address, contract_address, owner_address, clock):
    return EvmAchievementsVerifier(
        evm_signer_address, 31337, contract_address, owner=owner_address, clock=clock.unix
    )


@pytest.fixture
def solana_verifier(solana_signer_pubkey, program_id, clock):
    return SolanaAchievementsVerifier(
        solana_signer_pubkey, program_id, authority="authority", clock=clock.unix
    )


# ============================================================================
# API
# ============================================================================

@pytest.fixture(autouse=True)
def reset_rate_limits():
    """Rate limit counters are process-global; start every test from zero"""
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture
def app(container):
    from badger_claims.api.server import create_api_application
    return create_api_application(container)


@pytest.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


@pytest.fixture
def fake_weather():
    """Factory for weather doubles with custom behavior"""
    return FakeWeatherOracle
