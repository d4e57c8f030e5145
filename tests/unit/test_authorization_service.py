"""Unit tests for AuthorizationIssuer"""
import pytest
from unittest.mock import patch

import base58

from badger_claims.exceptions import ConfigurationError, InternalError, ValidationError
from badger_claims.guards.nonce_guard import InMemoryNonceGuard
from badger_claims.services.authorization_service import AuthorizationIssuer
from badger_claims.signing.backends import build_evm_backend
from badger_claims.signing.evm import achievement_key, claim_digest, recover_signer
from badger_claims.signing.solana import claim_message, decode_pubkey, verify_ed25519


@pytest.fixture
def evm_issuer(evm_backend, nonce_guard, clock):
    return AuthorizationIssuer(evm_backend, nonce_guard, ttl_seconds=300, clock=clock)


@pytest.fixture
def solana_issuer(solana_backend, nonce_guard, clock):
    return AuthorizationIssuer(solana_backend, nonce_guard, ttl_seconds=300, clock=clock)


class TestEvmIssue:

    @pytest.mark.asyncio
    async def test_issue_shape(self, evm_issuer, registry, user_wallet, clock):
        authorization = await evm_issuer.issue(user_wallet.lower(), registry.get_by_id("RAINY_DAY_2025"))

        assert authorization.subject_address == user_wallet
        assert authorization.achievement_id == "RAINY_DAY_2025"
        assert authorization.deadline == clock.unix() + 300
        assert authorization.nonce.startswith("0x") and len(authorization.nonce) == 66
        assert authorization.signature.startswith("0x") and len(authorization.signature) == 132
        assert authorization.chain == "evm"

    @pytest.mark.asyncio
    async def test_signature_recovers_to_backend_signer(
        self, evm_issuer, registry, user_wallet, contract_address, evm_signer_address
    ):
        authorization = await evm_issuer.issue(user_wallet, registry.get_by_id("RAINY_DAY_2025"))

        digest = claim_digest(
            user_wallet,
            achievement_key("RAINY_DAY_2025"),
            authorization.nonce_bytes,
            authorization.deadline,
            31337,
            contract_address
        )
        assert recover_signer(digest, authorization.signature_bytes) == evm_signer_address

    @pytest.mark.asyncio
    async def test_nonce_recorded_before_return(self, evm_issuer, nonce_guard, registry, user_wallet):
        authorization = await evm_issuer.issue(user_wallet, registry.get_by_id("TEST_BADGE"))
        assert await nonce_guard.is_used(authorization.nonce_bytes)

    @pytest.mark.asyncio
    async def test_signing_failure_leaves_no_nonce(self, evm_issuer, nonce_guard, registry, user_wallet):
        with patch.object(evm_issuer.backend.signer, "sign", side_effect=RuntimeError("hsm offline")):
            with pytest.raises(RuntimeError):
                await evm_issuer.issue(user_wallet, registry.get_by_id("TEST_BADGE"))

        assert len(nonce_guard) == 0

    @pytest.mark.asyncio
    async def test_fresh_nonce_every_time(self, evm_issuer, registry, user_wallet):
        achievement = registry.get_by_id("TEST_BADGE")
        nonces = {(await evm_issuer.issue(user_wallet, achievement)).nonce for _ in range(20)}
        assert len(nonces) == 20

    @pytest.mark.asyncio
    async def test_invalid_subject(self, evm_issuer, registry):
        with pytest.raises(ValidationError):
            await evm_issuer.issue("0x12", registry.get_by_id("TEST_BADGE"))

    @pytest.mark.asyncio
    async def test_unconfigured_backend_fails_closed(self, nonce_guard, registry, user_wallet, contract_address):
        issuer = AuthorizationIssuer(build_evm_backend("", "localhost", contract_address), nonce_guard)
        with pytest.raises(ConfigurationError):
            await issuer.issue(user_wallet, registry.get_by_id("TEST_BADGE"))
        assert len(nonce_guard) == 0


class TestNonceCollisions:

    @pytest.mark.asyncio
    async def test_collision_regenerates(self, evm_issuer, nonce_guard, registry, user_wallet):
        taken = b"\x11" * 32
        fresh = b"\x22" * 32
        await nonce_guard.mark_used(taken)

        with patch.object(InMemoryNonceGuard, "issue", side_effect=[taken, fresh]):
            authorization = await evm_issuer.issue(user_wallet, registry.get_by_id("TEST_BADGE"))

        assert authorization.nonce_bytes == fresh

    @pytest.mark.asyncio
    async def test_repeated_collision_fails(self, evm_issuer, nonce_guard, registry, user_wallet):
        taken = b"\x11" * 32
        await nonce_guard.mark_used(taken)

        with patch.object(InMemoryNonceGuard, "issue", return_value=taken):
            with pytest.raises(InternalError) as exc_info:
                await evm_issuer.issue(user_wallet, registry.get_by_id("TEST_BADGE"))

        assert exc_info.value.user_message == "Nonce collision, please retry"


class TestSolanaIssue:

    @pytest.mark.asyncio
    async def test_bare_hex_and_valid_signature(
        self, solana_issuer, registry, user_pubkey, program_id, solana_signer_pubkey
    ):
        authorization = await solana_issuer.issue(user_pubkey, registry.get_by_id("TEST_BADGE"))

        assert not authorization.nonce.startswith("0x")
        assert len(authorization.nonce) == 64
        assert len(authorization.signature) == 128

        message = claim_message(
            user_pubkey,
            "TEST_BADGE",
            authorization.nonce_bytes,
            authorization.deadline,
            decode_pubkey(program_id)
        )
        assert verify_ed25519(
            base58.b58decode(solana_signer_pubkey), message, authorization.signature_bytes
        )

    @pytest.mark.asyncio
    async def test_invalid_pubkey(self, solana_issuer, registry):
        with pytest.raises(ValidationError) as exc_info:
            await solana_issuer.issue("not-a-key", registry.get_by_id("TEST_BADGE"))
        assert exc_info.value.user_message == "Invalid user public key"
