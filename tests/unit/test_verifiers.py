"""Unit tests for the in-memory contract and program models"""
import pytest
from eth_account import Account

from badger_claims.exceptions import (
    AlreadyClaimedError,
    InvalidSignatureError,
    MaxSupplyReachedError,
    NonceAlreadyUsedError,
    SignatureExpiredError,
    UnauthorizedError,
)
from badger_claims.signing.evm import TEST_NFT_MARKER, EvmSigner, achievement_key, claim_digest
from badger_claims.verifier.evm import TEST_TOKEN_ID_START, EvmAchievementsVerifier
from badger_claims.verifier.solana import SolanaAchievementsVerifier
from badger_claims.signing.solana import Ed25519Signer, claim_message, decode_pubkey

RAINY = achievement_key("RAINY_DAY_2025")


@pytest.fixture
def evm_signer(evm_signer_key):
    return EvmSigner(evm_signer_key)


@pytest.fixture
def sign_evm(evm_signer, contract_address):
    def sign(to, key, nonce, deadline, chain_id=31337, contract=contract_address):
        return evm_signer.sign(claim_digest(to, key, nonce, deadline, chain_id, contract))
    return sign


class TestEvmVerifier:

    def test_mint_achievement(self, evm_verifier, sign_evm, user_wallet, clock):
        deadline = clock.unix() + 300
        nonce = b"\x01" * 32

        event = evm_verifier.mint_achievement(user_wallet, RAINY, nonce, deadline, sign_evm(user_wallet, RAINY, nonce, deadline))

        assert event.name == "AchievementMinted"
        assert event.token_id == int.from_bytes(RAINY, "big")
        assert evm_verifier.has_achievement(user_wallet, RAINY)
        assert evm_verifier.balance_of(user_wallet, event.token_id) == 1
        assert evm_verifier.get_achievement_key(event.token_id) == RAINY

    def test_expired(self, evm_verifier, sign_evm, user_wallet, clock):
        deadline = clock.unix() - 1
        nonce = b"\x01" * 32
        with pytest.raises(SignatureExpiredError):
            evm_verifier.mint_achievement(user_wallet, RAINY, nonce, deadline, sign_evm(user_wallet, RAINY, nonce, deadline))

    def test_deadline_inclusive(self, evm_verifier, sign_evm, user_wallet, clock):
        deadline = clock.unix()
        nonce = b"\x01" * 32
        evm_verifier.mint_achievement(user_wallet, RAINY, nonce, deadline, sign_evm(user_wallet, RAINY, nonce, deadline))

    def test_nonce_replay(self, evm_verifier, sign_evm, user_wallet, clock):
        deadline = clock.unix() + 300
        nonce = b"\x01" * 32
        evm_verifier.mint_test_nft(user_wallet, nonce, deadline, sign_evm(user_wallet, TEST_NFT_MARKER, nonce, deadline))

        with pytest.raises(NonceAlreadyUsedError):
            evm_verifier.mint_achievement(user_wallet, RAINY, nonce, deadline, sign_evm(user_wallet, RAINY, nonce, deadline))

    def test_already_claimed(self, evm_verifier, sign_evm, user_wallet, clock):
        deadline = clock.unix() + 300
        first, second = b"\x01" * 32, b"\x02" * 32
        evm_verifier.mint_achievement(user_wallet, RAINY, first, deadline, sign_evm(user_wallet, RAINY, first, deadline))

        with pytest.raises(AlreadyClaimedError):
            evm_verifier.mint_achievement(user_wallet, RAINY, second, deadline, sign_evm(user_wallet, RAINY, second, deadline))

    def test_wrong_signer(self, evm_verifier, user_wallet, contract_address, clock):
        deadline = clock.unix() + 300
        nonce = b"\x01" * 32
        impostor = EvmSigner("0x" + "77" * 32)
        signature = impostor.sign(claim_digest(user_wallet, RAINY, nonce, deadline, 31337, contract_address))

        with pytest.raises(InvalidSignatureError):
            evm_verifier.mint_achievement(user_wallet, RAINY, nonce, deadline, signature)
        assert nonce not in evm_verifier.used_nonces

    def test_other_chain_rejected(self, evm_verifier, sign_evm, user_wallet, clock):
        deadline = clock.unix() + 300
        nonce = b"\x01" * 32
        signature = sign_evm(user_wallet, RAINY, nonce, deadline, chain_id=11155111)
        with pytest.raises(InvalidSignatureError):
            evm_verifier.mint_achievement(user_wallet, RAINY, nonce, deadline, signature)

    def test_malformed_signature(self, evm_verifier, user_wallet, clock):
        with pytest.raises(InvalidSignatureError):
            evm_verifier.mint_achievement(user_wallet, RAINY, b"\x01" * 32, clock.unix() + 300, b"\x00" * 12)

    def test_test_nft_ids_and_cap(self, evm_signer_address, contract_address, sign_evm, user_wallet, clock):
        verifier = EvmAchievementsVerifier(evm_signer_address, 31337, contract_address, test_max_supply=2, clock=clock.unix)
        deadline = clock.unix() + 300

        ids = []
        for i in range(2):
            nonce = bytes([i]) * 32
            ids.append(verifier.mint_test_nft(user_wallet, nonce, deadline, sign_evm(user_wallet, TEST_NFT_MARKER, nonce, deadline)).token_id)

        assert ids == [TEST_TOKEN_ID_START, TEST_TOKEN_ID_START + 1]
        assert all(EvmAchievementsVerifier.is_test_nft(token_id) for token_id in ids)
        assert verifier.test_nfts_owned_by(user_wallet) == 2

        nonce = b"\x09" * 32
        with pytest.raises(MaxSupplyReachedError):
            verifier.mint_test_nft(user_wallet, nonce, deadline, sign_evm(user_wallet, TEST_NFT_MARKER, nonce, deadline))
        assert verifier.test_nfts_minted == 2

    def test_update_signer_owner_only(self, evm_verifier, owner_address, user_wallet):
        new_signer = Account.from_key("0x" + "77" * 32).address

        with pytest.raises(UnauthorizedError):
            evm_verifier.update_signer(user_wallet, new_signer)

        event = evm_verifier.update_signer(owner_address, new_signer)
        assert evm_verifier.signer == new_signer
        assert event in evm_verifier.events

    def test_rotated_signer_invalidates_old_authorizations(self, evm_verifier, sign_evm, owner_address, user_wallet, clock):
        deadline = clock.unix() + 300
        nonce = b"\x01" * 32
        signature = sign_evm(user_wallet, RAINY, nonce, deadline)
        evm_verifier.update_signer(owner_address, Account.from_key("0x" + "77" * 32).address)

        with pytest.raises(InvalidSignatureError):
            evm_verifier.mint_achievement(user_wallet, RAINY, nonce, deadline, signature)


@pytest.fixture
def sign_solana(solana_signer_secret, program_id):
    signer = Ed25519Signer(solana_signer_secret)

    def sign(user, achievement_id, nonce, deadline):
        return signer.sign(claim_message(user, achievement_id, nonce, deadline, decode_pubkey(program_id)))
    return sign


class TestSolanaVerifier:

    def test_mint_records_mint_number(self, solana_verifier, sign_solana, user_pubkey, clock):
        deadline = clock.unix() + 300
        nonce = b"\x01" * 32

        event = solana_verifier.mint_achievement(
            user_pubkey, "RAINY_DAY_2025", nonce, deadline, sign_solana(user_pubkey, "RAINY_DAY_2025", nonce, deadline)
        )

        assert event.mint_number == 1
        assert solana_verifier.has_achievement(user_pubkey, "RAINY_DAY_2025")
        assert solana_verifier.records[(user_pubkey, "RAINY_DAY_2025")].minted_at == clock.unix()

    def test_expired(self, solana_verifier, sign_solana, user_pubkey, clock):
        deadline = clock.unix() - 1
        nonce = b"\x01" * 32
        with pytest.raises(SignatureExpiredError) as exc_info:
            solana_verifier.mint_achievement(
                user_pubkey, "RAINY_DAY_2025", nonce, deadline, sign_solana(user_pubkey, "RAINY_DAY_2025", nonce, deadline)
            )
        assert exc_info.value.message == "Signature has expired"

    def test_already_claimed(self, solana_verifier, sign_solana, user_pubkey, clock):
        deadline = clock.unix() + 300
        for i, expected in ((1, None), (2, AlreadyClaimedError)):
            nonce = bytes([i]) * 32
            signature = sign_solana(user_pubkey, "RAINY_DAY_2025", nonce, deadline)
            if expected is None:
                solana_verifier.mint_achievement(user_pubkey, "RAINY_DAY_2025", nonce, deadline, signature)
            else:
                with pytest.raises(expected):
                    solana_verifier.mint_achievement(user_pubkey, "RAINY_DAY_2025", nonce, deadline, signature)

    def test_regular_achievement_never_takes_test_path(self, solana_verifier, sign_solana, user_pubkey, clock):
        deadline = clock.unix() + 300
        minted = 0
        for i in range(3):
            nonce = bytes([i + 1]) * 32
            signature = sign_solana(user_pubkey, "RAINY_DAY_2025", nonce, deadline)
            try:
                solana_verifier.mint_achievement(user_pubkey, "RAINY_DAY_2025", nonce, deadline, signature)
                minted += 1
            except AlreadyClaimedError:
                pass

        assert minted == 1
        assert solana_verifier.test_records == []
        assert solana_verifier.total_minted == 1

    def test_custom_test_ids(self, solana_signer_pubkey, program_id, sign_solana, user_pubkey, clock):
        verifier = SolanaAchievementsVerifier(
            solana_signer_pubkey, program_id, test_achievement_ids={"DEMO"}, clock=clock.unix
        )
        deadline = clock.unix() + 300

        for i in range(2):
            nonce = bytes([i + 1]) * 32
            verifier.mint_achievement(user_pubkey, "DEMO", nonce, deadline, sign_solana(user_pubkey, "DEMO", nonce, deadline))

        nonce = b"\x05" * 32
        verifier.mint_achievement(
            user_pubkey, "TEST_BADGE", nonce, deadline, sign_solana(user_pubkey, "TEST_BADGE", nonce, deadline)
        )
        nonce = b"\x06" * 32
        with pytest.raises(AlreadyClaimedError):
            verifier.mint_achievement(
                user_pubkey, "TEST_BADGE", nonce, deadline, sign_solana(user_pubkey, "TEST_BADGE", nonce, deadline)
            )
        assert len(verifier.test_records) == 2

    def test_tampered_achievement(self, solana_verifier, sign_solana, user_pubkey, clock):
        deadline = clock.unix() + 300
        nonce = b"\x01" * 32
        signature = sign_solana(user_pubkey, "TEST_BADGE", nonce, deadline)
        with pytest.raises(InvalidSignatureError) as exc_info:
            solana_verifier.mint_achievement(user_pubkey, "RAINY_DAY_2025", nonce, deadline, signature)
        assert exc_info.value.message == "Invalid signature from backend"

    def test_test_badges_repeat_until_cap(self, solana_signer_pubkey, program_id, sign_solana, user_pubkey, clock):
        verifier = SolanaAchievementsVerifier(solana_signer_pubkey, program_id, test_max_supply=2, clock=clock.unix)
        deadline = clock.unix() + 300

        for i in range(2):
            nonce = bytes([i]) * 32
            verifier.mint_achievement(
                user_pubkey, "TEST_BADGE", nonce, deadline, sign_solana(user_pubkey, "TEST_BADGE", nonce, deadline)
            )

        nonce = b"\x09" * 32
        with pytest.raises(MaxSupplyReachedError):
            verifier.mint_achievement(
                user_pubkey, "TEST_BADGE", nonce, deadline, sign_solana(user_pubkey, "TEST_BADGE", nonce, deadline)
            )
        assert len(verifier.test_records) == 2

    def test_update_backend_signer(self, solana_verifier, user_pubkey):
        with pytest.raises(UnauthorizedError):
            solana_verifier.update_backend_signer("mallory", user_pubkey)

        event = solana_verifier.update_backend_signer("authority", user_pubkey)
        assert solana_verifier.backend_signer == user_pubkey
        assert event.new_signer == user_pubkey
