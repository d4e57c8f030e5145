"""
In-memory model of the Achievements contract

Mirrors the contract's checks and revert reasons so authorizations issued by
the service can be exercised end to end without a chain:

    mintAchievement: expired -> nonce used -> already claimed -> bad signature
    mintTestNFT:     expired -> nonce used -> bad signature -> supply cap
"""

import logging
from collections import defaultdict
from typing import Callable, Dict, List, Optional, Set, Tuple

from web3 import Web3

from badger_claims.exceptions import (
    AlreadyClaimedError,
    InvalidSignatureError,
    MaxSupplyReachedError,
    NonceAlreadyUsedError,
    SignatureExpiredError,
    UnauthorizedError,
)
from badger_claims.signing.evm import TEST_NFT_MARKER, claim_digest, recover_signer
from badger_claims.utils.datetime_helpers import now_utc, unix_seconds
from badger_claims.verifier.events import MintEvent, SignerUpdated

logger = logging.getLogger(__name__)

TEST_TOKEN_ID_START = 10000
TEST_TOKEN_ID_END = 20000
TEST_NFT_MAX_SUPPLY = 10000


class EvmAchievementsVerifier:
    """ERC-1155 achievements contract state and mint rules"""

    def __init__(
        self,
        signer_address: str,
        chain_id: int,
        contract_address: str,
        owner: Optional[str] = None,
        test_max_supply: int = TEST_NFT_MAX_SUPPLY,
        clock: Callable[[], int] = lambda: unix_seconds(now_utc())
    ):
        self.signer = Web3.to_checksum_address(signer_address)
        self.chain_id = chain_id
        self.contract_address = Web3.to_checksum_address(contract_address)
        self.owner = Web3.to_checksum_address(owner) if owner else None
        self.test_max_supply = test_max_supply
        self.clock = clock

        self.used_nonces: Set[bytes] = set()
        self.claimed: Set[Tuple[str, bytes]] = set()
        self.balances: Dict[Tuple[str, int], int] = defaultdict(int)
        self.token_keys: Dict[int, bytes] = {}
        self.test_nfts_minted = 0
        self._test_owned: Dict[str, int] = defaultdict(int)
        self.events: List[object] = []

    def _verify(self, to: str, key: bytes, nonce: bytes, deadline: int, signature: bytes) -> bool:
        digest = claim_digest(to, key, nonce, deadline, self.chain_id, self.contract_address)
        try:
            return recover_signer(digest, signature) == self.signer
        except Exception:
            # Malformed signatures revert the same way as wrong ones
            return False

    def mint_achievement(
        self,
        to: str,
        achievement_key: bytes,
        nonce: bytes,
        deadline: int,
        signature: bytes
    ) -> MintEvent:
        to = Web3.to_checksum_address(to)

        if self.clock() > deadline:
            raise SignatureExpiredError(subject=to, operation="mint_achievement")
        if nonce in self.used_nonces:
            raise NonceAlreadyUsedError(subject=to, operation="mint_achievement")
        if (to, achievement_key) in self.claimed:
            raise AlreadyClaimedError(subject=to, operation="mint_achievement")
        if not self._verify(to, achievement_key, nonce, deadline, signature):
            raise InvalidSignatureError(subject=to, operation="mint_achievement")

        self.used_nonces.add(nonce)
        self.claimed.add((to, achievement_key))

        token_id = int.from_bytes(achievement_key, "big")
        self.token_keys[token_id] = achievement_key
        self.balances[(to, token_id)] += 1

        event = MintEvent("AchievementMinted", to, token_id, achievement_key=achievement_key)
        self.events.append(event)
        logger.info(f"AchievementMinted to={to} token_id={token_id}")
        return event

    def mint_test_nft(self, to: str, nonce: bytes, deadline: int, signature: bytes) -> MintEvent:
        to = Web3.to_checksum_address(to)

        if self.clock() > deadline:
            raise SignatureExpiredError(subject=to, operation="mint_test_nft")
        if nonce in self.used_nonces:
            raise NonceAlreadyUsedError(subject=to, operation="mint_test_nft")
        if not self._verify(to, TEST_NFT_MARKER, nonce, deadline, signature):
            raise InvalidSignatureError(subject=to, operation="mint_test_nft")
        if self.test_nfts_minted >= self.test_max_supply:
            raise MaxSupplyReachedError(subject=to, operation="mint_test_nft")

        self.used_nonces.add(nonce)

        token_id = TEST_TOKEN_ID_START + self.test_nfts_minted
        self.test_nfts_minted += 1
        self._test_owned[to] += 1
        self.balances[(to, token_id)] += 1

        event = MintEvent("TestNFTMinted", to, token_id, mint_number=self.test_nfts_minted)
        self.events.append(event)
        logger.info(f"TestNFTMinted to={to} token_id={token_id}")
        return event

    def has_achievement(self, owner: str, achievement_key: bytes) -> bool:
        return (Web3.to_checksum_address(owner), achievement_key) in self.claimed

    def balance_of(self, owner: str, token_id: int) -> int:
        return self.balances.get((Web3.to_checksum_address(owner), token_id), 0)

    def get_achievement_key(self, token_id: int) -> Optional[bytes]:
        return self.token_keys.get(token_id)

    @staticmethod
    def is_test_nft(token_id: int) -> bool:
        return TEST_TOKEN_ID_START <= token_id < TEST_TOKEN_ID_END

    def test_nfts_owned_by(self, owner: str) -> int:
        return self._test_owned.get(Web3.to_checksum_address(owner), 0)

    def update_signer(self, caller: str, new_signer: str) -> SignerUpdated:
        if self.owner is None or Web3.to_checksum_address(caller) != self.owner:
            raise UnauthorizedError(
                "Ownable: caller is not the owner", subject=caller, operation="update_signer"
            )
        event = SignerUpdated(self.signer, Web3.to_checksum_address(new_signer))
        self.signer = event.new_signer
        self.events.append(event)
        logger.info(f"SignerUpdated {event.old_signer} -> {event.new_signer}")
        return event
