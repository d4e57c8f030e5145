"""In-memory model of the Solana achievements program"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Set, Tuple

from badger_claims.exceptions import (
    AlreadyClaimedError,
    InvalidSignatureError,
    MaxSupplyReachedError,
    NonceAlreadyUsedError,
    SignatureExpiredError,
    UnauthorizedError,
)
from badger_claims.signing.solana import claim_message, decode_pubkey, verify_ed25519
from badger_claims.utils.datetime_helpers import now_utc, unix_seconds
from badger_claims.verifier.events import MintEvent, SignerUpdated

logger = logging.getLogger(__name__)

TEST_NFT_MAX_SUPPLY = 10000
TEST_ACHIEVEMENT_IDS = frozenset({"TEST_BADGE"})


@dataclass(frozen=True)
class UserAchievement:
    user: str
    achievement_id: str
    mint_number: int
    minted_at: int


class SolanaAchievementsVerifier:
    """Program state: backend signer, used nonces and one record per mint"""

    def __init__(
        self,
        backend_signer_pubkey: str,
        program_id: str,
        authority: Optional[str] = None,
        test_max_supply: int = TEST_NFT_MAX_SUPPLY,
        test_achievement_ids: Iterable[str] = TEST_ACHIEVEMENT_IDS,
        clock: Callable[[], int] = lambda: unix_seconds(now_utc())
    ):
        self.backend_signer = backend_signer_pubkey
        self.program_id = program_id
        self._program_id_bytes = decode_pubkey(program_id)
        self.authority = authority
        self.test_max_supply = test_max_supply
        self.test_achievement_ids = frozenset(test_achievement_ids)
        self.clock = clock

        self.used_nonces: Set[bytes] = set()
        self.records: Dict[Tuple[str, str], UserAchievement] = {}
        self.test_records: List[UserAchievement] = []
        self.total_minted = 0

    def mint_achievement(
        self,
        user_pubkey: str,
        achievement_id: str,
        nonce: bytes,
        deadline: int,
        signature: bytes
    ) -> MintEvent:
        now = self.clock()
        # Test badges are identified by the signed achievement id
        is_test = achievement_id in self.test_achievement_ids

        if now > deadline:
            raise SignatureExpiredError("Signature has expired", subject=user_pubkey)
        if nonce in self.used_nonces:
            raise NonceAlreadyUsedError(subject=user_pubkey)
        if not is_test and (user_pubkey, achievement_id) in self.records:
            raise AlreadyClaimedError("Achievement already claimed by this user", subject=user_pubkey)

        message = claim_message(user_pubkey, achievement_id, nonce, deadline, self._program_id_bytes)
        if not verify_ed25519(decode_pubkey(self.backend_signer), message, signature):
            raise InvalidSignatureError("Invalid signature from backend", subject=user_pubkey)

        if is_test and len(self.test_records) >= self.test_max_supply:
            raise MaxSupplyReachedError(subject=user_pubkey)

        self.used_nonces.add(nonce)
        self.total_minted += 1
        record = UserAchievement(user_pubkey, achievement_id, self.total_minted, now)
        if is_test:
            self.test_records.append(record)
        else:
            self.records[(user_pubkey, achievement_id)] = record

        logger.info(f"Achievement minted: user={user_pubkey} id={achievement_id} #{record.mint_number}")
        return MintEvent(
            "AchievementMinted",
            user_pubkey,
            record.mint_number,
            achievement_id=achievement_id,
            mint_number=record.mint_number
        )

    def has_achievement(self, user_pubkey: str, achievement_id: str) -> bool:
        return (user_pubkey, achievement_id) in self.records

    def update_backend_signer(self, authority: str, new_signer: str) -> SignerUpdated:
        if self.authority is None or authority != self.authority:
            raise UnauthorizedError(subject=authority, operation="update_backend_signer")
        decode_pubkey(new_signer)
        event = SignerUpdated(self.backend_signer, new_signer)
        self.backend_signer = new_signer
        logger.info(f"Backend signer updated from {event.old_signer} to {event.new_signer}")
        return event
