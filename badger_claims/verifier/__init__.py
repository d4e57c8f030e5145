"""Reference models of the on-chain verifiers"""

from badger_claims.verifier.events import MintEvent, SignerUpdated
from badger_claims.verifier.evm import EvmAchievementsVerifier
from badger_claims.verifier.solana import SolanaAchievementsVerifier, UserAchievement

__all__ = [
    "MintEvent",
    "SignerUpdated",
    "EvmAchievementsVerifier",
    "SolanaAchievementsVerifier",
    "UserAchievement",
]
