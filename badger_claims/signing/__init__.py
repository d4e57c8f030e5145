"""Claim message encoding and signing per chain"""

from badger_claims.signing.backends import (
    ChainBackend,
    build_evm_backend,
    build_solana_backend,
    chain_id_for_network,
)
from badger_claims.signing.base import MessageEncoder, Signer
from badger_claims.signing.evm import EvmMessageEncoder, EvmSigner, TEST_NFT_MARKER, achievement_key
from badger_claims.signing.solana import Ed25519Signer, SolanaMessageEncoder

__all__ = [
    "ChainBackend",
    "build_evm_backend",
    "build_solana_backend",
    "chain_id_for_network",
    "MessageEncoder",
    "Signer",
    "EvmMessageEncoder",
    "EvmSigner",
    "TEST_NFT_MARKER",
    "achievement_key",
    "Ed25519Signer",
    "SolanaMessageEncoder",
]
