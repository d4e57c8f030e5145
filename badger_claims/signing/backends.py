"""
Chain backends

A ChainBackend pairs a message encoder with a signer and the identity of
the verifier that will check the result. Backends are built from config
without raising: a missing key or address leaves the backend unconfigured
and every claim against it fails closed with a ConfigurationError.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from badger_claims.exceptions import ConfigurationError
from badger_claims.signing.base import MessageEncoder, Signer
from badger_claims.signing.evm import EvmMessageEncoder, EvmSigner, normalize_address
from badger_claims.signing.solana import Ed25519Signer, SolanaMessageEncoder, normalize_pubkey

logger = logging.getLogger(__name__)

EVM_CHAIN_IDS: Dict[str, int] = {
    "localhost": 31337,
    "sepolia": 11155111,
    "mainnet": 1,
}

# Deterministic address of the first contract deployed to a fresh Hardhat node
DEFAULT_CONTRACT_ADDRESSES: Dict[str, str] = {
    "localhost": "0x5FbDB2315678afecb367f032d93F642f64180aa3",
}


def chain_id_for_network(network: str) -> int:
    try:
        return EVM_CHAIN_IDS[network]
    except KeyError:
        raise ConfigurationError(
            f"Unknown network '{network}'. Expected one of: {', '.join(EVM_CHAIN_IDS)}",
            config_key="NETWORK"
        )


@dataclass
class ChainBackend:
    name: str
    blockchain: str
    network: str
    normalize_subject: Callable[[str], str]
    encoder: Optional[MessageEncoder] = None
    signer: Optional[Signer] = None
    chain_id: Optional[int] = None
    verifier_address: Optional[str] = None
    problems: List[str] = field(default_factory=list)

    @property
    def configured(self) -> bool:
        return self.encoder is not None and self.signer is not None

    def require_ready(self) -> None:
        """
        Raises:
            ConfigurationError: If the signer or verifier is not configured
        """
        if self.signer is None:
            raise ConfigurationError(
                f"Backend signer not configured for {self.blockchain}",
                operation="issue_authorization",
                user_message="Backend signer not configured"
            )
        if self.encoder is None:
            reason = self.problems[-1] if self.problems else f"{self.blockchain} verifier not configured"
            raise ConfigurationError(reason, operation="issue_authorization")

    def health(self) -> Dict[str, Any]:
        info: Dict[str, Any] = {
            "status": "ok" if self.configured else "degraded",
            "signerConfigured": self.signer is not None,
            "signerAddress": self.signer.public_identity if self.signer else None,
            "network": self.network,
            "blockchain": self.blockchain,
        }
        if self.name == "evm":
            info["chainId"] = self.chain_id
            info["contractAddress"] = self.verifier_address or "Not configured"
        else:
            info["programId"] = self.verifier_address or "Not configured"
        info["warnings"] = list(self.problems)
        return info


def build_evm_backend(signer_key: str, network: str, contract_address: str) -> ChainBackend:
    backend = ChainBackend(
        name="evm", blockchain="Ethereum", network=network, normalize_subject=normalize_address
    )

    if signer_key:
        try:
            backend.signer = EvmSigner(signer_key)
        except ConfigurationError as e:
            backend.problems.append(e.message)
    else:
        backend.problems.append("BACKEND_SIGNER_KEY not set")

    address = contract_address or DEFAULT_CONTRACT_ADDRESSES.get(network, "")
    try:
        backend.chain_id = chain_id_for_network(network)
        backend.encoder = EvmMessageEncoder(backend.chain_id, address)
        backend.verifier_address = backend.encoder.contract_address
    except ConfigurationError as e:
        backend.problems.append(e.message)

    if backend.problems:
        logger.warning(f"EVM backend not fully configured: {'; '.join(backend.problems)}")
    return backend


def build_solana_backend(signer_key: str, network: str, program_id: str) -> ChainBackend:
    backend = ChainBackend(
        name="solana", blockchain="Solana", network=network, normalize_subject=normalize_pubkey
    )

    if signer_key:
        try:
            backend.signer = Ed25519Signer(signer_key)
        except ConfigurationError as e:
            backend.problems.append(e.message)
    else:
        backend.problems.append("SOLANA_SIGNER_KEY not set")

    if program_id:
        try:
            backend.encoder = SolanaMessageEncoder(program_id)
            backend.verifier_address = program_id
        except ConfigurationError as e:
            backend.problems.append(e.message)
    else:
        backend.problems.append("Program not deployed. Set SOLANA_PROGRAM_ID")

    if backend.problems:
        logger.warning(f"Solana backend not fully configured: {'; '.join(backend.problems)}")
    return backend
