"""
EVM claim signing

The Achievements contract recomputes

    keccak256(abi.encodePacked(address to, bytes32 achievementKey,
        bytes32 nonce, uint256 deadline, uint256 chainId, address contract))

and recovers the signer of its personal-message hash
("\\x19Ethereum Signed Message:\\n32" + digest). Both sides must agree
byte for byte.
"""

import logging

from eth_account import Account
from eth_account.messages import encode_defunct
from web3 import Web3

from badger_claims.exceptions import ConfigurationError, ValidationError
from badger_claims.models.achievement import Achievement
from badger_claims.signing.base import MessageEncoder, Signer

logger = logging.getLogger(__name__)

TEST_NFT_MARKER: bytes = bytes(Web3.keccak(text="TEST_NFT"))

CLAIM_TYPES = ["address", "bytes32", "bytes32", "uint256", "uint256", "address"]


def achievement_key(achievement_id: str) -> bytes:
    """bytes32 key the contract stores claims under"""
    return bytes(Web3.keccak(text=achievement_id))


def key_for(achievement: Achievement) -> bytes:
    return TEST_NFT_MARKER if achievement.is_test else achievement_key(achievement.id)


def claim_digest(
    subject: str,
    key: bytes,
    nonce: bytes,
    deadline: int,
    chain_id: int,
    contract_address: str
) -> bytes:
    """keccak256 of the packed claim fields"""
    return bytes(Web3.solidity_keccak(
        CLAIM_TYPES,
        [
            Web3.to_checksum_address(subject),
            key,
            nonce,
            deadline,
            chain_id,
            Web3.to_checksum_address(contract_address),
        ]
    ))


def normalize_address(subject: str) -> str:
    """
    Checksummed form of an EVM address

    Raises:
        ValidationError: If the value is not a 20-byte hex address
    """
    if not subject or not isinstance(subject, str) or not Web3.is_address(subject):
        raise ValidationError("Invalid wallet address", field="wallet", value=subject)
    return Web3.to_checksum_address(subject)


def recover_signer(digest: bytes, signature: bytes) -> str:
    """Address that produced `signature` over the personal-message hash of `digest`"""
    return Account.recover_message(encode_defunct(primitive=digest), signature=signature)


class EvmMessageEncoder(MessageEncoder):

    def __init__(self, chain_id: int, contract_address: str):
        if not contract_address or not Web3.is_address(contract_address):
            raise ConfigurationError(
                "Contract not deployed. Set ACHIEVEMENTS_CONTRACT_ADDRESS to the deployed Achievements contract",
                config_key="ACHIEVEMENTS_CONTRACT_ADDRESS"
            )
        self.chain_id = chain_id
        self.contract_address = Web3.to_checksum_address(contract_address)

    def normalize_subject(self, subject: str) -> str:
        return normalize_address(subject)

    def encode(self, subject: str, achievement: Achievement, nonce: bytes, deadline: int) -> bytes:
        return claim_digest(
            subject, key_for(achievement), nonce, deadline, self.chain_id, self.contract_address
        )


class EvmSigner(Signer):
    """secp256k1 personal-message signer"""

    def __init__(self, private_key: str):
        try:
            self._account = Account.from_key(private_key)
        except Exception as e:
            # eth_keys raises its own ValidationError for out-of-range keys
            raise ConfigurationError(
                "BACKEND_SIGNER_KEY is not a valid private key",
                config_key="BACKEND_SIGNER_KEY",
                cause=e
            )
        logger.info(f"EVM backend signer: {self._account.address}")

    @property
    def public_identity(self) -> str:
        return self._account.address

    def sign(self, message: bytes) -> bytes:
        signed = self._account.sign_message(encode_defunct(primitive=message))
        return bytes(signed.signature)
