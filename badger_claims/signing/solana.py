"""
Solana claim signing

The achievements program verifies an Ed25519 signature over

    u32_le(len) || subject (base58 text)
    u32_le(len) || achievement id (utf-8)
    nonce (32 bytes)
    i64_le(deadline)
    program id (32 bytes)

The program id binds an authorization to a single deployment.
"""

import logging
import struct

import base58
from nacl.exceptions import BadSignatureError
from nacl.signing import SigningKey, VerifyKey

from badger_claims.exceptions import ConfigurationError, ValidationError
from badger_claims.models.achievement import Achievement
from badger_claims.signing.base import MessageEncoder, Signer

logger = logging.getLogger(__name__)

PUBKEY_BYTES = 32
SEED_BYTES = 32
SECRET_KEY_BYTES = 64


def decode_pubkey(value: str) -> bytes:
    """
    Decode a base58 Solana public key

    Raises:
        ValueError: If it is not base58 or not 32 bytes
    """
    raw = base58.b58decode(value)
    if len(raw) != PUBKEY_BYTES:
        raise ValueError(f"Expected {PUBKEY_BYTES} bytes, got {len(raw)}")
    return raw


def normalize_pubkey(subject: str) -> str:
    """
    Raises:
        ValidationError: If the value is not a base58 32-byte public key
    """
    try:
        decode_pubkey(subject if isinstance(subject, str) else "")
    except ValueError:
        raise ValidationError("Invalid user public key", field="userPubkey", value=subject)
    return subject


def _borsh_string(value: str) -> bytes:
    encoded = value.encode("utf-8")
    return struct.pack("<I", len(encoded)) + encoded


def claim_message(
    subject: str,
    achievement_id: str,
    nonce: bytes,
    deadline: int,
    program_id: bytes
) -> bytes:
    return (
        _borsh_string(subject)
        + _borsh_string(achievement_id)
        + nonce
        + struct.pack("<q", deadline)
        + program_id
    )


def verify_ed25519(pubkey: bytes, message: bytes, signature: bytes) -> bool:
    try:
        VerifyKey(pubkey).verify(message, signature)
        return True
    except (BadSignatureError, ValueError, TypeError):
        return False


class SolanaMessageEncoder(MessageEncoder):

    def __init__(self, program_id: str):
        try:
            self.program_id_bytes = decode_pubkey(program_id)
        except ValueError as e:
            raise ConfigurationError(
                "Program not deployed. Set SOLANA_PROGRAM_ID to the deployed achievements program",
                config_key="SOLANA_PROGRAM_ID",
                cause=e
            )
        self.program_id = program_id

    def normalize_subject(self, subject: str) -> str:
        return normalize_pubkey(subject)

    def encode(self, subject: str, achievement: Achievement, nonce: bytes, deadline: int) -> bytes:
        return claim_message(subject, achievement.id, nonce, deadline, self.program_id_bytes)


class Ed25519Signer(Signer):
    """
    Ed25519 signer from a Solana keypair

    Accepts base58 of either the 64-byte secret key (seed followed by public
    key, as written by solana-keygen) or the bare 32-byte seed.
    """

    def __init__(self, secret: str):
        try:
            raw = base58.b58decode(secret)
        except ValueError as e:
            raise ConfigurationError(
                "SOLANA_SIGNER_KEY is not valid base58", config_key="SOLANA_SIGNER_KEY", cause=e
            )

        if len(raw) not in (SEED_BYTES, SECRET_KEY_BYTES):
            raise ConfigurationError(
                f"SOLANA_SIGNER_KEY must decode to {SEED_BYTES} or {SECRET_KEY_BYTES} bytes",
                config_key="SOLANA_SIGNER_KEY"
            )

        self._key = SigningKey(raw[:SEED_BYTES])
        self.public_key_bytes = bytes(self._key.verify_key)

        if len(raw) == SECRET_KEY_BYTES and raw[SEED_BYTES:] != self.public_key_bytes:
            raise ConfigurationError(
                "SOLANA_SIGNER_KEY public half does not match its seed",
                config_key="SOLANA_SIGNER_KEY"
            )
        logger.info(f"Solana backend signer: {self.public_identity}")

    @property
    def public_identity(self) -> str:
        return base58.b58encode(self.public_key_bytes).decode("ascii")

    def sign(self, message: bytes) -> bytes:
        return self._key.sign(message).signature
