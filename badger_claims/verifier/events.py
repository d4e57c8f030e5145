"""Events emitted by the verifier models"""
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class MintEvent:
    name: str
    to: str
    token_id: int
    achievement_key: Optional[bytes] = None
    achievement_id: Optional[str] = None
    mint_number: Optional[int] = None


@dataclass(frozen=True)
class SignerUpdated:
    old_signer: str
    new_signer: str
