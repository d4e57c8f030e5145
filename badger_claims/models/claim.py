"""Claim models: evaluation context, eligibility outcome and issued authorization"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class ClaimContext(BaseModel):
    """What the claimant asserts, plus the evaluation instant"""
    model_config = ConfigDict(frozen=True)

    lat: Optional[float] = None
    lng: Optional[float] = None
    event_code: Optional[str] = None
    now: datetime


class EligibilityResult(BaseModel):
    """Eligible, or Ineligible with a user-facing reason"""
    model_config = ConfigDict(frozen=True)

    eligible: bool
    reason: Optional[str] = None
    rule_type: Optional[str] = None

    @classmethod
    def passed(cls) -> "EligibilityResult":
        return cls(eligible=True)

    @classmethod
    def failed(cls, reason: str, rule_type: Optional[str] = None) -> "EligibilityResult":
        return cls(eligible=False, reason=reason, rule_type=rule_type)


class ClaimAuthorization(BaseModel):
    """Signed, single-use permission to mint one achievement"""
    model_config = ConfigDict(frozen=True)

    achievement_id: str
    subject_address: str
    nonce: str = Field(..., description="Hex of 32 random bytes (0x-prefixed on EVM)")
    deadline: int = Field(..., description="Unix seconds after which the verifier rejects")
    signature: str = Field(..., description="Hex signature (0x-prefixed on EVM)")
    chain: str

    @property
    def nonce_bytes(self) -> bytes:
        return bytes.fromhex(self.nonce.removeprefix("0x"))

    @property
    def signature_bytes(self) -> bytes:
        return bytes.fromhex(self.signature.removeprefix("0x"))
