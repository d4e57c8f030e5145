"""Pydantic models for API request/response validation"""
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field

# Checked by ClaimService so strings, booleans and out-of-range values all report "Invalid coordinates"
Coordinate = Optional[Any]


class EvmClaimRequest(BaseModel):
    """Request model for the EVM claim endpoint"""
    model_config = ConfigDict(populate_by_name=True)

    wallet: Optional[str] = Field(default=None, description="0x wallet address")
    achievement_id: Optional[str] = Field(default=None, alias="achievementId")
    lat: Coordinate = Field(default=None, description="Latitude in decimal degrees")
    lng: Coordinate = Field(default=None, description="Longitude in decimal degrees")
    event_code: Optional[str] = Field(default=None, alias="eventCode")


class SolanaClaimRequest(BaseModel):
    """Request model for the Solana claim endpoint"""
    model_config = ConfigDict(populate_by_name=True)

    achievement_id: Optional[str] = Field(default=None, alias="achievementId")
    user_pubkey: Optional[str] = Field(default=None, alias="userPubkey", description="Base58 public key")
    latitude: Coordinate = None
    longitude: Coordinate = None
    event_code: Optional[str] = Field(default=None, alias="eventCode")


class ClaimResponse(BaseModel):
    """Signed authorization returned to the wallet"""
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    achievement_id: str = Field(..., alias="achievementId")
    signature: str = Field(..., description="Hex signature to submit on-chain")
    nonce: str = Field(..., description="Hex of the single-use 32-byte nonce")
    deadline: int = Field(..., description="Unix seconds after which the signature is rejected")
    message: str


class ErrorResponse(BaseModel):
    """Error response model"""
    success: bool = False
    error: str = Field(..., description="User-facing error message")
    request_id: Optional[str] = Field(None, description="Correlates with server logs")
