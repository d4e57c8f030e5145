"""API routes for claim authorization"""
import logging
from typing import Any, Dict, List, Optional
from fastapi import APIRouter, Depends, Request

from badger_claims.api.middleware import limiter
from badger_claims.api.models import ClaimResponse, EvmClaimRequest, SolanaClaimRequest
from badger_claims.config import CLAIM_RATE_LIMIT, READ_RATE_LIMIT
from badger_claims.eligibility.weather import UnavailableWeatherOracle
from badger_claims.exceptions import ValidationError
from badger_claims.models.achievement import AchievementCategory
from badger_claims.services.container import ServiceContainer, get_container

logger = logging.getLogger(__name__)

router = APIRouter()

EVM_SUCCESS_MESSAGE = "Eligibility verified. Use this signature to mint your achievement NFT."
SOLANA_SUCCESS_MESSAGE = "Validation passed! Confirm transaction to mint NFT"


def get_services(request: Request) -> ServiceContainer:
    """Container attached to the app, or the global one"""
    container = getattr(request.app.state, "container", None)
    return container if container is not None else get_container()


@router.post("/api/claim", response_model=ClaimResponse)
@limiter.limit(CLAIM_RATE_LIMIT)
async def claim_evm(
    request: Request,
    body: EvmClaimRequest,
    services: ServiceContainer = Depends(get_services)
):
    """
    EVM claim - checks eligibility and returns a signature for mintAchievement

    Rate limit: 10 requests per minute per IP
    """
    logger.info(f"Validating claim for {body.achievement_id} by {body.wallet}")
    authorization = await services.claim_service.claim(
        "evm",
        body.wallet,
        body.achievement_id,
        lat=body.lat,
        lng=body.lng,
        event_code=body.event_code,
        require_location=True
    )
    return ClaimResponse(
        achievement_id=authorization.achievement_id,
        signature=authorization.signature,
        nonce=authorization.nonce,
        deadline=authorization.deadline,
        message=EVM_SUCCESS_MESSAGE,
    )


@router.post("/api/claim-solana", response_model=ClaimResponse)
@limiter.limit(CLAIM_RATE_LIMIT)
async def claim_solana(
    request: Request,
    body: SolanaClaimRequest,
    services: ServiceContainer = Depends(get_services)
):
    """Solana claim - checks eligibility and returns an Ed25519 signature"""
    logger.info(f"Validating Solana claim for {body.achievement_id} by {body.user_pubkey}")
    authorization = await services.claim_service.claim(
        "solana",
        body.user_pubkey,
        body.achievement_id,
        lat=body.latitude,
        lng=body.longitude,
        event_code=body.event_code
    )
    return ClaimResponse(
        achievement_id=authorization.achievement_id,
        signature=authorization.signature,
        nonce=authorization.nonce,
        deadline=authorization.deadline,
        message=SOLANA_SUCCESS_MESSAGE,
    )


@router.get("/api/claim/health")
@limiter.limit(READ_RATE_LIMIT)
async def claim_evm_health(request: Request, services: ServiceContainer = Depends(get_services)):
    """EVM signer and contract status"""
    return _health(services, "evm")


@router.get("/api/claim-solana/health")
@limiter.limit(READ_RATE_LIMIT)
async def claim_solana_health(request: Request, services: ServiceContainer = Depends(get_services)):
    """Solana signer and program status"""
    return _health(services, "solana")


def _health(services: ServiceContainer, chain: str) -> Dict[str, Any]:
    info = services.backend(chain).health()
    info["warnings"] = info["warnings"] + services.storage_warnings()
    if isinstance(services.weather_oracle, UnavailableWeatherOracle):
        info["warnings"].append("Weather provider not configured - weather achievements cannot be claimed")
    return info


@router.get("/api/achievements")
@limiter.limit(READ_RATE_LIMIT)
async def list_achievements(
    request: Request,
    category: Optional[str] = None,
    services: ServiceContainer = Depends(get_services)
) -> List[Dict[str, Any]]:
    """Achievement catalog, optionally filtered by category"""
    if category is None:
        achievements = services.registry.list_all()
    else:
        try:
            achievements = services.registry.list_by_category(category)
        except ValueError:
            valid = ", ".join(c.value for c in AchievementCategory)
            raise ValidationError(
                f"Unknown category '{category}'. Expected one of: {valid}",
                field="category",
                value=category
            )
    return [achievement.model_dump(mode="json") for achievement in achievements]


@router.get("/api/achievements/{achievement_id}")
@limiter.limit(READ_RATE_LIMIT)
async def get_achievement(
    request: Request,
    achievement_id: str,
    services: ServiceContainer = Depends(get_services)
) -> Dict[str, Any]:
    """Single achievement definition (404 for unknown ids)"""
    return services.registry.get_by_id(achievement_id).model_dump(mode="json")
