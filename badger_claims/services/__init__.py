"""
Service Layer Package

Business logic between the HTTP layer and the core (catalog, eligibility,
guards, signing).

Core Services:
- ClaimService: Input validation, lookup, eligibility, issuance
- AuthorizationIssuer: Nonce, deadline and signature for one chain
"""

from badger_claims.services.authorization_service import AuthorizationIssuer
from badger_claims.services.claim_service import ClaimService
from badger_claims.services.container import (
    ServiceContainer,
    build_container_from_config,
    get_container,
    init_container,
)

__all__ = [
    "AuthorizationIssuer",
    "ClaimService",
    "ServiceContainer",
    "build_container_from_config",
    "get_container",
    "init_container",
]
