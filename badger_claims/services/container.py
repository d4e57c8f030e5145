"""
Service Container - Dependency Injection Container

Holds the catalog, guards and chain backends, and builds the services that
depend on them lazily on first access. The API builds one from config in
its lifespan; tests build their own with doubles.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Optional
import logging

from badger_claims import config
from badger_claims.achievements.registry import AchievementRegistry, load_default_registry
from badger_claims.eligibility.evaluator import EligibilityEvaluator
from badger_claims.eligibility.event_codes import DEFAULT_EVENT_CODES, EventCodeRegistry
from badger_claims.eligibility.weather import (
    OpenWeatherMapOracle,
    UnavailableWeatherOracle,
    WeatherOracle,
)
from badger_claims.guards.claim_guard import ClaimGuard, InMemoryClaimGuard, RedisClaimGuard
from badger_claims.guards.nonce_guard import InMemoryNonceGuard, NonceGuard, RedisNonceGuard
from badger_claims.guards.redis_client import RedisConnection
from badger_claims.signing.backends import ChainBackend, build_evm_backend, build_solana_backend
from badger_claims.utils.datetime_helpers import now_utc, unix_seconds

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """
    Simple dependency injection container for services.

    Services are lazy-loaded on first access via properties.
    Infrastructure (registry, guards, backends, weather oracle) is injected.
    """

    registry: AchievementRegistry
    backends: Dict[str, ChainBackend]
    nonce_guard: NonceGuard
    claim_guard: Optional[ClaimGuard] = None
    weather_oracle: WeatherOracle = field(default_factory=UnavailableWeatherOracle)
    event_codes: EventCodeRegistry = field(default_factory=EventCodeRegistry)
    ttl_seconds: int = 300
    weather_timeout: float = 5.0
    clock: Callable[[], datetime] = now_utc
    redis_connection: Optional[RedisConnection] = None
    nonce_store: str = "memory"

    # Services (lazy-loaded via properties)
    _evaluator: Optional[EligibilityEvaluator] = field(default=None, init=False, repr=False)
    _issuers: Optional[Dict[str, Any]] = field(default=None, init=False, repr=False)
    _claim_service: Optional[Any] = field(default=None, init=False, repr=False)

    @property
    def evaluator(self) -> EligibilityEvaluator:
        """Get EligibilityEvaluator instance (lazy-loaded)"""
        if self._evaluator is None:
            self._evaluator = EligibilityEvaluator(
                event_codes=self.event_codes,
                weather_oracle=self.weather_oracle,
                weather_timeout=self.weather_timeout
            )
            logger.debug("EligibilityEvaluator instantiated")
        return self._evaluator

    @property
    def issuers(self) -> Dict[str, Any]:
        """Get one AuthorizationIssuer per backend (lazy-loaded)"""
        if self._issuers is None:
            from badger_claims.services.authorization_service import AuthorizationIssuer
            self._issuers = {
                name: AuthorizationIssuer(
                    backend, self.nonce_guard, ttl_seconds=self.ttl_seconds, clock=self.clock
                )
                for name, backend in self.backends.items()
            }
            logger.debug("AuthorizationIssuers instantiated")
        return self._issuers

    @property
    def claim_service(self):
        """Get ClaimService instance (lazy-loaded)"""
        if self._claim_service is None:
            from badger_claims.services.claim_service import ClaimService
            self._claim_service = ClaimService(
                self.registry,
                self.evaluator,
                self.issuers,
                claim_guard=self.claim_guard,
                clock=self.clock
            )
            logger.debug("ClaimService instantiated")
        return self._claim_service

    def backend(self, name: str) -> ChainBackend:
        return self.backends[name]

    def storage_warnings(self) -> list[str]:
        if self.nonce_store == "memory":
            return ["Nonce storage is in-memory - set NONCE_STORE=redis for production"]
        return []

    async def startup(self) -> None:
        if self.redis_connection is not None:
            await self.redis_connection.connect()

    async def shutdown(self) -> None:
        await self.weather_oracle.close()
        await self.nonce_guard.close()
        if self.claim_guard is not None:
            await self.claim_guard.close()


def build_container_from_config() -> ServiceContainer:
    """Wire every collaborator from badger_claims.config"""
    config.validate_config()

    redis_connection = None
    if config.NONCE_STORE == "redis":
        redis_connection = RedisConnection(config.REDIS_URL)
        nonce_guard: NonceGuard = RedisNonceGuard(redis_connection, ttl_seconds=config.NONCE_TTL_SECONDS)
        claim_guard: ClaimGuard = RedisClaimGuard(redis_connection)
    else:
        nonce_guard = InMemoryNonceGuard()
        claim_guard = InMemoryClaimGuard(clock=lambda: unix_seconds(now_utc()))

    if config.WEATHER_API_KEY:
        weather_oracle: WeatherOracle = OpenWeatherMapOracle(
            config.WEATHER_API_KEY,
            base_url=config.WEATHER_API_URL,
            timeout=config.WEATHER_TIMEOUT_SECONDS
        )
    else:
        logger.warning("WEATHER_API_KEY not set - weather achievements cannot be claimed")
        weather_oracle = UnavailableWeatherOracle()

    backends = {
        "evm": build_evm_backend(
            config.BACKEND_SIGNER_KEY, config.NETWORK, config.ACHIEVEMENTS_CONTRACT_ADDRESS
        ),
        "solana": build_solana_backend(
            config.SOLANA_SIGNER_KEY, config.SOLANA_NETWORK, config.SOLANA_PROGRAM_ID
        ),
    }

    return ServiceContainer(
        registry=load_default_registry(),
        backends=backends,
        nonce_guard=nonce_guard,
        claim_guard=claim_guard,
        weather_oracle=weather_oracle,
        event_codes=EventCodeRegistry.from_config(config.EVENT_CODES, base=DEFAULT_EVENT_CODES.items()),
        ttl_seconds=config.AUTHORIZATION_TTL_SECONDS,
        weather_timeout=config.WEATHER_TIMEOUT_SECONDS,
        redis_connection=redis_connection,
        nonce_store=config.NONCE_STORE,
    )


# Global container instance (initialized in the API lifespan)
_container: Optional[ServiceContainer] = None


def get_container() -> ServiceContainer:
    """
    Get the global service container.

    Raises:
        RuntimeError: If container not initialized (call init_container first)
    """
    if _container is None:
        raise RuntimeError(
            "Service container not initialized. "
            "Call init_container() before using services."
        )
    return _container


def init_container(container: Optional[ServiceContainer] = None) -> ServiceContainer:
    """
    Initialize the global service container.

    Args:
        container: Prebuilt container (tests); built from config when omitted

    Returns:
        ServiceContainer: The initialized container
    """
    global _container

    _container = container or build_container_from_config()

    logger.info("Service container initialized")
    return _container
