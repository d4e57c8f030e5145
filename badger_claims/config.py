"""Configuration management"""
import os
from dotenv import load_dotenv

from badger_claims.exceptions import ConfigurationError

load_dotenv()

# EVM backend
# BACKEND_SIGNER_KEY: hex secp256k1 private key used to sign EVM claim authorizations
BACKEND_SIGNER_KEY: str = os.getenv("BACKEND_SIGNER_KEY", "")
NETWORK: str = os.getenv("NETWORK", os.getenv("NEXT_PUBLIC_NETWORK", "localhost"))
ACHIEVEMENTS_CONTRACT_ADDRESS: str = os.getenv(
    "ACHIEVEMENTS_CONTRACT_ADDRESS",
    os.getenv("NEXT_PUBLIC_ACHIEVEMENTS_CONTRACT_ADDRESS", "")
)

# Solana backend
# SOLANA_SIGNER_KEY: base58 of a 64-byte Solana secret key (or a 32-byte seed)
SOLANA_SIGNER_KEY: str = os.getenv("SOLANA_SIGNER_KEY", "")
SOLANA_NETWORK: str = os.getenv("SOLANA_NETWORK", "devnet")
SOLANA_PROGRAM_ID: str = os.getenv("SOLANA_PROGRAM_ID", "")

# Authorization
AUTHORIZATION_TTL_SECONDS: int = int(os.getenv("AUTHORIZATION_TTL_SECONDS", "300"))

# Nonce store
# - 'memory' (default): per-process set, reset on restart
# - 'redis': durable store shared by every worker
NONCE_STORE: str = os.getenv("NONCE_STORE", "memory").lower()
REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")
NONCE_TTL_SECONDS: int | None = (
    int(os.getenv("NONCE_TTL_SECONDS")) if os.getenv("NONCE_TTL_SECONDS") else None
)

# Eligibility
# EVENT_CODES: comma separated CODE:ACHIEVEMENT_ID pairs, added to the built-in codes
EVENT_CODES: str = os.getenv("EVENT_CODES", "")
WEATHER_API_KEY: str = os.getenv("WEATHER_API_KEY", "")
WEATHER_API_URL: str = os.getenv("WEATHER_API_URL", "https://api.openweathermap.org/data/2.5/weather")
WEATHER_TIMEOUT_SECONDS: float = float(os.getenv("WEATHER_TIMEOUT_SECONDS", "5"))

# API
API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
API_PORT: int = int(os.getenv("API_PORT", "8000"))
CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "http://localhost:3000")
CLAIM_RATE_LIMIT: str = os.getenv("CLAIM_RATE_LIMIT", "10/minute")
READ_RATE_LIMIT: str = os.getenv("READ_RATE_LIMIT", "60/minute")

# Logging
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

# Monitoring
ENABLE_PROMETHEUS: bool = os.getenv("ENABLE_PROMETHEUS", "true").lower() == "true"
ENABLE_SENTRY: bool = os.getenv("ENABLE_SENTRY", "false").lower() == "true"
SENTRY_DSN: str = os.getenv("SENTRY_DSN", "")
SENTRY_ENVIRONMENT: str = os.getenv("SENTRY_ENVIRONMENT", "development")
SENTRY_TRACES_SAMPLE_RATE: float = float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.1"))

# Fail at startup instead of per request when signing keys are missing
STRICT_CONFIG: bool = os.getenv("STRICT_CONFIG", "false").lower() == "true"


# Validation
def validate_config() -> None:
    """Validate required configuration"""
    if NONCE_STORE not in ("memory", "redis"):
        raise ConfigurationError(
            f"NONCE_STORE must be 'memory' or 'redis', got '{NONCE_STORE}'",
            config_key="NONCE_STORE"
        )
    if AUTHORIZATION_TTL_SECONDS <= 0:
        raise ConfigurationError(
            "AUTHORIZATION_TTL_SECONDS must be positive",
            config_key="AUTHORIZATION_TTL_SECONDS"
        )
    if not STRICT_CONFIG:
        # Claim endpoints still fail closed per request when keys are absent
        return
    if not BACKEND_SIGNER_KEY and not SOLANA_SIGNER_KEY:
        raise ConfigurationError(
            "BACKEND_SIGNER_KEY or SOLANA_SIGNER_KEY is required",
            config_key="BACKEND_SIGNER_KEY"
        )
    if BACKEND_SIGNER_KEY and not ACHIEVEMENTS_CONTRACT_ADDRESS:
        raise ConfigurationError(
            "ACHIEVEMENTS_CONTRACT_ADDRESS is required for the EVM backend",
            config_key="ACHIEVEMENTS_CONTRACT_ADDRESS"
        )
    if SOLANA_SIGNER_KEY and not SOLANA_PROGRAM_ID:
        raise ConfigurationError(
            "SOLANA_PROGRAM_ID is required for the Solana backend",
            config_key="SOLANA_PROGRAM_ID"
        )
