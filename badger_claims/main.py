"""Main entry point for the claim API"""
import logging
import asyncio

import uvicorn

from badger_claims.config import API_HOST, API_PORT, LOG_LEVEL, validate_config

# Configure logging
logging.basicConfig(
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    level=getattr(logging, LOG_LEVEL.upper(), logging.INFO)
)

logger = logging.getLogger(__name__)


async def main() -> None:
    """Main application entry point"""
    # Validate configuration
    logger.info("Validating configuration...")
    validate_config()

    from badger_claims.api.server import create_api_application
    app = create_api_application()

    server = uvicorn.Server(uvicorn.Config(
        app,
        host=API_HOST,
        port=API_PORT,
        log_level=LOG_LEVEL.lower(),
    ))

    logger.info(f"Claim API listening on {API_HOST}:{API_PORT}")
    try:
        await server.serve()
    except KeyboardInterrupt:
        logger.info("Shutting down...")
    finally:
        logger.info("Shutdown complete")


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
