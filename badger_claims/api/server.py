"""FastAPI application setup"""
import logging
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from badger_claims.api.metrics_routes import router as metrics_router
from badger_claims.api.middleware import setup_cors, setup_rate_limiting, setup_request_metrics
from badger_claims.api.routes import router
from badger_claims.config import LOG_LEVEL
from badger_claims.exceptions import BadgeClaimError
from badger_claims.monitoring.sentry_config import capture_exception, init_sentry, set_request_context
from badger_claims.services.container import ServiceContainer, init_container

# Configure logging
logging.basicConfig(
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    level=getattr(logging, LOG_LEVEL.upper(), logging.INFO)
)

logger = logging.getLogger(__name__)


def create_api_application(container: Optional[ServiceContainer] = None) -> FastAPI:
    """
    Create and configure FastAPI application

    Args:
        container: Prebuilt services (tests); built from config at startup when omitted
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifecycle manager for FastAPI application"""
        # Startup
        logger.info("Starting claim API server...")
        init_sentry()
        services = init_container(container)
        app.state.container = services
        await services.startup()
        logger.info("Service container ready")

        yield

        # Shutdown
        logger.info("Shutting down claim API server...")
        await services.shutdown()
        logger.info("Services closed")

    app = FastAPI(
        title="BadgerBadge Claim API",
        description="Eligibility checks and signed mint authorizations for achievement NFTs",
        version="1.0.0",
        lifespan=lifespan
    )
    # Available before startup for in-process test clients that skip the lifespan
    app.state.container = container

    # Setup middleware
    setup_cors(app)
    setup_rate_limiting(app)
    setup_request_metrics(app)

    # Include routes
    app.include_router(router)
    app.include_router(metrics_router)

    @app.exception_handler(BadgeClaimError)
    async def claim_error_handler(request: Request, exc: BadgeClaimError):
        if exc.status_code >= 500:
            set_request_context(exc.request_id, exc.operation or request.url.path)
            capture_exception(exc, path=request.url.path)
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": exc.user_message, "request_id": exc.request_id}
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        logger.info(f"Rejected request body on {request.url.path}: {exc.errors()}")
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": "Invalid request body"}
        )

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        capture_exception(exc, path=request.url.path)
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "Internal server error"}
        )

    logger.info("FastAPI application created")

    return app


app = create_api_application()
