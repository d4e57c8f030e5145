"""API middleware for rate limiting, CORS and request metrics"""
import logging
from fastapi import Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from badger_claims.config import CORS_ORIGINS, READ_RATE_LIMIT, CLAIM_RATE_LIMIT
from badger_claims.monitoring.prometheus_metrics import track_request

logger = logging.getLogger(__name__)

# Initialize rate limiter
limiter = Limiter(key_func=get_remote_address)


def setup_cors(app):
    """Configure CORS middleware"""
    cors_origins = [origin.strip() for origin in CORS_ORIGINS.split(",") if origin.strip()]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    logger.info(f"CORS configured for origins: {cors_origins}")


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning(f"Rate limit exceeded for {get_remote_address(request)} on {request.url.path}")
    return JSONResponse(
        status_code=429,
        content={"success": False, "error": f"Rate limit exceeded: {exc.detail}"}
    )


def setup_rate_limiting(app):
    """Configure rate limiting"""
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    logger.info(f"Rate limiting configured: claims {CLAIM_RATE_LIMIT}, reads {READ_RATE_LIMIT} per IP")


def setup_request_metrics(app):
    """Record request count and latency per route template"""

    @app.middleware("http")
    async def request_metrics(request: Request, call_next):
        with track_request(request.method, request.url.path) as result:
            response = await call_next(request)
            # The router records the matched route on the scope during call_next;
            # label by its template so /api/achievements/{achievement_id} is one series
            route = request.scope.get("route")
            if route is not None and hasattr(route, "path"):
                result["endpoint"] = route.path
            result["status"] = response.status_code
        return response
