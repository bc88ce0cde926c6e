"""FastAPI application entry point."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from api.routes import session
from config import config
from core.errors import (
    AuthError,
    DeckExhaustedError,
    InvalidActionError,
    InvalidSignature,
    PersistenceError,
    ValidationError,
)

logging.basicConfig(
    level=config.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Initialize rate limiter
limiter = Limiter(
    key_func=get_remote_address,
    enabled=config.rate_limit.enabled,
    default_limits=[f"{config.rate_limit.requests_per_minute}/minute"],
)


def _rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Handle rate limit exceeded errors."""
    return JSONResponse(
        status_code=429,
        content={"message": f"Rate limit exceeded: {exc.detail}"},
    )


def _validation_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Missing or malformed request fields."""
    if isinstance(exc, RequestValidationError):
        fields = ", ".join(".".join(str(p) for p in e["loc"]) for e in exc.errors())
        return JSONResponse(status_code=400, content={"message": f"Invalid request: {fields}"})
    return JSONResponse(status_code=400, content={"message": str(exc)})


def _invalid_action_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.info("Rejected action: %s", exc)
    return JSONResponse(status_code=400, content={"error": "invalid action"})


def _invalid_signature_handler(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=400, content={"message": "invalid signature"})


def _auth_error_handler(request: Request, exc: Exception) -> JSONResponse:
    message = exc.message if isinstance(exc, AuthError) else "unauthorized"
    return JSONResponse(status_code=401, content={"message": message})


def _persistence_error_handler(request: Request, exc: Exception) -> JSONResponse:
    message = exc.message if isinstance(exc, PersistenceError) else "failed to persist score"
    return JSONResponse(status_code=500, content={"message": message})


def _deck_exhausted_handler(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={"message": "session reset, start a new hand"},
    )


app = FastAPI(
    title="Blackjack Session Server",
    description="Server-authoritative blackjack sessions gated by wallet signatures",
    version="0.1.0",
)

# Add rate limiter to app state and exception handler
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)  # type: ignore[arg-type]
app.add_middleware(SlowAPIMiddleware)

# Domain errors, most specific class wins
app.add_exception_handler(RequestValidationError, _validation_error_handler)
app.add_exception_handler(ValidationError, _validation_error_handler)
app.add_exception_handler(InvalidActionError, _invalid_action_handler)
app.add_exception_handler(InvalidSignature, _invalid_signature_handler)
app.add_exception_handler(AuthError, _auth_error_handler)
app.add_exception_handler(PersistenceError, _persistence_error_handler)
app.add_exception_handler(DeckExhaustedError, _deck_exhausted_handler)

# CORS middleware with configurable origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors.allowed_origins,
    allow_credentials=config.cors.allow_credentials,
    allow_methods=config.cors.allow_methods,
    allow_headers=config.cors.allow_headers,
)


@app.get("/api/health")
@limiter.limit(f"{config.rate_limit.requests_per_minute}/minute")
async def health_check(request: Request) -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


# Include routers
app.include_router(session.router, prefix="/session", tags=["session"])
