"""FastAPI application entrypoint. No business logic; only wiring and middleware."""

from dotenv import load_dotenv

load_dotenv()

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.v1 import router as v1_router
from app.core.config import Settings, TokenConfig, get_settings
from app.core.logging import configure_logging
from app.core.tokens import TokenIssuer, TokenVerifier

logger = logging.getLogger(__name__)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed or incomplete request bodies are client errors (400)."""
    fields = sorted({".".join(str(loc) for loc in err["loc"][1:]) for err in exc.errors()})
    detail = "Invalid request body."
    if fields and any(fields):
        detail = f"Missing or invalid fields: {', '.join(f for f in fields if f)}."
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": detail})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log the failure with context; never return its detail."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error."},
    )


def create_app(app_settings: Settings | None = None) -> FastAPI:
    """
    Build the API. The signing configuration is resolved during startup: a
    missing JWT_SECRET raises ConfigurationError there and the server never
    starts serving requests.
    """
    app_settings = app_settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging(app_settings.LOG_LEVEL)
        token_config = TokenConfig.from_settings(app_settings)
        app.state.token_issuer = TokenIssuer(token_config)
        app.state.token_verifier = TokenVerifier(token_config)
        app.state.single_session = app_settings.SESSION_POLICY == "single"
        app.state.environment = app_settings.APP_ENV
        logger.info(
            "Auth core ready",
            extra={"session_policy": app_settings.SESSION_POLICY, "jwt_algorithm": token_config.algorithm},
        )
        yield

    app = FastAPI(
        title="Options Exchange Auth API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if app_settings.APP_ENV == "dev" else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(v1_router, prefix=app_settings.API_V1_PREFIX)

    @app.get("/")
    def root() -> dict[str, str]:
        """Root route; minimal payload for discovery."""
        return {"message": "Options Exchange Auth API"}

    return app


app = create_app()
