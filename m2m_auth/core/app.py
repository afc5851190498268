"""FastAPI application factory for the token server."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from m2m_auth.core.context import ServerContext, build_context
from m2m_auth.core.exceptions import setup_exception_handlers
from m2m_auth.core.logging import configure_logging, get_logger
from m2m_auth.core.settings import AuthSettings
from m2m_auth.oauth.routes_introspect import router as introspect_router
from m2m_auth.oauth.routes_jwks import router as jwks_router
from m2m_auth.oauth.routes_token import router as token_router

logger = get_logger(__name__)


def create_app(context: ServerContext | None = None) -> FastAPI:
    """Build and configure the FastAPI application.

    Without an explicit ``context`` the signing key and credential store are
    loaded from the environment once, before any request is served.
    """
    settings = AuthSettings()
    if context is None:
        configure_logging(settings.log_level, json_output=settings.log_json)
        context = build_context(settings)

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        logger.info("server_starting", issuer=context.issuer)
        yield

    app = FastAPI(
        title="M2M Auth Token Server",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.context = context
    setup_exception_handlers(app)

    origins = settings.get_cors_origin_list()
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=["GET", "POST"],
            allow_headers=["Authorization", "Content-Type"],
        )

    app.include_router(token_router)
    app.include_router(jwks_router)
    app.include_router(introspect_router)

    return app
