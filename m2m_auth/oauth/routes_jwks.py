"""JWKS endpoint."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from starlette.responses import JSONResponse

from m2m_auth.api.deps import get_context
from m2m_auth.core.context import ServerContext
from m2m_auth.core.logging import get_logger
from m2m_auth.oauth.jwks import KeySetUnavailableError, build_jwks
from m2m_auth.oauth.types import OAuthErrorResponse

router = APIRouter()

HTTP_BAD_REQUEST = 400
JWKS_CACHE_CONTROL = "public, max-age=3600"

logger = get_logger(__name__)


@router.get("/.well-known/jwks.json")
async def jwks(
    request: Request,
    context: Annotated[ServerContext, Depends(get_context)],
) -> JSONResponse:
    """JSON Web Key Set endpoint."""
    try:
        key_set = build_jwks(context.key_pair, request.method)
    except KeySetUnavailableError:
        logger.error("jwks_requested_without_key")
        body = OAuthErrorResponse(
            error="invalid_request", error_description="No signing key configured"
        )
        return JSONResponse(
            body.model_dump(),
            status_code=HTTP_BAD_REQUEST,
        )
    return JSONResponse(
        key_set.model_dump(),
        headers={"Cache-Control": JWKS_CACHE_CONTROL},
    )
