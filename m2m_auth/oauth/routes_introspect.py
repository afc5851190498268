"""OAuth token introspection endpoint."""

from typing import Annotated

from fastapi import APIRouter, Depends, Form, Header
from starlette.responses import JSONResponse

from m2m_auth.api.deps import get_context
from m2m_auth.core.context import ServerContext
from m2m_auth.core.logging import get_logger
from m2m_auth.oauth.introspection import extract_token, introspect_token
from m2m_auth.oauth.types import OAuthErrorResponse

router = APIRouter()

HTTP_BAD_REQUEST = 400

logger = get_logger(__name__)


@router.post("/introspect")
async def introspect(
    context: Annotated[ServerContext, Depends(get_context)],
    token: Annotated[str | None, Form()] = None,
    authorization: Annotated[str | None, Header()] = None,
) -> JSONResponse:
    """POST /introspect -- report whether a token is active (RFC 7662)."""
    raw = extract_token(token, authorization)
    if raw is None:
        logger.warning("introspection_without_token")
        body = OAuthErrorResponse(
            error="invalid_request", error_description="No token provided"
        )
        return JSONResponse(
            body.model_dump(),
            status_code=HTTP_BAD_REQUEST,
        )

    result = introspect_token(context, raw)
    return JSONResponse(result.model_dump(exclude_none=True))
