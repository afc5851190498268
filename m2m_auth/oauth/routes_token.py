"""OAuth token endpoint (client-credentials grant)."""

from typing import Annotated

from fastapi import APIRouter, Depends, Form, Header
from starlette.responses import JSONResponse

from m2m_auth.api.deps import get_context
from m2m_auth.core.context import ServerContext
from m2m_auth.core.logging import get_logger
from m2m_auth.crypto.errors import TokenSigningError
from m2m_auth.oauth.credentials import CredentialError, validate_basic_auth
from m2m_auth.oauth.token_service import issue_access_token
from m2m_auth.oauth.types import OAuthErrorResponse

router = APIRouter()

HTTP_BAD_REQUEST = 400
HTTP_UNAUTHORIZED = 401
HTTP_SERVER_ERROR = 500
CLIENT_CREDENTIALS = "client_credentials"
NO_STORE_HEADERS = {"Cache-Control": "no-store", "Pragma": "no-cache"}

logger = get_logger(__name__)


@router.post("/token", response_model=None)
async def token_endpoint(
    context: Annotated[ServerContext, Depends(get_context)],
    authorization: Annotated[str | None, Header()] = None,
    grant_type: Annotated[str | None, Form()] = None,
) -> JSONResponse:
    """POST /token -- issue an access token to an authenticated client."""
    if grant_type is not None and grant_type != CLIENT_CREDENTIALS:
        body = OAuthErrorResponse(error="unsupported_grant_type")
        return JSONResponse(
            body.model_dump(exclude_none=True),
            status_code=HTTP_BAD_REQUEST,
        )

    try:
        client = validate_basic_auth(authorization, context.credentials)
    except CredentialError as exc:
        logger.warning("token_request_rejected", reason=type(exc).__name__)
        body = OAuthErrorResponse(error=exc.error, error_description=exc.description)
        return JSONResponse(
            body.model_dump(),
            status_code=HTTP_UNAUTHORIZED,
            headers={"WWW-Authenticate": 'Basic realm="token"'},
        )

    try:
        token = issue_access_token(context, client.client_id)
    except TokenSigningError:
        logger.exception("token_signing_failed", client_id=client.client_id)
        body = OAuthErrorResponse(
            error="server_error", error_description="Failed to generate token"
        )
        return JSONResponse(
            body.model_dump(),
            status_code=HTTP_SERVER_ERROR,
        )

    return JSONResponse(token.model_dump(), headers=NO_STORE_HEADERS)
