"""Stateless token introspection (RFC 7662)."""

import jwt
from pydantic import ValidationError

from m2m_auth.core.context import ServerContext
from m2m_auth.core.logging import get_logger
from m2m_auth.crypto.jwt_manager import JWTManager
from m2m_auth.oauth.token_service import TOKEN_TYPE
from m2m_auth.oauth.types import IntrospectionResponse

BEARER_PREFIX = "Bearer "

INACTIVE = IntrospectionResponse(active=False)

logger = get_logger(__name__)


def extract_token(form_token: str | None, authorization: str | None) -> str | None:
    """Pick the token from the form field, falling back to a Bearer header."""
    if form_token:
        return form_token
    if authorization and authorization.startswith(BEARER_PREFIX):
        return authorization[len(BEARER_PREFIX) :] or None
    return None


def introspect_token(context: ServerContext, token: str) -> IntrospectionResponse:
    """Verify ``token`` and describe it, or report it inactive."""
    jwt_mgr = JWTManager(context.key_pair, issuer=context.issuer)
    try:
        claims = jwt_mgr.verify_token(token)
    except (jwt.PyJWTError, ValidationError) as exc:
        logger.info("token_inactive", reason=type(exc).__name__)
        return INACTIVE

    return IntrospectionResponse(
        active=True,
        token_type=TOKEN_TYPE,
        sub=claims.sub,
        iss=claims.iss,
        exp=claims.exp,
        iat=claims.iat,
        nbf=claims.nbf,
    )
