"""Access token issuance for the client-credentials grant."""

from m2m_auth.core.context import ServerContext
from m2m_auth.core.logging import get_logger
from m2m_auth.crypto.jwt_manager import ACCESS_TOKEN_TTL, JWTManager
from m2m_auth.oauth.types import TokenResponse

TOKEN_TYPE = "Bearer"

logger = get_logger(__name__)


def issue_access_token(context: ServerContext, client_id: str) -> TokenResponse:
    """Sign a fresh access token for an authenticated client."""
    jwt_mgr = JWTManager(context.key_pair, issuer=context.issuer)
    access_jwt = jwt_mgr.create_access_token(client_id)
    logger.info("access_token_issued", client_id=client_id)
    return TokenResponse(
        access_token=access_jwt,
        token_type=TOKEN_TYPE,
        expires_in=ACCESS_TOKEN_TTL,
    )
