"""OAuth2-shaped bodies for framework-level HTTP errors."""

from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import JSONResponse

from m2m_auth.core.logging import get_logger
from m2m_auth.oauth.types import OAuthErrorResponse

HTTP_BAD_REQUEST = 400
HTTP_SERVER_ERROR = 500

logger = get_logger(__name__)


def oauth_error_code(status_code: int) -> str:
    """Map an HTTP status to the OAuth2 error code reported for it."""
    if status_code >= HTTP_SERVER_ERROR:
        return "server_error"
    return "invalid_request"


def _error_response(
    status_code: int, headers: dict[str, str] | None = None
) -> JSONResponse:
    body = OAuthErrorResponse(
        error=oauth_error_code(status_code),
        error_description=HTTPStatus(status_code).phrase,
    )
    return JSONResponse(body.model_dump(), status_code=status_code, headers=headers)


def setup_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers with the FastAPI application."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request,
        exc: StarletteHTTPException,
    ) -> JSONResponse:
        """Render routing and body-parsing failures without parser detail."""
        logger.info(
            "http_error",
            path=request.url.path,
            method=request.method,
            status_code=exc.status_code,
            detail=str(exc.detail),
        )
        return _error_response(exc.status_code, exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        """Report malformed request parameters as an invalid request."""
        logger.info(
            "request_validation_failed",
            path=request.url.path,
            errors=len(exc.errors()),
        )
        return _error_response(HTTP_BAD_REQUEST)
