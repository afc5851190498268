"""FastAPI dependency injection for the shared server context."""

from fastapi import Request

from m2m_auth.core.context import ServerContext


def get_context(request: Request) -> ServerContext:
    """Return the context the application was created with."""
    context: ServerContext = request.app.state.context
    return context
