"""API package exports."""

from courier.api.middleware import RequestContextMiddleware
from courier.api.routes import router

__all__ = ["router", "RequestContextMiddleware"]
