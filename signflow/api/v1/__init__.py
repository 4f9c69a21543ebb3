"""API v1."""

from signflow.api.v1.router import api_router

__all__ = ["api_router"]
