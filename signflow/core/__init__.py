"""Core: config, exception handlers, and application lifespan."""

from signflow.core.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
