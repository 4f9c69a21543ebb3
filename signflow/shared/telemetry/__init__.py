"""Logging setup for the application."""

from signflow.shared.telemetry.logging import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
