"""Telemetry helpers for external command activity."""

from .logger import CommandLogger, configure_logging

__all__ = ["CommandLogger", "configure_logging"]
