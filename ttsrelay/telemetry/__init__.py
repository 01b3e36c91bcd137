"""Telemetry and observability helpers.

This package emits structured relay events through loguru.
"""

from .logger import RelayLogger, configure_logging

__all__ = ["RelayLogger", "configure_logging"]
