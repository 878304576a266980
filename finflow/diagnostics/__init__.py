"""Diagnostics logging package."""

from finflow.diagnostics.logger import DiagnosticsLogger, configure_logging

__all__ = ["DiagnosticsLogger", "configure_logging"]
