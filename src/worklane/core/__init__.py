"""
Worklane core primitives: errors, structured logging and settings.
"""

from worklane.core.errors import (
    ConfigError,
    ErrorCategory,
    ErrorContext,
    OrchestrationError,
    WorklaneError,
    categorize_error,
)
from worklane.core.logging import (
    LogContext,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    unbind_context,
)
from worklane.core.settings import WorklaneSettings, get_settings

__all__ = [
    # Errors
    "ErrorCategory",
    "ErrorContext",
    "WorklaneError",
    "ConfigError",
    "OrchestrationError",
    "categorize_error",
    # Logging
    "configure_logging",
    "get_logger",
    "bind_context",
    "unbind_context",
    "clear_context",
    "LogContext",
    # Settings
    "WorklaneSettings",
    "get_settings",
]
