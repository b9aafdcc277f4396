from stargazer.core.logging.logger import (
    LogContext,
    clear_log_context,
    get_logger,
    setup_logging,
    shutdown_logging,
)

__all__ = [
    "LogContext",
    "clear_log_context",
    "get_logger",
    "setup_logging",
    "shutdown_logging",
]
