"""User-visible notices and structured logging."""

from financetracker.notices.notifier import Notifier, configure_logging, get_logger

__all__ = ["Notifier", "configure_logging", "get_logger"]
