"""
Notifier

DESIGN DECISION: Every user-visible notice goes through one place.
This provides:
1. A single structured log line per notice
2. A history the rendering surface can drain into toasts
3. A way for tests to count notices exactly

The notifier:
- Is synchronous; emitting never suspends the calling flow
- Gracefully handles failing listeners (a broken toast renderer must not
  break the call that produced the notice)
"""

import logging
import sys
from typing import Callable, Optional

import structlog

from financetracker.models.notice import Notice, NoticeBuilder, NoticeLevel


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


NoticeListener = Callable[[Notice], None]


class Notifier:
    """
    Central notice service.

    Notices are:
    1. Logged locally as structured events
    2. Kept in an in-memory history for the current run
    3. Pushed to any subscribed listeners (toast renderers)
    """

    def __init__(self, listeners: Optional[list[NoticeListener]] = None):
        self._listeners: list[NoticeListener] = list(listeners or [])
        self._history: list[Notice] = []
        self._logger = structlog.get_logger("financetracker.notices")

    @property
    def history(self) -> list[Notice]:
        return list(self._history)

    def subscribe(self, listener: NoticeListener) -> None:
        self._listeners.append(listener)

    def drain(self) -> list[Notice]:
        """Return and forget all notices emitted so far."""
        drained, self._history = self._history, []
        return drained

    def emit(self, notice: Notice) -> Notice:
        """
        Emit a notice.

        Always logs and records. Listener failures are logged, not raised.
        """
        log_dict = notice.to_log_dict()
        if notice.level == NoticeLevel.ERROR:
            self._logger.warning("notice", **log_dict)
        else:
            self._logger.info("notice", **log_dict)

        self._history.append(notice)

        for listener in list(self._listeners):
            try:
                listener(notice)
            except Exception as e:
                self._logger.error(
                    "notice_listener_failed",
                    error=str(e),
                    notice_id=str(notice.notice_id),
                )

        return notice

    def session_expired(self, endpoint: str) -> Notice:
        return self.emit(NoticeBuilder.session_expired(endpoint))

    def connection_error(self, endpoint: str, error: str) -> Notice:
        return self.emit(NoticeBuilder.connection_error(endpoint, error))

    def login_succeeded(self, first_name: str) -> Notice:
        return self.emit(NoticeBuilder.login_succeeded(first_name))

    def registration_succeeded(self, first_name: str) -> Notice:
        return self.emit(NoticeBuilder.registration_succeeded(first_name))

    def transaction_deleted(self, transaction_id: str) -> Notice:
        return self.emit(NoticeBuilder.transaction_deleted(transaction_id))

    def delete_failed(self, transaction_id: str, error: Optional[str] = None) -> Notice:
        return self.emit(NoticeBuilder.delete_failed(transaction_id, error))

    def checkout_redirect(self, plan_id: str, url: str) -> Notice:
        return self.emit(NoticeBuilder.checkout_redirect(plan_id, url))


def get_logger(name: str):
    """Structured logger for a component, sharing the notifier's configuration."""
    return structlog.get_logger(name)


def configure_logging(level: str = "INFO") -> None:
    """Route structlog's JSON lines to stderr at the given level."""
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)
    logging.getLogger().setLevel(level)
