"""
Controller Base

Controllers own in-memory view state and tell the rendering surface when it
changed. They never touch a widget toolkit directly.
"""

from typing import Callable

from financetracker.models.results import BackendResult, Ok
from financetracker.notices import get_logger


ChangeListener = Callable[[str], None]


class Controller:
    """Common change-notification plumbing."""

    name = "controller"

    def __init__(self):
        self._change_listeners: list[ChangeListener] = []
        self._load_seq = 0
        self._logger = get_logger(f"financetracker.{self.name}")

    def subscribe(self, listener: ChangeListener) -> None:
        """listener(region) is called after every state change."""
        self._change_listeners.append(listener)

    def _changed(self, region: str) -> None:
        for listener in list(self._change_listeners):
            listener(region)

    def _next_seq(self) -> int:
        self._load_seq += 1
        return self._load_seq

    def _accept(self, result: BackendResult, seq: int, section: str) -> bool:
        """True if result is Ok and belongs to the latest load."""
        if not isinstance(result, Ok):
            self._logger.warning(
                "section_not_loaded",
                section=section,
                outcome=type(result).__name__,
                message=getattr(result, "message", None),
            )
            return False
        return self._is_current(seq)

    def _is_current(self, seq: int) -> bool:
        """
        True if no newer load was started after the one numbered seq.

        There is no cancellation. A superseded response still arrives, and
        it is dropped here instead of overwriting newer state.
        """
        if seq == self._load_seq:
            return True
        self._logger.info("stale_response_discarded", seq=seq, latest=self._load_seq)
        return False
