"""Trailing debounce timer carrying the most recent payload."""

from typing import Any, Callable, Optional
from PyQt6.QtCore import QTimer

_UNSET = object()


class DebounceTimer:
    """
    Trailing debounce timer that delivers only the latest payload.

    Each trigger supersedes the pending one. The handler fires once, delay_ms
    after the last trigger, with the payload of that last trigger.

    Usage:
        self._debounce = DebounceTimer(delay_ms=250, handler=self._apply_text)

        def on_selection_changed(self, text):
            self._debounce.trigger(text)  # Replaces any pending text
    """

    def __init__(self, delay_ms: int, handler: Callable[[Any], None]):
        self._delay_ms = delay_ms
        self._handler = handler
        self._timer: Optional[QTimer] = None
        self._payload: Any = _UNSET

    @property
    def pending(self) -> bool:
        """True while a payload is waiting to be delivered."""
        return self._payload is not _UNSET

    @property
    def payload(self) -> Any:
        """The payload that will be delivered next, or None."""
        return None if self._payload is _UNSET else self._payload

    def trigger(self, payload: Any = None):
        """Schedule payload, superseding whatever was pending."""
        if self._timer is not None:
            self._timer.stop()

        self._payload = payload
        self._timer = QTimer()
        self._timer.setSingleShot(True)
        self._timer.timeout.connect(self._fire)
        self._timer.start(self._delay_ms)

    def cancel(self):
        """Cancel the pending payload."""
        if self._timer is not None:
            self._timer.stop()
            self._timer = None
        self._payload = _UNSET

    def force(self):
        """Cancel the timer and deliver the pending payload immediately."""
        if not self.pending:
            self.cancel()
            return
        payload = self._payload
        self.cancel()
        self._handler(payload)

    def _fire(self):
        payload = self._payload
        self._timer = None
        self._payload = _UNSET
        if payload is not _UNSET:
            self._handler(payload)
