"""Tests for core utilities."""

import pytest


def test_debounce_timer_supersedes_payload(qapp):
    """Test only the latest payload is delivered."""
    from pyqt_dragact.core import DebounceTimer

    delivered = []
    timer = DebounceTimer(delay_ms=50, handler=delivered.append)

    timer.trigger("first")
    timer.trigger("second")
    assert timer.pending
    assert timer.payload == "second"

    timer.force()
    assert delivered == ["second"]
    assert not timer.pending


def test_debounce_timer_cancel(qapp):
    """Test a cancelled payload is never delivered."""
    from pyqt_dragact.core import DebounceTimer

    delivered = []
    timer = DebounceTimer(delay_ms=50, handler=delivered.append)

    timer.trigger("text")
    timer.cancel()
    timer.force()

    assert delivered == []
    assert timer.payload is None


def test_debounce_timer_fires_after_delay(qapp):
    """Test the handler runs once the event loop reaches the deadline."""
    from PyQt6.QtCore import QEventLoop, QTimer
    from pyqt_dragact.core import DebounceTimer

    delivered = []
    timer = DebounceTimer(delay_ms=10, handler=delivered.append)
    timer.trigger("late")

    loop = QEventLoop()
    QTimer.singleShot(100, loop.quit)
    loop.exec()

    assert delivered == ["late"]
