"""QTimer-backed scheduler for the session countdown."""

from __future__ import annotations

from collections.abc import Callable

from PySide6.QtCore import QObject, QTimer

from quizgenius.core.services.session_timer import Scheduler


class QtTimerHandle:
    """Cancellable handle around a running QTimer."""

    def __init__(self, timer: QTimer) -> None:
        self._timer = timer

    def cancel(self) -> None:
        self._timer.stop()
        self._timer.deleteLater()


def make_qt_scheduler(parent: QObject | None = None) -> Scheduler:
    """Return a scheduler that runs callbacks on the Qt event loop."""

    def schedule(interval_ms: int, callback: Callable[[], None]) -> QtTimerHandle:
        timer = QTimer(parent)
        timer.setInterval(interval_ms)
        timer.timeout.connect(callback)
        timer.start()
        return QtTimerHandle(timer)

    return schedule
