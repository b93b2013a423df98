"""``Scheduler`` implementation backed by single-shot ``QTimer`` objects."""

from __future__ import annotations

from collections.abc import Callable

from PySide6.QtCore import QObject, QTimer


class QtScheduledCall:
    def __init__(self, timer: QTimer) -> None:
        self._timer = timer
        self._pending = True

    def cancel(self) -> None:
        if not self._pending:
            return
        self._pending = False
        self._timer.stop()
        self._timer.deleteLater()

    def _fired(self) -> None:
        self._pending = False
        self._timer.deleteLater()


class QtScheduler:
    """Runs attempt callbacks on the Qt event loop that owns ``parent``."""

    def __init__(self, parent: QObject) -> None:
        self._parent = parent

    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> QtScheduledCall:
        timer = QTimer(self._parent)
        timer.setSingleShot(True)
        timer.setInterval(max(int(delay_seconds * 1000), 0))
        call = QtScheduledCall(timer)

        def fire() -> None:
            call._fired()
            callback()

        timer.timeout.connect(fire)
        timer.start()
        return call
