"""
Base ViewModel for views backed by background work.

Owns the state every long-running view shares:
- busy flag and 0-100 progress, each with a change signal
- the current worker and the list of workers still running, so a
  superseded QThread is not garbage collected mid-batch
"""

from typing import Optional, Any, List

from PyQt6.QtCore import QObject, QThread, pyqtSignal


class BaseViewModel(QObject):
    """
    Base class for ViewModels that run work off the UI thread.

    Signals:
        progress_changed(int): Emitted when progress changes (0-100)
        busy_changed(bool): Emitted when work starts or ends

    Subclasses start workers through _run_worker() and report state
    through _set_busy() / _set_progress(). Workers are expected to
    provide cancel().
    """

    progress_changed = pyqtSignal(int)  # percent
    busy_changed = pyqtSignal(bool)  # is_busy

    def __init__(self, parent: Optional[QObject] = None, threaded: bool = True):
        """
        Initialize the ViewModel.

        Args:
            parent: Optional parent QObject for Qt memory management
            threaded: Start workers on their own thread; False runs them inline
        """
        super().__init__(parent)
        self._threaded = threaded
        self._progress = 0
        self._is_busy = False

        # Worker thread references
        self._current_worker: Optional[QThread] = None
        self._workers: List[QThread] = []

    @property
    def progress(self) -> int:
        return self._progress

    @property
    def is_busy(self) -> bool:
        return self._is_busy

    def _notify_change(self, signal: pyqtSignal, *args: Any) -> None:
        """
        Emit a change notification.

        Args:
            signal: The signal to emit
            *args: Arguments to pass to the signal
        """
        signal.emit(*args)

    def _set_busy(self, busy: bool) -> None:
        if self._is_busy != busy:
            self._is_busy = busy
            self._notify_change(self.busy_changed, busy)

    def _set_progress(self, percent: int) -> None:
        self._progress = percent
        self._notify_change(self.progress_changed, percent)

    def _run_worker(self, worker: QThread) -> None:
        """Make worker the current one and start it (inline when not threaded)."""
        self._workers = [w for w in self._workers if w.isRunning()]
        self._current_worker = worker
        if self._threaded:
            self._workers.append(worker)
            worker.start()
        else:
            worker.run()

    def _cancel_worker(self) -> None:
        """Cancel the current worker; it stays referenced until its thread ends."""
        if self._current_worker is not None:
            self._current_worker.cancel()
            self._current_worker = None
