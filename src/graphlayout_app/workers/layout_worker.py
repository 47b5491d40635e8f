"""
Layout worker thread.

Runs a chunked layout task in the background without blocking the UI.
The task itself is built on the UI thread, so bad arguments fail there.
"""

import logging
from typing import Union

from PyQt6.QtCore import QThread, pyqtSignal

from graphlayout_core.services.scheduler import LayoutTask
from graphlayout_core.services.focus_layout import FocusLayoutTask

logger = logging.getLogger(__name__)


class LayoutWorker(QThread):
    """
    Background thread for base and focus layouts.

    Signals:
        progress(int, int): Emitted once per batch with (generation, percent)
        finished(int, object): Emitted when the task ends with (generation, LayoutOutcome)
        failed(int, str): Emitted if the task raised, with (generation, message)
    """

    progress = pyqtSignal(int, int)  # generation, percent
    finished = pyqtSignal(int, object)  # generation, outcome
    failed = pyqtSignal(int, str)  # generation, error message

    def __init__(self, task: Union[LayoutTask, FocusLayoutTask]):
        """
        Initialize the worker.

        Args:
            task: The layout task to run (not yet iterated)
        """
        super().__init__()
        self.task = task
        self.generation = task.generation

    def cancel(self) -> None:
        """Ask the task to stop at the next batch boundary."""
        self.task.token.cancel()

    def run(self):
        """Run the layout task."""
        try:
            for event in self.task:
                self.progress.emit(self.generation, event.percent)
            self.finished.emit(self.generation, self.task.outcome)
        except Exception as e:
            logger.exception("Layout generation %d failed", self.generation)
            self.failed.emit(self.generation, f"Layout failed: {e}")
