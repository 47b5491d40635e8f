"""
Chunked Layout Scheduler.

Runs a ForceSimulation in small batches of iterations so a single-threaded
host can interleave other work. Between batches the task:
- reports progress (0-100)
- checks its CancellationToken
- yields control through a cooperative hook

A LayoutTask is a finite, ordered, one-shot iterator of LayoutProgress
events. Once exhausted, task.outcome holds the LayoutOutcome. A cancelled
run never exposes positions.
"""

import logging
import time
from typing import Callable, Iterable, Iterator, Optional, Sequence

from ..domain.enums import LayoutStatus
from ..domain.models import (
    GraphNode,
    GraphEdge,
    LayoutParams,
    LayoutProgress,
    LayoutOutcome,
)
from .simulation import ForceSimulation, InitialLayout

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[LayoutProgress], None]

# Above this node count batches get smaller
LARGE_GRAPH_NODES = 200


class CancellationToken:
    """Cooperative cancel flag, checked between batches only."""

    def __init__(self):
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


def chunk_size_for(node_count: int) -> int:
    """Iterations per batch; smaller for large graphs to bound batch cost."""
    return 5 if node_count > LARGE_GRAPH_NODES else 10


def _default_yield() -> None:
    # Releases the GIL so the UI thread can run between batches
    time.sleep(0)


class LayoutTask:
    """
    Cancellable, chunked run of a ForceSimulation.

    Usage:
        task = LayoutTask(sim, token=token)
        for event in task:
            show(event.percent)
        if task.outcome.is_complete:
            render(task.outcome.nodes)
    """

    def __init__(
        self,
        simulation: ForceSimulation,
        token: Optional[CancellationToken] = None,
        progress_callback: Optional[ProgressCallback] = None,
        yield_hook: Optional[Callable[[], None]] = None,
        generation: int = 0,
        chunk_size: Optional[int] = None,
        progress_offset: int = 0,
        progress_span: int = 100,
    ):
        """
        Initialize the task.

        Args:
            simulation: Simulation to drive (owned by this task from now on)
            token: Cancellation token (a fresh one if None)
            progress_callback: Called once per batch with the progress event
            yield_hook: Called between batches to let the host run
            generation: Request token carried through to the outcome
            chunk_size: Iterations per batch (derived from node count if None)
            progress_offset: Percent reported before the first batch
            progress_span: Percent range the batches map onto
        """
        self.simulation = simulation
        self.token = token or CancellationToken()
        self.generation = generation
        self.total = simulation.iteration_budget
        self.chunk_size = chunk_size or chunk_size_for(simulation.node_count)
        if self.chunk_size <= 0:
            raise ValueError(f"chunk_size must be > 0, got {self.chunk_size}")

        self._progress_callback = progress_callback
        self._yield_hook = yield_hook or _default_yield
        self._progress_offset = progress_offset
        self._progress_span = progress_span
        self._started = False
        self.outcome: Optional[LayoutOutcome] = None

    def __iter__(self) -> Iterator[LayoutProgress]:
        if self._started:
            raise RuntimeError("LayoutTask can only be run once")
        self._started = True
        return self._run()

    def _report(self, done: int) -> LayoutProgress:
        fraction = done / self.total if self.total else 1.0
        percent = self._progress_offset + round(fraction * self._progress_span)
        event = LayoutProgress(percent=percent, iteration=done, total=self.total)
        if self._progress_callback:
            self._progress_callback(event)
        return event

    def _run(self) -> Iterator[LayoutProgress]:
        sim = self.simulation

        if self.total == 0:
            if self.token.cancelled:
                self._cancel(0)
                return
            yield self._report(0)
            self._complete()
            return

        for start in range(0, self.total, self.chunk_size):
            if self.token.cancelled:
                self._cancel(start)
                return

            end = min(start + self.chunk_size, self.total)
            for iteration in range(start, end):
                sim.step(iteration, self.total)

            yield self._report(end)

            if end < self.total:
                self._yield_hook()

        if self.token.cancelled:
            self._cancel(self.total)
            return
        self._complete()

    def _cancel(self, done: int) -> None:
        logger.debug("Layout generation %d cancelled after %d/%d iterations",
                     self.generation, done, self.total)
        self.outcome = LayoutOutcome.cancelled(self.generation)

    def _complete(self) -> None:
        self.simulation.unpin_all()
        self.outcome = LayoutOutcome(
            status=LayoutStatus.COMPLETED,
            nodes=self.simulation.result(),
            generation=self.generation,
        )


def run_layout_task(task: Iterable[LayoutProgress]) -> LayoutOutcome:
    """Drain a task and return its outcome."""
    for _ in task:
        pass
    return task.outcome


def apply_force_layout_chunked(
    nodes: Sequence[GraphNode],
    edges: Sequence[GraphEdge],
    width: float,
    height: float,
    params: Optional[LayoutParams] = None,
    initial: Optional[InitialLayout] = None,
    progress_callback: Optional[ProgressCallback] = None,
    token: Optional[CancellationToken] = None,
    generation: int = 0,
    yield_hook: Optional[Callable[[], None]] = None,
) -> LayoutOutcome:
    """
    Compute a force-directed layout in batches.

    Args:
        nodes: Nodes to lay out
        edges: Edges (dangling ones are ignored)
        width: Viewport width
        height: Viewport height
        params: Tuning (defaults to LayoutParams())
        initial: Optional starting positions
        progress_callback: Called after each batch
        token: Cancellation token checked between batches
        generation: Request token carried through to the outcome
        yield_hook: Called between batches

    Returns:
        LayoutOutcome (nodes is None if cancelled)
    """
    sim = ForceSimulation(nodes, edges, width, height, params, initial)
    task = LayoutTask(
        sim,
        token=token,
        progress_callback=progress_callback,
        yield_hook=yield_hook,
        generation=generation,
    )
    return run_layout_task(task)
