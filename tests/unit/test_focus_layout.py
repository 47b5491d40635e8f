"""
Tests for the focus layout.

The focused node sits at the center, neighbors sit on rings, and the
settle pass never moves a pinned node.
"""

import math
import random

import pytest
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from graphlayout_core.domain.enums import LayoutStatus
from graphlayout_core.domain.models import GraphNode, GraphEdge, PositionedNode
from graphlayout_core.services.scheduler import CancellationToken, LayoutTask, run_layout_task
from graphlayout_core.services.focus_layout import (
    FIRST_RING_RADIUS,
    SECOND_RING_RADIUS,
    FocusLayoutTask,
    arrange_focus,
    apply_focused_layout,
    apply_focused_layout_chunked,
)


def no_yield():
    pass


def star_graph():
    nodes = [GraphNode(id=i) for i in "ABCDE"]
    edges = [GraphEdge(id=f"e{t}", type="LINK", source="A", target=t) for t in "BCDE"]
    return nodes, edges


def chain_graph():
    nodes = [GraphNode(id=i) for i in "ABC"]
    edges = [
        GraphEdge(id="e1", type="LINK", source="A", target="B"),
        GraphEdge(id="e2", type="LINK", source="B", target="C"),
    ]
    return nodes, edges


def by_id(positioned):
    return {p.id: (p.x, p.y) for p in positioned}


class TestPlacement:
    """Ring placement before the settle pass."""

    def test_star_neighbors_on_first_ring(self):
        nodes, edges = star_graph()
        sim, arrangement = arrange_focus(nodes, edges, "A", 800, 600)

        assert arrangement.first_ring == ["B", "C", "D", "E"]
        assert sim.state("A").pinned
        assert (sim.state("A").x, sim.state("A").y) == (400, 300)

        for k, node_id in enumerate(arrangement.first_ring):
            state = sim.state(node_id)
            angle = 2 * math.pi * k / 4
            assert state.pinned
            assert state.x == pytest.approx(400 + FIRST_RING_RADIUS * math.cos(angle))
            assert state.y == pytest.approx(300 + FIRST_RING_RADIUS * math.sin(angle))

    def test_second_degree_on_outer_ring(self):
        nodes, edges = chain_graph()
        sim, arrangement = arrange_focus(nodes, edges, "A", 1000, 800)

        assert arrangement.first_ring == ["B"]
        assert arrangement.second_ring == ["C"]
        assert (sim.state("B").x, sim.state("B").y) == pytest.approx((500 + FIRST_RING_RADIUS, 400))
        assert (sim.state("C").x, sim.state("C").y) == pytest.approx((500 + SECOND_RING_RADIUS, 400))

    def test_compact_viewport_rings_stay_distinct(self):
        nodes = [GraphNode(id="A")] + [GraphNode(id=f"B{i}") for i in range(4)] + \
            [GraphNode(id=f"C{i}") for i in range(8)]
        edges = [GraphEdge(id=f"ab{i}", type="LINK", source="A", target=f"B{i}") for i in range(4)]
        edges += [GraphEdge(id=f"bc{i}", type="LINK", source=f"B{i // 2}", target=f"C{i}")
                  for i in range(8)]

        sim, arrangement = arrange_focus(nodes, edges, "A", 400, 250)

        # Padded half-height is 45, so both rings shrink by 45 / 320
        assert arrangement.ring_scale == pytest.approx(45 / SECOND_RING_RADIUS)
        pinned = {}
        for node_id in ["A"] + arrangement.first_ring + arrangement.second_ring:
            state = sim.state(node_id)
            assert state.pinned
            pinned.setdefault((round(state.x, 6), round(state.y, 6)), []).append(node_id)
        assert all(len(ids) == 1 for ids in pinned.values())

        first_radii = {round(math.hypot(sim.state(n).x - 200, sim.state(n).y - 125), 6)
                       for n in arrangement.first_ring}
        second_radii = {round(math.hypot(sim.state(n).x - 200, sim.state(n).y - 125), 6)
                        for n in arrangement.second_ring}
        assert first_radii == {round(FIRST_RING_RADIUS * arrangement.ring_scale, 6)}
        assert second_radii == {45.0}

    def test_full_size_viewport_keeps_ring_radii(self):
        nodes, edges = star_graph()
        _, arrangement = arrange_focus(nodes, edges, "A", 800, 600)
        assert arrangement.ring_scale == 1.0

    def test_isolated_focus(self):
        nodes = [GraphNode(id="A"), GraphNode(id="B")]
        sim, arrangement = arrange_focus(nodes, [], "A", 800, 600)
        assert arrangement.first_ring == []
        assert arrangement.second_ring == []
        assert arrangement.background == ["B"]
        assert not sim.state("B").pinned

    def test_missing_target(self):
        nodes, edges = star_graph()
        assert arrange_focus(nodes, edges, "Z", 800, 600) == (None, None)


class TestSettle:
    """Pins hold through the settle pass and are released afterwards."""

    def test_focused_node_stays_centered_every_step(self):
        nodes, edges = star_graph()
        sim, _ = arrange_focus(nodes, edges, "A", 800, 600)
        total = sim.params.iterations
        for i in range(total):
            sim.step(i, total)
            state = sim.state("A")
            assert (state.x, state.y) == (400, 300)

    def test_result_keeps_ring_positions(self):
        nodes, edges = star_graph()
        result = by_id(apply_focused_layout(nodes, edges, "A", 800, 600))
        assert result["A"] == (400, 300)
        assert result["B"] == pytest.approx((580, 300))
        assert result["D"] == pytest.approx((220, 300))

    def test_pins_released_after_run(self):
        nodes, edges = star_graph()
        sim, arrangement = arrange_focus(nodes, edges, "A", 800, 600)
        outcome = run_layout_task(LayoutTask(sim, yield_hook=no_yield))
        assert outcome.is_complete
        for node_id in ["A"] + arrangement.first_ring:
            assert not sim.state(node_id).pinned


class TestBackground:
    """Unrelated nodes keep or receive positions."""

    def test_only_nodes_without_prior_are_scattered(self):
        nodes = [GraphNode(id=i) for i in "ABXY"]
        edges = [GraphEdge(id="e1", type="LINK", source="A", target="B")]
        current = {"A": (100.0, 100.0), "B": (200.0, 200.0), "X": (300.0, 150.0)}

        _, arrangement = arrange_focus(nodes, edges, "A", 800, 600, current_layout=current,
                                       rng=random.Random(1))
        assert arrangement.background == ["X", "Y"]
        assert arrangement.scattered == ["Y"]

    def test_scatter_is_deterministic_with_seeded_rng(self):
        nodes = [GraphNode(id=i) for i in "ABXY"]
        edges = [GraphEdge(id="e1", type="LINK", source="A", target="B")]
        first = apply_focused_layout(nodes, edges, "A", 800, 600, rng=random.Random(7))
        second = apply_focused_layout(nodes, edges, "A", 800, 600, rng=random.Random(7))
        assert by_id(first) == by_id(second)

    def test_scattered_nodes_inside_viewport(self):
        nodes = [GraphNode(id=f"n{i}") for i in range(8)]
        sim, arrangement = arrange_focus(nodes, [], "n0", 800, 600, rng=random.Random(3))
        for node_id in arrangement.scattered:
            state = sim.state(node_id)
            assert 80 <= state.x <= 720
            assert 80 <= state.y <= 520


class TestMissingTarget:
    """Focusing a node that is not in the graph."""

    def test_returns_current_layout_unchanged(self):
        nodes, edges = star_graph()
        current = [PositionedNode(node=n, x=100.0 + i * 10, y=200.0) for i, n in enumerate(nodes)]
        result = apply_focused_layout(nodes, edges, "Z", 800, 600, current_layout=current)
        assert result == current

    def test_without_current_layout_every_node_is_placed(self):
        nodes, edges = star_graph()
        result = apply_focused_layout(nodes, edges, "Z", 800, 600)
        assert [p.id for p in result] == list("ABCDE")

    def test_chunked_reports_done(self):
        nodes, edges = star_graph()
        seen = []
        outcome = apply_focused_layout_chunked(nodes, edges, "Z", 800, 600,
                                               progress_callback=lambda e: seen.append(e.percent))
        assert outcome.is_complete
        assert seen == [100]


class TestChunkedFocus:
    """Progress and cancellation of the chunked focus layout."""

    def test_progress_sequence(self):
        nodes, edges = star_graph()
        seen = []
        outcome = apply_focused_layout_chunked(
            nodes, edges, "A", 800, 600,
            progress_callback=lambda e: seen.append(e.percent),
            yield_hook=no_yield,
        )
        assert outcome.is_complete
        assert seen[:3] == [20, 40, 60]
        assert seen[-1] == 100
        assert seen == sorted(seen)

    def test_matches_synchronous_layout(self):
        nodes, edges = star_graph()
        sync = apply_focused_layout(nodes, edges, "A", 800, 600, rng=random.Random(5))
        chunked = apply_focused_layout_chunked(nodes, edges, "A", 800, 600,
                                               rng=random.Random(5), yield_hook=no_yield)
        assert by_id(chunked.nodes) == by_id(sync)

    def test_cancel_during_placement(self):
        nodes, edges = star_graph()
        token = CancellationToken()

        def cancel_at_40(event):
            if event.percent == 40:
                token.cancel()

        outcome = apply_focused_layout_chunked(nodes, edges, "A", 800, 600, token=token,
                                               progress_callback=cancel_at_40, generation=9)
        assert outcome.status == LayoutStatus.CANCELLED
        assert outcome.nodes is None
        assert outcome.generation == 9

    def test_arrangement_exposed(self):
        nodes, edges = star_graph()
        task = FocusLayoutTask(nodes, edges, "A", 800, 600, yield_hook=no_yield)
        run_layout_task(task)
        assert task.arrangement.focused_id == "A"
        assert task.arrangement.first_ring == ["B", "C", "D", "E"]

    def test_single_use(self):
        nodes, edges = star_graph()
        task = FocusLayoutTask(nodes, edges, "A", 800, 600, yield_hook=no_yield)
        run_layout_task(task)
        with pytest.raises(RuntimeError):
            iter(task)

    def test_inputs_not_modified(self):
        nodes, edges = star_graph()
        current = [PositionedNode(node=n, x=300.0, y=250.0 + i) for i, n in enumerate(nodes)]
        snapshot = (list(nodes), list(edges), list(current))
        apply_focused_layout(nodes, edges, "A", 800, 600, current_layout=current)
        assert (nodes, edges, current) == snapshot
