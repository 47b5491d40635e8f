"""
Tests for the force simulation.

Covers the bounds invariant, determinism, numeric degeneracy guards,
pins, and eager rejection of bad parameters.
"""

import math
import random

import pytest
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from graphlayout_core.domain.models import GraphNode, GraphEdge, LayoutParams, LayoutParamsError, NodeLayoutState
from graphlayout_core.services.simulation import (
    ForceSimulation,
    apply_force_layout,
    initialize_circle_layout,
    initialize_random_layout,
    reset_layout,
)


def make_graph(node_count, edge_count, seed=1):
    rng = random.Random(seed)
    nodes = [GraphNode(id=f"n{i}", labels=["Thing"]) for i in range(node_count)]
    edges = []
    for k in range(edge_count):
        s, t = rng.randrange(node_count), rng.randrange(node_count)
        edges.append(GraphEdge(id=f"e{k}", type="LINK", source=f"n{s}", target=f"n{t}"))
    return nodes, edges


def distance(a, b):
    return math.hypot(a.x - b.x, a.y - b.y)


class TestBounds:
    """Every returned position stays inside the padded viewport."""

    @pytest.mark.parametrize("width,height", [(800, 600), (400, 250), (1200, 400)])
    def test_positions_within_padding(self, width, height):
        nodes, edges = make_graph(40, 60)
        result = apply_force_layout(nodes, edges, width, height)
        padding = LayoutParams().padding
        assert len(result) == 40
        for p in result:
            assert padding <= p.x <= width - padding
            assert padding <= p.y <= height - padding

    def test_starting_positions_outside_viewport_are_pulled_in(self):
        nodes, edges = make_graph(5, 4)
        initial = {n.id: (-500.0, 5000.0) for n in nodes}
        result = apply_force_layout(nodes, edges, 800, 600, initial=initial)
        for p in result:
            assert 80 <= p.x <= 720
            assert 80 <= p.y <= 520


    def test_zero_iterations_seeded_circle_in_bounds(self):
        nodes, _ = make_graph(6, 0)
        result = apply_force_layout(nodes, [], 800, 200, params=LayoutParams(iterations=0))
        for p in result:
            assert 80 <= p.x <= 720
            assert 80 <= p.y <= 120

    def test_zero_iterations_out_of_band_initial_in_bounds(self):
        nodes, _ = make_graph(6, 0)
        initial = initialize_random_layout(nodes, 800, 600, rng=random.Random(4))
        initial["n0"] = (0.0, 600.0)
        result = apply_force_layout(nodes, [], 800, 600, params=LayoutParams(iterations=0),
                                    initial=initial)
        for p in result:
            assert 80 <= p.x <= 720
            assert 80 <= p.y <= 520
        assert (result[0].x, result[0].y) == (80, 520)


class TestDeterminism:
    """Identical inputs give identical outputs."""

    def test_two_runs_identical(self):
        nodes, edges = make_graph(25, 40)
        initial = initialize_random_layout(nodes, 800, 600, rng=random.Random(3))
        first = apply_force_layout(nodes, edges, 800, 600, initial=initial)
        second = apply_force_layout(nodes, edges, 800, 600, initial=initial)
        assert [(p.x, p.y) for p in first] == [(p.x, p.y) for p in second]

    def test_unset_positions_seeded_on_circle(self):
        nodes, _ = make_graph(4, 0)
        sim = ForceSimulation(nodes, [], 800, 600)
        radius = 0.3 * 600
        for i, node in enumerate(nodes):
            state = sim.state(node.id)
            angle = 2 * math.pi * i / 4
            assert state.x == pytest.approx(400 + radius * math.cos(angle))
            assert state.y == pytest.approx(300 + radius * math.sin(angle))


class TestScenarios:
    """Small graphs with known outcomes."""

    def test_triangle_settles_near_ideal_length(self):
        nodes = [GraphNode(id=i) for i in ("A", "B", "C")]
        edges = [
            GraphEdge(id="ab", type="T", source="A", target="B"),
            GraphEdge(id="bc", type="T", source="B", target="C"),
            GraphEdge(id="ca", type="T", source="C", target="A"),
        ]
        result = {p.id: p for p in apply_force_layout(nodes, edges, 400, 400)}

        sides = [
            distance(result["A"], result["B"]),
            distance(result["B"], result["C"]),
            distance(result["C"], result["A"]),
        ]
        # Center gravity balances the springs somewhat short of 120
        for side in sides:
            assert 0.7 * 120 <= side <= 1.3 * 120
        assert max(sides) - min(sides) < 1.0
        for p in result.values():
            assert 80 <= p.x <= 320
            assert 80 <= p.y <= 320

    def test_empty_graph(self):
        assert apply_force_layout([], [], 800, 600) == []

    def test_single_node(self):
        result = apply_force_layout([GraphNode(id="solo")], [], 800, 600)
        assert len(result) == 1
        assert math.isfinite(result[0].x) and math.isfinite(result[0].y)


class TestDegenerateInput:
    """Data anomalies are recovered, not raised."""

    def test_dangling_edges_skipped(self):
        nodes = [GraphNode(id="a"), GraphNode(id="b")]
        edges = [
            GraphEdge(id="1", type="T", source="a", target="b"),
            GraphEdge(id="2", type="T", source="a", target="missing"),
        ]
        sim = ForceSimulation(nodes, edges, 800, 600)
        assert sim.edge_count == 1
        sim.run()
        assert len(sim.result()) == 2

    def test_coincident_nodes_separate_without_nan(self):
        nodes = [GraphNode(id="a"), GraphNode(id="b"), GraphNode(id="c")]
        initial = {"a": (400.0, 300.0), "b": (400.0, 300.0), "c": (400.0, 300.0)}
        result = apply_force_layout(nodes, [], 800, 600, initial=initial)
        for p in result:
            assert math.isfinite(p.x) and math.isfinite(p.y)
        assert distance(result[0], result[1]) > 1.0
        assert distance(result[1], result[2]) > 1.0

    def test_non_finite_initial_position_treated_as_unset(self):
        nodes = [GraphNode(id="a"), GraphNode(id="b")]
        initial = {"a": (float("nan"), 10.0)}
        result = apply_force_layout(nodes, [], 800, 600, initial=initial)
        assert all(math.isfinite(p.x) and math.isfinite(p.y) for p in result)

    def test_duplicate_node_ids_keep_first(self):
        nodes = [GraphNode(id="a", labels=["First"]), GraphNode(id="a", labels=["Second"])]
        result = apply_force_layout(nodes, [], 800, 600)
        assert len(result) == 1
        assert result[0].node.labels == ["First"]


class TestInputsUntouched:
    """Layout works on private copies."""

    def test_nodes_edges_and_initial_not_modified(self):
        nodes, edges = make_graph(10, 12)
        initial = initialize_circle_layout(nodes, 800, 600)
        nodes_before, edges_before, initial_before = list(nodes), list(edges), dict(initial)

        result = apply_force_layout(nodes, edges, 800, 600, initial=initial)

        assert nodes == nodes_before
        assert edges == edges_before
        assert initial == initial_before
        assert [p.node for p in result] == nodes


class TestPins:
    """Pinned nodes hold their position every iteration."""

    def test_pinned_node_stays_put(self):
        nodes, edges = make_graph(12, 20)
        sim = ForceSimulation(nodes, edges, 800, 600)
        sim.pin("n0", 250.0, 350.0)
        total = sim.params.iterations
        for i in range(total):
            sim.step(i, total)
            state = sim.state("n0")
            assert (state.x, state.y) == (250.0, 350.0)

    def test_pin_clamped_into_viewport(self):
        sim = ForceSimulation([GraphNode(id="a")], [], 800, 600)
        sim.pin("a", 5000.0, -20.0)
        state = sim.state("a")
        assert (state.fx, state.fy) == (720.0, 80.0)

    def test_pin_unknown_node(self):
        sim = ForceSimulation([GraphNode(id="a")], [], 800, 600)
        assert sim.pin("nope", 1.0, 1.0) is False

    def test_unpin_all(self):
        sim = ForceSimulation([GraphNode(id="a"), GraphNode(id="b")], [], 800, 600)
        sim.pin("a", 300.0, 300.0)
        sim.pin("b", 500.0, 300.0)
        sim.unpin_all()
        assert not sim.state("a").pinned
        assert not sim.state("b").pinned

    def test_reset_layout_returns_unpinned_copies(self):
        states = {"a": NodeLayoutState(x=1.0, y=2.0, fx=1.0, fy=2.0)}
        reset = reset_layout(states)
        assert not reset["a"].pinned
        assert states["a"].pinned
        assert (reset["a"].x, reset["a"].y) == (1.0, 2.0)


class TestParameterValidation:
    """Programming errors are rejected at the call boundary."""

    @pytest.mark.parametrize("overrides", [
        {"iterations": -1},
        {"repulsion_strength": -10.0},
        {"attraction_strength": -0.1},
        {"center_strength": -0.1},
        {"friction": 1.5},
        {"ideal_edge_length": 0.0},
        {"min_node_distance": -1.0},
        {"padding": -5.0},
    ])
    def test_invalid_params_rejected(self, overrides):
        params = LayoutParams().with_overrides(**overrides)
        with pytest.raises(LayoutParamsError):
            apply_force_layout([GraphNode(id="a")], [], 800, 600, params=params)

    def test_invalid_params_are_value_errors(self):
        with pytest.raises(ValueError):
            LayoutParams(iterations=-3).validate()

    @pytest.mark.parametrize("width,height", [(0, 600), (800, -1), (100, 600), (800, 150)])
    def test_viewport_too_small(self, width, height):
        with pytest.raises(ValueError):
            ForceSimulation([GraphNode(id="a")], [], width, height)

    def test_zero_iterations_returns_seed_positions(self):
        nodes, _ = make_graph(3, 0)
        params = LayoutParams(iterations=0)
        result = apply_force_layout(nodes, [], 800, 600, params=params)
        seeded = ForceSimulation(nodes, [], 800, 600).result()
        assert [(p.x, p.y) for p in result] == [(p.x, p.y) for p in seeded]


class TestStartingLayouts:
    """Helper starting layouts."""

    def test_circle_layout_radius(self):
        nodes, _ = make_graph(6, 0)
        positions = initialize_circle_layout(nodes, 800, 600)
        for x, y in positions.values():
            assert math.hypot(x - 400, y - 300) == pytest.approx(0.35 * 600)

    def test_random_layout_seeded(self):
        nodes, _ = make_graph(6, 0)
        a = initialize_random_layout(nodes, 800, 600, rng=random.Random(11))
        b = initialize_random_layout(nodes, 800, 600, rng=random.Random(11))
        assert a == b
        assert all(0 <= x <= 800 and 0 <= y <= 600 for x, y in a.values())
