"""
pytest suite for the orbital layout engine.

Jitter is pinned either with ``OrbitConfig(jitter=0)`` or a seeded
numpy ``Generator`` so every assertion is deterministic.
"""

import math
import os
import sys

import numpy as np
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from eduorbit.config import OrbitConfig
from eduorbit.layout import calculate_orbits, compute_depths, group_by_depth, layer_radius
from eduorbit.models import DependencyEdge, TopicNode
from eduorbit.syllabus_parser import parse_syllabus

NO_JITTER = OrbitConfig(jitter=0)


def _node(node_id, deps=()):
    return TopicNode(id=node_id, name=node_id, dependencies=list(deps))


def _edge(src, tgt):
    return DependencyEdge(source=src, target=tgt)


# =========================================================================
# Test: Depth relaxation
# =========================================================================


class TestDepths:
    """Longest-path depth on DAGs."""

    def test_roots_are_zero(self):
        nodes = [_node("a"), _node("b")]
        assert compute_depths(nodes, []) == {"a": 0, "b": 0}

    def test_chain(self):
        nodes = [_node("a"), _node("b"), _node("c")]
        edges = [_edge("a", "b"), _edge("b", "c")]
        assert compute_depths(nodes, edges) == {"a": 0, "b": 1, "c": 2}

    def test_longest_path_wins(self):
        """d is reachable in 1 hop from a and in 3 hops via b, c."""
        nodes = [_node(x) for x in "abcd"]
        edges = [_edge("a", "d"), _edge("c", "d"), _edge("b", "c"), _edge("a", "b")]
        depths = compute_depths(nodes, edges)
        assert depths["d"] == 3

    def test_edge_inequality_holds(self):
        text = "A\nB: A\nC: A\nD: B, C\nE: D, A\nF: E, C"
        nodes, edges = parse_syllabus(text)
        depths = compute_depths(nodes, edges)
        for e in edges:
            assert depths[e.target] >= depths[e.source] + 1

    def test_reverse_ordered_edges_converge(self):
        """Edges listed deepest-first need several rounds but still converge."""
        ids = [f"n{i}" for i in range(6)]
        nodes = [_node(i) for i in ids]
        edges = [_edge(ids[i], ids[i + 1]) for i in reversed(range(5))]
        depths = compute_depths(nodes, edges)
        assert [depths[i] for i in ids] == [0, 1, 2, 3, 4, 5]

    def test_cycle_terminates(self):
        nodes = [_node("a"), _node("b")]
        edges = [_edge("a", "b"), _edge("b", "a")]
        depths = compute_depths(nodes, edges)
        assert set(depths) == {"a", "b"}

    def test_unknown_endpoint_ignored(self):
        nodes = [_node("a")]
        assert compute_depths(nodes, [_edge("ghost", "a")]) == {"a": 0}

    def test_group_by_depth_preserves_order(self):
        nodes = [_node(x) for x in "abcd"]
        depths = {"a": 0, "b": 1, "c": 0, "d": 1}
        assert group_by_depth(nodes, depths) == {0: ["a", "c"], 1: ["b", "d"]}


# =========================================================================
# Test: Positions
# =========================================================================


class TestPositions:
    """Ring radius, angle spacing and y jitter."""

    def test_layer_radius(self):
        assert layer_radius(0) == 15
        assert layer_radius(1) == 23
        assert layer_radius(3) == 39

    def test_single_root_position(self):
        out = calculate_orbits([_node("a")], [], config=NO_JITTER)
        assert out[0].position == pytest.approx((15.0, 0.0, 0.0))

    def test_layer_angles(self):
        nodes = [_node(x) for x in "abcd"]
        out = calculate_orbits(nodes, [], config=NO_JITTER)
        expected = [
            (15.0, 0.0, 0.0),
            (0.0, 0.0, 15.0),
            (-15.0, 0.0, 0.0),
            (0.0, 0.0, -15.0),
        ]
        for node, exp in zip(out, expected):
            assert node.position == pytest.approx(exp, abs=1e-9)

    def test_depth_sets_radius(self):
        nodes = [_node("a"), _node("b"), _node("c")]
        edges = [_edge("a", "b"), _edge("b", "c")]
        out = calculate_orbits(nodes, edges, config=NO_JITTER)
        for node in out:
            x, _, z = node.position
            assert math.hypot(x, z) == pytest.approx(15 + node.depth * 8)

    def test_jitter_within_bounds(self):
        nodes = [_node(f"n{i}") for i in range(50)]
        out = calculate_orbits(nodes, [], rng=np.random.default_rng(7))
        ys = [n.position[1] for n in out]
        assert all(-2.5 <= y <= 2.5 for y in ys)
        assert len(set(ys)) > 1

    def test_seeded_rng_reproducible(self):
        nodes = [_node(f"n{i}") for i in range(5)]
        a = calculate_orbits(nodes, [], rng=np.random.default_rng(42))
        b = calculate_orbits(nodes, [], rng=np.random.default_rng(42))
        assert [n.position for n in a] == [n.position for n in b]

    def test_custom_geometry(self):
        config = OrbitConfig(base_radius=10, layer_spacing=5, jitter=0)
        nodes = [_node("a"), _node("b")]
        out = calculate_orbits(nodes, [_edge("a", "b")], config=config)
        assert out[1].position == pytest.approx((15.0, 0.0, 0.0))


# =========================================================================
# Test: Purity and idempotence
# =========================================================================


class TestLayoutContract:

    def test_inputs_untouched(self):
        nodes, edges = parse_syllabus("A\nB: A")
        before = [n.model_dump() for n in nodes]
        calculate_orbits(nodes, edges, config=NO_JITTER)
        assert [n.model_dump() for n in nodes] == before

    def test_repeat_layout_stable_depth_and_xz(self):
        nodes, edges = parse_syllabus("A\nB: A\nC: A\nD: B, C")
        first = calculate_orbits(nodes, edges, rng=np.random.default_rng(1))
        second = calculate_orbits(first, edges, rng=np.random.default_rng(2))
        for a, b in zip(first, second):
            assert a.depth == b.depth
            assert a.position[0] == pytest.approx(b.position[0])
            assert a.position[2] == pytest.approx(b.position[2])

    def test_names_and_ids_preserved(self):
        nodes, edges = parse_syllabus("A\nB: A")
        out = calculate_orbits(nodes, edges, config=NO_JITTER)
        assert [(n.id, n.name) for n in out] == [(n.id, n.name) for n in nodes]

    def test_empty_graph(self):
        assert calculate_orbits([], []) == []
