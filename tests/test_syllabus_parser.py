"""
pytest suite for the syllabus parser.

Pure text in, records out; no I/O except the file helper test.
"""

import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from eduorbit.syllabus_parser import parse_syllabus, parse_syllabus_file


def _by_name(nodes):
    return {n.name: n for n in nodes}


# =========================================================================
# Test: Node creation
# =========================================================================


class TestNodeCreation:
    """First pass: one node per distinct topic name."""

    def test_two_topics_one_edge(self):
        nodes, edges = parse_syllabus("A\nB: A")
        assert [n.name for n in nodes] == ["A", "B"]
        a, b = nodes
        assert len(edges) == 1
        assert edges[0].source == a.id
        assert edges[0].target == b.id
        assert b.dependencies == [a.id]
        assert a.dependencies == []

    def test_duplicate_name_single_node(self):
        nodes, edges = parse_syllabus("A\nA: ")
        assert len(nodes) == 1
        assert edges == []

    def test_node_defaults(self):
        nodes, _ = parse_syllabus("Topic")
        node = nodes[0]
        assert node.status == "LOCKED"
        assert node.depth == 0
        assert node.estimated_time == 30
        assert node.position == (0.0, 0.0, 0.0)
        assert node.dependencies == []

    def test_estimated_time_override(self):
        nodes, _ = parse_syllabus("A\nB: A", estimated_time=45)
        assert [n.estimated_time for n in nodes] == [45, 45]

    def test_ids_unique(self):
        nodes, _ = parse_syllabus("A\nB\nC\nD")
        assert len({n.id for n in nodes}) == 4

    def test_names_trimmed(self):
        nodes, edges = parse_syllabus("  Alpha  \n  Beta :   Alpha  ")
        assert [n.name for n in nodes] == ["Alpha", "Beta"]
        assert len(edges) == 1

    def test_blank_lines_skipped(self):
        nodes, _ = parse_syllabus("\n\nA\n   \n\nB\n")
        assert [n.name for n in nodes] == ["A", "B"]

    def test_first_seen_order(self):
        nodes, _ = parse_syllabus("C: A\nA\nB: C")
        assert [n.name for n in nodes] == ["C", "A", "B"]

    def test_empty_text(self):
        nodes, edges = parse_syllabus("")
        assert nodes == []
        assert edges == []


# =========================================================================
# Test: Dependency linking
# =========================================================================


class TestDependencyLinking:
    """Second pass: edges and dependency lists."""

    def test_unknown_dependency_ignored(self):
        nodes, edges = parse_syllabus("A\nB: A, Ghost")
        assert len(nodes) == 2
        assert len(edges) == 1
        names = {n.name for n in nodes}
        assert "Ghost" not in names

    def test_forward_reference_resolves(self):
        """A prerequisite declared on a later line still links."""
        nodes, edges = parse_syllabus("B: A\nA")
        by_name = _by_name(nodes)
        assert by_name["B"].dependencies == [by_name["A"].id]
        assert len(edges) == 1

    def test_later_line_augments(self):
        nodes, edges = parse_syllabus("A\nC\nB: A\nB: C")
        by_name = _by_name(nodes)
        assert len(nodes) == 3
        assert by_name["B"].dependencies == [by_name["A"].id, by_name["C"].id]
        assert len(edges) == 2

    def test_text_after_second_colon_ignored(self):
        nodes, edges = parse_syllabus("A\nB\nC: A, B: note")
        by_name = _by_name(nodes)
        assert [n.name for n in nodes] == ["A", "B", "C"]
        assert by_name["C"].dependencies == [by_name["A"].id, by_name["B"].id]
        assert [(e.source, e.target) for e in edges] == [
            (by_name["A"].id, by_name["C"].id),
            (by_name["B"].id, by_name["C"].id),
        ]

    def test_prerequisite_after_second_colon_not_linked(self):
        nodes, edges = parse_syllabus("A\nB\nC: A: B")
        by_name = _by_name(nodes)
        assert by_name["C"].dependencies == [by_name["A"].id]
        assert len(edges) == 1

    def test_repeated_dependency_listed_once(self):
        """Edge list keeps the repeat; dependencies does not."""
        nodes, edges = parse_syllabus("A\nB: A, A")
        by_name = _by_name(nodes)
        assert by_name["B"].dependencies == [by_name["A"].id]
        assert len(edges) == 2

    def test_case_sensitive_match(self):
        nodes, edges = parse_syllabus("Algebra\nCalculus: algebra")
        assert edges == []
        assert _by_name(nodes)["Calculus"].dependencies == []

    def test_dependencies_match_edges(self):
        text = "A\nB: A\nC: A, B\nD: C, B"
        nodes, edges = parse_syllabus(text)
        for node in nodes:
            sources = {e.source for e in edges if e.target == node.id}
            assert set(node.dependencies) == sources

    def test_edge_discovery_order(self):
        nodes, edges = parse_syllabus("A\nB\nC: B, A")
        by_name = _by_name(nodes)
        assert [e.source for e in edges] == [by_name["B"].id, by_name["A"].id]


# =========================================================================
# Test: File helper
# =========================================================================


class TestParseFile:

    def test_sample_syllabus(self):
        path = os.path.join(os.path.dirname(__file__), "sample_syllabus.txt")
        nodes, edges = parse_syllabus_file(path)
        assert len(nodes) == 7
        assert len(edges) == 6
        assert nodes[0].name == "React Basics"
