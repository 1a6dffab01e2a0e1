"""
DAG validation: cycle detection and graph metrics for topic graphs.

Uses ``networkx.DiGraph`` for cycle detection and longest-path
computation. The layout and path search never call into this module;
it backs the opt-in cycle guard of ``add_edge`` and the ``stats`` CLI.
"""

import logging
from typing import Any, Dict, List, Optional

import networkx as nx

from eduorbit.models import DependencyEdge, TopicNode

logger = logging.getLogger(__name__)


class CycleError(ValueError):
    """Raised when an edge would close a dependency cycle."""

    def __init__(self, source: str, target: str):
        super().__init__(f"Edge {source} → {target} would create a cycle.")
        self.source = source
        self.target = target


# =========================================================================
# Graph construction
# =========================================================================


def build_digraph(
    nodes: List[TopicNode],
    edges: List[DependencyEdge],
) -> nx.DiGraph:
    """Build a ``DiGraph`` with every topic as a node (isolated ones too)."""
    G = nx.DiGraph()
    for n in nodes:
        G.add_node(n.id, name=n.name)
    for e in edges:
        G.add_edge(e.source, e.target)
    return G


# =========================================================================
# Validation
# =========================================================================


def validate_dag(nodes: List[TopicNode], edges: List[DependencyEdge]) -> bool:
    """Verify that the graph is acyclic (topological sort succeeds)."""
    G = build_digraph(nodes, edges)
    try:
        list(nx.topological_sort(G))
        return True
    except nx.NetworkXUnfeasible:
        return False


def find_cycle(edges: List[DependencyEdge]) -> Optional[List[str]]:
    """Return the node ids of one cycle, or ``None`` if there is none."""
    G = nx.DiGraph()
    G.add_edges_from((e.source, e.target) for e in edges)
    try:
        cycle = nx.find_cycle(G, orientation="original")
    except nx.NetworkXNoCycle:
        return None
    return [u for u, _, _ in cycle]


def would_create_cycle(
    edges: List[DependencyEdge],
    source: str,
    target: str,
) -> bool:
    """Return ``True`` if adding ``source → target`` closes a cycle.

    A self-loop counts as a cycle. Otherwise the new edge closes a cycle
    exactly when *source* is already reachable from *target*.
    """
    if source == target:
        return True
    G = nx.DiGraph()
    G.add_edges_from((e.source, e.target) for e in edges)
    if target not in G or source not in G:
        return False
    return nx.has_path(G, target, source)


# =========================================================================
# Metrics
# =========================================================================


def compute_metrics(
    nodes: List[TopicNode],
    edges: List[DependencyEdge],
) -> Dict[str, Any]:
    """Compute graph summary metrics.

    Returns dict with: total_topics, total_edges, max_depth, root_count,
    isolated_nodes_count, is_dag.
    """
    G = build_digraph(nodes, edges)
    is_dag = nx.is_directed_acyclic_graph(G)

    if G.number_of_edges() > 0 and is_dag:
        max_depth = nx.dag_longest_path_length(G)
    else:
        max_depth = 0

    roots = [n for n in G.nodes if G.in_degree(n) == 0]
    isolated = list(nx.isolates(G))

    if not is_dag:
        logger.warning("Topic graph contains a cycle; max_depth reported as 0.")

    return {
        "total_topics": G.number_of_nodes(),
        "total_edges": G.number_of_edges(),
        "max_depth": max_depth,
        "root_count": len(roots),
        "isolated_nodes_count": len(isolated),
        "is_dag": is_dag,
    }
