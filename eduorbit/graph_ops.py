"""
Graph mutation helpers.

Every function takes an explicit ``(nodes, edges)`` snapshot and returns
a new one; nothing here holds state between calls.
"""

import logging
from typing import List, Optional, Tuple

import numpy as np

from eduorbit.config import OrbitConfig
from eduorbit.dag_validator import CycleError, would_create_cycle
from eduorbit.layout import calculate_orbits
from eduorbit.models import DependencyEdge, TopicNode, TopicStatus

logger = logging.getLogger(__name__)


# =========================================================================
# Lookup
# =========================================================================


def find_node(nodes: List[TopicNode], node_id: str) -> Optional[TopicNode]:
    """Return the node with *node_id*, or ``None``."""
    return next((n for n in nodes if n.id == node_id), None)


def resolve_node(nodes: List[TopicNode], ref: str) -> Optional[TopicNode]:
    """Look a node up by id first, then by exact name."""
    node = find_node(nodes, ref)
    if node is not None:
        return node
    return next((n for n in nodes if n.name == ref.strip()), None)


# =========================================================================
# Mutation
# =========================================================================


def add_edge(
    nodes: List[TopicNode],
    edges: List[DependencyEdge],
    source: str,
    target: str,
    rng: Optional[np.random.Generator] = None,
    config: Optional[OrbitConfig] = None,
    reject_cycles: bool = False,
) -> Tuple[List[TopicNode], List[DependencyEdge]]:
    """Add ``source → target`` and re-run the orbit layout.

    Returns the inputs unchanged when the edge already exists. Self-loops
    and cycles are accepted unless *reject_cycles* is set, in which case
    ``CycleError`` is raised and nothing is added.
    """
    if any(e.source == source and e.target == target for e in edges):
        logger.debug("Edge %s → %s already present; no-op.", source, target)
        return nodes, edges

    if reject_cycles and would_create_cycle(edges, source, target):
        raise CycleError(source, target)

    new_edges = list(edges) + [DependencyEdge(source=source, target=target)]
    updated: List[TopicNode] = []
    for n in nodes:
        if n.id == target and source not in n.dependencies:
            n = n.model_copy(update={"dependencies": n.dependencies + [source]})
        updated.append(n)

    logger.info("Added edge %s → %s (%d edges total).", source, target, len(new_edges))
    return calculate_orbits(updated, new_edges, rng=rng, config=config), new_edges


def update_node_status(
    nodes: List[TopicNode],
    node_id: str,
    status: TopicStatus,
) -> List[TopicNode]:
    """Return *nodes* with the status of *node_id* replaced."""
    return [
        n.model_copy(update={"status": status}) if n.id == node_id else n
        for n in nodes
    ]
