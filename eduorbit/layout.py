"""
Orbital layout: topological depth + rest position per topic.

Depth is the longest prerequisite chain leading into a node, found by
edge relaxation capped at ``len(nodes)`` rounds. Nodes sharing a depth
form a ring of radius ``base_radius + depth * layer_spacing``, spread
evenly by angle in node order, with a small random ``y`` offset.

Cyclic graphs are not rejected here: relaxation stops at the round cap
and depths on the cycle are whatever the last round left.
"""

import logging
from collections import defaultdict
from typing import Dict, List, Optional

import numpy as np

from eduorbit.config import DEFAULT_CONFIG, OrbitConfig
from eduorbit.models import DependencyEdge, TopicNode

logger = logging.getLogger(__name__)


# =========================================================================
# Depth
# =========================================================================


def compute_depths(
    nodes: List[TopicNode],
    edges: List[DependencyEdge],
) -> Dict[str, int]:
    """Return ``{node_id: depth}`` via capped longest-path relaxation.

    Edges whose endpoints are not in *nodes* are ignored.
    """
    depth: Dict[str, int] = {n.id: 0 for n in nodes}

    rounds = 0
    changed = True
    while changed and rounds < len(nodes):
        changed = False
        for e in edges:
            if e.source not in depth or e.target not in depth:
                continue
            if depth[e.source] + 1 > depth[e.target]:
                depth[e.target] = depth[e.source] + 1
                changed = True
        rounds += 1

    if changed and nodes:
        logger.warning(
            "Depth relaxation hit the %d-round cap; graph likely has a cycle.",
            len(nodes),
        )
    logger.debug("Depths converged after %d round(s).", rounds)
    return depth


def group_by_depth(
    nodes: List[TopicNode],
    depths: Dict[str, int],
) -> Dict[int, List[str]]:
    """Group node ids by depth, preserving node order within each layer."""
    layers: Dict[int, List[str]] = defaultdict(list)
    for n in nodes:
        layers[depths[n.id]].append(n.id)
    return dict(layers)


def layer_radius(depth: int, config: OrbitConfig = DEFAULT_CONFIG) -> float:
    """Ring radius for a layer at *depth*."""
    return config.base_radius + depth * config.layer_spacing


# =========================================================================
# Layout
# =========================================================================


def calculate_orbits(
    nodes: List[TopicNode],
    edges: List[DependencyEdge],
    rng: Optional[np.random.Generator] = None,
    config: Optional[OrbitConfig] = None,
) -> List[TopicNode]:
    """Return copies of *nodes* with ``depth`` and ``position`` filled in.

    Args:
        nodes: Current topic nodes (left untouched).
        edges: Dependency edges.
        rng: Source of the ``y`` jitter; a fresh unseeded generator when
             ``None``.
        config: Geometry; ``config.jitter == 0`` pins ``y`` to zero.

    Returns:
        New node list, same order as *nodes*.
    """
    config = config or DEFAULT_CONFIG
    rng = rng if rng is not None else np.random.default_rng()

    depths = compute_depths(nodes, edges)
    layers = group_by_depth(nodes, depths)
    index_in_layer = {
        node_id: i
        for layer in layers.values()
        for i, node_id in enumerate(layer)
    }

    positioned: List[TopicNode] = []
    for n in nodes:
        depth = depths[n.id]
        radius = layer_radius(depth, config)
        angle = index_in_layer[n.id] / len(layers[depth]) * 2 * np.pi

        x = float(np.cos(angle) * radius)
        z = float(np.sin(angle) * radius)
        y = float(rng.uniform(-config.jitter, config.jitter)) if config.jitter else 0.0

        positioned.append(
            n.model_copy(update={"depth": depth, "position": (x, y, z)}, deep=True)
        )

    logger.info(
        "Laid out %d topic(s) on %d orbit(s).", len(positioned), len(layers),
    )
    return positioned
