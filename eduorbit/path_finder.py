"""
Study-path search (A*) over the prerequisite graph.

Only forward edges are followed (prerequisite → dependent), so a path
always reads in study order. Moving into a topic costs its estimated
time; the heuristic is the straight-line distance between layout
positions, or 0 when positions are missing.
"""

import heapq
import itertools
import logging
import math
from collections import defaultdict
from typing import Dict, List, Optional

from eduorbit.config import SEARCH_FALLBACK_TIME
from eduorbit.models import DependencyEdge, StudyPath, TopicNode

logger = logging.getLogger(__name__)


def _distance(a: Optional[tuple], b: Optional[tuple]) -> float:
    if a is None or b is None:
        return 0.0
    return math.dist(a, b)


def path_time(node_map: Dict[str, TopicNode], node_ids: List[str]) -> int:
    """Sum of ``estimated_time`` over *node_ids*, unset times counted as 0."""
    return sum(node_map[nid].estimated_time or 0 for nid in node_ids)


def compute_path(
    nodes: List[TopicNode],
    edges: List[DependencyEdge],
    start_id: str,
    end_id: str,
    fallback_time: int = SEARCH_FALLBACK_TIME,
) -> Optional[StudyPath]:
    """Find the cheapest forward path from *start_id* to *end_id*.

    Args:
        nodes: Topic nodes, positioned or not.
        edges: Dependency edges.
        start_id: First topic of the path.
        end_id: Last topic of the path.
        fallback_time: Step cost for a topic whose ``estimated_time`` is
            unset or 0.

    Returns:
        ``StudyPath`` with the start node's own time included in
        ``total_time``, or ``None`` when either id is unknown or the end
        is unreachable.
    """
    node_map = {n.id: n for n in nodes}
    if start_id not in node_map or end_id not in node_map:
        logger.debug("Unknown start/end id: %s → %s", start_id, end_id)
        return None

    successors: Dict[str, List[str]] = defaultdict(list)
    for e in edges:
        successors[e.source].append(e.target)

    goal_pos = node_map[end_id].position

    def h(node_id: str) -> float:
        return _distance(node_map[node_id].position, goal_pos)

    g_score: Dict[str, float] = {start_id: 0.0}
    came_from: Dict[str, str] = {}
    counter = itertools.count()
    frontier = [(h(start_id), next(counter), start_id)]

    while frontier:
        f, _, current = heapq.heappop(frontier)
        # Stale entry: a cheaper route to current was pushed later.
        if f > g_score[current] + h(current):
            continue

        if current == end_id:
            path = [current]
            while current in came_from:
                current = came_from[current]
                path.append(current)
            path.reverse()
            result = StudyPath(node_ids=path, total_time=path_time(node_map, path))
            logger.info(
                "Path found: %d topic(s), %d min.", len(path), result.total_time,
            )
            return result

        for neighbor in successors.get(current, []):
            neighbor_node = node_map.get(neighbor)
            if neighbor_node is None:
                continue
            tentative = g_score[current] + (neighbor_node.estimated_time or fallback_time)
            if tentative < g_score.get(neighbor, math.inf):
                came_from[neighbor] = current
                g_score[neighbor] = tentative
                heapq.heappush(frontier, (tentative + h(neighbor), next(counter), neighbor))

    logger.info("No path from %s to %s.", start_id, end_id)
    return None
