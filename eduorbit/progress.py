"""
Learning progress on top of the topic graph.

Completion, notes, resources, study time, a study timer, the next-topic
recommendation and summary statistics. All node operations return a new
node list and raise ``KeyError`` for an unknown node id.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

from eduorbit.models import Resource, TopicNode

logger = logging.getLogger(__name__)


# =========================================================================
# Helpers
# =========================================================================


def _replace(
    nodes: List[TopicNode],
    node_id: str,
    fn: Callable[[TopicNode], Dict[str, Any]],
) -> List[TopicNode]:
    """Apply the field update returned by *fn* to the node with *node_id*."""
    if not any(n.id == node_id for n in nodes):
        raise KeyError(node_id)
    return [n.model_copy(update=fn(n)) if n.id == node_id else n for n in nodes]


# =========================================================================
# Node operations
# =========================================================================


def mark_complete(
    nodes: List[TopicNode],
    node_id: str,
    when: Optional[datetime] = None,
) -> List[TopicNode]:
    """Mark a topic completed, stamping ``completed_date`` (UTC now by default)."""
    stamp = when or datetime.now(timezone.utc)
    logger.info("Completed topic %s.", node_id)
    return _replace(
        nodes, node_id, lambda n: {"status": "COMPLETED", "completed_date": stamp},
    )


def mark_incomplete(nodes: List[TopicNode], node_id: str) -> List[TopicNode]:
    """Put a topic back in orbit and clear its completion date."""
    return _replace(
        nodes, node_id, lambda n: {"status": "ORBIT", "completed_date": None},
    )


def add_note(nodes: List[TopicNode], node_id: str, note: str) -> List[TopicNode]:
    return _replace(nodes, node_id, lambda n: {"notes": note})


def add_resource(
    nodes: List[TopicNode],
    node_id: str,
    url: str,
    title: str,
) -> List[TopicNode]:
    """Attach a resource; a url already attached to the topic is ignored."""

    def update(n: TopicNode) -> Dict[str, Any]:
        if any(r.url == url for r in n.resources):
            logger.debug("Resource %s already on %s; skipping.", url, node_id)
            return {}
        return {"resources": n.resources + [Resource(url=url, title=title)]}

    return _replace(nodes, node_id, update)


def remove_resource(nodes: List[TopicNode], node_id: str, url: str) -> List[TopicNode]:
    return _replace(
        nodes, node_id,
        lambda n: {"resources": [r for r in n.resources if r.url != url]},
    )


def add_study_time(nodes: List[TopicNode], node_id: str, minutes: int) -> List[TopicNode]:
    """Accumulate *minutes* of study on a topic."""
    return _replace(
        nodes, node_id, lambda n: {"study_time": (n.study_time or 0) + minutes},
    )


# =========================================================================
# Recommendation
# =========================================================================


def recommended_topics(nodes: List[TopicNode], limit: int = 5) -> List[TopicNode]:
    """Open topics whose prerequisites are all completed, shallowest first."""
    status = {n.id: n.status for n in nodes}
    unlocked = [
        n for n in nodes
        if n.status != "COMPLETED"
        and all(status.get(dep) == "COMPLETED" for dep in n.dependencies)
    ]
    unlocked.sort(key=lambda n: n.depth)
    return unlocked[:limit]


# =========================================================================
# Statistics
# =========================================================================


def total_study_time(nodes: List[TopicNode]) -> int:
    return sum(n.study_time or 0 for n in nodes)


def completion_percentage(nodes: List[TopicNode]) -> int:
    """Rounded percentage of completed topics (0 for an empty graph)."""
    if not nodes:
        return 0
    completed = sum(1 for n in nodes if n.status == "COMPLETED")
    return round(completed / len(nodes) * 100)


def study_streak(nodes: List[TopicNode]) -> int:
    """Consecutive completion days counted back from the latest one.

    Stops at the first gap of more than one day; 0 when nothing has a
    completion date.
    """
    days = sorted({n.completed_date.date() for n in nodes if n.completed_date})
    if not days:
        return 0

    streak = 1
    for current, previous in zip(reversed(days), reversed(days[:-1])):
        if current - previous == timedelta(days=1):
            streak += 1
        else:
            break
    return streak


def summarize(nodes: List[TopicNode]) -> Dict[str, int]:
    """Progress statistics in one dict (used by the ``stats`` CLI)."""
    return {
        "total_study_time": total_study_time(nodes),
        "completion_percentage": completion_percentage(nodes),
        "study_streak": study_streak(nodes),
        "completed": sum(1 for n in nodes if n.status == "COMPLETED"),
    }


# =========================================================================
# Study timer
# =========================================================================


@dataclass
class StudyTimer:
    """Seconds counter for one topic; whole minutes are credited on stop."""

    active: bool = False
    seconds: int = 0
    target_node_id: Optional[str] = None

    def start(self, node_id: str) -> None:
        self.active = True
        self.seconds = 0
        self.target_node_id = node_id

    def tick(self, seconds: int = 1) -> None:
        if self.active:
            self.seconds += seconds

    def stop(self, nodes: List[TopicNode]) -> List[TopicNode]:
        """Credit elapsed whole minutes to the target topic and reset."""
        if self.target_node_id and self.seconds > 0:
            nodes = add_study_time(nodes, self.target_node_id, self.seconds // 60)
        self.active = False
        self.seconds = 0
        self.target_node_id = None
        return nodes
