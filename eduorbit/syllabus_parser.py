"""
Syllabus parser: plain text → topic nodes + dependency edges.

Input format, one topic per line::

    React Basics
    Components: React Basics
    Hooks: State, Components

The text before the first ``:`` names the topic; the comma-separated
list after it (up to any second ``:``) names prerequisites. Blank lines are skipped, names are
stripped and matched exactly (case-sensitive). Unknown prerequisite
names are dropped without error.
"""

import logging
import uuid
from typing import Dict, List, Tuple

from eduorbit.config import DEFAULT_ESTIMATED_TIME
from eduorbit.models import DependencyEdge, TopicNode

logger = logging.getLogger(__name__)


def _topic_name(line: str) -> str:
    return line.split(":", 1)[0].strip()


def parse_syllabus(
    text: str,
    estimated_time: int = DEFAULT_ESTIMATED_TIME,
) -> Tuple[List[TopicNode], List[DependencyEdge]]:
    """Parse *text* into ``(nodes, edges)``.

    Nodes come back in first-seen order, edges in discovery order. A name
    repeated on a later line does not create a second node; its
    dependency list augments the first one. Only the text between the
    first and second ``:`` is read as the dependency list.

    Args:
        text: Syllabus, one topic per line.
        estimated_time: Minutes assigned to every new topic.
    """
    lines = [line for line in text.split("\n") if line.strip() != ""]
    nodes: List[TopicNode] = []
    edges: List[DependencyEdge] = []
    name_to_node: Dict[str, TopicNode] = {}

    # --- First pass: create nodes ---
    for line in lines:
        name = _topic_name(line)
        if name in name_to_node:
            continue
        node = TopicNode(
            id=str(uuid.uuid4()),
            name=name,
            status="LOCKED",
            depth=0,
            dependencies=[],
            position=(0.0, 0.0, 0.0),
            estimated_time=estimated_time,
        )
        name_to_node[name] = node
        nodes.append(node)

    # --- Second pass: link dependencies ---
    dropped = 0
    for line in lines:
        if ":" not in line:
            continue
        parts = line.split(":")
        target = name_to_node[parts[0].strip()]
        dep_part = parts[1]

        for dep_name in (d.strip() for d in dep_part.split(",")):
            source = name_to_node.get(dep_name)
            if source is None:
                if dep_name:
                    dropped += 1
                    logger.debug(
                        "Dropping unknown dependency %r of %r.",
                        dep_name, target.name,
                    )
                continue
            edges.append(DependencyEdge(source=source.id, target=target.id))
            if source.id not in target.dependencies:
                target.dependencies.append(source.id)

    logger.info(
        "Parsed syllabus: %d topic(s), %d edge(s), %d unresolved reference(s).",
        len(nodes), len(edges), dropped,
    )
    return nodes, edges


def parse_syllabus_file(
    path: str,
    estimated_time: int = DEFAULT_ESTIMATED_TIME,
) -> Tuple[List[TopicNode], List[DependencyEdge]]:
    """Read a UTF-8 syllabus file and parse it."""
    with open(path, "r", encoding="utf-8") as fh:
        text = fh.read()
    logger.info("Read syllabus from %s (%d chars).", path, len(text))
    return parse_syllabus(text, estimated_time=estimated_time)
