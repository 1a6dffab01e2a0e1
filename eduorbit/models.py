"""
Pydantic models for the EduOrbit graph engine.

Graph records: topic nodes, dependency edges, study paths.
Field aliases follow the camelCase names of the exported JSON document,
so sessions written by older exports validate unchanged.
"""

from datetime import datetime
from typing import List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


# =========================================================================
# Literals
# =========================================================================

TopicStatus = Literal["ORBIT", "COMPLETED", "LOCKED"]

Position = Tuple[float, float, float]


# =========================================================================
# Graph records
# =========================================================================


class Resource(BaseModel):
    """A learning resource attached to a topic (unique by ``url``)."""

    url: str
    title: str


class TopicNode(BaseModel):
    """A single learning topic in the prerequisite graph."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    status: TopicStatus = "ORBIT"
    depth: int = Field(default=0, ge=0)
    # Ids of direct prerequisites; mirrors the edges targeting this node.
    dependencies: List[str] = Field(default_factory=list)
    position: Optional[Position] = None
    estimated_time: Optional[int] = Field(default=None, ge=0, alias="estimatedTime")

    notes: Optional[str] = None
    resources: List[Resource] = Field(default_factory=list)
    study_time: Optional[int] = Field(default=None, ge=0, alias="studyTime")
    completed_date: Optional[datetime] = Field(default=None, alias="completedDate")


class DependencyEdge(BaseModel):
    """Directed edge ``source → target``: *target* depends on *source*."""

    model_config = ConfigDict(frozen=True)

    source: str
    target: str


class StudyPath(BaseModel):
    """Ordered walk from a start topic to an end topic."""

    model_config = ConfigDict(populate_by_name=True)

    node_ids: List[str] = Field(alias="nodeIds")
    total_time: int = Field(alias="totalTime")
