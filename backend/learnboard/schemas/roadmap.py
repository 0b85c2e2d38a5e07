"""Roadmap tree schemas: arena nodes, inputs, and read views."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, Field


def utcnow() -> datetime:
    return datetime.now(UTC)


# Deepest topic level; a direct topic is level 1. Nested views are serialized
# as nested JSON, which only parses back up to a bounded depth.
MAX_TOPIC_DEPTH = 64


# ============================================================================
# Arena nodes
# ============================================================================


class OrderedNode(BaseModel):
    """A node that lives in an ordered sibling list."""

    id: str
    sort_order: int = 0


class Roadmap(BaseModel):
    """Top-level learning plan for one programming language."""

    id: str
    language_id: str
    title: str
    description: str = ""
    section_ids: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Section(OrderedNode):
    """Ordered grouping of topics within a roadmap."""

    roadmap_id: str
    title: str
    slug: str = ""
    description: str = ""
    target_count: int | None = None
    topic_ids: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Topic(OrderedNode):
    """A learning item. parent_id is None for a direct topic of the section."""

    section_id: str
    parent_id: str | None = None
    title: str
    completed: bool = False
    post_id: str | None = None
    child_ids: list[str] = Field(default_factory=list)


class TreeState(BaseModel):
    """The whole roadmap forest, keyed by id.

    Parent/child identity lives in the id lists (section_ids, topic_ids,
    child_ids); each list is kept in sort_order order.
    """

    roadmaps: dict[str, Roadmap] = Field(default_factory=dict)
    sections: dict[str, Section] = Field(default_factory=dict)
    topics: dict[str, Topic] = Field(default_factory=dict)


# ============================================================================
# Inputs
# ============================================================================


class RoadmapCreate(BaseModel):
    """Create a new roadmap."""

    language_id: str
    title: str
    description: str = ""


class RoadmapUpdate(BaseModel):
    """Update an existing roadmap."""

    language_id: str | None = None
    title: str | None = None
    description: str | None = None


class SectionCreate(BaseModel):
    """Create a section. sort_order is a 1-based insert position; omitted means append."""

    roadmap_id: str
    title: str
    slug: str | None = None
    description: str = ""
    sort_order: int | None = None
    target_count: int | None = None


class SectionUpdate(BaseModel):
    """Update an existing section."""

    title: str | None = None
    slug: str | None = None
    description: str | None = None
    target_count: int | None = None


class TopicCreate(BaseModel):
    """Create a topic or sub-topic."""

    title: str
    completed: bool = False
    post_id: str | None = None


class TopicUpdate(BaseModel):
    """Update an existing topic. Only fields that were set are applied."""

    title: str | None = None
    completed: bool | None = None
    post_id: str | None = None


# ============================================================================
# Read views
# ============================================================================


class Progress(BaseModel):
    """Completion counts over a section's or roadmap's direct topics."""

    completed: int = 0
    total: int = 0
    percentage: int = 0


class TopicTree(BaseModel):
    """Recursive view of a topic and its sub-topics."""

    id: str
    title: str
    completed: bool
    post_id: str | None
    sort_order: int
    sub_topics: list[TopicTree] = Field(default_factory=list)


class SectionTree(BaseModel):
    """A section with its topic tree and progress."""

    id: str
    title: str
    slug: str
    description: str
    sort_order: int
    target_count: int | None
    progress: Progress
    topics: list[TopicTree]


class RoadmapTree(BaseModel):
    """A roadmap with all its sections, topics, and progress."""

    id: str
    language_id: str
    title: str
    description: str
    created_at: datetime
    updated_at: datetime
    progress: Progress
    sections: list[SectionTree]


# ============================================================================
# Requests
# ============================================================================


class ReorderRequest(BaseModel):
    """Sibling ids in their new order, as produced by a drag-and-drop."""

    ids: list[str]


class MoveRequest(BaseModel):
    """Move one sibling to another sibling's position."""

    from_id: str
    to_id: str


class AssignPostRequest(BaseModel):
    """Link a topic to a post, or unlink it with null."""

    post_id: str | None = None
