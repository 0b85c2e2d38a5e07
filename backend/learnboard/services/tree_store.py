"""Roadmap tree store: CRUD, reordering, and progress over an arena of nodes.

Every function takes the owned TreeState as its first argument, the same way
services take a database session. Nodes are replaced with copies rather than
mutated. Operations that address a missing roadmap, section, or topic are
no-ops: they return None (or False / an empty list) and never raise, so a bulk
producer cannot abort halfway.
"""

import re
import uuid
from collections.abc import Iterable, Sequence
from typing import Any

from pydantic import BaseModel

from learnboard.core.logging import get_logger
from learnboard.schemas.roadmap import (
    MAX_TOPIC_DEPTH,
    Progress,
    Roadmap,
    RoadmapCreate,
    RoadmapTree,
    RoadmapUpdate,
    Section,
    SectionCreate,
    SectionTree,
    SectionUpdate,
    Topic,
    TopicCreate,
    TopicTree,
    TopicUpdate,
    TreeState,
    utcnow,
)
from learnboard.services import ordering, progress

logger = get_logger(__name__)


def new_id() -> str:
    return str(uuid.uuid4())


def slugify(title: str) -> str:
    return re.sub(r"\s+", "-", title.strip().lower())


def _changes(patch: BaseModel, nullable: frozenset[str] = frozenset()) -> dict[str, Any]:
    """Fields the caller set; None only counts for nullable fields."""
    return {
        key: value
        for key, value in patch.model_dump(exclude_unset=True).items()
        if value is not None or key in nullable
    }


# ============================================================================
# Internal helpers
# ============================================================================


def _touch_roadmap(state: TreeState, roadmap_id: str, **update: Any) -> None:
    roadmap = state.roadmaps.get(roadmap_id)
    if roadmap is not None:
        state.roadmaps[roadmap_id] = roadmap.model_copy(update={**update, "updated_at": utcnow()})


def _touch_section(state: TreeState, section_id: str, **update: Any) -> None:
    section = state.sections.get(section_id)
    if section is not None:
        state.sections[section_id] = section.model_copy(update={**update, "updated_at": utcnow()})


def _store_sections(state: TreeState, roadmap_id: str, sections: Sequence[Section]) -> None:
    """Write an ordered sibling list back into the arena."""
    for section in sections:
        state.sections[section.id] = section
    _touch_roadmap(state, roadmap_id, section_ids=[section.id for section in sections])


def _sibling_topics(state: TreeState, section_id: str, parent_id: str | None) -> list[Topic]:
    if parent_id is None:
        ids = state.sections[section_id].topic_ids
    else:
        ids = state.topics[parent_id].child_ids
    return [state.topics[topic_id] for topic_id in ids]


def _store_topics(
    state: TreeState,
    section_id: str,
    parent_id: str | None,
    topics: Sequence[Topic],
) -> None:
    """Write an ordered sibling list back into the arena and its owner."""
    for topic in topics:
        state.topics[topic.id] = topic
    ids = [topic.id for topic in topics]
    if parent_id is None:
        _touch_section(state, section_id, topic_ids=ids)
    else:
        parent = state.topics[parent_id]
        state.topics[parent_id] = parent.model_copy(update={"child_ids": ids})
        _touch_section(state, section_id)


def _locate_topic(state: TreeState, section_id: str, topic_id: str) -> Topic | None:
    """Find a topic at any depth, provided it belongs to the section."""
    topic = state.topics.get(topic_id)
    if topic is None or topic.section_id != section_id:
        return None
    return topic


def topic_depth(state: TreeState, topic_id: str) -> int:
    """Level of a topic: 1 for a direct topic, 0 if it does not exist."""
    depth = 0
    current = state.topics.get(topic_id)
    while current is not None:
        depth += 1
        current = state.topics.get(current.parent_id) if current.parent_id else None
    return depth


def _subtree_ids(state: TreeState, root_ids: Iterable[str]) -> list[str]:
    stack = list(root_ids)
    collected: list[str] = []
    while stack:
        topic_id = stack.pop()
        topic = state.topics.get(topic_id)
        if topic is None:
            continue
        collected.append(topic_id)
        stack.extend(topic.child_ids)
    return collected


def _drop_section(state: TreeState, section_id: str) -> int:
    """Remove a section and every topic under it. Returns removed topic count."""
    section = state.sections.pop(section_id, None)
    if section is None:
        return 0
    topic_ids = _subtree_ids(state, section.topic_ids)
    for topic_id in topic_ids:
        state.topics.pop(topic_id, None)
    return len(topic_ids)


# ============================================================================
# Roadmaps
# ============================================================================


def add_roadmap(state: TreeState, data: RoadmapCreate) -> str:
    """Create a roadmap with no sections.

    Args:
        state: Tree state to mutate
        data: Roadmap data

    Returns:
        Created roadmap ID
    """
    roadmap = Roadmap(id=new_id(), **data.model_dump())
    state.roadmaps[roadmap.id] = roadmap
    logger.info("Roadmap created", roadmap_id=roadmap.id, title=roadmap.title)
    return roadmap.id


def get_roadmap(state: TreeState, roadmap_id: str) -> Roadmap | None:
    return state.roadmaps.get(roadmap_id)


def list_roadmaps(state: TreeState) -> list[Roadmap]:
    """All roadmaps, oldest first."""
    return sorted(state.roadmaps.values(), key=lambda roadmap: roadmap.created_at)


def get_roadmaps_by_language(state: TreeState, language_id: str) -> list[Roadmap]:
    return [roadmap for roadmap in list_roadmaps(state) if roadmap.language_id == language_id]


def find_roadmap_by_title(state: TreeState, title: str) -> Roadmap | None:
    """Exact, case-sensitive title match."""
    return next((r for r in state.roadmaps.values() if r.title == title), None)


def update_roadmap(state: TreeState, roadmap_id: str, patch: RoadmapUpdate) -> Roadmap | None:
    """Apply the set fields of a patch.

    Returns:
        Updated roadmap or None if it does not exist
    """
    if roadmap_id not in state.roadmaps:
        return None
    _touch_roadmap(state, roadmap_id, **_changes(patch))
    logger.info("Roadmap updated", roadmap_id=roadmap_id)
    return state.roadmaps[roadmap_id]


def delete_roadmap(state: TreeState, roadmap_id: str) -> bool:
    """Delete a roadmap with all of its sections and their topics."""
    roadmap = state.roadmaps.pop(roadmap_id, None)
    if roadmap is None:
        return False

    removed_topics = 0
    for section_id in roadmap.section_ids:
        removed_topics += _drop_section(state, section_id)

    logger.info(
        "Roadmap deleted",
        roadmap_id=roadmap_id,
        sections=len(roadmap.section_ids),
        topics=removed_topics,
    )
    return True


# ============================================================================
# Sections
# ============================================================================


def get_section(state: TreeState, section_id: str) -> Section | None:
    return state.sections.get(section_id)


def get_sections_by_roadmap(state: TreeState, roadmap_id: str) -> list[Section]:
    """Sections of a roadmap in sort_order."""
    roadmap = state.roadmaps.get(roadmap_id)
    if roadmap is None:
        return []
    return [state.sections[section_id] for section_id in roadmap.section_ids]


def add_section(state: TreeState, data: SectionCreate) -> str | None:
    """Create a section inside a roadmap.

    Without a sort_order (or with one past the end) the section is appended
    with max + 1. A sort_order inside the list inserts there and renumbers.

    Args:
        state: Tree state to mutate
        data: Section data including the owning roadmap ID

    Returns:
        Created section ID, or None if the roadmap does not exist
    """
    if data.roadmap_id not in state.roadmaps:
        logger.warning("Roadmap not found for new section", roadmap_id=data.roadmap_id)
        return None

    section = Section(
        id=new_id(),
        roadmap_id=data.roadmap_id,
        title=data.title,
        slug=data.slug or slugify(data.title),
        description=data.description,
        target_count=data.target_count,
    )
    siblings = get_sections_by_roadmap(state, data.roadmap_id)
    if data.sort_order is None or data.sort_order > len(siblings):
        ordered = ordering.insert_append(siblings, section)
    else:
        ordered = ordering.insert_at(siblings, section, data.sort_order)

    _store_sections(state, data.roadmap_id, ordered)
    logger.debug("Section created", section_id=section.id, roadmap_id=data.roadmap_id)
    return section.id


def update_section(state: TreeState, section_id: str, patch: SectionUpdate) -> Section | None:
    if section_id not in state.sections:
        return None
    _touch_section(state, section_id, **_changes(patch, frozenset({"target_count"})))
    return state.sections[section_id]


def delete_section(state: TreeState, section_id: str) -> bool:
    """Delete a section and its topics, then renumber the remaining sections."""
    section = state.sections.get(section_id)
    if section is None:
        return False

    removed_topics = _drop_section(state, section_id)
    roadmap = state.roadmaps.get(section.roadmap_id)
    if roadmap is not None:
        remaining = [state.sections[sid] for sid in roadmap.section_ids if sid != section_id]
        _store_sections(state, roadmap.id, ordering.renumber(remaining))

    logger.info("Section deleted", section_id=section_id, topics=removed_topics)
    return True


def reorder_sections(state: TreeState, roadmap_id: str, ordered_ids: Iterable[str]) -> list[Section]:
    """Renumber a roadmap's sections in the order a drag-and-drop produced."""
    if roadmap_id not in state.roadmaps:
        return []
    ordered = ordering.apply_order(get_sections_by_roadmap(state, roadmap_id), ordered_ids)
    _store_sections(state, roadmap_id, ordered)
    return ordered


def move_section(state: TreeState, roadmap_id: str, from_id: str, to_id: str) -> list[Section]:
    """Move one section to another's position within the same roadmap."""
    siblings = get_sections_by_roadmap(state, roadmap_id)
    moved = ordering.move(siblings, from_id, to_id)
    if moved is not siblings:
        _store_sections(state, roadmap_id, moved)
    return moved


# ============================================================================
# Topics
# ============================================================================


def get_topic(state: TreeState, topic_id: str) -> Topic | None:
    return state.topics.get(topic_id)


def get_topics(state: TreeState, section_id: str) -> list[Topic]:
    """Direct topics of a section in sort_order."""
    if section_id not in state.sections:
        return []
    return _sibling_topics(state, section_id, None)


def get_sub_topics(state: TreeState, topic_id: str) -> list[Topic]:
    topic = state.topics.get(topic_id)
    if topic is None:
        return []
    return [state.topics[child_id] for child_id in topic.child_ids]


def add_topic(state: TreeState, section_id: str, data: TopicCreate) -> str | None:
    """Append a direct topic to a section.

    Returns:
        Created topic ID, or None if the section does not exist
    """
    if section_id not in state.sections:
        logger.warning("Section not found for new topic", section_id=section_id)
        return None

    topic = Topic(id=new_id(), section_id=section_id, **data.model_dump())
    siblings = _sibling_topics(state, section_id, None)
    _store_topics(state, section_id, None, ordering.insert_append(siblings, topic))
    return topic.id


def add_sub_topic(
    state: TreeState,
    section_id: str,
    parent_topic_id: str,
    data: TopicCreate,
) -> str | None:
    """Append a sub-topic under any topic of the section.

    Nesting is limited to MAX_TOPIC_DEPTH levels.

    Returns:
        Created topic ID, or None if the parent is not in the section or is
        already at the deepest level
    """
    parent = _locate_topic(state, section_id, parent_topic_id)
    if parent is None:
        logger.warning(
            "Parent topic not found for new sub-topic",
            section_id=section_id,
            parent_topic_id=parent_topic_id,
        )
        return None
    if topic_depth(state, parent.id) >= MAX_TOPIC_DEPTH:
        logger.warning(
            "Sub-topic too deep",
            section_id=section_id,
            parent_topic_id=parent_topic_id,
            max_depth=MAX_TOPIC_DEPTH,
        )
        return None

    topic = Topic(id=new_id(), section_id=section_id, parent_id=parent.id, **data.model_dump())
    siblings = _sibling_topics(state, section_id, parent.id)
    _store_topics(state, section_id, parent.id, ordering.insert_append(siblings, topic))
    return topic.id


def update_topic(
    state: TreeState,
    section_id: str,
    topic_id: str,
    patch: TopicUpdate,
) -> Topic | None:
    """Apply the set fields of a patch to one topic; siblings are untouched."""
    topic = _locate_topic(state, section_id, topic_id)
    if topic is None:
        return None
    updated = topic.model_copy(update=_changes(patch, frozenset({"post_id"})))
    state.topics[topic_id] = updated
    _touch_section(state, section_id)
    return updated


def toggle_topic_complete(state: TreeState, section_id: str, topic_id: str) -> Topic | None:
    """Flip one topic's completed flag. Children keep their own flags."""
    topic = _locate_topic(state, section_id, topic_id)
    if topic is None:
        return None
    updated = topic.model_copy(update={"completed": not topic.completed})
    state.topics[topic_id] = updated
    _touch_section(state, section_id)
    return updated


def assign_post_to_topic(
    state: TreeState,
    section_id: str,
    topic_id: str,
    post_id: str | None,
) -> Topic | None:
    """Set or clear the post reference. The post itself is never looked up."""
    topic = _locate_topic(state, section_id, topic_id)
    if topic is None:
        return None
    updated = topic.model_copy(update={"post_id": post_id})
    state.topics[topic_id] = updated
    _touch_section(state, section_id)
    return updated


def delete_topic(state: TreeState, section_id: str, topic_id: str) -> bool:
    """Delete a topic with its whole subtree, then renumber its siblings."""
    topic = _locate_topic(state, section_id, topic_id)
    if topic is None:
        return False

    remaining = [t for t in _sibling_topics(state, section_id, topic.parent_id) if t.id != topic_id]
    for removed_id in _subtree_ids(state, [topic_id]):
        del state.topics[removed_id]
    _store_topics(state, section_id, topic.parent_id, ordering.renumber(remaining))
    return True


def reorder_topics(state: TreeState, section_id: str, ordered_ids: Iterable[str]) -> list[Topic]:
    """Renumber a section's direct topics in the supplied order."""
    if section_id not in state.sections:
        return []
    ordered = ordering.apply_order(_sibling_topics(state, section_id, None), ordered_ids)
    _store_topics(state, section_id, None, ordered)
    return ordered


def reorder_sub_topics(
    state: TreeState,
    section_id: str,
    parent_topic_id: str,
    ordered_ids: Iterable[str],
) -> list[Topic]:
    """Renumber the children of one topic in the supplied order."""
    parent = _locate_topic(state, section_id, parent_topic_id)
    if parent is None:
        return []
    ordered = ordering.apply_order(_sibling_topics(state, section_id, parent.id), ordered_ids)
    _store_topics(state, section_id, parent.id, ordered)
    return ordered


def move_topic(state: TreeState, section_id: str, from_id: str, to_id: str) -> list[Topic]:
    """Move a topic to a sibling's position. Both must share the same parent."""
    topic = _locate_topic(state, section_id, from_id)
    if topic is None:
        return []
    siblings = _sibling_topics(state, section_id, topic.parent_id)
    moved = ordering.move(siblings, from_id, to_id)
    if moved is not siblings:
        _store_topics(state, section_id, topic.parent_id, moved)
    return moved


# ============================================================================
# Read views and progress
# ============================================================================


def preorder_ids(state: TreeState, root_ids: Sequence[str]) -> list[str]:
    """Ids of the given topics and all their descendants, parents before children."""
    ordered: list[str] = []
    stack = list(reversed(root_ids))
    while stack:
        topic_id = stack.pop()
        ordered.append(topic_id)
        stack.extend(reversed(state.topics[topic_id].child_ids))
    return ordered


def _build_tree(state: TreeState, topic_ids: Sequence[str]) -> list[TopicTree]:
    # children are built before their parent by walking the preorder backwards
    built: dict[str, TopicTree] = {}
    for topic_id in reversed(preorder_ids(state, topic_ids)):
        topic = state.topics[topic_id]
        built[topic_id] = TopicTree(
            id=topic.id,
            title=topic.title,
            completed=topic.completed,
            post_id=topic.post_id,
            sort_order=topic.sort_order,
            sub_topics=[built[child_id] for child_id in topic.child_ids],
        )
    return [built[topic_id] for topic_id in topic_ids]


def get_topic_tree(state: TreeState, section_id: str) -> list[TopicTree]:
    """Nested view of a section's topics, ordered at every level."""
    section = state.sections.get(section_id)
    if section is None:
        return []
    return _build_tree(state, section.topic_ids)


def get_section_progress(state: TreeState, section_id: str) -> Progress:
    return progress.section_progress(get_topics(state, section_id))


def get_roadmap_progress(state: TreeState, roadmap_id: str) -> Progress:
    return progress.roadmap_progress(
        get_topics(state, section.id) for section in get_sections_by_roadmap(state, roadmap_id)
    )


def get_roadmap_tree(state: TreeState, roadmap_id: str) -> RoadmapTree | None:
    """Whole roadmap with nested topics and progress at every level."""
    roadmap = state.roadmaps.get(roadmap_id)
    if roadmap is None:
        return None

    sections = [
        SectionTree(
            id=section.id,
            title=section.title,
            slug=section.slug,
            description=section.description,
            sort_order=section.sort_order,
            target_count=section.target_count,
            progress=get_section_progress(state, section.id),
            topics=get_topic_tree(state, section.id),
        )
        for section in get_sections_by_roadmap(state, roadmap_id)
    ]
    return RoadmapTree(
        id=roadmap.id,
        language_id=roadmap.language_id,
        title=roadmap.title,
        description=roadmap.description,
        created_at=roadmap.created_at,
        updated_at=roadmap.updated_at,
        progress=get_roadmap_progress(state, roadmap_id),
        sections=sections,
    )
