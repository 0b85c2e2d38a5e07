"""Section and topic API routes."""

from fastapi import APIRouter, HTTPException, status

from learnboard.api.deps import DBDep, WorkspaceDep, require_title
from learnboard.core.logging import get_logger
from learnboard.schemas.roadmap import (
    MAX_TOPIC_DEPTH,
    AssignPostRequest,
    MoveRequest,
    Progress,
    ReorderRequest,
    Section,
    SectionCreate,
    SectionUpdate,
    Topic,
    TopicCreate,
    TopicTree,
    TopicUpdate,
)
from learnboard.services import snapshot_service, tree_store

logger = get_logger(__name__)
router = APIRouter(prefix="/sections", tags=["sections"])


def _section_not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Section not found",
    )


def _topic_not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Topic not found",
    )


# ============================================================================
# Sections
# ============================================================================


@router.post("", response_model=Section, status_code=status.HTTP_201_CREATED)
async def create_section(data: SectionCreate, workspace: WorkspaceDep, db: DBDep) -> Section:
    """Create a section, appended unless a sort_order position is given."""
    require_title(data.title)
    section_id = tree_store.add_section(workspace.tree, data)
    if section_id is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Roadmap not found",
        )
    await snapshot_service.save_workspace(db, workspace)
    return workspace.tree.sections[section_id]


@router.get("/{section_id}", response_model=Section)
async def get_section(section_id: str, workspace: WorkspaceDep) -> Section:
    section = tree_store.get_section(workspace.tree, section_id)
    if section is None:
        raise _section_not_found()
    return section


@router.patch("/{section_id}", response_model=Section)
async def update_section(
    section_id: str,
    data: SectionUpdate,
    workspace: WorkspaceDep,
    db: DBDep,
) -> Section:
    require_title(data.title)
    section = tree_store.update_section(workspace.tree, section_id, data)
    if section is None:
        raise _section_not_found()
    await snapshot_service.save_workspace(db, workspace)
    return section


@router.delete("/{section_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_section(section_id: str, workspace: WorkspaceDep, db: DBDep) -> None:
    """Delete a section and its topics; the remaining sections are renumbered."""
    if not tree_store.delete_section(workspace.tree, section_id):
        raise _section_not_found()
    await snapshot_service.save_workspace(db, workspace)


@router.get("/{section_id}/progress", response_model=Progress)
async def get_section_progress(section_id: str, workspace: WorkspaceDep) -> Progress:
    if tree_store.get_section(workspace.tree, section_id) is None:
        raise _section_not_found()
    return tree_store.get_section_progress(workspace.tree, section_id)


# ============================================================================
# Topics
# ============================================================================


@router.get("/{section_id}/topics", response_model=list[TopicTree])
async def get_topic_tree(section_id: str, workspace: WorkspaceDep) -> list[TopicTree]:
    """Direct topics with their nested sub-topics, in sort_order."""
    if tree_store.get_section(workspace.tree, section_id) is None:
        raise _section_not_found()
    return tree_store.get_topic_tree(workspace.tree, section_id)


@router.post("/{section_id}/topics", response_model=Topic, status_code=status.HTTP_201_CREATED)
async def create_topic(
    section_id: str,
    data: TopicCreate,
    workspace: WorkspaceDep,
    db: DBDep,
) -> Topic:
    require_title(data.title)
    topic_id = tree_store.add_topic(workspace.tree, section_id, data)
    if topic_id is None:
        raise _section_not_found()
    await snapshot_service.save_workspace(db, workspace)
    return workspace.tree.topics[topic_id]


@router.post(
    "/{section_id}/topics/{topic_id}/subtopics",
    response_model=Topic,
    status_code=status.HTTP_201_CREATED,
)
async def create_sub_topic(
    section_id: str,
    topic_id: str,
    data: TopicCreate,
    workspace: WorkspaceDep,
    db: DBDep,
) -> Topic:
    """Append a sub-topic under any topic of the section."""
    require_title(data.title)
    parent = tree_store.get_topic(workspace.tree, topic_id)
    if parent is None or parent.section_id != section_id:
        raise _topic_not_found()
    if tree_store.topic_depth(workspace.tree, topic_id) >= MAX_TOPIC_DEPTH:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Topics cannot nest deeper than {MAX_TOPIC_DEPTH} levels",
        )
    sub_topic_id = tree_store.add_sub_topic(workspace.tree, section_id, topic_id, data)
    if sub_topic_id is None:
        raise _topic_not_found()
    await snapshot_service.save_workspace(db, workspace)
    return workspace.tree.topics[sub_topic_id]


@router.patch("/{section_id}/topics/{topic_id}", response_model=Topic)
async def update_topic(
    section_id: str,
    topic_id: str,
    data: TopicUpdate,
    workspace: WorkspaceDep,
    db: DBDep,
) -> Topic:
    require_title(data.title)
    topic = tree_store.update_topic(workspace.tree, section_id, topic_id, data)
    if topic is None:
        raise _topic_not_found()
    await snapshot_service.save_workspace(db, workspace)
    return topic


@router.post("/{section_id}/topics/{topic_id}/toggle", response_model=Topic)
async def toggle_topic(
    section_id: str,
    topic_id: str,
    workspace: WorkspaceDep,
    db: DBDep,
) -> Topic:
    """Flip one topic's completed flag."""
    topic = tree_store.toggle_topic_complete(workspace.tree, section_id, topic_id)
    if topic is None:
        raise _topic_not_found()
    await snapshot_service.save_workspace(db, workspace)
    return topic


@router.put("/{section_id}/topics/{topic_id}/post", response_model=Topic)
async def assign_post(
    section_id: str,
    topic_id: str,
    data: AssignPostRequest,
    workspace: WorkspaceDep,
    db: DBDep,
) -> Topic:
    """Link a topic to a post, or clear the link with a null post_id."""
    topic = tree_store.assign_post_to_topic(workspace.tree, section_id, topic_id, data.post_id)
    if topic is None:
        raise _topic_not_found()
    await snapshot_service.save_workspace(db, workspace)
    return topic


@router.delete("/{section_id}/topics/{topic_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_topic(
    section_id: str,
    topic_id: str,
    workspace: WorkspaceDep,
    db: DBDep,
) -> None:
    """Delete a topic with all its sub-topics."""
    if not tree_store.delete_topic(workspace.tree, section_id, topic_id):
        raise _topic_not_found()
    await snapshot_service.save_workspace(db, workspace)


@router.put("/{section_id}/topics/order", response_model=list[Topic])
async def reorder_topics(
    section_id: str,
    data: ReorderRequest,
    workspace: WorkspaceDep,
    db: DBDep,
) -> list[Topic]:
    if tree_store.get_section(workspace.tree, section_id) is None:
        raise _section_not_found()
    topics = tree_store.reorder_topics(workspace.tree, section_id, data.ids)
    await snapshot_service.save_workspace(db, workspace)
    return topics


@router.put("/{section_id}/topics/{topic_id}/subtopics/order", response_model=list[Topic])
async def reorder_sub_topics(
    section_id: str,
    topic_id: str,
    data: ReorderRequest,
    workspace: WorkspaceDep,
    db: DBDep,
) -> list[Topic]:
    topic = tree_store.get_topic(workspace.tree, topic_id)
    if topic is None or topic.section_id != section_id:
        raise _topic_not_found()
    topics = tree_store.reorder_sub_topics(workspace.tree, section_id, topic_id, data.ids)
    await snapshot_service.save_workspace(db, workspace)
    return topics


@router.post("/{section_id}/topics/move", response_model=list[Topic])
async def move_topic(
    section_id: str,
    data: MoveRequest,
    workspace: WorkspaceDep,
    db: DBDep,
) -> list[Topic]:
    """Move a topic onto a sibling's position."""
    topic = tree_store.get_topic(workspace.tree, data.from_id)
    if topic is None or topic.section_id != section_id:
        raise _topic_not_found()
    topics = tree_store.move_topic(workspace.tree, section_id, data.from_id, data.to_id)
    await snapshot_service.save_workspace(db, workspace)
    return topics
