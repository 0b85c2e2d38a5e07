"""Tests for workspace snapshot persistence."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from learnboard.core.config import get_settings
from learnboard.models import Snapshot
from learnboard.schemas.roadmap import RoadmapCreate, SectionCreate, TopicCreate, TreeState
from learnboard.schemas.workspace import Workspace
from learnboard.services import import_service, snapshot_service, tree_store


@pytest.mark.asyncio
async def test_load_empty_workspace(test_session: AsyncSession) -> None:
    workspace = await snapshot_service.load_workspace(test_session)
    assert workspace == Workspace()


@pytest.mark.asyncio
async def test_save_and_load_round_trip(test_session: AsyncSession) -> None:
    workspace = Workspace()
    import_service.import_roadmaps(
        workspace.tree,
        workspace.catalog,
        [{"title": "Python", "language": "Python", "sections": [{"title": "Basics", "topics": ["Loops"]}]}],
    )

    await snapshot_service.save_workspace(test_session, workspace)
    loaded = await snapshot_service.load_workspace(test_session)

    assert loaded == workspace


@pytest.mark.asyncio
async def test_save_replaces_blob_and_bumps_version(test_session: AsyncSession) -> None:
    settings = get_settings()
    state = TreeState()
    roadmap_id = tree_store.add_roadmap(state, RoadmapCreate(language_id="py", title="Python"))
    await snapshot_service.save_snapshot(test_session, settings.SNAPSHOT_KEY, state)

    section_id = tree_store.add_section(state, SectionCreate(roadmap_id=roadmap_id, title="Basics"))
    tree_store.add_topic(state, section_id, TopicCreate(title="Loops"))
    await snapshot_service.save_snapshot(test_session, settings.SNAPSHOT_KEY, state)

    snapshot = await test_session.get(Snapshot, settings.SNAPSHOT_KEY)
    assert snapshot.version == 2
    loaded = await snapshot_service.load_snapshot(test_session, settings.SNAPSHOT_KEY, TreeState)
    assert loaded == state


@pytest.mark.asyncio
async def test_load_missing_key(test_session: AsyncSession) -> None:
    assert await snapshot_service.load_snapshot(test_session, "nothing-here", TreeState) is None
