"""Whole-store snapshot persistence.

The workspace is loaded wholesale at startup and rewritten wholesale after
every mutation; there is no incremental persistence.
"""

from typing import TypeVar

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from learnboard.core.config import get_settings
from learnboard.core.logging import get_logger
from learnboard.models.snapshot import Snapshot
from learnboard.schemas.language import LanguageCatalog
from learnboard.schemas.roadmap import TreeState
from learnboard.schemas.workspace import Workspace

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


async def load_snapshot(db: AsyncSession, key: str, model: type[ModelT]) -> ModelT | None:
    """Load and validate the blob stored under a key.

    Returns:
        The parsed model, or None if nothing is stored under the key
    """
    snapshot = await db.get(Snapshot, key)
    if snapshot is None:
        return None
    return model.model_validate(snapshot.payload)


async def save_snapshot(db: AsyncSession, key: str, value: BaseModel) -> None:
    """Replace the blob stored under a key.

    Note: This function flushes but does NOT commit the transaction.
    """
    payload = value.model_dump(mode="json")
    snapshot = await db.get(Snapshot, key)
    if snapshot is None:
        db.add(Snapshot(key=key, payload=payload))
    else:
        snapshot.payload = payload
        snapshot.version += 1
    await db.flush()


async def load_workspace(db: AsyncSession) -> Workspace:
    """Load the tree and the language catalog, starting empty when absent."""
    settings = get_settings()
    tree = await load_snapshot(db, settings.SNAPSHOT_KEY, TreeState)
    catalog = await load_snapshot(db, settings.LANGUAGES_SNAPSHOT_KEY, LanguageCatalog)
    workspace = Workspace(tree=tree or TreeState(), catalog=catalog or LanguageCatalog())
    logger.info(
        "Workspace loaded",
        roadmaps=len(workspace.tree.roadmaps),
        sections=len(workspace.tree.sections),
        topics=len(workspace.tree.topics),
        languages=len(workspace.catalog.languages),
    )
    return workspace


async def save_workspace(db: AsyncSession, workspace: Workspace) -> None:
    """Rewrite both snapshots and commit."""
    settings = get_settings()
    await save_snapshot(db, settings.SNAPSHOT_KEY, workspace.tree)
    await save_snapshot(db, settings.LANGUAGES_SNAPSHOT_KEY, workspace.catalog)
    await db.commit()
    logger.debug("Workspace saved", roadmaps=len(workspace.tree.roadmaps))
