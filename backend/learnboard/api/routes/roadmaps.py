"""Roadmap API routes."""

from urllib.parse import quote

from fastapi import APIRouter, HTTPException, Response, status

from learnboard.api.deps import DBDep, WorkspaceDep, require_title
from learnboard.core.logging import get_logger
from learnboard.schemas.fragment import ImportReport
from learnboard.schemas.roadmap import (
    MoveRequest,
    Progress,
    ReorderRequest,
    Roadmap,
    RoadmapCreate,
    RoadmapTree,
    RoadmapUpdate,
    Section,
)
from learnboard.services import (
    export_service,
    generation_client,
    import_service,
    language_service,
    snapshot_service,
    tree_store,
)

logger = get_logger(__name__)
router = APIRouter(prefix="/roadmaps", tags=["roadmaps"])


def _not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Roadmap not found",
    )


@router.get("", response_model=list[Roadmap])
async def list_roadmaps(workspace: WorkspaceDep, language_id: str | None = None) -> list[Roadmap]:
    """List roadmaps, optionally for one language."""
    if language_id:
        return tree_store.get_roadmaps_by_language(workspace.tree, language_id)
    return tree_store.list_roadmaps(workspace.tree)


@router.post("", response_model=Roadmap, status_code=status.HTTP_201_CREATED)
async def create_roadmap(data: RoadmapCreate, workspace: WorkspaceDep, db: DBDep) -> Roadmap:
    """Create an empty roadmap."""
    require_title(data.title)
    roadmap_id = tree_store.add_roadmap(workspace.tree, data)
    await snapshot_service.save_workspace(db, workspace)
    return workspace.tree.roadmaps[roadmap_id]


@router.get("/{roadmap_id}", response_model=RoadmapTree)
async def get_roadmap(roadmap_id: str, workspace: WorkspaceDep) -> RoadmapTree:
    """Get a roadmap with its sections, nested topics, and progress."""
    tree = tree_store.get_roadmap_tree(workspace.tree, roadmap_id)
    if tree is None:
        raise _not_found()
    return tree


@router.patch("/{roadmap_id}", response_model=Roadmap)
async def update_roadmap(
    roadmap_id: str,
    data: RoadmapUpdate,
    workspace: WorkspaceDep,
    db: DBDep,
) -> Roadmap:
    """Update a roadmap's title, description, or language."""
    require_title(data.title)
    roadmap = tree_store.update_roadmap(workspace.tree, roadmap_id, data)
    if roadmap is None:
        raise _not_found()
    await snapshot_service.save_workspace(db, workspace)
    return roadmap


@router.delete("/{roadmap_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_roadmap(roadmap_id: str, workspace: WorkspaceDep, db: DBDep) -> None:
    """Delete a roadmap with all its sections and topics."""
    if not tree_store.delete_roadmap(workspace.tree, roadmap_id):
        raise _not_found()
    await snapshot_service.save_workspace(db, workspace)


@router.get("/{roadmap_id}/progress", response_model=Progress)
async def get_roadmap_progress(roadmap_id: str, workspace: WorkspaceDep) -> Progress:
    """Completion over the direct topics of every section."""
    if tree_store.get_roadmap(workspace.tree, roadmap_id) is None:
        raise _not_found()
    return tree_store.get_roadmap_progress(workspace.tree, roadmap_id)


@router.get("/{roadmap_id}/sections", response_model=list[Section])
async def list_sections(roadmap_id: str, workspace: WorkspaceDep) -> list[Section]:
    if tree_store.get_roadmap(workspace.tree, roadmap_id) is None:
        raise _not_found()
    return tree_store.get_sections_by_roadmap(workspace.tree, roadmap_id)


@router.put("/{roadmap_id}/sections/order", response_model=list[Section])
async def reorder_sections(
    roadmap_id: str,
    data: ReorderRequest,
    workspace: WorkspaceDep,
    db: DBDep,
) -> list[Section]:
    """Apply a drag-and-drop order to the roadmap's sections."""
    if tree_store.get_roadmap(workspace.tree, roadmap_id) is None:
        raise _not_found()
    sections = tree_store.reorder_sections(workspace.tree, roadmap_id, data.ids)
    await snapshot_service.save_workspace(db, workspace)
    return sections


@router.post("/{roadmap_id}/sections/move", response_model=list[Section])
async def move_section(
    roadmap_id: str,
    data: MoveRequest,
    workspace: WorkspaceDep,
    db: DBDep,
) -> list[Section]:
    """Move one section onto another's position."""
    if tree_store.get_roadmap(workspace.tree, roadmap_id) is None:
        raise _not_found()
    sections = tree_store.move_section(workspace.tree, roadmap_id, data.from_id, data.to_id)
    await snapshot_service.save_workspace(db, workspace)
    return sections


@router.get("/{roadmap_id}/export")
async def export_roadmap(roadmap_id: str, workspace: WorkspaceDep) -> Response:
    """Download the roadmap as a JSON document that can be imported again."""
    document = export_service.export_roadmap(workspace.tree, workspace.catalog, roadmap_id)
    if document is None:
        raise _not_found()
    filename = export_service.export_filename(document.title)
    return Response(
        content=export_service.dump_document(document),
        media_type="application/json",
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(filename)}"},
    )


@router.post("/{roadmap_id}/generate", response_model=ImportReport)
async def generate_sections(roadmap_id: str, workspace: WorkspaceDep, db: DBDep) -> ImportReport:
    """Generate a detailed outline with the AI service and append it.

    Rate limiting and insufficient balance keep their status codes (429/402);
    any other generation failure is a 502.
    """
    roadmap = tree_store.get_roadmap(workspace.tree, roadmap_id)
    if roadmap is None:
        raise _not_found()

    language = language_service.get_language(workspace.catalog, roadmap.language_id)
    language_name = language.name if language else roadmap.title

    try:
        generated = await generation_client.generate_roadmap(roadmap.title, language_name)
    except generation_client.RateLimitError as e:
        raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail=str(e)) from e
    except generation_client.InsufficientBalanceError as e:
        raise HTTPException(status_code=status.HTTP_402_PAYMENT_REQUIRED, detail=str(e)) from e
    except generation_client.GenerationError as e:
        logger.error("Roadmap generation failed", roadmap_id=roadmap_id, kind=e.kind, error=str(e))
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e)) from e

    report = import_service.merge_generated(workspace.tree, roadmap_id, generated)
    await snapshot_service.save_workspace(db, workspace)
    return report
