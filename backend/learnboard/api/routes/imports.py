"""Bulk import API routes."""

from typing import Any

from fastapi import APIRouter, HTTPException, status

from learnboard.api.deps import DBDep, WorkspaceDep
from learnboard.core.logging import get_logger
from learnboard.schemas.fragment import DefaultRoadmapsRequest, ImportReport, ImportRequest
from learnboard.services import default_roadmaps, import_service, snapshot_service

logger = get_logger(__name__)
router = APIRouter(prefix="/import", tags=["import"])


@router.post("", response_model=ImportReport)
async def import_document(data: ImportRequest, workspace: WorkspaceDep, db: DBDep) -> ImportReport:
    """Merge a bulk JSON document.

    Each fragment is validated on its own; invalid or duplicate fragments are
    reported in ``skipped`` while the rest of the batch is merged.
    """
    try:
        report = import_service.import_payload(
            workspace.tree,
            workspace.catalog,
            data.payload,
            roadmap_id=data.roadmap_id,
            section_id=data.section_id,
        )
    except ValueError as e:
        logger.warning("Rejected import payload", error=str(e))
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    await snapshot_service.save_workspace(db, workspace)
    return report


@router.get("/defaults")
async def list_default_roadmaps() -> list[dict[str, Any]]:
    """Built-in templates that can be added in one click."""
    return default_roadmaps.list_default_roadmaps()


@router.post("/defaults", response_model=ImportReport)
async def import_default_roadmaps(
    data: DefaultRoadmapsRequest,
    workspace: WorkspaceDep,
    db: DBDep,
) -> ImportReport:
    report = default_roadmaps.import_default_roadmaps(
        workspace.tree,
        workspace.catalog,
        data.template_ids,
    )
    await snapshot_service.save_workspace(db, workspace)
    return report
