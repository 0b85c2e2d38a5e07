"""Language catalog API routes."""

from fastapi import APIRouter, HTTPException, status

from learnboard.api.deps import DBDep, WorkspaceDep
from learnboard.schemas.language import Language, LanguageCreate
from learnboard.services import language_service, snapshot_service

router = APIRouter(prefix="/languages", tags=["languages"])


@router.get("", response_model=list[Language])
async def list_languages(workspace: WorkspaceDep) -> list[Language]:
    return language_service.list_languages(workspace.catalog)


@router.post("", response_model=Language, status_code=status.HTTP_201_CREATED)
async def create_language(data: LanguageCreate, workspace: WorkspaceDep, db: DBDep) -> Language:
    """Add a language; names are unique regardless of case."""
    if not data.name.strip():
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Name must not be empty",
        )
    if language_service.find_language_by_name(workspace.catalog, data.name) is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Language already exists",
        )
    language = language_service.add_language(workspace.catalog, data)
    await snapshot_service.save_workspace(db, workspace)
    return language
