"""API dependencies."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from learnboard.core.database import get_session
from learnboard.schemas.workspace import Workspace


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get database session dependency."""
    async for session in get_session():
        yield session


def get_workspace(request: Request) -> Workspace:
    """The single in-process workspace, loaded at startup."""
    workspace = getattr(request.app.state, "workspace", None)
    if workspace is None:
        workspace = Workspace()
        request.app.state.workspace = workspace
    return workspace


DBDep = Annotated[AsyncSession, Depends(get_db)]
WorkspaceDep = Annotated[Workspace, Depends(get_workspace)]


def require_title(title: str | None) -> None:
    """Reject blank titles; the tree store itself accepts anything."""
    if title is not None and not title.strip():
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Title must not be empty",
        )
