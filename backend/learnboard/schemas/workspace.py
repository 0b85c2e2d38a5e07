"""Workspace schema: the unit that is loaded and persisted wholesale."""

from pydantic import BaseModel, Field

from learnboard.schemas.language import LanguageCatalog
from learnboard.schemas.roadmap import TreeState


class Workspace(BaseModel):
    """Roadmap tree plus the language catalog it references."""

    tree: TreeState = Field(default_factory=TreeState)
    catalog: LanguageCatalog = Field(default_factory=LanguageCatalog)
