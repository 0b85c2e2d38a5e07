"""Programming language schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from learnboard.schemas.roadmap import utcnow


class Language(BaseModel):
    """A programming language that roadmaps are grouped under."""

    id: str
    name: str
    slug: str
    color: str
    icon: str = ""
    created_at: datetime = Field(default_factory=utcnow)


class LanguageCreate(BaseModel):
    """Create a language entry."""

    name: str
    color: str | None = None
    icon: str | None = None


class LanguageCatalog(BaseModel):
    """All known languages, keyed by id."""

    languages: dict[str, Language] = Field(default_factory=dict)
