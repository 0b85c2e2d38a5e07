"""Pydantic schemas."""

from learnboard.schemas.export import RoadmapDocument, SectionDocument, TopicDocument
from learnboard.schemas.fragment import (
    BranchTopic,
    DefaultRoadmapsRequest,
    GeneratedRoadmap,
    ImportPayload,
    ImportReport,
    ImportRequest,
    LeafTopic,
    RoadmapFragment,
    SectionFragment,
    SkippedFragment,
)
from learnboard.schemas.language import Language, LanguageCatalog, LanguageCreate
from learnboard.schemas.roadmap import (
    AssignPostRequest,
    MoveRequest,
    Progress,
    ReorderRequest,
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
)
from learnboard.schemas.workspace import Workspace

__all__ = [
    "Roadmap",
    "RoadmapCreate",
    "RoadmapUpdate",
    "RoadmapTree",
    "Section",
    "SectionCreate",
    "SectionUpdate",
    "SectionTree",
    "Topic",
    "TopicCreate",
    "TopicUpdate",
    "TopicTree",
    "Progress",
    "TreeState",
    "Language",
    "LanguageCreate",
    "LanguageCatalog",
    "Workspace",
    "LeafTopic",
    "BranchTopic",
    "SectionFragment",
    "RoadmapFragment",
    "ImportPayload",
    "GeneratedRoadmap",
    "ImportReport",
    "SkippedFragment",
    "RoadmapDocument",
    "SectionDocument",
    "TopicDocument",
    "ReorderRequest",
    "MoveRequest",
    "AssignPostRequest",
    "ImportRequest",
    "DefaultRoadmapsRequest",
]
