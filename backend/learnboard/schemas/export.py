"""Portable roadmap document, the same shape the importer accepts."""

from __future__ import annotations

from datetime import datetime

from learnboard.schemas.fragment import FragmentModel
from learnboard.schemas.roadmap import Progress


class TopicDocument(FragmentModel):
    title: str
    completed: bool
    sub_topics: list[TopicDocument] | None = None


class SectionDocument(FragmentModel):
    title: str
    description: str
    topics: list[TopicDocument]


class RoadmapDocument(FragmentModel):
    """Exported roadmap, serialized with camelCase keys."""

    title: str
    description: str
    language: str
    language_id: str
    progress: Progress
    exported_at: datetime
    sections: list[SectionDocument]
