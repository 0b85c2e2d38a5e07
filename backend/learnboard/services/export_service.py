"""Export a roadmap as a portable JSON document.

The document has the same shape the importer accepts, so an exported file can
be uploaded again; ids are regenerated on import.
"""

import re
from collections.abc import Sequence

from learnboard.core.logging import get_logger
from learnboard.schemas.export import RoadmapDocument, SectionDocument, TopicDocument
from learnboard.schemas.language import LanguageCatalog
from learnboard.schemas.roadmap import TreeState, utcnow
from learnboard.services import language_service, tree_store

logger = get_logger(__name__)

UNKNOWN_LANGUAGE = "Unknown"

_WHITESPACE = re.compile(r"\s+")


def _topic_documents(state: TreeState, topic_ids: Sequence[str]) -> list[TopicDocument]:
    built: dict[str, TopicDocument] = {}
    for topic_id in reversed(tree_store.preorder_ids(state, topic_ids)):
        topic = state.topics[topic_id]
        built[topic_id] = TopicDocument(
            title=topic.title,
            completed=topic.completed,
            sub_topics=[built[child_id] for child_id in topic.child_ids] or None,
        )
    return [built[topic_id] for topic_id in topic_ids]


def export_roadmap(
    state: TreeState,
    catalog: LanguageCatalog,
    roadmap_id: str,
) -> RoadmapDocument | None:
    """Build the export document for one roadmap.

    Sections and topics come out in sort_order at every level.

    Returns:
        The document, or None if the roadmap does not exist
    """
    roadmap = tree_store.get_roadmap(state, roadmap_id)
    if roadmap is None:
        return None

    language = language_service.get_language(catalog, roadmap.language_id)
    sections = [
        SectionDocument(
            title=section.title,
            description=section.description,
            topics=_topic_documents(state, section.topic_ids),
        )
        for section in tree_store.get_sections_by_roadmap(state, roadmap_id)
    ]

    logger.info("Roadmap exported", roadmap_id=roadmap_id, sections=len(sections))
    return RoadmapDocument(
        title=roadmap.title,
        description=roadmap.description,
        language=language.name if language else UNKNOWN_LANGUAGE,
        language_id=roadmap.language_id,
        progress=tree_store.get_roadmap_progress(state, roadmap_id),
        exported_at=utcnow(),
        sections=sections,
    )


def export_filename(title: str) -> str:
    """Download name: whitespace runs in the title become hyphens."""
    return f"roadmap-{_WHITESPACE.sub('-', title)}.json"


def dump_document(document: RoadmapDocument) -> str:
    """Pretty JSON with camelCase keys; empty sub-topic lists are left out."""
    return document.model_dump_json(by_alias=True, exclude_none=True, indent=2)
