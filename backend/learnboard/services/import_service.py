"""Merge external roadmap fragments into the tree store.

Bulk JSON uploads, AI-generated outlines, and built-in templates all go
through the same section/topic merge below, so deduplication, language
creation, and ordering behave the same for every producer.

Fragments are merged strictly one after another. Each ``add_*`` call returns
the created id, and everything that depends on it uses that id directly.
"""

from collections.abc import Iterable, Iterator, Mapping, Sequence
from typing import Any

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from learnboard.core.logging import get_logger
from learnboard.schemas.fragment import (
    TOO_DEEP_MESSAGE,
    BranchTopic,
    GeneratedRoadmap,
    ImportPayload,
    ImportReport,
    LeafTopic,
    RoadmapFragment,
    SectionFragment,
    SkippedFragment,
    TopicInput,
    nesting_depth,
    normalize_topic,
)
from learnboard.schemas.language import LanguageCatalog
from learnboard.schemas.roadmap import MAX_TOPIC_DEPTH, RoadmapCreate, SectionCreate, TopicCreate, TreeState
from learnboard.services import language_service, tree_store
from learnboard.services.payload_parser import parse_json_payload

logger = get_logger(__name__)

SUB_SECTION_MARKER = "↳ "

REASON_DUPLICATE = "duplicate_title"
REASON_INVALID = "invalid"
REASON_MISSING_TARGET = "missing_target"
REASON_UNKNOWN_TEMPLATE = "unknown_template"

_TOPIC_ADAPTER: TypeAdapter[LeafTopic | BranchTopic] = TypeAdapter(TopicInput)


class FragmentResult(BaseModel):
    """Outcome of merging a single roadmap fragment."""

    title: str
    roadmap_id: str | None = None
    section_ids: list[str] = Field(default_factory=list)
    topic_count: int = 0
    skipped: SkippedFragment | None = None


def _raw_title(raw: Any) -> str:
    if isinstance(raw, Mapping):
        return str(raw.get("title") or "")
    if isinstance(raw, str):
        return raw
    return getattr(raw, "title", "") or ""


def _error_detail(exc: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in error['loc']) or 'fragment'}: {error['msg']}"
        for error in exc.errors()
    )


# ============================================================================
# Topic and section merge
# ============================================================================


def _merge_topic(
    state: TreeState,
    section_id: str,
    topic: LeafTopic | BranchTopic,
    parent_id: str | None = None,
) -> int:
    """Create one topic and its children. Returns the number of topics created."""
    data = TopicCreate(title=topic.title, completed=topic.completed)
    if parent_id is None:
        topic_id = tree_store.add_topic(state, section_id, data)
    else:
        topic_id = tree_store.add_sub_topic(state, section_id, parent_id, data)
    if topic_id is None:
        return 0

    created = 1
    if isinstance(topic, BranchTopic):
        for child in topic.children:
            created += _merge_topic(state, section_id, child, parent_id=topic_id)
    return created


def _merge_section(
    state: TreeState,
    roadmap_id: str,
    section: SectionFragment,
    depth: int = 0,
) -> tuple[list[str], int]:
    """Append a section, its topics, then its flattened sub-sections.

    Sub-sections become ordinary sections placed directly after their parent,
    with an indent marker in the title.
    """
    title = section.title if depth == 0 else f"{'   ' * (depth - 1)}{SUB_SECTION_MARKER}{section.title}"
    section_id = tree_store.add_section(
        state,
        SectionCreate(
            roadmap_id=roadmap_id,
            title=title,
            description=section.description,
            target_count=section.target_count,
        ),
    )
    if section_id is None:
        return [], 0

    section_ids = [section_id]
    topic_count = sum(_merge_topic(state, section_id, topic) for topic in section.topics)

    for sub_section in section.sub_sections:
        sub_ids, sub_topics = _merge_section(state, roadmap_id, sub_section, depth + 1)
        section_ids.extend(sub_ids)
        topic_count += sub_topics
    return section_ids, topic_count


def merge_sections(
    state: TreeState,
    roadmap_id: str,
    sections: Sequence[SectionFragment | Mapping[str, Any]],
) -> ImportReport:
    """Append sections (with topics) to an existing roadmap.

    Invalid section entries are reported and skipped; the rest still merge.
    """
    report = ImportReport()
    if roadmap_id not in state.roadmaps:
        report.skipped.extend(
            SkippedFragment(title=_raw_title(raw), reason=REASON_MISSING_TARGET) for raw in sections
        )
        return report

    for raw in sections:
        try:
            section = SectionFragment.model_validate(raw)
        except ValidationError as exc:
            report.skipped.append(
                SkippedFragment(title=_raw_title(raw), reason=REASON_INVALID, detail=_error_detail(exc))
            )
            continue
        section_ids, topic_count = _merge_section(state, roadmap_id, section)
        report.created_section_ids.extend(section_ids)
        report.created_topic_count += topic_count

    logger.info(
        "Sections merged",
        roadmap_id=roadmap_id,
        sections=len(report.created_section_ids),
        topics=report.created_topic_count,
    )
    return report


def merge_topics(state: TreeState, section_id: str, topics: Sequence[Any]) -> ImportReport:
    """Append topics (bare titles or objects) to an existing section."""
    report = ImportReport()
    if section_id not in state.sections:
        report.skipped.extend(
            SkippedFragment(title=_raw_title(raw), reason=REASON_MISSING_TARGET) for raw in topics
        )
        return report

    for raw in topics:
        try:
            topic = _TOPIC_ADAPTER.validate_python(normalize_topic(raw))
            if nesting_depth(topic) > MAX_TOPIC_DEPTH:
                raise ValueError(TOO_DEEP_MESSAGE)
        except ValidationError as exc:
            report.skipped.append(
                SkippedFragment(title=_raw_title(raw), reason=REASON_INVALID, detail=_error_detail(exc))
            )
            continue
        except ValueError as exc:
            report.skipped.append(SkippedFragment(title=_raw_title(raw), reason=REASON_INVALID, detail=str(exc)))
            continue
        report.created_topic_count += _merge_topic(state, section_id, topic)
    return report


def merge_generated(state: TreeState, roadmap_id: str, generated: GeneratedRoadmap) -> ImportReport:
    """Append AI-generated sections to a roadmap."""
    return merge_sections(state, roadmap_id, generated.sections)


# ============================================================================
# Roadmap fragments
# ============================================================================


def merge_roadmap(
    state: TreeState,
    catalog: LanguageCatalog,
    raw: RoadmapFragment | Mapping[str, Any],
) -> FragmentResult:
    """Merge one roadmap fragment.

    Steps: validate, resolve or create the language, skip on an exact title
    match with an existing roadmap, otherwise create the roadmap and append its
    sections in order.
    """
    try:
        fragment = RoadmapFragment.model_validate(raw)
    except ValidationError as exc:
        title = _raw_title(raw)
        logger.warning("Invalid roadmap fragment", title=title, errors=exc.error_count())
        return FragmentResult(
            title=title,
            skipped=SkippedFragment(title=title, reason=REASON_INVALID, detail=_error_detail(exc)),
        )

    if tree_store.find_roadmap_by_title(state, fragment.title) is not None:
        logger.info("Roadmap already exists, skipping", title=fragment.title)
        return FragmentResult(
            title=fragment.title,
            skipped=SkippedFragment(title=fragment.title, reason=REASON_DUPLICATE),
        )

    language = language_service.resolve_language(
        catalog,
        language_id=fragment.language_id,
        name=fragment.language,
    )
    roadmap_id = tree_store.add_roadmap(
        state,
        RoadmapCreate(
            language_id=language.id,
            title=fragment.title,
            description=fragment.description,
        ),
    )

    result = FragmentResult(title=fragment.title, roadmap_id=roadmap_id)
    for section in fragment.sections:
        section_ids, topic_count = _merge_section(state, roadmap_id, section)
        result.section_ids.extend(section_ids)
        result.topic_count += topic_count
    return result


def iter_import(
    state: TreeState,
    catalog: LanguageCatalog,
    fragments: Iterable[RoadmapFragment | Mapping[str, Any]],
) -> Iterator[FragmentResult]:
    """Merge fragments lazily, one per step.

    A caller that stops iterating cancels the rest of the batch; a fragment
    that was started is always merged completely.
    """
    for raw in fragments:
        yield merge_roadmap(state, catalog, raw)


def _collect(results: Iterable[FragmentResult], report: ImportReport | None = None) -> ImportReport:
    report = report or ImportReport()
    for result in results:
        if result.skipped is not None:
            report.skipped.append(result.skipped)
            continue
        if result.roadmap_id is not None:
            report.created_roadmap_ids.append(result.roadmap_id)
        report.created_section_ids.extend(result.section_ids)
        report.created_topic_count += result.topic_count
    return report


def import_roadmaps(
    state: TreeState,
    catalog: LanguageCatalog,
    fragments: Iterable[RoadmapFragment | Mapping[str, Any]],
) -> ImportReport:
    """Merge a batch of roadmap fragments and report what happened.

    Args:
        state: Tree state to merge into
        catalog: Language catalog used to resolve or create languages
        fragments: Roadmap fragments, validated models or raw mappings

    Returns:
        Created roadmap/section ids and the skipped fragments with reasons
    """
    report = _collect(iter_import(state, catalog, fragments))
    logger.info(
        "Roadmaps imported",
        created=len(report.created_roadmap_ids),
        skipped=len(report.skipped),
    )
    return report


def import_payload(
    state: TreeState,
    catalog: LanguageCatalog,
    payload: str | Mapping[str, Any] | ImportPayload,
    *,
    roadmap_id: str | None = None,
    section_id: str | None = None,
) -> ImportReport:
    """Import a bulk upload document.

    ``roadmaps`` become new roadmaps; ``sections`` are appended to
    ``roadmap_id`` and ``topics`` to ``section_id``.

    Raises:
        ValueError: If the text is not JSON or the document has none of
            roadmaps, sections, or topics
    """
    if isinstance(payload, str):
        payload = parse_json_payload(payload)
    if not isinstance(payload, ImportPayload):
        if not isinstance(payload, Mapping):
            raise ValueError("Payload must be a JSON object")
        payload = ImportPayload.model_validate(dict(payload))

    report = _collect(iter_import(state, catalog, payload.roadmaps))

    if payload.sections:
        sections_report = merge_sections(state, roadmap_id or "", payload.sections)
        report.created_section_ids.extend(sections_report.created_section_ids)
        report.created_topic_count += sections_report.created_topic_count
        report.skipped.extend(sections_report.skipped)

    if payload.topics:
        topics_report = merge_topics(state, section_id or "", payload.topics)
        report.created_topic_count += topics_report.created_topic_count
        report.skipped.extend(topics_report.skipped)

    logger.info(
        "Payload imported",
        roadmaps=len(report.created_roadmap_ids),
        sections=len(report.created_section_ids),
        topics=report.created_topic_count,
        skipped=len(report.skipped),
    )
    return report
