"""Import fragment schemas for bulk JSON, AI output, and built-in templates.

External producers hand over camelCase JSON. Topic entries arrive either as a
bare string or as an object carrying ``subTopics``/``subtopics``; they are
resolved here, once, into ``LeafTopic | BranchTopic``.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from learnboard.schemas.roadmap import MAX_TOPIC_DEPTH

_CHILD_KEYS = ("subTopics", "subtopics", "sub_topics", "children")

TOO_DEEP_MESSAGE = f"Topics nest deeper than {MAX_TOPIC_DEPTH} levels"


class FragmentModel(BaseModel):
    """Base for externally produced shapes (camelCase on the wire)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class LeafTopic(FragmentModel):
    kind: Literal["leaf"] = "leaf"
    title: str = Field(min_length=1)
    completed: bool = False


class BranchTopic(FragmentModel):
    kind: Literal["branch"] = "branch"
    title: str = Field(min_length=1)
    completed: bool = False
    children: list[TopicInput] = Field(default_factory=list)


TopicInput = Annotated[LeafTopic | BranchTopic, Field(discriminator="kind")]

BranchTopic.model_rebuild()


def normalize_topic(raw: Any, level: int = 1) -> Any:
    """Resolve a raw topic entry into the tagged ``kind`` shape.

    Anything that is neither a string nor a mapping is passed through so
    validation rejects it. Raises ValueError past ``MAX_TOPIC_DEPTH``.
    """
    if level > MAX_TOPIC_DEPTH:
        raise ValueError(TOO_DEEP_MESSAGE)
    if isinstance(raw, BaseModel):
        return raw.model_dump()
    if isinstance(raw, str):
        return {"kind": "leaf", "title": raw}
    if not isinstance(raw, dict) or "kind" in raw:
        return raw

    base = {"title": raw.get("title"), "completed": raw.get("completed") or False}
    children = next((raw[key] for key in _CHILD_KEYS if raw.get(key)), None)
    if not children:
        return {"kind": "leaf", **base}
    if isinstance(children, list):
        children = [normalize_topic(child, level + 1) for child in children]
    return {"kind": "branch", **base, "children": children}


def nesting_depth(topic: LeafTopic | BranchTopic) -> int:
    """Number of levels in a validated topic, counting the topic itself."""
    deepest = 0
    stack: list[tuple[LeafTopic | BranchTopic, int]] = [(topic, 1)]
    while stack:
        node, level = stack.pop()
        deepest = max(deepest, level)
        if isinstance(node, BranchTopic):
            stack.extend((child, level + 1) for child in node.children)
    return deepest


class SectionFragment(FragmentModel):
    """A section with its topics; subSections are flattened on merge."""

    title: str = Field(min_length=1)
    description: str = ""
    target_count: int | None = None
    topics: list[TopicInput] = Field(default_factory=list)
    sub_sections: list[SectionFragment] = Field(default_factory=list)

    @field_validator("description", mode="before")
    @classmethod
    def _none_description(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("topics", mode="before")
    @classmethod
    def _resolve_topics(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, list):
            return [normalize_topic(item) for item in value]
        return value

    @field_validator("sub_sections", mode="before")
    @classmethod
    def _none_sub_sections(cls, value: Any) -> Any:
        return [] if value is None else value

    @model_validator(mode="after")
    def _limit_nesting(self) -> SectionFragment:
        if any(nesting_depth(topic) > MAX_TOPIC_DEPTH for topic in self.topics):
            raise ValueError(TOO_DEEP_MESSAGE)
        return self


class RoadmapFragment(FragmentModel):
    """A whole roadmap to merge. Needs a language id, a language name, or both."""

    title: str = Field(min_length=1)
    description: str = ""
    language_id: str | None = None
    language: str | None = Field(
        default=None,
        validation_alias=AliasChoices("language", "languageName", "language_name"),
    )
    sections: list[SectionFragment] = Field(default_factory=list)

    @field_validator("description", mode="before")
    @classmethod
    def _none_description(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("sections", mode="before")
    @classmethod
    def _none_sections(cls, value: Any) -> Any:
        return [] if value is None else value

    @model_validator(mode="after")
    def _require_language(self) -> RoadmapFragment:
        if not self.language_id and not self.language:
            raise ValueError("Roadmap fragment needs languageId or language")
        return self


class ImportPayload(FragmentModel):
    """Bulk upload document. Entries stay raw so each one validates on its own."""

    roadmaps: list[Any] = Field(default_factory=list)
    sections: list[Any] = Field(default_factory=list)
    topics: list[Any] = Field(default_factory=list)

    @field_validator("roadmaps", "sections", "topics", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @model_validator(mode="before")
    @classmethod
    def _require_content(cls, data: Any) -> Any:
        if isinstance(data, dict) and not any(
            data.get(key) is not None for key in ("roadmaps", "sections", "topics")
        ):
            raise ValueError("Payload must contain roadmaps, sections or topics")
        return data


class GeneratedRoadmap(FragmentModel):
    """Structured response of the AI roadmap generation endpoint."""

    sections: list[SectionFragment]


# ============================================================================
# Import results
# ============================================================================


class SkippedFragment(BaseModel):
    """A fragment that was not merged, and why."""

    title: str
    reason: str
    detail: str | None = None


class ImportReport(BaseModel):
    """Outcome of one import batch."""

    created_roadmap_ids: list[str] = Field(default_factory=list)
    created_section_ids: list[str] = Field(default_factory=list)
    created_topic_count: int = 0
    skipped: list[SkippedFragment] = Field(default_factory=list)


class ImportRequest(BaseModel):
    """Bulk import request: the document (raw text or JSON) plus optional targets."""

    payload: str | dict[str, Any]
    roadmap_id: str | None = None
    section_id: str | None = None


class DefaultRoadmapsRequest(BaseModel):
    """Built-in templates to add; null means all of them."""

    template_ids: list[str] | None = None
