"""Tests for merging import fragments."""

import json

import pytest

from learnboard.schemas.fragment import GeneratedRoadmap
from learnboard.schemas.language import LanguageCatalog
from learnboard.schemas.roadmap import MAX_TOPIC_DEPTH, RoadmapCreate, SectionCreate, TreeState
from learnboard.services import default_roadmaps, import_service, language_service, tree_store

PYTHON_PAYLOAD = {
    "roadmaps": [
        {
            "title": "Python",
            "language": "Python",
            "sections": [
                {
                    "title": "Basics",
                    "topics": [
                        "Variables",
                        {"title": "Functions", "subTopics": ["Arguments", "Closures"]},
                    ],
                }
            ],
        }
    ]
}


def test_import_creates_language_roadmap_and_nested_topics(
    state: TreeState, catalog: LanguageCatalog
) -> None:
    report = import_service.import_payload(state, catalog, PYTHON_PAYLOAD)

    assert len(report.created_roadmap_ids) == 1
    assert len(report.created_section_ids) == 1
    assert report.created_topic_count == 4
    assert report.skipped == []

    language = language_service.find_language_by_name(catalog, "python")
    assert language is not None
    assert language.color == "#3776AB"

    roadmap = tree_store.get_roadmap(state, report.created_roadmap_ids[0])
    assert roadmap.language_id == language.id

    section_id = report.created_section_ids[0]
    topics = tree_store.get_topics(state, section_id)
    assert [t.title for t in topics] == ["Variables", "Functions"]
    assert [t.sort_order for t in topics] == [1, 2]
    children = tree_store.get_sub_topics(state, topics[1].id)
    assert [t.title for t in children] == ["Arguments", "Closures"]


def test_import_from_raw_text(state: TreeState, catalog: LanguageCatalog) -> None:
    text = "```json\n" + json.dumps(PYTHON_PAYLOAD) + "\n```"
    report = import_service.import_payload(state, catalog, text)
    assert len(report.created_roadmap_ids) == 1


def test_duplicate_title_is_skipped_and_existing_untouched(
    state: TreeState, catalog: LanguageCatalog
) -> None:
    first = import_service.import_payload(state, catalog, PYTHON_PAYLOAD)
    roadmap_id = first.created_roadmap_ids[0]
    before = state.model_copy(deep=True)

    second = import_service.import_payload(state, catalog, PYTHON_PAYLOAD)

    assert second.created_roadmap_ids == []
    assert [(s.title, s.reason) for s in second.skipped] == [("Python", import_service.REASON_DUPLICATE)]
    assert state == before
    assert len(tree_store.get_sections_by_roadmap(state, roadmap_id)) == 1


def test_existing_language_is_reused_case_insensitively(
    state: TreeState, catalog: LanguageCatalog
) -> None:
    import_service.import_payload(state, catalog, PYTHON_PAYLOAD)
    report = import_service.import_roadmaps(
        state, catalog, [{"title": "Django", "languageName": "PYTHON", "sections": []}]
    )
    assert len(report.created_roadmap_ids) == 1
    assert len(catalog.languages) == 1


def test_unknown_language_id_creates_entry_with_that_id(
    state: TreeState, catalog: LanguageCatalog
) -> None:
    report = import_service.import_roadmaps(
        state, catalog, [{"title": "Rust", "languageId": "lang-rust", "sections": []}]
    )
    roadmap = tree_store.get_roadmap(state, report.created_roadmap_ids[0])
    assert roadmap.language_id == "lang-rust"
    assert "lang-rust" in catalog.languages


def test_invalid_fragment_skipped_rest_merged(state: TreeState, catalog: LanguageCatalog) -> None:
    report = import_service.import_roadmaps(
        state,
        catalog,
        [
            {"title": "No language", "sections": []},
            {"title": "", "language": "Go"},
            {"title": "Go", "language": "Go", "sections": [{"title": "Basics", "topics": ["Goroutines"]}]},
        ],
    )
    assert len(report.created_roadmap_ids) == 1
    assert [s.reason for s in report.skipped] == [import_service.REASON_INVALID] * 2
    assert report.skipped[0].title == "No language"
    assert report.skipped[0].detail


def test_sub_sections_follow_their_parent(state: TreeState, catalog: LanguageCatalog) -> None:
    report = import_service.import_roadmaps(
        state,
        catalog,
        [
            {
                "title": "Web",
                "language": "JavaScript",
                "sections": [
                    {
                        "title": "HTTP",
                        "topics": ["Methods"],
                        "subSections": [
                            {"title": "Caching", "topics": ["ETags"], "subSections": [{"title": "CDNs"}]},
                        ],
                    },
                    {"title": "Browsers", "topics": ["DOM"]},
                ],
            }
        ],
    )
    sections = tree_store.get_sections_by_roadmap(state, report.created_roadmap_ids[0])
    assert [s.title for s in sections] == ["HTTP", "↳ Caching", "   ↳ CDNs", "Browsers"]
    assert [s.sort_order for s in sections] == [1, 2, 3, 4]
    assert report.created_topic_count == 3


def test_sections_and_topics_appended_to_targets(state: TreeState, catalog: LanguageCatalog) -> None:
    roadmap_id = tree_store.add_roadmap(state, RoadmapCreate(language_id="x", title="Existing"))
    section_id = tree_store.add_section(state, SectionCreate(roadmap_id=roadmap_id, title="First"))

    report = import_service.import_payload(
        state,
        catalog,
        {"sections": [{"title": "Second", "topics": ["A"]}], "topics": ["B", {"title": "C"}]},
        roadmap_id=roadmap_id,
        section_id=section_id,
    )
    assert [s.title for s in tree_store.get_sections_by_roadmap(state, roadmap_id)] == ["First", "Second"]
    assert [t.title for t in tree_store.get_topics(state, section_id)] == ["B", "C"]
    assert report.created_topic_count == 3


def test_sections_without_target_are_skipped(state: TreeState, catalog: LanguageCatalog) -> None:
    report = import_service.import_payload(state, catalog, {"sections": [{"title": "Orphan"}]})
    assert [(s.title, s.reason) for s in report.skipped] == [("Orphan", import_service.REASON_MISSING_TARGET)]
    assert state.sections == {}


def test_null_lists_count_as_empty(state: TreeState, catalog: LanguageCatalog) -> None:
    report = import_service.import_payload(
        state,
        catalog,
        {"roadmaps": [{"title": "Go", "language": "Go"}], "sections": None, "topics": None},
    )
    assert len(report.created_roadmap_ids) == 1
    assert report.skipped == []


def _nested_topic(levels: int) -> dict:
    topic: dict = {"title": f"Level {levels}"}
    for level in range(levels - 1, 0, -1):
        topic = {"title": f"Level {level}", "subTopics": [topic]}
    return topic


def _tagged_topic(levels: int) -> dict:
    topic: dict = {"kind": "leaf", "title": f"Level {levels}"}
    for level in range(levels - 1, 0, -1):
        topic = {"kind": "branch", "title": f"Level {level}", "children": [topic]}
    return topic


def test_topics_nested_past_cap_are_rejected(state: TreeState, catalog: LanguageCatalog) -> None:
    report = import_service.import_roadmaps(
        state,
        catalog,
        [
            {
                "title": "Too deep",
                "language": "Go",
                "sections": [{"title": "S", "topics": [_nested_topic(MAX_TOPIC_DEPTH + 1)]}],
            },
            {
                "title": "Deepest",
                "language": "Go",
                "sections": [{"title": "S", "topics": [_nested_topic(MAX_TOPIC_DEPTH)]}],
            },
        ],
    )
    assert [(s.title, s.reason) for s in report.skipped] == [("Too deep", import_service.REASON_INVALID)]
    assert str(MAX_TOPIC_DEPTH) in report.skipped[0].detail
    assert report.created_topic_count == MAX_TOPIC_DEPTH
    assert [r.title for r in state.roadmaps.values()] == ["Deepest"]


@pytest.mark.parametrize("make_topic", [_nested_topic, _tagged_topic])
def test_merge_topics_rejects_topics_past_cap(state: TreeState, make_topic) -> None:
    roadmap_id = tree_store.add_roadmap(state, RoadmapCreate(language_id="x", title="Existing"))
    section_id = tree_store.add_section(state, SectionCreate(roadmap_id=roadmap_id, title="First"))

    report = import_service.merge_topics(state, section_id, [make_topic(MAX_TOPIC_DEPTH + 1), "Shallow"])
    assert [(s.title, s.reason) for s in report.skipped] == [("Level 1", import_service.REASON_INVALID)]
    assert report.created_topic_count == 1
    assert [t.title for t in tree_store.get_topics(state, section_id)] == ["Shallow"]


@pytest.mark.parametrize("payload", ["not json at all", "[1, 2]", {"other": []}])
def test_unusable_payload_raises(state: TreeState, catalog: LanguageCatalog, payload) -> None:
    with pytest.raises(ValueError):
        import_service.import_payload(state, catalog, payload)


def test_iter_import_stops_between_fragments(state: TreeState, catalog: LanguageCatalog) -> None:
    fragments = [
        {"title": "One", "language": "Python", "sections": [{"title": "S", "topics": ["T"]}]},
        {"title": "Two", "language": "Python"},
    ]
    results = import_service.iter_import(state, catalog, fragments)
    first = next(results)
    results.close()

    assert first.roadmap_id is not None
    summary = first.model_dump(include={"title", "topic_count", "skipped"})
    assert summary == {"title": "One", "topic_count": 1, "skipped": None}
    assert len(first.section_ids) == 1
    assert [r.title for r in state.roadmaps.values()] == ["One"]
    assert len(state.sections) == 1
    assert len(state.topics) == 1


def test_merge_generated_appends_sections(state: TreeState) -> None:
    roadmap_id = tree_store.add_roadmap(state, RoadmapCreate(language_id="x", title="Python"))
    generated = GeneratedRoadmap.model_validate(
        {"sections": [{"title": "Async", "topics": ["asyncio", {"title": "Tasks", "subtopics": ["gather"]}]}]}
    )
    report = import_service.merge_generated(state, roadmap_id, generated)
    assert len(report.created_section_ids) == 1
    assert report.created_topic_count == 3


def test_default_roadmaps_import_and_skip_unknown(state: TreeState, catalog: LanguageCatalog) -> None:
    report = default_roadmaps.import_default_roadmaps(state, catalog, ["python", "django", "cobol"])
    assert len(report.created_roadmap_ids) == 2
    assert [(s.title, s.reason) for s in report.skipped] == [("cobol", import_service.REASON_UNKNOWN_TEMPLATE)]
    # both templates share the Python language
    assert len(catalog.languages) == 1

    again = default_roadmaps.import_default_roadmaps(state, catalog, ["python"])
    assert again.created_roadmap_ids == []
    assert again.skipped[0].reason == import_service.REASON_DUPLICATE


def test_list_default_roadmaps() -> None:
    templates = {t["id"]: t for t in default_roadmaps.list_default_roadmaps()}
    assert list(templates) == [
        "python",
        "django",
        "laravel",
        "react",
        "wordpress",
        "vue",
        "nestjs",
        "nextjs",
        "javascript",
        "fastapi",
    ]
    assert {template_id: t["language"] for template_id, t in templates.items()} == {
        "python": "Python",
        "django": "Python",
        "laravel": "PHP",
        "react": "JavaScript",
        "wordpress": "PHP",
        "vue": "JavaScript",
        "nestjs": "TypeScript",
        "nextjs": "TypeScript",
        "javascript": "JavaScript",
        "fastapi": "Python",
    }
    assert templates["python"]["section_count"] == 4
    assert all(t["section_count"] == 5 for template_id, t in templates.items() if template_id != "python")
    assert all(t["title"] and t["description"] for t in templates.values())


def test_all_default_roadmaps_import(state: TreeState, catalog: LanguageCatalog) -> None:
    report = default_roadmaps.import_default_roadmaps(state, catalog, None)
    assert report.skipped == []
    assert len(report.created_roadmap_ids) == 10
    assert sorted(language.name for language in catalog.languages.values()) == [
        "JavaScript",
        "PHP",
        "Python",
        "TypeScript",
    ]


def test_import_python_basics_scenario(state: TreeState, catalog: LanguageCatalog) -> None:
    report = import_service.import_payload(
        state,
        catalog,
        {
            "roadmaps": [
                {
                    "languageId": "py",
                    "title": "Python",
                    "sections": [
                        {"title": "Basics", "topics": ["Variables", {"title": "Loops", "subtopics": ["for", "while"]}]}
                    ],
                }
            ]
        },
    )

    roadmaps = tree_store.list_roadmaps(state)
    assert [r.title for r in roadmaps] == ["Python"]
    sections = tree_store.get_sections_by_roadmap(state, roadmaps[0].id)
    assert [(s.title, s.sort_order) for s in sections] == [("Basics", 1)]

    topics = tree_store.get_topics(state, sections[0].id)
    assert [(t.title, t.sort_order) for t in topics] == [("Variables", 1), ("Loops", 2)]
    assert [t.title for t in tree_store.get_sub_topics(state, topics[1].id)] == ["for", "while"]

    progress = tree_store.get_section_progress(state, sections[0].id)
    assert (progress.completed, progress.total, progress.percentage) == (0, 2, 0)
    assert report.created_topic_count == 4
