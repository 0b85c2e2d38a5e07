"""Tests for roadmap export."""

import json

from learnboard.schemas.language import LanguageCatalog, LanguageCreate
from learnboard.schemas.roadmap import MAX_TOPIC_DEPTH, TreeState
from learnboard.services import export_service, import_service, language_service, tree_store

SOURCE = {
    "title": "Python",
    "language": "Python",
    "description": "From zero",
    "sections": [
        {
            "title": "Basics",
            "topics": [
                {"title": "Variables", "completed": True},
                {"title": "Functions", "subTopics": ["Arguments"]},
            ],
        },
        {"title": "Advanced", "topics": ["Metaclasses"]},
    ],
}


def _imported(state: TreeState, catalog: LanguageCatalog) -> str:
    report = import_service.import_roadmaps(state, catalog, [SOURCE])
    return report.created_roadmap_ids[0]


def test_export_document_shape(state: TreeState, catalog: LanguageCatalog) -> None:
    roadmap_id = _imported(state, catalog)
    document = export_service.export_roadmap(state, catalog, roadmap_id)
    assert document is not None

    data = json.loads(export_service.dump_document(document))
    assert set(data) == {"title", "description", "language", "languageId", "progress", "exportedAt", "sections"}
    assert data["language"] == "Python"
    assert data["progress"] == {"completed": 1, "total": 3, "percentage": 33}
    assert [s["title"] for s in data["sections"]] == ["Basics", "Advanced"]

    variables, functions = data["sections"][0]["topics"]
    assert variables == {"title": "Variables", "completed": True}
    assert functions["subTopics"] == [{"title": "Arguments", "completed": False}]


def test_export_unknown_language(state: TreeState, catalog: LanguageCatalog) -> None:
    roadmap_id = _imported(state, catalog)
    catalog.languages.clear()
    document = export_service.export_roadmap(state, catalog, roadmap_id)
    assert document.language == export_service.UNKNOWN_LANGUAGE


def test_export_missing_roadmap(state: TreeState, catalog: LanguageCatalog) -> None:
    assert export_service.export_roadmap(state, catalog, "missing") is None


def test_export_filename_hyphenates_whitespace() -> None:
    assert export_service.export_filename("Python  Developer Roadmap") == "roadmap-Python-Developer-Roadmap.json"


def test_export_then_import_round_trip(state: TreeState, catalog: LanguageCatalog) -> None:
    roadmap_id = _imported(state, catalog)
    exported = export_service.dump_document(export_service.export_roadmap(state, catalog, roadmap_id))

    fresh_state = TreeState()
    fresh_catalog = LanguageCatalog()
    language_service.add_language(fresh_catalog, LanguageCreate(name="Go"))
    report = import_service.import_payload(fresh_state, fresh_catalog, {"roadmaps": [json.loads(exported)]})

    assert report.skipped == []
    new_id = report.created_roadmap_ids[0]
    original = tree_store.get_roadmap_tree(state, roadmap_id)
    restored = tree_store.get_roadmap_tree(fresh_state, new_id)

    def outline(tree):
        return [
            (
                section.title,
                [(t.title, t.completed, [c.title for c in t.sub_topics]) for t in section.topics],
            )
            for section in tree.sections
        ]

    assert outline(restored) == outline(original)
    assert restored.progress == original.progress
    assert restored.language_id == original.language_id
    assert fresh_catalog.languages[restored.language_id].name == "Python"


def _nested_topic(levels: int) -> dict:
    topic: dict = {"title": f"Level {levels}"}
    for level in range(levels - 1, 0, -1):
        topic = {"title": f"Level {level}", "subTopics": [topic]}
    return topic


def test_export_deepest_chain_and_import_again(state: TreeState, catalog: LanguageCatalog) -> None:
    source = {
        "title": "Deep",
        "language": "Python",
        "sections": [{"title": "Chain", "topics": [_nested_topic(MAX_TOPIC_DEPTH)]}],
    }
    report = import_service.import_roadmaps(state, catalog, [source])
    assert report.created_topic_count == MAX_TOPIC_DEPTH

    document = export_service.export_roadmap(state, catalog, report.created_roadmap_ids[0])
    assert document is not None
    data = json.loads(export_service.dump_document(document))

    node = data["sections"][0]["topics"][0]
    depth = 1
    while "subTopics" in node:
        node = node["subTopics"][0]
        depth += 1
    assert depth == MAX_TOPIC_DEPTH
    assert node["title"] == f"Level {MAX_TOPIC_DEPTH}"

    data["title"] = "Deep again"
    fresh = TreeState()
    again = import_service.import_roadmaps(fresh, catalog, [data])
    assert again.skipped == []
    assert again.created_topic_count == MAX_TOPIC_DEPTH
