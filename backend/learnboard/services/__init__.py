"""Service layer modules."""

from learnboard.services import (
    default_roadmaps,
    export_service,
    generation_client,
    import_service,
    language_service,
    ordering,
    payload_parser,
    progress,
    snapshot_service,
    tree_store,
)

__all__ = [
    "default_roadmaps",
    "export_service",
    "generation_client",
    "import_service",
    "language_service",
    "ordering",
    "payload_parser",
    "progress",
    "snapshot_service",
    "tree_store",
]
