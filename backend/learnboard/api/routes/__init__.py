"""API routes."""

from learnboard.api.routes import imports, languages, roadmaps, sections

__all__ = ["roadmaps", "sections", "languages", "imports"]
