"""Database models."""

from learnboard.models.snapshot import Snapshot

__all__ = ["Snapshot"]
