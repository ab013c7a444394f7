"""Change summaries built from repository data."""

from commit_buddy.changes.builder import build, validate_file_change
from commit_buddy.changes.model import ChangeModel, ChangeStats, SourceDescription, SourceKind

__all__ = ["ChangeModel", "ChangeStats", "SourceDescription", "SourceKind", "build", "validate_file_change"]
