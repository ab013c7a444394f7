"""Offline artifact generation used when the backend is unavailable."""

from commit_buddy.fallback.conventional import (
	ConventionalCommit,
	extract_commit_type,
	is_conventional_commit,
	parse_conventional,
)
from commit_buddy.fallback.templates import render

__all__ = ["ConventionalCommit", "extract_commit_type", "is_conventional_commit", "parse_conventional", "render"]
