"""Schemas for generated artifacts."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class ArtifactKind(str, Enum):
	"""The human-facing artifacts commit-buddy can produce."""

	PR_DESCRIPTION = "pr_description"
	UNIT_TESTS = "unit_tests"
	COMMIT_MESSAGE = "commit_message"
	CHANGELOG = "changelog"
	REVIEW = "review"


class Origin(str, Enum):
	"""Whether an artifact came from the backend or the offline templates."""

	AI_GENERATED = "ai_generated"
	TEMPLATED = "templated"


class OutputFormat(str, Enum):
	"""Output format of a serialized artifact."""

	TEXT = "text"
	JSON = "json"


class ArtifactResult(BaseModel):
	"""A validated artifact, ready to be printed or written."""

	kind: ArtifactKind
	content: str
	origin: Origin
	truncated: bool = False
	suspect: bool = False
	sections: dict[str, list[str]] = Field(default_factory=dict)
