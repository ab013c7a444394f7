"""Schema definitions for composed prompts."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Literal, TypedDict

if TYPE_CHECKING:
	from commit_buddy.artifacts.schemas import ArtifactKind


class TruncationStrategy(str, Enum):
	"""Ways of shrinking the change context, in the order they are tried."""

	DROP_PATCHES = "drop_patches"
	ELIDE_HUNKS = "elide_hunks"
	SUBJECT_ONLY = "subject_only"
	HARD_CUT = "hard_cut"


class MessageDict(TypedDict):
	"""Typed dictionary for LLM message structure."""

	role: Literal["user", "system"]
	content: str


@dataclass(frozen=True)
class Prompt:
	"""A bounded prompt for one artifact kind."""

	kind: ArtifactKind
	system: str
	user: str
	context: str
	char_budget: int
	hint: str | None = None
	truncated: bool = False
	strategies: tuple[TruncationStrategy, ...] = ()
	full_patch_count: int = 0

	def messages(self) -> list[MessageDict]:
		"""Build the chat messages sent to the backend."""
		return [
			{"role": "system", "content": self.system},
			{"role": "user", "content": f"{self.user}\n\n{self.context}"},
		]
