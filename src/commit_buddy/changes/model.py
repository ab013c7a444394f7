"""Schema definitions for normalized change summaries."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from commit_buddy.git.models import CommitRef, FileChange


class SourceKind(str, Enum):
	"""Where the changes of a request come from."""

	BRANCH_COMPARISON = "branch_comparison"
	COMMIT_RANGE = "commit_range"
	WORKING_TREE = "working_tree"


@dataclass(frozen=True)
class SourceDescription:
	"""Describes what was compared to produce a ChangeModel."""

	kind: SourceKind
	base: str | None = None
	head: str | None = None
	staged: bool = False

	def describe(self) -> str:
		"""Render a one-line human description."""
		if self.kind is SourceKind.BRANCH_COMPARISON:
			return f"Changes on '{self.head or 'HEAD'}' compared to '{self.base}'"
		if self.kind is SourceKind.COMMIT_RANGE:
			if self.base:
				return f"Commits {self.base}..{self.head}"
			return f"Commit {self.head}"
		if self.staged:
			return "Staged changes in the working tree"
		return "Uncommitted changes in the working tree"


@dataclass(frozen=True)
class ChangeStats:
	"""Aggregate counts over all file changes."""

	files_touched: int = 0
	additions: int = 0
	deletions: int = 0

	def summary(self) -> str:
		"""Render the stats as a short sentence."""
		noun = "file" if self.files_touched == 1 else "files"
		return f"{self.files_touched} {noun} changed, {self.additions} insertions(+), {self.deletions} deletions(-)"


@dataclass(frozen=True)
class ChangeModel:
	"""Validated, immutable summary of one set of changes."""

	commits: tuple[CommitRef, ...]
	files: tuple[FileChange, ...]
	stats: ChangeStats
	source: SourceDescription

	@property
	def is_empty(self) -> bool:
		"""True when there are neither commits nor file changes."""
		return not self.commits and not self.files
