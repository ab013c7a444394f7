"""Immutable records produced by the repository reader."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
	from datetime import datetime

SHORT_ID_LENGTH = 8


class ChangeKind(str, Enum):
	"""How a file was changed."""

	ADDED = "added"
	MODIFIED = "modified"
	DELETED = "deleted"
	RENAMED = "renamed"


class LineOrigin(str, Enum):
	"""Marker of a single patch line."""

	ADDED = "+"
	REMOVED = "-"
	CONTEXT = " "


@dataclass(frozen=True)
class CommitRef:
	"""A commit as read from the repository."""

	id: str
	author: str
	email: str
	timestamp: datetime
	message: str
	parents: tuple[str, ...] = ()

	@property
	def short_id(self) -> str:
		"""Abbreviated commit hash."""
		return self.id[:SHORT_ID_LENGTH]

	@property
	def subject(self) -> str:
		"""First line of the commit message."""
		lines = self.message.strip().splitlines()
		return lines[0].strip() if lines else ""

	@property
	def body(self) -> str:
		"""Everything after the subject line, stripped."""
		lines = self.message.strip().splitlines()
		return "\n".join(lines[1:]).strip()


@dataclass(frozen=True)
class HunkLine:
	"""One added, removed or context line of a hunk."""

	origin: LineOrigin
	content: str

	def render(self) -> str:
		"""Render the line the way a unified diff shows it."""
		return f"{self.origin.value}{self.content}"


@dataclass(frozen=True)
class Hunk:
	"""A contiguous block of changes within a file."""

	old_start: int
	old_lines: int
	new_start: int
	new_lines: int
	header: str = ""
	lines: tuple[HunkLine, ...] = ()

	@property
	def range_header(self) -> str:
		"""The ``@@ -a,b +c,d @@`` part of the header."""
		return f"@@ -{self.old_start},{self.old_lines} +{self.new_start},{self.new_lines} @@"

	def count(self, origin: LineOrigin) -> int:
		"""Count lines with the given origin."""
		return sum(1 for line in self.lines if line.origin is origin)


@dataclass(frozen=True)
class FileChange:
	"""All changes made to a single file."""

	path: str
	kind: ChangeKind
	additions: int = 0
	deletions: int = 0
	hunks: tuple[Hunk, ...] = ()
	old_path: str | None = None
	is_binary: bool = False

	@property
	def display_path(self) -> str:
		"""Path as shown to readers, including the rename source."""
		if self.kind is ChangeKind.RENAMED and self.old_path and self.old_path != self.path:
			return f"{self.old_path} -> {self.path}"
		return self.path

	@property
	def stat(self) -> str:
		"""Compact ``+A/-D`` summary."""
		return f"+{self.additions}/-{self.deletions}"

