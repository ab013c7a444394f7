"""Base classes and factories shared by the test suite."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import pygit2
import pytest

from commit_buddy.changes.builder import build
from commit_buddy.changes.model import SourceDescription, SourceKind
from commit_buddy.git.models import ChangeKind, CommitRef, FileChange, Hunk, HunkLine, LineOrigin

if TYPE_CHECKING:
	from pathlib import Path

	from commit_buddy.changes.model import ChangeModel

AUTHOR_NAME = "Test User"
AUTHOR_EMAIL = "test@example.com"
BASE_TIME = 1_700_000_000


def make_commit(message: str, index: int = 0, parents: tuple[str, ...] = ()) -> CommitRef:
	"""Create a CommitRef with a predictable id and timestamp."""
	return CommitRef(
		id=f"{index:040x}",
		author=AUTHOR_NAME,
		email=AUTHOR_EMAIL,
		timestamp=datetime(2024, 1, 1, tzinfo=UTC) + timedelta(minutes=index),
		message=message,
		parents=parents,
	)


def make_hunk(added: list[str], removed: list[str] | None = None, start: int = 1, context: int = 0) -> Hunk:
	"""Create a consistent hunk from added and removed line contents."""
	removed = removed or []
	lines = [HunkLine(LineOrigin.CONTEXT, f"context {i}") for i in range(context)]
	lines.extend(HunkLine(LineOrigin.REMOVED, text) for text in removed)
	lines.extend(HunkLine(LineOrigin.ADDED, text) for text in added)
	return Hunk(
		old_start=start,
		old_lines=context + len(removed),
		new_start=start,
		new_lines=context + len(added),
		lines=tuple(lines),
	)


def make_file_change(
	path: str,
	kind: ChangeKind = ChangeKind.MODIFIED,
	added: list[str] | None = None,
	removed: list[str] | None = None,
	**kwargs: object,
) -> FileChange:
	"""Create a FileChange whose counts agree with its single hunk."""
	added = added or []
	removed = removed or []
	hunks = (make_hunk(added, removed),) if added or removed else ()
	return FileChange(
		path=path,
		kind=kind,
		additions=len(added),
		deletions=len(removed),
		hunks=hunks,
		**kwargs,  # type: ignore[arg-type]
	)


def make_model(
	commits: list[CommitRef] | None = None,
	files: list[FileChange] | None = None,
	source: SourceDescription | None = None,
) -> ChangeModel:
	"""Build a ChangeModel for a branch comparison unless told otherwise."""
	source = source or SourceDescription(kind=SourceKind.BRANCH_COMPARISON, base="master", head="feature")
	return build(commits or [], files or [], source)


class FileSystemTestBase:
	"""Base class for tests that work inside a temporary directory."""

	temp_dir: Path

	@pytest.fixture(autouse=True)
	def setup_temp_dir(self, temp_dir: Path) -> None:
		"""Expose the temporary directory on the instance."""
		self.temp_dir = temp_dir


class GitTestBase:
	"""
	Base class for tests that need a real repository.

	Each test gets a fresh repository on ``master`` with a fixed author and
	monotonically increasing commit times.

	"""

	repo: pygit2.Repository
	repo_path: Path
	_clock: int

	@pytest.fixture(autouse=True)
	def setup_repo(self, tmp_path: Path) -> None:
		"""Initialize an empty repository."""
		self.repo_path = tmp_path / "repo"
		self.repo_path.mkdir()
		self.repo = pygit2.init_repository(str(self.repo_path), initial_head="master")
		self._clock = BASE_TIME

	def write_file(self, rel_path: str, content: str | bytes) -> None:
		"""Write a file in the working directory without staging it."""
		target = self.repo_path / rel_path
		target.parent.mkdir(parents=True, exist_ok=True)
		if isinstance(content, bytes):
			target.write_bytes(content)
		else:
			target.write_text(content, encoding="utf-8")

	def stage(self, *rel_paths: str) -> None:
		"""Add files to the index."""
		index = self.repo.index
		for rel_path in rel_paths:
			index.add(rel_path)
		index.write()

	def commit_files(self, files: dict[str, str | bytes | None], message: str) -> str:
		"""
		Write, stage and commit files on the current branch.

		Args:
		    files: Relative path to content, None deletes the file
		    message: Commit message

		Returns:
		    str: The new commit id

		"""
		index = self.repo.index
		for rel_path, content in files.items():
			if content is None:
				(self.repo_path / rel_path).unlink()
				index.remove(rel_path)
			else:
				self.write_file(rel_path, content)
				index.add(rel_path)
		index.write()
		tree = index.write_tree()

		self._clock += 60
		signature = pygit2.Signature(AUTHOR_NAME, AUTHOR_EMAIL, self._clock, 0)
		parents = [] if self.repo.head_is_unborn else [self.repo.head.target]
		commit_id = self.repo.create_commit("HEAD", signature, signature, message, tree, parents)
		return str(commit_id)

	def create_branch(self, name: str, checkout: bool = True) -> None:
		"""Create a branch at HEAD and optionally switch to it."""
		head = self.repo.head.peel(pygit2.Commit)
		self.repo.branches.local.create(name, head)
		if checkout:
			self.checkout(name)

	def checkout(self, name: str) -> None:
		"""Switch to an existing local branch."""
		self.repo.checkout(f"refs/heads/{name}")
