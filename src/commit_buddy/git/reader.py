"""Read-only access to commits and diffs through pygit2."""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta, timezone
from pathlib import Path
from typing import TYPE_CHECKING

from pygit2 import Commit, discover_repository
from pygit2 import GitError as Pygit2GitError
from pygit2.enums import DeltaStatus, SortMode
from pygit2.repository import Repository

from commit_buddy.git.errors import RefNotFoundError, RepoError
from commit_buddy.git.models import ChangeKind, CommitRef, FileChange, Hunk, HunkLine, LineOrigin

if TYPE_CHECKING:
	from pygit2 import Diff, Patch, Tree

logger = logging.getLogger(__name__)

_ORIGINS = {
	"+": LineOrigin.ADDED,
	"-": LineOrigin.REMOVED,
	" ": LineOrigin.CONTEXT,
}

_KINDS = {
	DeltaStatus.ADDED: ChangeKind.ADDED,
	DeltaStatus.UNTRACKED: ChangeKind.ADDED,
	DeltaStatus.DELETED: ChangeKind.DELETED,
	DeltaStatus.RENAMED: ChangeKind.RENAMED,
	DeltaStatus.COPIED: ChangeKind.ADDED,
}


def commit_to_ref(commit: Commit) -> CommitRef:
	"""
	Convert a pygit2 commit into an immutable CommitRef.

	The timestamp is the author time in the author's own offset.

	Args:
	    commit: The pygit2 commit object

	Returns:
	    CommitRef: The converted commit

	"""
	author = commit.author
	tz = timezone(timedelta(minutes=author.offset)) if author.offset else UTC
	return CommitRef(
		id=str(commit.id),
		author=author.name,
		email=author.email,
		timestamp=datetime.fromtimestamp(author.time, tz=tz),
		message=commit.message or "",
		parents=tuple(str(parent_id) for parent_id in commit.parent_ids),
	)


def patch_to_file_change(patch: Patch) -> FileChange:
	"""
	Convert a pygit2 patch into a FileChange.

	Binary patches produce no hunks and zero counts. End-of-file newline
	markers are not part of the hunk lines.

	Args:
	    patch: The pygit2 patch for one file

	Returns:
	    FileChange: The converted file change

	"""
	delta = patch.delta
	kind = _KINDS.get(delta.status, ChangeKind.MODIFIED)
	path = delta.old_file.path if kind is ChangeKind.DELETED else delta.new_file.path
	old_path = delta.old_file.path if kind is ChangeKind.RENAMED else None

	if delta.is_binary:
		return FileChange(path=path, kind=kind, old_path=old_path, is_binary=True)

	hunks = []
	for diff_hunk in patch.hunks:
		lines = tuple(
			HunkLine(origin=_ORIGINS[line.origin], content=line.content.rstrip("\r\n"))
			for line in diff_hunk.lines
			if line.origin in _ORIGINS
		)
		hunks.append(
			Hunk(
				old_start=diff_hunk.old_start,
				old_lines=diff_hunk.old_lines,
				new_start=diff_hunk.new_start,
				new_lines=diff_hunk.new_lines,
				header=diff_hunk.header.rstrip("\r\n"),
				lines=lines,
			)
		)

	_, additions, deletions = patch.line_stats
	return FileChange(
		path=path,
		kind=kind,
		additions=additions,
		deletions=deletions,
		hunks=tuple(hunks),
		old_path=old_path,
	)


class RepositoryReader:
	"""Resolves refs, lists commits and computes diffs without ever writing to the repository."""

	def __init__(self, path: Path | None = None) -> None:
		"""
		Open the repository containing ``path``.

		Args:
		    path: Any path inside the repository, defaults to the current directory

		Raises:
		    RepoError: If no repository can be found or opened

		"""
		start = Path(path or Path.cwd())
		git_dir = discover_repository(str(start))
		if git_dir is None:
			msg = f"Not a git repository: {start}"
			logger.error(msg)
			raise RepoError(msg)
		try:
			self.repo = Repository(git_dir)
		except Pygit2GitError as e:
			msg = f"Failed to open repository at {git_dir}: {e}"
			raise RepoError(msg) from e
		logger.debug("Opened repository at %s", self.repo.path)

	@property
	def root(self) -> Path:
		"""Working directory of the repository, or the git dir for bare repositories."""
		return Path(self.repo.workdir or self.repo.path)

	def current_branch(self) -> str:
		"""Return the checked-out branch name, or an empty string when detached or unborn."""
		if self.repo.head_is_unborn or self.repo.head_is_detached:
			return ""
		return self.repo.head.shorthand or ""

	def _lookup_commit(self, name: str) -> Commit:
		try:
			obj = self.repo.revparse_single(name)
			return obj.peel(Commit)
		except (KeyError, ValueError, Pygit2GitError) as e:
			logger.debug("Failed to resolve '%s': %s", name, e)
			raise RefNotFoundError(name) from e

	def resolve_ref(self, name: str) -> CommitRef:
		"""
		Resolve a branch, tag, revision expression or hash to a commit.

		Args:
		    name: Anything ``git rev-parse`` understands

		Returns:
		    CommitRef: The commit the name points to

		Raises:
		    RefNotFoundError: If the name does not resolve to a commit

		"""
		if not name:
			raise RefNotFoundError(name, "Empty ref name")
		return commit_to_ref(self._lookup_commit(name))

	def commits_between(self, base_ref: str | None, head_ref: str) -> list[CommitRef]:
		"""
		List commits reachable from ``head_ref`` but not from ``base_ref``.

		Args:
		    base_ref: Base ref whose history is hidden, or None for the full history
		    head_ref: Head ref to walk from

		Returns:
		    list[CommitRef]: Commits, most recent first

		Raises:
		    RefNotFoundError: If either ref does not resolve
		    RepoError: If the history cannot be walked

		"""
		head = self._lookup_commit(head_ref)
		base = self._lookup_commit(base_ref) if base_ref else None
		try:
			walker = self.repo.walk(head.id, SortMode.TOPOLOGICAL | SortMode.TIME)
			if base is not None:
				walker.hide(base.id)
			commits = [commit_to_ref(commit) for commit in walker]
		except Pygit2GitError as e:
			msg = f"Failed to walk history between '{base_ref}' and '{head_ref}': {e}"
			raise RepoError(msg) from e

		logger.debug("Found %d commits between '%s' and '%s'", len(commits), base_ref, head_ref)
		return commits

	def diff_range(self, base_ref: str | None, head_ref: str) -> list[FileChange]:
		"""
		Compute what ``head_ref`` introduces relative to ``base_ref``.

		The base side is the merge base of the two commits when they share
		history, otherwise the base commit itself. Without a base the head
		tree is compared against the empty tree.

		Args:
		    base_ref: Base ref, or None for a root comparison
		    head_ref: Head ref

		Returns:
		    list[FileChange]: One entry per changed file

		Raises:
		    RefNotFoundError: If either ref does not resolve
		    RepoError: If the diff cannot be computed

		"""
		head = self._lookup_commit(head_ref)
		try:
			if base_ref is None:
				diff = head.tree.diff_to_tree(swap=True)
			else:
				base = self._lookup_commit(base_ref)
				merge_base = self.repo.merge_base(base.id, head.id)
				base_tree: Tree = self.repo[merge_base].peel(Commit).tree if merge_base else base.tree
				diff = self.repo.diff(base_tree, head.tree)
		except Pygit2GitError as e:
			msg = f"Failed to diff '{base_ref}'..'{head_ref}': {e}"
			raise RepoError(msg) from e
		return self._collect(diff)

	def diff_working_tree(self, staged: bool) -> list[FileChange]:
		"""
		Compute uncommitted changes to tracked files.

		Args:
		    staged: Compare HEAD with the index when True, with the working directory otherwise

		Returns:
		    list[FileChange]: One entry per changed file

		Raises:
		    RepoError: If HEAD is unborn or the diff cannot be computed

		"""
		if self.repo.head_is_unborn:
			msg = "HEAD does not point to a commit yet"
			raise RepoError(msg)
		try:
			head_tree = self.repo.head.peel(Commit).tree
			diff = self.repo.diff(head_tree, cached=True) if staged else head_tree.diff_to_workdir()
		except Pygit2GitError as e:
			msg = f"Failed to diff the working tree: {e}"
			raise RepoError(msg) from e
		return self._collect(diff)

	@staticmethod
	def _collect(diff: Diff) -> list[FileChange]:
		diff.find_similar()
		changes = [patch_to_file_change(patch) for patch in diff if patch is not None]
		logger.debug("Diff touches %d files", len(changes))
		return changes
