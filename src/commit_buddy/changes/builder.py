"""Normalize raw commits and diffs into a validated ChangeModel."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from commit_buddy.changes.model import ChangeModel, ChangeStats, SourceDescription
from commit_buddy.git.errors import MalformedDiffError
from commit_buddy.git.models import FileChange, Hunk, LineOrigin

if TYPE_CHECKING:
	from collections.abc import Iterable

	from commit_buddy.git.models import CommitRef

logger = logging.getLogger(__name__)


def _validate_hunk(path: str, hunk: Hunk) -> None:
	if min(hunk.old_start, hunk.old_lines, hunk.new_start, hunk.new_lines) < 0:
		raise MalformedDiffError(path, f"hunk {hunk.range_header} has negative bounds")
	if not hunk.lines:
		return

	context = hunk.count(LineOrigin.CONTEXT)
	if context + hunk.count(LineOrigin.REMOVED) != hunk.old_lines:
		raise MalformedDiffError(path, f"hunk {hunk.range_header} does not match its old line count")
	if context + hunk.count(LineOrigin.ADDED) != hunk.new_lines:
		raise MalformedDiffError(path, f"hunk {hunk.range_header} does not match its new line count")


def validate_file_change(change: FileChange) -> None:
	"""
	Check the internal consistency of a single file change.

	Args:
	    change: The file change to check

	Raises:
	    MalformedDiffError: If counts are negative, hunks are out of order or
	        the hunk lines disagree with the recorded counts

	"""
	path = change.path
	if change.additions < 0 or change.deletions < 0:
		raise MalformedDiffError(path, "negative addition or deletion count")

	previous: Hunk | None = None
	for hunk in change.hunks:
		_validate_hunk(path, hunk)
		if previous is not None and (hunk.old_start < previous.old_start or hunk.new_start < previous.new_start):
			raise MalformedDiffError(path, "hunk start lines are not in order")
		previous = hunk

	if change.hunks and all(hunk.lines for hunk in change.hunks):
		added = sum(hunk.count(LineOrigin.ADDED) for hunk in change.hunks)
		removed = sum(hunk.count(LineOrigin.REMOVED) for hunk in change.hunks)
		if (added, removed) != (change.additions, change.deletions):
			raise MalformedDiffError(
				path,
				f"recorded +{change.additions}/-{change.deletions} but hunks contain +{added}/-{removed}",
			)


def build(
	commits: Iterable[CommitRef],
	file_changes: Iterable[FileChange],
	source: SourceDescription,
) -> ChangeModel:
	"""
	Build an immutable ChangeModel from raw repository data.

	Pure and deterministic. The stats always equal the sum over the file
	changes.

	Args:
	    commits: Commits in the order they should be presented
	    file_changes: Changed files in diff order
	    source: What was compared

	Returns:
	    ChangeModel: The validated model

	Raises:
	    MalformedDiffError: If any file change is inconsistent

	"""
	commit_tuple = tuple(commits)
	file_tuple = tuple(file_changes)
	for change in file_tuple:
		validate_file_change(change)

	stats = ChangeStats(
		files_touched=len(file_tuple),
		additions=sum(change.additions for change in file_tuple),
		deletions=sum(change.deletions for change in file_tuple),
	)
	logger.debug("Built change model: %d commits, %s", len(commit_tuple), stats.summary())
	return ChangeModel(commits=commit_tuple, files=file_tuple, stats=stats, source=source)
