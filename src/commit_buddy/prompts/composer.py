"""Compose bounded prompts from a ChangeModel."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from commit_buddy.prompts.schemas import Prompt, TruncationStrategy
from commit_buddy.prompts.templates import get_template

if TYPE_CHECKING:
	from commit_buddy.artifacts.schemas import ArtifactKind
	from commit_buddy.changes.model import ChangeModel
	from commit_buddy.git.models import CommitRef, FileChange, Hunk

logger = logging.getLogger(__name__)

CHARS_PER_TOKEN = 4
DEFAULT_ELIDE_CONTEXT_LINES = 3
HARD_CUT_MARKER = "\n[... context cut to fit the size limit]"


def estimate_char_budget(token_budget: int) -> int:
	"""Convert a token budget to a character budget."""
	return token_budget * CHARS_PER_TOKEN


def _commit_block(commit: CommitRef, subject_only: bool) -> str:
	lines = [f"- {commit.short_id} {commit.subject}"]
	if not subject_only and commit.body:
		lines.extend(f"    {line}" if line else "" for line in commit.body.splitlines())
	return "\n".join(lines)


def _hunk_lines(hunk: Hunk, elide: bool, keep: int) -> list[str]:
	rendered = [line.render() for line in hunk.lines]
	if elide and len(rendered) > keep * 2:
		hidden = len(rendered) - keep * 2
		rendered = [*rendered[:keep], f"... ({hidden} lines elided) ...", *rendered[-keep:]]
	return [hunk.header or hunk.range_header, *rendered]


def _has_patch(change: FileChange) -> bool:
	return bool(change.hunks) and not change.is_binary


def _file_header(change: FileChange) -> str:
	return f"### {change.display_path} ({change.kind.value}, {change.stat})"


def _summary_block(change: FileChange) -> str:
	if change.is_binary:
		return f"{_file_header(change)}\n[binary file]"
	if not change.hunks:
		return f"{_file_header(change)}\n[no textual changes]"
	return f"{_file_header(change)}\n[patch omitted: {change.stat}]"


def _full_block(change: FileChange, elide: bool, keep: int) -> str:
	if not _has_patch(change):
		return _summary_block(change)
	lines = [_file_header(change)]
	for hunk in change.hunks:
		lines.extend(_hunk_lines(hunk, elide, keep))
	return "\n".join(lines)


def _header_parts(
	model: ChangeModel,
	subject_only: bool,
	strategies: tuple[TruncationStrategy, ...],
) -> list[str]:
	parts = [f"Source: {model.source.describe()}", f"Stats: {model.stats.summary()}"]
	if strategies:
		parts.append(f"[truncated: {', '.join(strategy.value for strategy in strategies)}]")
	if model.commits:
		parts.append("Commits:")
		parts.extend(_commit_block(commit, subject_only) for commit in model.commits)
	else:
		parts.append("Commits: none")
	parts.append("Files:" if model.files else "Files: none")
	return parts


def serialize_change_model(
	model: ChangeModel,
	*,
	full_patches: int | None = None,
	elide: bool = False,
	subject_only: bool = False,
	strategies: tuple[TruncationStrategy, ...] = (),
	context_lines: int = DEFAULT_ELIDE_CONTEXT_LINES,
) -> str:
	"""
	Serialize a ChangeModel into prompt context.

	Args:
	    model: The change model
	    full_patches: Number of leading files that keep their patch, None for all
	    elide: Reduce every kept hunk to its first and last ``context_lines`` lines
	    subject_only: Reduce commit messages to their subject line
	    strategies: Applied truncation strategies, stated in a marker line
	    context_lines: Lines kept at each end of an elided hunk

	Returns:
	    str: The serialized context

	"""
	keep = len(model.files) if full_patches is None else full_patches
	parts = _header_parts(model, subject_only, strategies)
	for index, change in enumerate(model.files):
		if index < keep:
			parts.append(_full_block(change, elide, context_lines))
		else:
			parts.append(_summary_block(change))
	return "\n".join(parts)


def _fit_full_patches(
	model: ChangeModel,
	budget: int,
	*,
	elide: bool,
	subject_only: bool,
	strategies: tuple[TruncationStrategy, ...],
	context_lines: int,
) -> tuple[int, str] | None:
	"""Find the longest prefix of full patches that keeps the context within budget."""
	header = _header_parts(model, subject_only, strategies)
	full = [len(_full_block(change, elide, context_lines)) for change in model.files]
	summary = [len(_summary_block(change)) for change in model.files]
	# Parts are newline-joined
	base = sum(len(part) for part in header) + len(header) + len(model.files) - 1

	best: int | None = None
	length = base + sum(summary)
	if length <= budget:
		best = 0
	for index in range(len(model.files)):
		length += full[index] - summary[index]
		if length <= budget:
			best = index + 1
	if best is None:
		return None

	context = serialize_change_model(
		model,
		full_patches=best,
		elide=elide,
		subject_only=subject_only,
		strategies=strategies,
		context_lines=context_lines,
	)
	return best, context


def _hard_cut(text: str, budget: int) -> str:
	if len(text) <= budget:
		return text
	if budget <= len(HARD_CUT_MARKER):
		return HARD_CUT_MARKER.strip()[:budget]
	return text[: budget - len(HARD_CUT_MARKER)] + HARD_CUT_MARKER


def compose(
	model: ChangeModel,
	kind: ArtifactKind,
	token_budget: int,
	hint: str | None = None,
	*,
	context_lines: int = DEFAULT_ELIDE_CONTEXT_LINES,
) -> Prompt:
	"""
	Map a ChangeModel and an artifact kind to a bounded prompt.

	The context is shrunk in stages until it fits the character budget:
	dropping trailing patches, eliding hunks, reducing commits to their
	subject and finally cutting the text.

	Args:
	    model: The change model
	    kind: The artifact to request
	    token_budget: Maximum context size in tokens
	    hint: Optional framework or style hint
	    context_lines: Lines kept at each end of an elided hunk

	Returns:
	    Prompt: The composed prompt

	Raises:
	    ValueError: If the token budget is not positive

	"""
	if token_budget <= 0:
		msg = f"Token budget must be positive, got {token_budget}"
		raise ValueError(msg)

	budget = estimate_char_budget(token_budget)
	template = get_template(kind, model.source.kind)
	user = template.user
	if hint:
		user = f"{user}\n{template.hint_label}: {hint}"

	patched = sum(1 for change in model.files if _has_patch(change))
	context = serialize_change_model(model, context_lines=context_lines)
	full_count = len(model.files)
	strategies: tuple[TruncationStrategy, ...] = ()

	if len(context) > budget:
		stages = (
			(TruncationStrategy.DROP_PATCHES, False, False),
			(TruncationStrategy.ELIDE_HUNKS, True, False),
			(TruncationStrategy.SUBJECT_ONLY, True, True),
		)
		fitted = None
		for strategy, elide, subject_only in stages:
			strategies = (*strategies, strategy)
			fitted = _fit_full_patches(
				model,
				budget,
				elide=elide,
				subject_only=subject_only,
				strategies=strategies,
				context_lines=context_lines,
			)
			if fitted is None:
				continue
			full_count, context = fitted
			# The last stage accepts any prefix, including none
			if full_count >= 1 or patched == 0 or strategy is TruncationStrategy.SUBJECT_ONLY:
				break
			fitted = None

		if fitted is None:
			strategies = (*strategies, TruncationStrategy.HARD_CUT)
			full_count = 0
			context = _hard_cut(
				serialize_change_model(
					model,
					full_patches=0,
					elide=True,
					subject_only=True,
					strategies=strategies,
					context_lines=context_lines,
				),
				budget,
			)
		logger.debug(
			"Context truncated with %s, %d full patches kept, %d chars",
			[strategy.value for strategy in strategies],
			full_count,
			len(context),
		)

	return Prompt(
		kind=kind,
		system=template.system,
		user=user,
		context=context,
		char_budget=budget,
		hint=hint,
		truncated=bool(strategies),
		strategies=strategies,
		full_patch_count=full_count,
	)
