"""Tests for prompt composition and context truncation."""

from __future__ import annotations

import math

import pytest

from commit_buddy.artifacts.schemas import ArtifactKind
from commit_buddy.changes.model import SourceKind
from commit_buddy.git.models import ChangeKind
from commit_buddy.prompts.composer import (
	CHARS_PER_TOKEN,
	HARD_CUT_MARKER,
	compose,
	estimate_char_budget,
	serialize_change_model,
)
from commit_buddy.prompts.schemas import TruncationStrategy
from commit_buddy.prompts.templates import IMPROVE_COMMIT_TEMPLATE, SUGGEST_COMMIT_TEMPLATE, get_template
from tests.base import make_commit, make_file_change, make_model


def _ten_file_model():
	files = [
		make_file_change(f"src/module_{i}.py", added=[f"value_{i}_{j} = {j}" for j in range(12)]) for i in range(10)
	]
	return make_model([make_commit("feat: add modules\n\nAdds ten modules.")], files)


def _tokens_for(length: int) -> int:
	return math.ceil(length / CHARS_PER_TOKEN)


@pytest.mark.unit
class TestSerialize:
	"""Serializing change models into prompt context."""

	def test_full_context(self) -> None:
		"""Headers, commits and patches appear in order."""
		model = make_model(
			[make_commit("feat: add parser\n\nHandles nested input.")],
			[make_file_change("parser.py", ChangeKind.ADDED, added=["def parse():", "    pass"])],
		)
		context = serialize_change_model(model)
		lines = context.splitlines()

		assert lines[0] == "Source: Changes on 'feature' compared to 'master'"
		assert lines[1] == "Stats: 1 file changed, 2 insertions(+), 0 deletions(-)"
		assert lines[2] == "Commits:"
		assert lines[3].endswith(" feat: add parser")
		assert lines[4] == "    Handles nested input."
		assert "### parser.py (added, +2/-0)" in lines
		assert "+def parse():" in lines

	def test_summary_blocks(self) -> None:
		"""Files beyond the kept prefix are summarized by their stats."""
		model = make_model(
			files=[
				make_file_change("a.py", added=["a"]),
				make_file_change("b.py", added=["b"], removed=["c"]),
				make_file_change("logo.png", ChangeKind.ADDED, is_binary=True),
			]
		)
		context = serialize_change_model(model, full_patches=1)
		assert "+a" in context
		assert "[patch omitted: +1/-1]" in context
		assert "[binary file]" in context
		assert "Commits: none" in context

	def test_elided_hunks(self) -> None:
		"""Elided hunks keep both ends and state how many lines were hidden."""
		model = make_model(files=[make_file_change("a.py", added=[f"line {i}" for i in range(10)])])
		context = serialize_change_model(model, elide=True, context_lines=2)
		assert "+line 0" in context
		assert "+line 9" in context
		assert "+line 5" not in context
		assert "... (6 lines elided) ..." in context


@pytest.mark.unit
class TestCompose:
	"""Composing bounded prompts."""

	def test_fits_without_truncation(self) -> None:
		"""Small contexts are left intact."""
		model = _ten_file_model()
		prompt = compose(model, ArtifactKind.PR_DESCRIPTION, token_budget=100_000)

		assert not prompt.truncated
		assert prompt.strategies == ()
		assert prompt.full_patch_count == 10
		assert prompt.context == serialize_change_model(model)
		assert prompt.char_budget == estimate_char_budget(100_000)

	def test_keeps_leading_patches(self) -> None:
		"""When three full patches fit, the first three are kept and the rest summarized."""
		model = _ten_file_model()
		target = serialize_change_model(model, full_patches=3, strategies=(TruncationStrategy.DROP_PATCHES,))
		prompt = compose(model, ArtifactKind.PR_DESCRIPTION, token_budget=_tokens_for(len(target)))

		assert prompt.truncated
		assert prompt.strategies == (TruncationStrategy.DROP_PATCHES,)
		assert prompt.full_patch_count == 3
		assert prompt.context == target
		assert "[truncated: drop_patches]" in prompt.context
		assert "value_2_0 = 0" in prompt.context
		assert "value_3_0 = 0" not in prompt.context
		assert "### src/module_9.py (modified, +12/-0)" in prompt.context

	def test_elides_before_dropping_everything(self) -> None:
		"""Eliding hunks is tried when not even one full patch fits."""
		model = _ten_file_model()
		target = serialize_change_model(
			model,
			full_patches=1,
			elide=True,
			strategies=(TruncationStrategy.DROP_PATCHES, TruncationStrategy.ELIDE_HUNKS),
		)
		prompt = compose(model, ArtifactKind.PR_DESCRIPTION, token_budget=_tokens_for(len(target)))

		assert prompt.strategies == (TruncationStrategy.DROP_PATCHES, TruncationStrategy.ELIDE_HUNKS)
		assert prompt.full_patch_count >= 1
		assert "lines elided" in prompt.context

	@pytest.mark.parametrize("token_budget", [1, 10, 50, 120, 300])
	def test_never_exceeds_budget(self, token_budget: int) -> None:
		"""Whatever the budget, the context fits it."""
		prompt = compose(_ten_file_model(), ArtifactKind.CHANGELOG, token_budget=token_budget)
		assert len(prompt.context) <= prompt.char_budget
		assert prompt.truncated

	def test_hard_cut(self) -> None:
		"""Tiny budgets cut the text and mark the cut."""
		prompt = compose(_ten_file_model(), ArtifactKind.REVIEW, token_budget=20)
		assert prompt.strategies[-1] is TruncationStrategy.HARD_CUT
		assert prompt.full_patch_count == 0
		assert prompt.context.endswith(HARD_CUT_MARKER)
		assert len(prompt.context) == prompt.char_budget

	def test_hard_cut_below_marker_length(self) -> None:
		"""A budget shorter than the marker still shows the cut instead of raw text."""
		prompt = compose(_ten_file_model(), ArtifactKind.REVIEW, token_budget=1)
		assert prompt.char_budget == CHARS_PER_TOKEN
		assert prompt.context == HARD_CUT_MARKER.strip()[:CHARS_PER_TOKEN]
		assert prompt.context == "[..."

	def test_rejects_non_positive_budget(self) -> None:
		"""A zero budget is an error."""
		with pytest.raises(ValueError, match="positive"):
			compose(_ten_file_model(), ArtifactKind.REVIEW, token_budget=0)

	def test_deterministic(self) -> None:
		"""Equal inputs give equal prompts."""
		model = _ten_file_model()
		assert compose(model, ArtifactKind.REVIEW, 200) == compose(model, ArtifactKind.REVIEW, 200)

	def test_hint_and_messages(self) -> None:
		"""The hint is appended to the instructions and the context follows them."""
		prompt = compose(_ten_file_model(), ArtifactKind.UNIT_TESTS, token_budget=100_000, hint="pytest")
		messages = prompt.messages()

		assert prompt.user.endswith("Test framework: pytest")
		assert [message["role"] for message in messages] == ["system", "user"]
		assert messages[1]["content"] == f"{prompt.user}\n\n{prompt.context}"


@pytest.mark.unit
class TestTemplates:
	"""Template selection."""

	def test_commit_templates_depend_on_source(self) -> None:
		"""Working tree changes get suggestions; existing commits get improvements."""
		assert get_template(ArtifactKind.COMMIT_MESSAGE, SourceKind.WORKING_TREE) is SUGGEST_COMMIT_TEMPLATE
		assert get_template(ArtifactKind.COMMIT_MESSAGE, SourceKind.COMMIT_RANGE) is IMPROVE_COMMIT_TEMPLATE

	@pytest.mark.parametrize("kind", list(ArtifactKind))
	def test_every_kind_has_a_template(self, kind: ArtifactKind) -> None:
		"""Every artifact kind has non-empty instructions."""
		template = get_template(kind, SourceKind.BRANCH_COMPARISON)
		assert template.system
		assert template.user
