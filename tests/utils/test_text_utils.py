"""Tests for the text helpers."""

from __future__ import annotations

import pytest

from commit_buddy.utils.text_utils import capitalize_first, strip_code_fence, truncate_string


@pytest.mark.unit
class TestTextUtils:
	"""Truncation, fences and capitalization."""

	@pytest.mark.parametrize(
		("text", "max_len", "expected"),
		[
			("short", 10, "short"),
			("exactly ten", 11, "exactly ten"),
			("this is far too long", 10, "this is..."),
			("abcdef", 2, "ab"),
		],
	)
	def test_truncate_string(self, text: str, max_len: int, expected: str) -> None:
		"""Long text is shortened with an ellipsis and never exceeds the limit."""
		result = truncate_string(text, max_len)
		assert result == expected
		assert len(result) <= max_len

	def test_strip_single_fence(self) -> None:
		"""A fence wrapping the whole text is removed."""
		assert strip_code_fence("```python\nx = 1\n```") == "x = 1"
		assert strip_code_fence("```\n# Title\n```\n") == "# Title"

	def test_keeps_multiple_fences(self) -> None:
		"""Several fenced blocks are not a wrapper."""
		text = "```python\nx = 1\n```\n\n```python\ny = 2\n```"
		assert strip_code_fence(text) == text

	def test_keeps_unfenced_text(self) -> None:
		"""Text without a wrapping fence is returned unchanged."""
		assert strip_code_fence("# Title\n\n```\ncode\n```") == "# Title\n\n```\ncode\n```"

	def test_capitalize_first(self) -> None:
		"""Only the first character changes."""
		assert capitalize_first("add CSV export") == "Add CSV export"
		assert capitalize_first("") == ""
