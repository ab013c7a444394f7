"""Small text helpers shared by the fallback templates and the response mapper."""

from __future__ import annotations

import re

ELLIPSIS = "..."

CODE_FENCE_PATTERN = re.compile(r"^\s*```[\w+-]*[ \t]*\n(?P<body>.*?)\n```\s*$", re.DOTALL)


def truncate_string(text: str, max_len: int) -> str:
	"""
	Truncate ``text`` to at most ``max_len`` characters, ending with an ellipsis.

	Args:
	    text: The text to truncate
	    max_len: Maximum length of the result

	Returns:
	    str: The original text if short enough, otherwise a shortened copy

	"""
	if len(text) <= max_len:
		return text
	if max_len <= len(ELLIPSIS):
		return text[:max_len]
	return text[: max_len - len(ELLIPSIS)].rstrip() + ELLIPSIS


def strip_code_fence(text: str) -> str:
	"""Remove a single markdown code fence wrapping the whole text."""
	match = CODE_FENCE_PATTERN.match(text)
	if not match:
		return text
	body = match.group("body")
	# Several fenced blocks side by side are not a single wrapper
	if any(line.lstrip().startswith("```") for line in body.splitlines()):
		return text
	return body


def capitalize_first(text: str) -> str:
	"""Upper-case the first character, leaving the rest untouched."""
	return text[:1].upper() + text[1:]
