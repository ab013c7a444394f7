"""Validate artifact text, extract structured sections and serialize results."""

from __future__ import annotations

import logging
import re

from commit_buddy.artifacts.schemas import ArtifactKind, ArtifactResult, Origin, OutputFormat
from commit_buddy.utils.text_utils import strip_code_fence

logger = logging.getLogger(__name__)

MAX_COMMIT_SUBJECT_LENGTH = 100
OPTION_SEPARATOR = "---"

MARKDOWN_STRUCTURE = re.compile(r"^\s*(#{1,6}\s+\S|[-*+]\s+\S|\d+[.)]\s+\S)", re.MULTILINE)
HEADING = re.compile(r"^\s*#{1,6}\s+(?P<title>.+?)\s*#*\s*$")
LIST_ITEM = re.compile(r"^\s*(?:[-*+]|\d+[.)])\s+(?P<item>.+?)\s*$")

TEST_MARKERS = {
	"pytest": ("def test_",),
	"unittest": ("unittest.TestCase", "def test_"),
	"jest": ("describe(", "it(", "test("),
	"vitest": ("describe(", "it(", "test("),
	"mocha": ("describe(", "it("),
	"go": ("func Test",),
	"rust": ("#[test]",),
	"junit": ("@Test",),
}
ALL_TEST_MARKERS = tuple(sorted({marker for markers in TEST_MARKERS.values() for marker in markers}))


def split_options(text: str) -> list[str]:
	"""Split commit message options on lines containing only ``---``."""
	options: list[str] = []
	current: list[str] = []
	for line in text.splitlines():
		if line.strip() == OPTION_SEPARATOR:
			options.append("\n".join(current).strip())
			current = []
		else:
			current.append(line)
	options.append("\n".join(current).strip())
	return [option for option in options if option]


def extract_heading_sections(text: str) -> dict[str, list[str]]:
	"""
	Group markdown list items under the heading that precedes them.

	Args:
	    text: Markdown text

	Returns:
	    dict[str, list[str]]: Heading title to list items, headings without items omitted

	"""
	sections: dict[str, list[str]] = {}
	heading: str | None = None
	for line in text.splitlines():
		heading_match = HEADING.match(line)
		if heading_match:
			heading = heading_match.group("title")
			continue
		item_match = LIST_ITEM.match(line)
		if heading and item_match:
			sections.setdefault(heading, []).append(item_match.group("item"))
	return sections


def _test_markers(hint: str | None) -> tuple[str, ...]:
	framework = (hint or "auto").strip().lower()
	return TEST_MARKERS.get(framework, ALL_TEST_MARKERS)


def _commit_subject_ok(option: str) -> bool:
	lines = option.strip().splitlines()
	subject = lines[0].strip() if lines else ""
	return bool(subject) and len(subject) <= MAX_COMMIT_SUBJECT_LENGTH


def is_suspect(content: str, kind: ArtifactKind, hint: str | None = None) -> bool:
	"""
	Check backend text against the expectations for its kind.

	Args:
	    content: The artifact text, code fence already removed
	    kind: The artifact kind
	    hint: Framework hint for unit tests

	Returns:
	    bool: True if the text fails validation

	"""
	if not content.strip():
		return True
	if kind is ArtifactKind.UNIT_TESTS:
		return not any(marker in content for marker in _test_markers(hint))
	if kind is ArtifactKind.COMMIT_MESSAGE:
		options = split_options(content)
		return not options or not all(_commit_subject_ok(option) for option in options)
	if kind in {ArtifactKind.CHANGELOG, ArtifactKind.PR_DESCRIPTION}:
		return MARKDOWN_STRUCTURE.search(content) is None
	return False


def extract_sections(content: str, kind: ArtifactKind) -> dict[str, list[str]]:
	"""Extract structured sections for the kinds that have them."""
	if kind is ArtifactKind.CHANGELOG:
		return extract_heading_sections(content)
	if kind is ArtifactKind.COMMIT_MESSAGE:
		return {"options": split_options(content)}
	return {}


def map_result(
	text: str,
	kind: ArtifactKind,
	origin: Origin,
	*,
	truncated: bool,
	hint: str | None = None,
) -> ArtifactResult:
	"""
	Turn backend or template text into an ArtifactResult.

	Backend text has a wrapping code fence removed and is validated;
	failing validation marks it suspect but keeps it. Templated text is
	never suspect.

	Args:
	    text: Raw artifact text
	    kind: The artifact kind
	    origin: Where the text came from
	    truncated: Whether the prompt context was truncated
	    hint: Framework or style hint used for validation

	Returns:
	    ArtifactResult: The mapped result

	"""
	content = text.strip()
	suspect = False
	if origin is Origin.AI_GENERATED:
		content = strip_code_fence(content).strip()
		suspect = is_suspect(content, kind, hint)
		if suspect:
			logger.warning("Backend output for %s did not pass validation", kind.value)

	return ArtifactResult(
		kind=kind,
		content=content,
		origin=origin,
		truncated=truncated,
		suspect=suspect,
		sections=extract_sections(content, kind),
	)


def serialize(result: ArtifactResult, fmt: OutputFormat) -> str:
	"""
	Serialize a result as plain text or a JSON envelope.

	Args:
	    result: The artifact result
	    fmt: Output format

	Returns:
	    str: The content alone for text, the full envelope for JSON

	"""
	if fmt is OutputFormat.JSON:
		return result.model_dump_json(indent=2)
	return result.content
