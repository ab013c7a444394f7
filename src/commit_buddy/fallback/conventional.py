"""Conventional commit parsing and type inference."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import PurePosixPath

CONVENTIONAL_COMMIT_PATTERN = re.compile(
	r"^(?P<type>[a-z][a-z-]{0,19})(?:\((?P<scope>[^)]*)\))?(?P<breaking>!)?:\s*(?P<description>.+)$",
	re.IGNORECASE,
)

BREAKING_CHANGE_FOOTER = re.compile(r"^BREAKING[ -]CHANGE:", re.MULTILINE)

DOC_EXTENSIONS = frozenset({".md", ".rst", ".txt", ".adoc"})
BUILD_FILES = frozenset(
	{
		"pyproject.toml",
		"setup.py",
		"setup.cfg",
		"requirements.txt",
		"package.json",
		"package-lock.json",
		"cargo.toml",
		"cargo.lock",
		"go.mod",
		"go.sum",
		"pom.xml",
		"build.gradle",
		"makefile",
		"dockerfile",
	}
)
STYLE_EXTENSIONS = frozenset({".css", ".scss", ".sass", ".less"})

COMMIT_EMOJIS = {
	"feat": "✨",
	"fix": "\U0001f41b",
	"docs": "\U0001f4da",
	"style": "\U0001f484",
	"refactor": "♻️",
	"test": "\U0001f9ea",
	"chore": "\U0001f527",
	"perf": "⚡",
	"ci": "\U0001f477",
	"build": "\U0001f4e6",
	"revert": "⏪",
}
DEFAULT_EMOJI = "\U0001f4dd"


@dataclass(frozen=True)
class ConventionalCommit:
	"""A parsed conventional commit subject."""

	type: str
	description: str
	scope: str | None = None
	breaking: bool = False


def parse_conventional(message: str) -> ConventionalCommit | None:
	"""
	Parse a commit message subject as a conventional commit.

	The type is normalized to lower case. A ``BREAKING CHANGE:`` footer in
	the body marks the commit as breaking as well.

	Args:
	    message: Full commit message or subject line

	Returns:
	    The parsed commit, or None if the subject is not conventional

	"""
	lines = message.strip().splitlines()
	if not lines:
		return None
	match = CONVENTIONAL_COMMIT_PATTERN.match(lines[0].strip())
	if not match:
		return None
	body = "\n".join(lines[1:])
	return ConventionalCommit(
		type=match.group("type").lower(),
		description=match.group("description").strip(),
		scope=match.group("scope") or None,
		breaking=bool(match.group("breaking")) or bool(BREAKING_CHANGE_FOOTER.search(body)),
	)


def extract_commit_type(message: str) -> str | None:
	"""Return the lower-cased conventional type of a message, if any."""
	parsed = parse_conventional(message)
	return parsed.type if parsed else None


def is_conventional_commit(message: str) -> bool:
	"""Check whether a message subject follows the conventional commit format."""
	return parse_conventional(message) is not None


def get_commit_emoji(commit_type: str) -> str:
	"""Map a commit type to its emoji."""
	return COMMIT_EMOJIS.get(commit_type, DEFAULT_EMOJI)


def is_test_path(path: str) -> bool:
	"""Heuristically decide whether a path belongs to a test suite."""
	pure = PurePosixPath(path)
	name = pure.name.lower()
	parts = {part.lower() for part in pure.parts[:-1]}
	if parts & {"tests", "test", "__tests__", "spec"}:
		return True
	stem = name.split(".", 1)[0]
	return (
		stem.startswith("test_")
		or stem.endswith(("_test", "_spec"))
		or ".test." in name
		or ".spec." in name
		or (pure.suffix == ".java" and stem.endswith("test"))
	)


def _path_type(path: str) -> str:
	pure = PurePosixPath(path)
	name = pure.name.lower()
	if is_test_path(path):
		return "test"
	if pure.parts and pure.parts[0] in {"docs", "doc"} or pure.suffix.lower() in DOC_EXTENSIONS:
		return "docs"
	if pure.parts and pure.parts[0] in {".github", ".gitlab", ".circleci"} or name in {
		".gitlab-ci.yml",
		".travis.yml",
	}:
		return "ci"
	if name in BUILD_FILES:
		return "build"
	if pure.suffix.lower() in STYLE_EXTENSIONS:
		return "style"
	return ""


def infer_commit_type(paths: list[str], *, all_added: bool = False) -> str:
	"""
	Infer a conventional commit type from changed paths.

	When every path maps to the same category that category wins; otherwise
	new files suggest ``feat`` and anything else ``chore``.

	Args:
	    paths: Changed file paths
	    all_added: True when every file is newly added

	Returns:
	    str: The inferred commit type

	"""
	if not paths:
		return "chore"
	types = {_path_type(path) for path in paths}
	if len(types) == 1 and "" not in types:
		return types.pop()
	if all_added:
		return "feat"
	return "chore"


def describe_paths(paths: list[str], *, verb: str = "update") -> str:
	"""
	Describe a set of changed paths in a few words.

	Args:
	    paths: Changed file paths
	    verb: Verb used in the description

	Returns:
	    str: ``<verb> <file>``, ``<verb> files in <dir>`` or ``<verb> N files``

	"""
	if not paths:
		return f"{verb} files"
	if len(paths) == 1:
		return f"{verb} {paths[0]}"
	common_dir = os.path.commonpath(paths)
	if common_dir and common_dir != ".":
		return f"{verb} files in {common_dir}"
	return f"{verb} {len(paths)} files"
