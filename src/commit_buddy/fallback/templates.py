"""
Deterministic, offline artifact templates.

Every renderer works from the ChangeModel alone, never fails for a
well-formed model and always returns non-empty text.

"""

from __future__ import annotations

import logging
import re
from pathlib import PurePosixPath
from typing import TYPE_CHECKING

from commit_buddy.artifacts.schemas import ArtifactKind
from commit_buddy.changes.model import SourceKind
from commit_buddy.fallback.conventional import (
	describe_paths,
	extract_commit_type,
	get_commit_emoji,
	infer_commit_type,
	is_test_path,
	parse_conventional,
)
from commit_buddy.git.models import ChangeKind, LineOrigin
from commit_buddy.utils.text_utils import capitalize_first, truncate_string

if TYPE_CHECKING:
	from collections.abc import Callable

	from commit_buddy.changes.model import ChangeModel
	from commit_buddy.git.models import CommitRef, FileChange

logger = logging.getLogger(__name__)

MAX_SUBJECT_LENGTH = 72
LARGE_CHANGE_LINES = 400
STUB_REASON = "stub generated without AI assistance"

PR_TITLE_PREFIXES = {
	"feat": "Feature:",
	"fix": "Fix:",
	"docs": "Docs:",
	"refactor": "Refactor:",
	"perf": "Optimize:",
}

BREAKING_HEADING = "Breaking Changes"
OTHER_HEADING = "Other"
CHANGELOG_HEADINGS = {
	"feat": "Added",
	"fix": "Fixed",
	"perf": "Changed",
	"refactor": "Changed",
	"style": "Changed",
	"deprecate": "Deprecated",
	"remove": "Removed",
	"security": "Security",
	"docs": "Documentation",
	"test": "Maintenance",
	"build": "Maintenance",
	"ci": "Maintenance",
	"chore": "Maintenance",
	"revert": "Reverted",
}
CHANGELOG_ORDER = (
	BREAKING_HEADING,
	"Added",
	"Changed",
	"Deprecated",
	"Removed",
	"Fixed",
	"Security",
	"Documentation",
	"Maintenance",
	"Reverted",
	OTHER_HEADING,
)

KIND_HEADINGS = (
	(ChangeKind.ADDED, "Added"),
	(ChangeKind.MODIFIED, "Modified"),
	(ChangeKind.RENAMED, "Renamed"),
	(ChangeKind.DELETED, "Deleted"),
)

CHANGE_VERBS = {
	ChangeKind.ADDED: "add",
	ChangeKind.MODIFIED: "update",
	ChangeKind.DELETED: "remove",
	ChangeKind.RENAMED: "rename",
}

FRAMEWORK_BY_EXTENSION = {
	".py": "pytest",
	".js": "jest",
	".jsx": "jest",
	".mjs": "jest",
	".cjs": "jest",
	".ts": "jest",
	".tsx": "jest",
	".go": "go",
	".rs": "rust",
	".java": "junit",
	".kt": "junit",
}
FRAMEWORK_ALIASES = {
	"py.test": "pytest",
	"junit5": "junit",
	"golang": "go",
	"cargo": "rust",
}
SUPPORTED_FRAMEWORKS = frozenset({"pytest", "unittest", "jest", "vitest", "mocha", "go", "rust", "junit"})
NON_SOURCE_EXTENSIONS = frozenset(
	{".md", ".rst", ".txt", ".json", ".yml", ".yaml", ".toml", ".lock", ".cfg", ".ini", ".css", ".html", ".svg"}
)

TODO_PATTERN = re.compile(r"\b(TODO|FIXME|XXX|HACK)\b")
DEBUG_PATTERN = re.compile(
	r"(\bprint\(|console\.log\(|\bdebugger\b|\bdbg!\(|pdb\.set_trace\(|\bbreakpoint\(\)|System\.out\.println\(|fmt\.Println\()"
)
SECRET_PATTERN = re.compile(
	r"((api[_-]?key|secret|password|passwd|token)\s*[:=]\s*['\"][^'\"]{8,}['\"]"
	r"|AKIA[0-9A-Z]{16}"
	r"|-----BEGIN [A-Z ]*PRIVATE KEY-----)",
	re.IGNORECASE,
)


def _bullets(items: list[str]) -> list[str]:
	return [f"- {item}" for item in items]


def _oldest_first(commits: tuple[CommitRef, ...]) -> list[CommitRef]:
	return list(reversed(commits))


def _paths(model: ChangeModel) -> list[str]:
	return [change.path for change in model.files]


def _all_added(model: ChangeModel) -> bool:
	return bool(model.files) and all(change.kind is ChangeKind.ADDED for change in model.files)


def render_no_changes(model: ChangeModel) -> str:
	"""Render the artifact used when there is nothing to describe."""
	return (
		"# No changes detected\n\n"
		f"No commits or file changes were found for: {model.source.describe()}.\n"
	)


# --- PR description ---


def pr_title(model: ChangeModel) -> str:
	"""
	Derive a PR title from the first commit on the branch.

	Conventional prefixes are mapped to a readable prefix such as
	``Feature:``; other subjects are used verbatim.

	Args:
	    model: The change model

	Returns:
	    str: The title

	"""
	commits = _oldest_first(model.commits)
	if not commits:
		return capitalize_first(describe_paths(_paths(model)))

	subject = commits[0].subject
	parsed = parse_conventional(subject)
	if parsed is None:
		return subject
	prefix = PR_TITLE_PREFIXES.get(parsed.type, "Update:")
	return f"{prefix} {capitalize_first(parsed.description)}"


def _files_by_kind(model: ChangeModel) -> list[str]:
	lines: list[str] = []
	for kind, heading in KIND_HEADINGS:
		changes = [change for change in model.files if change.kind is kind]
		if not changes:
			continue
		lines.append(f"### {heading}")
		lines.append("")
		for change in changes:
			suffix = " (binary)" if change.is_binary else f" ({change.stat})"
			lines.append(f"- `{change.display_path}`{suffix}")
		lines.append("")
	return lines


def render_pr_description(model: ChangeModel, hint: str | None = None) -> str:
	"""Render a PR description with title, stats, commits, files and a testing checklist."""
	lines = [f"# {pr_title(model)}", "", "## Summary", ""]
	commit_count = len(model.commits)
	noun = "commit" if commit_count == 1 else "commits"
	lines.append(f"{model.stats.summary()} across {commit_count} {noun}.")
	lines.append(f"{model.source.describe()}.")
	lines.append("")

	if model.commits:
		lines.extend(["## Commits", ""])
		for commit in _oldest_first(model.commits):
			commit_type = extract_commit_type(commit.subject) or ""
			lines.append(f"- {get_commit_emoji(commit_type)} {commit.subject}")
		lines.append("")

	if model.files:
		lines.extend(["## Changes", ""])
		lines.extend(_files_by_kind(model))

	lines.extend(["## Testing", ""])
	checklist = ["Existing test suite passes", "Changed behavior is covered by tests", "Changes verified manually"]
	lines.extend(f"- [ ] {item}" for item in checklist)
	if model.files and not any(is_test_path(path) for path in _paths(model)):
		lines.extend(["", "> No test files were changed in this pull request."])
	return "\n".join(lines).rstrip() + "\n"


# --- Changelog ---


def group_changelog(commits: list[CommitRef]) -> dict[str, list[str]]:
	"""
	Group commit subjects into Keep a Changelog headings.

	Args:
	    commits: Commits in the order they should be listed

	Returns:
	    dict[str, list[str]]: Non-empty headings in canonical order, verbatim subjects

	"""
	groups: dict[str, list[str]] = {heading: [] for heading in CHANGELOG_ORDER}
	for commit in commits:
		subject = commit.subject
		parsed = parse_conventional(commit.message)
		if parsed is None:
			groups[OTHER_HEADING].append(subject)
		elif parsed.breaking:
			groups[BREAKING_HEADING].append(subject)
		else:
			groups[CHANGELOG_HEADINGS.get(parsed.type, OTHER_HEADING)].append(subject)
	return {heading: items for heading, items in groups.items() if items}


def render_changelog(model: ChangeModel, hint: str | None = None) -> str:
	"""Render a Keep a Changelog style entry from the commit subjects."""
	version = hint or "Unreleased"
	lines = ["# Changelog", "", f"## [{version}]", ""]
	groups = group_changelog(list(model.commits))
	if not groups:
		groups = {"Changed": [describe_paths(_paths(model))]}
	for heading, items in groups.items():
		lines.append(f"### {heading}")
		lines.append("")
		lines.extend(_bullets(items))
		lines.append("")
	return "\n".join(lines).rstrip() + "\n"


# --- Commit message ---


def suggest_subject(model: ChangeModel) -> str:
	"""Build a conventional subject from the changed paths, at most 72 characters."""
	paths = _paths(model)
	verb = "add" if _all_added(model) else "update"
	commit_type = infer_commit_type(paths, all_added=_all_added(model))
	return truncate_string(f"{commit_type}: {describe_paths(paths, verb=verb)}", MAX_SUBJECT_LENGTH)


def _improve_commit(commit: CommitRef, model: ChangeModel) -> str:
	parsed = parse_conventional(commit.subject)
	if parsed is not None:
		subject = commit.subject
	elif commit.subject:
		commit_type = infer_commit_type(_paths(model), all_added=_all_added(model))
		description = commit.subject.rstrip(".")
		description = description[:1].lower() + description[1:]
		subject = f"{commit_type}: {description}"
	else:
		subject = suggest_subject(model)
	subject = truncate_string(subject, MAX_SUBJECT_LENGTH)
	if commit.body:
		return f"{subject}\n\n{commit.body}\n"
	return f"{subject}\n"


def render_commit_message(model: ChangeModel, hint: str | None = None) -> str:
	"""
	Render a commit message.

	For an existing commit the recorded message is kept when it is already
	conventional and prefixed with an inferred type otherwise. For working
	tree changes two options are produced, separated by ``---``.

	Args:
	    model: The change model
	    hint: Unused style hint

	Returns:
	    str: The commit message or options

	"""
	if model.source.kind is not SourceKind.WORKING_TREE and model.commits:
		return _improve_commit(model.commits[0], model)

	subject = suggest_subject(model)
	body = _bullets([f"{CHANGE_VERBS[change.kind]} {change.display_path}" for change in model.files])
	detailed = "\n".join([subject, "", *body])
	return f"{subject}\n---\n{detailed}\n"


# --- Unit tests ---


def normalize_framework(name: str | None) -> str:
	"""Normalize a framework name; unknown names map to ``auto``."""
	value = (name or "auto").strip().lower()
	value = FRAMEWORK_ALIASES.get(value, value)
	return value if value in SUPPORTED_FRAMEWORKS else "auto"


def detect_framework(path: str) -> str | None:
	"""Pick a test framework from a file extension."""
	return FRAMEWORK_BY_EXTENSION.get(PurePosixPath(path).suffix.lower())


def _is_source(change: FileChange) -> bool:
	if change.kind is ChangeKind.DELETED or change.is_binary or is_test_path(change.path):
		return False
	return PurePosixPath(change.path).suffix.lower() not in NON_SOURCE_EXTENSIONS


def _identifier(path: str) -> str:
	stem = PurePosixPath(path).name.split(".", 1)[0]
	name = re.sub(r"\W+", "_", stem).strip("_").lower()
	return name or "module"


def _camel(name: str) -> str:
	return "".join(part.capitalize() for part in name.split("_") if part)


def _pytest_stub(path: str, name: str) -> tuple[str, str, str]:
	code = (
		f'"""Tests for {path}."""\n\n'
		"import pytest\n\n\n"
		f"def test_{name}_changed_behavior():\n"
		f'    pytest.skip("{STUB_REASON}")\n'
	)
	return f"tests/test_{name}.py", "python", code


def _unittest_stub(path: str, name: str) -> tuple[str, str, str]:
	code = (
		f'"""Tests for {path}."""\n\n'
		"import unittest\n\n\n"
		f"class Test{_camel(name)}(unittest.TestCase):\n"
		f"    def test_{name}_changed_behavior(self):\n"
		f'        self.skipTest("{STUB_REASON}")\n\n\n'
		'if __name__ == "__main__":\n'
		"    unittest.main()\n"
	)
	return f"tests/test_{name}.py", "python", code


def _js_stub(path: str, name: str, framework: str) -> tuple[str, str, str]:
	pure = PurePosixPath(path)
	header = ""
	if framework == "vitest":
		header = 'import { describe, it } from "vitest";\n\n'
	elif framework == "mocha":
		header = 'const assert = require("assert");\n\n'
	code = (
		f"{header}"
		f'describe("{path}", () => {{\n'
		f'  it.skip("{name} changed behavior", () => {{\n'
		f"    // {STUB_REASON}\n"
		"  });\n"
		"});\n"
	)
	language = "typescript" if pure.suffix in {".ts", ".tsx"} else "javascript"
	suffix = pure.suffix or ".js"
	test_path = str(pure.with_name(f"{pure.name.split('.', 1)[0]}.test{suffix}"))
	return test_path, language, code


def _go_stub(path: str, name: str) -> tuple[str, str, str]:
	pure = PurePosixPath(path)
	package = re.sub(r"\W+", "", pure.parent.name) or "main"
	code = (
		f"package {package}\n\n"
		'import "testing"\n\n'
		f"func Test{_camel(name)}(t *testing.T) {{\n"
		f'\tt.Skip("{STUB_REASON}")\n'
		"}\n"
	)
	return str(pure.with_name(f"{name}_test.go")), "go", code


def _rust_stub(path: str, name: str) -> tuple[str, str, str]:
	code = (
		"#[cfg(test)]\n"
		"mod tests {\n"
		"    use super::*;\n\n"
		"    #[test]\n"
		"    #[ignore]\n"
		f"    fn {name}_changed_behavior() {{\n"
		f'        unimplemented!("{STUB_REASON}");\n'
		"    }\n"
		"}\n"
	)
	return path, "rust", code


def _junit_stub(path: str, name: str) -> tuple[str, str, str]:
	camel = _camel(name)
	code = (
		"import org.junit.jupiter.api.Disabled;\n"
		"import org.junit.jupiter.api.Test;\n\n"
		f"class {camel}Test {{\n"
		"    @Test\n"
		f'    @Disabled("{STUB_REASON}")\n'
		"    void changedBehavior() {\n"
		"    }\n"
		"}\n"
	)
	return f"{camel}Test.java", "java", code


def build_test_stub(path: str, framework: str) -> tuple[str, str, str]:
	"""
	Build a test stub for one source file.

	Args:
	    path: The changed source file
	    framework: A supported framework name

	Returns:
	    tuple[str, str, str]: Suggested test path, code fence language and code

	"""
	name = _identifier(path)
	if framework == "unittest":
		return _unittest_stub(path, name)
	if framework in {"jest", "vitest", "mocha"}:
		return _js_stub(path, name, framework)
	if framework == "go":
		return _go_stub(path, name)
	if framework == "rust":
		return _rust_stub(path, name)
	if framework == "junit":
		return _junit_stub(path, name)
	return _pytest_stub(path, name)


def render_unit_tests(model: ChangeModel, hint: str | None = None) -> str:
	"""Render one framework-specific test stub per changed source file."""
	requested = normalize_framework(hint)
	sources = [change.path for change in model.files if _is_source(change)]
	lines = ["# Test stubs", ""]
	if not sources:
		lines.append("No changed source files need new tests.")
		return "\n".join(lines) + "\n"

	noun = "file" if len(sources) == 1 else "files"
	lines.append(f"Generated offline for {len(sources)} changed source {noun}. Replace the skips with real assertions.")
	lines.append("")
	for path in sources:
		framework = requested if requested != "auto" else detect_framework(path) or "pytest"
		test_path, language, code = build_test_stub(path, framework)
		lines.extend([f"## {test_path}", "", f"Covers `{path}` ({framework}).", ""])
		lines.extend([f"```{language}", code.rstrip(), "```", ""])
	return "\n".join(lines).rstrip() + "\n"


# --- Review ---


def _added_lines(change: FileChange) -> list[str]:
	return [line.content for hunk in change.hunks for line in hunk.lines if line.origin is LineOrigin.ADDED]


def review_findings(change: FileChange) -> list[str]:
	"""
	Collect heuristic findings for a single file.

	Args:
	    change: The file change

	Returns:
	    list[str]: Human-readable findings, possibly empty

	"""
	findings: list[str] = []
	touched = change.additions + change.deletions
	if touched >= LARGE_CHANGE_LINES:
		findings.append(f"Large change ({touched} lines touched); consider splitting it up")
	if change.kind is ChangeKind.DELETED:
		findings.append("File deleted; confirm nothing still references it")
	if change.is_binary:
		findings.append("Binary file; review it outside the diff")

	added = _added_lines(change)
	todos = sum(1 for line in added if TODO_PATTERN.search(line))
	if todos:
		findings.append(f"Adds {todos} TODO/FIXME marker(s)")
	debug = sum(1 for line in added if DEBUG_PATTERN.search(line))
	if debug and not is_test_path(change.path):
		findings.append(f"Adds {debug} debug statement(s)")
	secrets = sum(1 for line in added if SECRET_PATTERN.search(line))
	if secrets:
		findings.append(f"Possible secret in {secrets} added line(s)")
	return findings


def render_review(model: ChangeModel, hint: str | None = None) -> str:
	"""Render a deterministic review checklist with per-file findings."""
	lines = ["# Review checklist", "", f"{model.source.describe()}.", f"{model.stats.summary()}.", "", "## Findings", ""]
	found = False
	for change in model.files:
		findings = review_findings(change)
		if not findings:
			continue
		found = True
		lines.extend([f"### {change.display_path}", "", *_bullets(findings), ""])
	if not found:
		lines.extend(["No automated findings.", ""])

	lines.extend(["## General", ""])
	if model.files and not any(is_test_path(path) for path in _paths(model)):
		lines.extend(["- No test files were changed; consider adding tests", ""])
	checklist = ["Naming and structure are consistent", "Error handling covers failure paths", "Documentation is updated"]
	lines.extend(f"- [ ] {item}" for item in checklist)
	return "\n".join(lines).rstrip() + "\n"


RENDERERS: dict[ArtifactKind, Callable[[ChangeModel, str | None], str]] = {
	ArtifactKind.PR_DESCRIPTION: render_pr_description,
	ArtifactKind.CHANGELOG: render_changelog,
	ArtifactKind.COMMIT_MESSAGE: render_commit_message,
	ArtifactKind.UNIT_TESTS: render_unit_tests,
	ArtifactKind.REVIEW: render_review,
}


def render(model: ChangeModel, kind: ArtifactKind, hint: str | None = None) -> str:
	"""
	Render an artifact without the backend.

	Args:
	    model: The change model
	    kind: The artifact to render
	    hint: Optional framework, version or style hint

	Returns:
	    str: Non-empty artifact text

	"""
	if model.is_empty:
		return render_no_changes(model)
	logger.debug("Rendering templated %s", kind.value)
	return RENDERERS[kind](model, hint)
