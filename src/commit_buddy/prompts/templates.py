"""Instruction templates for each artifact kind."""

from __future__ import annotations

from dataclasses import dataclass

from commit_buddy.artifacts.schemas import ArtifactKind
from commit_buddy.changes.model import SourceKind


@dataclass(frozen=True)
class InstructionTemplate:
	"""System and user instructions for one artifact kind."""

	system: str
	user: str
	hint_label: str = "Note"


PR_DESCRIPTION_TEMPLATE = InstructionTemplate(
	system=(
		"You are an expert software engineer creating a pull request description. "
		"Generate a comprehensive PR description in markdown format that includes a clear title, "
		"a summary of changes, what was modified and why, any breaking changes and testing instructions."
	),
	user="""Based on the change summary below, write the pull request description.

Use this structure:
1. A title line starting with '# '
2. A '## Summary' section
3. A '## Changes' section listing what was modified and why
4. A '## Breaking Changes' section only if there are any
5. A '## Testing' section with a checklist

Respond with the markdown only.""",
	hint_label="Focus",
)

UNIT_TESTS_TEMPLATE = InstructionTemplate(
	system=(
		"You are an expert software engineer writing comprehensive unit tests. Generate well-structured "
		"unit tests with proper test cases, edge cases, error handling and mocking for external dependencies."
	),
	user="""Based on the code changes below, generate unit tests.

Please generate:
1. Unit tests for all new or modified functions
2. Edge case and error handling tests
3. Mocks for external dependencies
4. Clear test names and assertions

Format the tests as code blocks, one per test file.""",
	hint_label="Test framework",
)

IMPROVE_COMMIT_TEMPLATE = InstructionTemplate(
	system=(
		"You are an expert software engineer helping to improve commit messages. Provide an improved version "
		"that follows the conventional commit format with imperative mood, a clear subject line and a body if needed."
	),
	user="""Improve the message of the commit below so it follows the conventional commit format:
- <type>[optional scope]: <description>
- Use imperative mood ("add feature", not "added feature")
- Keep the subject line under 72 characters
- Use the body to explain what and why, not how

Provide only the improved commit message, no additional commentary.""",
	hint_label="Style",
)

SUGGEST_COMMIT_TEMPLATE = InstructionTemplate(
	system=(
		"You are an expert software engineer helping to write commit messages. "
		"Suggest three different commit messages following the conventional commit format."
	),
	user="""Based on the uncommitted changes below, suggest 3 different commit messages:
1. A concise, single-line commit message
2. A more descriptive commit message with a body
3. A detailed commit message with multiple paragraphs if needed

Each suggestion must follow the conventional commit format (feat, fix, docs, style, refactor, perf, test, chore).
Separate the suggestions with a line containing only ---. Do not number them.""",
	hint_label="Style",
)

CHANGELOG_TEMPLATE = InstructionTemplate(
	system=(
		"You are an expert software engineer creating a changelog. "
		"Generate a professional changelog in markdown following the Keep a Changelog format."
	),
	user="""Based on the commits below, generate a changelog entry.

Please include:
1. An '## [Unreleased]' header
2. Categorized changes under '### Added', '### Changed', '### Fixed', '### Removed' and similar headings
3. A '### Breaking Changes' section if applicable
4. Links to issues or pull requests mentioned in the commits

Keep commit subjects recognizable. Respond with the markdown only.""",
	hint_label="Version",
)

REVIEW_TEMPLATE = InstructionTemplate(
	system=(
		"You are an expert software engineer performing a code review. Provide feedback on code quality, "
		"potential bugs, performance, security, maintainability and testing."
	),
	user="""Review the code changes below.

Cover:
1. Code quality and best practices
2. Potential bugs or issues
3. Performance considerations
4. Security concerns
5. Maintainability and readability
6. Testing coverage
7. Documentation needs

Format your review as constructive markdown feedback with specific suggestions, grouped by file.""",
	hint_label="Focus",
)

_TEMPLATES = {
	ArtifactKind.PR_DESCRIPTION: PR_DESCRIPTION_TEMPLATE,
	ArtifactKind.UNIT_TESTS: UNIT_TESTS_TEMPLATE,
	ArtifactKind.CHANGELOG: CHANGELOG_TEMPLATE,
	ArtifactKind.REVIEW: REVIEW_TEMPLATE,
}


def get_template(kind: ArtifactKind, source_kind: SourceKind) -> InstructionTemplate:
	"""
	Select the instruction template for an artifact kind.

	Commit messages for working-tree changes are suggestions; for existing
	commits they are improvements of the recorded message.

	Args:
	    kind: The artifact kind
	    source_kind: Where the changes come from

	Returns:
	    InstructionTemplate: The matching template

	"""
	if kind is ArtifactKind.COMMIT_MESSAGE:
		if source_kind is SourceKind.WORKING_TREE:
			return SUGGEST_COMMIT_TEMPLATE
		return IMPROVE_COMMIT_TEMPLATE
	return _TEMPLATES[kind]
