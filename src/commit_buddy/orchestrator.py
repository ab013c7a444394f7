"""Wire the engine together for one artifact request."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

from commit_buddy.artifacts.mapper import map_result
from commit_buddy.artifacts.schemas import ArtifactKind, Origin, OutputFormat
from commit_buddy.changes.builder import build
from commit_buddy.changes.model import SourceDescription, SourceKind
from commit_buddy.config.config_schema import AppConfigSchema
from commit_buddy.fallback.templates import render
from commit_buddy.llm.gateway import NoCredentials, PermanentFailure, Success, TransientFailure
from commit_buddy.prompts.composer import compose

if TYPE_CHECKING:
	from collections.abc import Callable

	from commit_buddy.artifacts.schemas import ArtifactResult
	from commit_buddy.changes.model import ChangeModel
	from commit_buddy.git.models import CommitRef, FileChange
	from commit_buddy.git.reader import RepositoryReader
	from commit_buddy.llm.gateway import BackendResult
	from commit_buddy.prompts.schemas import Prompt

logger = logging.getLogger(__name__)

type Notifier = Callable[[str, bool], None]


class Gateway(Protocol):
	"""Anything that can send a prompt to the backend."""

	def send(self, prompt: Prompt, credentials: str | None) -> BackendResult:
		"""Send the prompt and classify the outcome."""
		...


@dataclass(frozen=True)
class ArtifactRequest:
	"""One request for an artifact."""

	kind: ArtifactKind
	source: SourceDescription
	hint: str | None = None
	output_format: OutputFormat = OutputFormat.TEXT


@dataclass(frozen=True)
class RuntimeSettings:
	"""Configuration and credentials resolved once at startup."""

	config: AppConfigSchema = field(default_factory=AppConfigSchema)
	credentials: str | None = None


def collect_changes(
	reader: RepositoryReader,
	source: SourceDescription,
) -> tuple[list[CommitRef], list[FileChange]]:
	"""
	Read the commits and file changes a source describes.

	Args:
	    reader: Repository reader
	    source: What to compare

	Returns:
	    Commits (most recent first) and file changes

	Raises:
	    RepoError: If the repository cannot be read or a ref does not resolve

	"""
	head = source.head or "HEAD"
	if source.kind is SourceKind.WORKING_TREE:
		return [], reader.diff_working_tree(staged=source.staged)

	if source.kind is SourceKind.COMMIT_RANGE and not source.base:
		commit = reader.resolve_ref(head)
		parent = commit.parents[0] if commit.parents else None
		return [commit], reader.diff_range(parent, commit.id)

	commits = reader.commits_between(source.base, head)
	return commits, reader.diff_range(source.base, head)


def _log_notice(message: str, is_warning: bool) -> None:
	if is_warning:
		logger.warning(message)
	else:
		logger.info(message)


def _fallback(model: ChangeModel, request: ArtifactRequest) -> ArtifactResult:
	text = render(model, request.kind, request.hint)
	return map_result(text, request.kind, Origin.TEMPLATED, truncated=False, hint=request.hint)


def generate_artifact(
	request: ArtifactRequest,
	settings: RuntimeSettings,
	reader: RepositoryReader,
	gateway: Gateway,
	notify: Notifier | None = None,
) -> ArtifactResult:
	"""
	Produce one artifact, from the backend when possible and from templates otherwise.

	Backend failures never escape; repository and malformed-diff errors do.

	Args:
	    request: What to produce
	    settings: Configuration and credentials
	    reader: Repository reader
	    gateway: Backend gateway
	    notify: Receives user-facing notices about fallbacks and whether each is a warning

	Returns:
	    ArtifactResult: The artifact

	Raises:
	    RepoError: If the repository cannot be read
	    MalformedDiffError: If the diff is inconsistent

	"""
	notice = notify or _log_notice
	commits, file_changes = collect_changes(reader, request.source)
	model = build(commits, file_changes, request.source)

	if model.is_empty:
		logger.info("No changes for %s, skipping the backend", request.source.describe())
		return _fallback(model, request)

	prompt = compose(
		model,
		request.kind,
		settings.config.prompt.token_budget,
		request.hint,
		context_lines=settings.config.prompt.elide_context_lines,
	)
	if prompt.truncated:
		logger.info("Prompt context truncated: %s", ", ".join(strategy.value for strategy in prompt.strategies))

	result = gateway.send(prompt, settings.credentials)
	match result:
		case Success(text=text):
			return map_result(text, request.kind, Origin.AI_GENERATED, truncated=prompt.truncated, hint=request.hint)
		case NoCredentials():
			notice("No API key configured; using the offline template.", False)
		case TransientFailure(reason=reason, attempts=attempts):
			notice(f"Backend unavailable after {attempts} attempt(s) ({reason}); using the offline template.", True)
		case PermanentFailure(reason=reason):
			notice(f"Backend request failed ({reason}); using the offline template.", True)
	return _fallback(model, request)
