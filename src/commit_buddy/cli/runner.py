"""Shared execution path for the artifact commands."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import typer

from commit_buddy.artifacts.mapper import serialize
from commit_buddy.artifacts.schemas import ArtifactKind
from commit_buddy.changes.model import SourceDescription, SourceKind
from commit_buddy.config import ConfigError, ConfigLoader, get_api_key
from commit_buddy.git.errors import MalformedDiffError, RefNotFoundError, RepoError
from commit_buddy.git.reader import RepositoryReader
from commit_buddy.llm.gateway import BackendGateway
from commit_buddy.orchestrator import ArtifactRequest, RuntimeSettings, generate_artifact
from commit_buddy.utils.cli_utils import exit_with_error, handle_keyboard_interrupt, loading_spinner, show_notice

if TYPE_CHECKING:
	from commit_buddy.artifacts.schemas import ArtifactResult, OutputFormat

logger = logging.getLogger(__name__)


@dataclass
class CliState:
	"""Global options shared by every command."""

	repo_path: Path | None = None
	config_file: Path | None = None
	is_verbose: bool = False


@dataclass(frozen=True)
class SourceOptions:
	"""Where a command reads its changes from, before defaults are applied."""

	kind: SourceKind
	base: str | None = None
	head: str | None = None
	staged: bool = False


def get_state(ctx: typer.Context) -> CliState:
	"""Return the global options stored by the app callback."""
	state = ctx.find_object(CliState)
	return state if state is not None else CliState()


def resolve_source(options: SourceOptions, reader: RepositoryReader, default_branch: str) -> SourceDescription:
	"""
	Apply defaults to the source options of a command.

	Branch comparisons default to the configured branch as base and the
	checked-out branch (or HEAD) as head.

	Args:
	    options: Source options from the command line
	    reader: Repository reader
	    default_branch: Configured default branch

	Returns:
	    SourceDescription: The resolved source

	"""
	if options.kind is SourceKind.BRANCH_COMPARISON:
		return SourceDescription(
			kind=options.kind,
			base=options.base or default_branch,
			head=options.head or reader.current_branch() or "HEAD",
		)
	return SourceDescription(kind=options.kind, base=options.base, head=options.head, staged=options.staged)


def _emit(result: ArtifactResult, fmt: OutputFormat, output: Path | None) -> None:
	text = serialize(result, fmt)
	if output is None:
		typer.echo(text)
		return
	try:
		output.write_text(text if text.endswith("\n") else f"{text}\n", encoding="utf-8")
	except OSError as e:
		exit_with_error(f"Could not write {output}", exception=e)
	show_notice(f"Wrote {result.kind.value.replace('_', ' ')} to {output}")


def run_artifact_command(
	ctx: typer.Context,
	kind: ArtifactKind,
	source: SourceOptions,
	fmt: OutputFormat,
	*,
	hint: str | None = None,
	output: Path | None = None,
) -> None:
	"""
	Generate one artifact and print or write it.

	Args:
	    ctx: Typer context holding the global options
	    kind: The artifact to produce
	    source: Where the changes come from
	    fmt: Output format
	    hint: Optional framework or style hint
	    output: Optional file to write instead of stdout

	"""
	state = get_state(ctx)
	try:
		reader = RepositoryReader(state.repo_path)
		config = ConfigLoader(state.config_file, repo_root=reader.root).get
		settings = RuntimeSettings(config=config, credentials=get_api_key())
		if hint is None and kind is ArtifactKind.UNIT_TESTS:
			hint = config.tests.framework
		request = ArtifactRequest(
			kind=kind,
			source=resolve_source(source, reader, config.default_branch),
			hint=hint,
			output_format=fmt,
		)
		gateway = BackendGateway.from_config(config.llm)
		with loading_spinner(f"Generating {kind.value.replace('_', ' ')}..."):
			result = generate_artifact(request, settings, reader, gateway, notify=show_notice)
	except KeyboardInterrupt:
		handle_keyboard_interrupt()
		return
	except RefNotFoundError as e:
		exit_with_error(f"Unknown ref '{e.ref}'", exception=e)
		return
	except RepoError as e:
		exit_with_error("Could not read the repository", exception=e)
		return
	except MalformedDiffError as e:
		exit_with_error(f"Inconsistent diff for {e.path}", exception=e)
		return
	except ConfigError as e:
		exit_with_error("Invalid configuration", exception=e)
		return

	if result.truncated:
		show_notice("The change summary was shortened to fit the prompt size limit.")
	if result.suspect:
		show_notice("The generated text did not pass validation; review it carefully.", is_warning=True)
	_emit(result, fmt, output)
