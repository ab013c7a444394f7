"""Command for generating changelog entries."""

from __future__ import annotations

import typer

from commit_buddy.artifacts.schemas import ArtifactKind, OutputFormat
from commit_buddy.changes.model import SourceKind
from commit_buddy.cli.cli_types import BaseOpt, FormatOpt, OutputOpt
from commit_buddy.cli.runner import SourceOptions, run_artifact_command


def register_command(app: typer.Typer) -> None:
	"""Register the changelog command with the CLI app."""

	@app.command(name="changelog")
	def changelog_command(
		ctx: typer.Context,
		base: BaseOpt = None,
		output: OutputOpt = None,
		fmt: FormatOpt = OutputFormat.TEXT,
	) -> None:
		"""Generate a Keep a Changelog entry from the commits on the current branch."""
		run_artifact_command(
			ctx,
			ArtifactKind.CHANGELOG,
			SourceOptions(kind=SourceKind.BRANCH_COMPARISON, base=base),
			fmt,
			output=output,
		)
