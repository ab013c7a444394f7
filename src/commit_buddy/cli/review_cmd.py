"""Command for reviewing the changes on a branch."""

from __future__ import annotations

import typer

from commit_buddy.artifacts.schemas import ArtifactKind, OutputFormat
from commit_buddy.changes.model import SourceKind
from commit_buddy.cli.cli_types import BaseOpt, FormatOpt
from commit_buddy.cli.runner import SourceOptions, run_artifact_command


def register_command(app: typer.Typer) -> None:
	"""Register the review command with the CLI app."""

	@app.command(name="review")
	def review_command(
		ctx: typer.Context,
		base: BaseOpt = None,
		fmt: FormatOpt = OutputFormat.TEXT,
	) -> None:
		"""Review the code changed on the current branch."""
		run_artifact_command(
			ctx,
			ArtifactKind.REVIEW,
			SourceOptions(kind=SourceKind.BRANCH_COMPARISON, base=base),
			fmt,
		)
