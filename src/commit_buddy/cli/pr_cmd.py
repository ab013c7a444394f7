"""Command for generating pull request descriptions."""

from __future__ import annotations

import typer

from commit_buddy.artifacts.schemas import ArtifactKind, OutputFormat
from commit_buddy.changes.model import SourceKind
from commit_buddy.cli.cli_types import BaseOpt, FormatOpt
from commit_buddy.cli.runner import SourceOptions, run_artifact_command


def register_command(app: typer.Typer) -> None:
	"""Register the pr-description command with the CLI app."""

	@app.command(name="pr-description")
	def pr_description_command(
		ctx: typer.Context,
		base: BaseOpt = None,
		fmt: FormatOpt = OutputFormat.TEXT,
	) -> None:
		"""
		Generate a pull request description for the current branch.

		Compares the checked-out branch with the base branch and describes
		what it introduces.

		"""
		run_artifact_command(
			ctx,
			ArtifactKind.PR_DESCRIPTION,
			SourceOptions(kind=SourceKind.BRANCH_COMPARISON, base=base),
			fmt,
		)
