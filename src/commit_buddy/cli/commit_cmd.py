"""Commands for writing and improving commit messages."""

from __future__ import annotations

import typer

from commit_buddy.artifacts.schemas import ArtifactKind, OutputFormat
from commit_buddy.changes.model import SourceKind
from commit_buddy.cli.cli_types import AllFlag, CommitOpt, FormatOpt
from commit_buddy.cli.runner import SourceOptions, run_artifact_command


def register_command(app: typer.Typer) -> None:
	"""Register the commit message commands with the CLI app."""

	@app.command(name="improve-commit")
	def improve_commit_command(
		ctx: typer.Context,
		commit: CommitOpt = "HEAD",
		fmt: FormatOpt = OutputFormat.TEXT,
	) -> None:
		"""Suggest an improved, conventional message for an existing commit."""
		run_artifact_command(
			ctx,
			ArtifactKind.COMMIT_MESSAGE,
			SourceOptions(kind=SourceKind.COMMIT_RANGE, head=commit),
			fmt,
		)

	@app.command(name="commit")
	def commit_command(
		ctx: typer.Context,
		all_changes: AllFlag = False,
		fmt: FormatOpt = OutputFormat.TEXT,
	) -> None:
		"""
		Suggest commit messages for uncommitted changes.

		Only staged changes are considered unless --all is given. Nothing is
		staged or committed.

		"""
		run_artifact_command(
			ctx,
			ArtifactKind.COMMIT_MESSAGE,
			SourceOptions(kind=SourceKind.WORKING_TREE, staged=not all_changes),
			fmt,
		)
