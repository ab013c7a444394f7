"""Command for generating unit tests for changed code."""

from __future__ import annotations

import typer

from commit_buddy.artifacts.schemas import ArtifactKind, OutputFormat
from commit_buddy.changes.model import SourceKind
from commit_buddy.cli.cli_types import BaseOpt, FormatOpt, FrameworkOpt
from commit_buddy.cli.runner import SourceOptions, run_artifact_command


def register_command(app: typer.Typer) -> None:
	"""Register the generate-tests command with the CLI app."""

	@app.command(name="generate-tests")
	def generate_tests_command(
		ctx: typer.Context,
		base: BaseOpt = None,
		framework: FrameworkOpt = None,
		fmt: FormatOpt = OutputFormat.TEXT,
	) -> None:
		"""Generate unit tests for the code changed on the current branch."""
		run_artifact_command(
			ctx,
			ArtifactKind.UNIT_TESTS,
			SourceOptions(kind=SourceKind.BRANCH_COMPARISON, base=base),
			fmt,
			hint=framework,
		)
