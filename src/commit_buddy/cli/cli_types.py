"""Type definitions for CLI parameters."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from commit_buddy.artifacts.schemas import OutputFormat

# Type aliases for common CLI parameters
BaseOpt = Annotated[
	str | None,
	typer.Option(
		"--base",
		"-b",
		help="Base branch or ref to compare against (default: configured default branch)",
	),
]

FormatOpt = Annotated[
	OutputFormat,
	typer.Option(
		"--format",
		"-f",
		help="Output format",
		case_sensitive=False,
	),
]

FrameworkOpt = Annotated[
	str | None,
	typer.Option(
		"--framework",
		help="Test framework (pytest, unittest, jest, vitest, mocha, go, rust, junit or auto)",
	),
]

CommitOpt = Annotated[
	str,
	typer.Option(
		"--commit",
		help="Commit whose message should be improved",
	),
]

AllFlag = Annotated[
	bool,
	typer.Option(
		"--all",
		"-a",
		help="Include all uncommitted changes to tracked files, not only staged ones",
	),
]

OutputOpt = Annotated[
	Path | None,
	typer.Option(
		"--output",
		"-o",
		help="Write the artifact to this file instead of stdout",
		dir_okay=False,
	),
]

ConfigOpt = Annotated[
	Path | None,
	typer.Option(
		"--config",
		"-c",
		help="Path to config file",
	),
]

RepoOpt = Annotated[
	Path | None,
	typer.Option(
		"--repo",
		"-r",
		help="Path inside the repository to inspect (default: current directory)",
		file_okay=False,
	),
]

VerboseFlag = Annotated[
	bool,
	typer.Option(
		"--verbose",
		"-v",
		help="Enable verbose logging",
	),
]
