"""Command-line interface package for commit-buddy."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv

from commit_buddy import __version__
from commit_buddy.cli.changelog_cmd import register_command as register_changelog_command
from commit_buddy.cli.cli_types import ConfigOpt, RepoOpt, VerboseFlag
from commit_buddy.cli.commit_cmd import register_command as register_commit_command
from commit_buddy.cli.pr_cmd import register_command as register_pr_command
from commit_buddy.cli.review_cmd import register_command as register_review_command
from commit_buddy.cli.runner import CliState
from commit_buddy.cli.tests_cmd import register_command as register_tests_command
from commit_buddy.utils.log_setup import setup_logging

logger = logging.getLogger(__name__)

ENV_FILES = (".env.local", ".env")

# Initialize the main CLI app
app = typer.Typer(
	help=f"commit-buddy - AI-assisted git companion\n\nVersion: {__version__}",
	no_args_is_help=True,
	context_settings={"help_option_names": ["-h", "--help"]},
)


def load_env_files(*directories: Path) -> None:
	"""Load the first of .env.local or .env found in each directory, without overriding the environment."""
	for directory in directories:
		for name in ENV_FILES:
			env_file = directory / name
			if env_file.is_file():
				load_dotenv(dotenv_path=env_file)
				logger.debug("Loaded environment variables from %s", env_file)
				break


# --- Global Options Callback ---


def _version_callback(value: bool) -> None:
	"""Callback for --version option."""
	if value:
		typer.echo(f"commit-buddy version: {__version__}")
		raise typer.Exit


@app.callback()
def global_options(
	ctx: typer.Context,
	is_verbose: VerboseFlag = False,
	config_file: ConfigOpt = None,
	repo_path: RepoOpt = None,
	_version: Annotated[
		bool | None,
		typer.Option("--version", help="Show version and exit.", callback=_version_callback, is_eager=True),
	] = None,
) -> None:
	"""Global CLI options and logging setup."""
	setup_logging(is_verbose=is_verbose)
	ctx.obj = CliState(repo_path=repo_path, config_file=config_file, is_verbose=is_verbose)

	directories = [Path.cwd()]
	if repo_path is not None and repo_path.resolve() != Path.cwd().resolve():
		directories.append(repo_path)
	load_env_files(*directories)


# --- Register commands ---

register_pr_command(app)
register_tests_command(app)
register_commit_command(app)
register_changelog_command(app)
register_review_command(app)


# --- Main Entry Point ---
def main() -> int:
	"""Run the CLI application."""
	return app()


if __name__ == "__main__":
	sys.exit(main())
