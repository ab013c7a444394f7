"""
Configuration loader for commit-buddy.

Configuration is read from a YAML file and overlaid with environment
variables. It is never written.

"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from xdg.BaseDirectory import xdg_config_home

from commit_buddy.config.config_schema import AppConfigSchema

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".commit-buddy.yml"
APP_DIR_NAME = "commit-buddy"

ENV_DEFAULT_BRANCH = "COMMIT_BUDDY_DEFAULT_BRANCH"
ENV_MODEL = "COMMIT_BUDDY_MODEL"
ENV_API_BASE = "COMMIT_BUDDY_API_BASE"
API_KEY_ENV_VARS = ("COMMIT_BUDDY_API_KEY", "OPENAI_API_KEY")


class ConfigError(Exception):
	"""Exception raised for configuration errors."""


class ConfigFileNotFoundError(ConfigError):
	"""Exception raised when configuration file is not found."""


class ConfigParsingError(ConfigError):
	"""Exception raised when configuration file cannot be parsed."""


def get_api_key() -> str | None:
	"""Return the first API key found in the environment, or None."""
	for env_var in API_KEY_ENV_VARS:
		value = os.environ.get(env_var, "").strip()
		if value:
			logger.debug("API key found in environment variable %s", env_var)
			return value
	return None


class ConfigLoader:
	"""
	Loads configuration for commit-buddy using Pydantic schemas.

	Sources, lowest to highest priority: schema defaults, the first YAML
	file found, then environment variables.

	"""

	def __init__(self, config_file: Path | None = None, repo_root: Path | None = None) -> None:
		"""
		Initialize the configuration loader.

		Args:
			config_file: Path to configuration file (optional)
			repo_root: Repository root path (optional)

		Raises:
			ConfigFileNotFoundError: If an explicit config file does not exist
			ConfigParsingError: If the file is not valid YAML or does not match the schema

		"""
		self.repo_root = repo_root
		self.config_file = self._resolve_config_file(config_file)
		self._app_config = self._load_config()

	def _resolve_config_file(self, config_file: Path | None = None) -> Path | None:
		"""
		Resolve the configuration file path.

		If a config file is specified, use that. Otherwise, look in standard locations:
		1. ./.commit-buddy.yml in the current directory
		2. <repo root>/.commit-buddy.yml
		3. $XDG_CONFIG_HOME/commit-buddy/config.yml

		Args:
			config_file: Explicitly provided config file path (optional)

		Returns:
			Optional[Path]: Resolved config file path or None if no suitable file found

		Raises:
			ConfigFileNotFoundError: If the explicit path does not exist

		"""
		if config_file:
			path = config_file.expanduser().resolve()
			if not path.exists():
				msg = f"Configuration file not found: {path}"
				raise ConfigFileNotFoundError(msg)
			return path

		candidates = [Path(CONFIG_FILE_NAME)]
		if self.repo_root:
			candidates.append(self.repo_root / CONFIG_FILE_NAME)
		candidates.append(Path(xdg_config_home) / APP_DIR_NAME / "config.yml")

		for candidate in candidates:
			if candidate.is_file():
				return candidate
		return None

	@staticmethod
	def _parse_yaml_file(file_path: Path) -> dict[str, Any]:
		"""
		Parse a YAML configuration file.

		Args:
			file_path: Path to the YAML file to parse

		Returns:
			Parsed YAML content as a dictionary

		Raises:
			ConfigParsingError: If the file cannot be read or is not a YAML mapping

		"""
		try:
			with file_path.open(encoding="utf-8") as f:
				content = yaml.safe_load(f)
		except (OSError, yaml.YAMLError) as e:
			msg = f"Could not read configuration file {file_path}: {e}"
			raise ConfigParsingError(msg) from e
		if content is None:
			return {}
		if not isinstance(content, dict):
			msg = f"File {file_path} does not contain a valid YAML dictionary"
			raise ConfigParsingError(msg)
		return content

	@staticmethod
	def _apply_environment(config: dict[str, Any]) -> None:
		default_branch = os.environ.get(ENV_DEFAULT_BRANCH, "").strip()
		if default_branch:
			config["default_branch"] = default_branch

		llm = config.setdefault("llm", {})
		if not isinstance(llm, dict):
			return
		model = os.environ.get(ENV_MODEL, "").strip()
		if model:
			llm["model"] = model
		api_base = os.environ.get(ENV_API_BASE, "").strip()
		if api_base:
			llm["api_base"] = api_base

	def _load_config(self) -> AppConfigSchema:
		file_config: dict[str, Any] = {}
		if self.config_file:
			file_config = self._parse_yaml_file(self.config_file)
			logger.info("Loaded configuration from %s", self.config_file)
		else:
			logger.info("No configuration file found. Using default configuration.")

		self._apply_environment(file_config)
		try:
			return AppConfigSchema(**file_config)
		except (ValidationError, TypeError) as e:
			source = self.config_file or "environment"
			error_msg = f"Invalid configuration in {source}: {e}"
			logger.debug(error_msg)
			raise ConfigParsingError(error_msg) from e

	@property
	def get(self) -> AppConfigSchema:
		"""
		Get the current application configuration.

		Returns:
			AppConfigSchema: The current configuration
		"""
		return self._app_config
