"""Configuration for commit-buddy."""

from commit_buddy.config.config_loader import (
	ConfigError,
	ConfigFileNotFoundError,
	ConfigLoader,
	ConfigParsingError,
	get_api_key,
)
from commit_buddy.config.config_schema import AppConfigSchema, GenerateTestsSchema, LLMSchema, PromptSchema

__all__ = [
	"AppConfigSchema",
	"ConfigError",
	"ConfigFileNotFoundError",
	"ConfigLoader",
	"ConfigParsingError",
	"GenerateTestsSchema",
	"LLMSchema",
	"PromptSchema",
	"get_api_key",
]
