"""Pydantic schemas for commit-buddy configuration."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class LLMSchema(BaseModel):
	"""Settings for the generative backend."""

	model_config = ConfigDict(extra="forbid")

	model: str = "openai/gpt-4o-mini"
	api_base: str | None = None
	temperature: float = Field(default=0.7, ge=0.0, le=2.0)
	max_output_tokens: int = Field(default=2000, gt=0)
	timeout: float = Field(default=30.0, gt=0)
	max_retries: int = Field(default=1, ge=0)
	retry_backoff: float = Field(default=2.0, ge=0)


class PromptSchema(BaseModel):
	"""Settings for prompt composition."""

	model_config = ConfigDict(extra="forbid")

	# Context size in tokens, at four characters per token
	token_budget: int = Field(default=6000, gt=0)
	elide_context_lines: int = Field(default=3, ge=1)


class GenerateTestsSchema(BaseModel):
	"""Settings for the generate-tests command."""

	model_config = ConfigDict(extra="forbid")

	framework: str = "auto"


class AppConfigSchema(BaseModel):
	"""Top-level application configuration."""

	model_config = ConfigDict(extra="forbid")

	default_branch: str = "master"
	llm: LLMSchema = Field(default_factory=LLMSchema)
	prompt: PromptSchema = Field(default_factory=PromptSchema)
	tests: GenerateTestsSchema = Field(default_factory=GenerateTestsSchema)
