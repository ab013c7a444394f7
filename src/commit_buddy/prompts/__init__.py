"""Prompt composition for the generative backend."""

from commit_buddy.prompts.composer import CHARS_PER_TOKEN, compose, estimate_char_budget, serialize_change_model
from commit_buddy.prompts.schemas import MessageDict, Prompt, TruncationStrategy

__all__ = [
	"CHARS_PER_TOKEN",
	"MessageDict",
	"Prompt",
	"TruncationStrategy",
	"compose",
	"estimate_char_budget",
	"serialize_change_model",
]
