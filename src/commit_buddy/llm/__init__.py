"""Generative backend access."""

from commit_buddy.llm.gateway import (
	BackendGateway,
	BackendResult,
	NoCredentials,
	PermanentFailure,
	Success,
	TransientFailure,
)

__all__ = ["BackendGateway", "BackendResult", "NoCredentials", "PermanentFailure", "Success", "TransientFailure"]
