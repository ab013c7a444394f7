"""Exceptions raised while reading repository state."""

from __future__ import annotations


class GitError(Exception):
	"""Base exception for Git-related errors."""


class RepoError(GitError):
	"""The path is not a repository, or its objects cannot be read."""


class RefNotFoundError(RepoError):
	"""A named ref, branch or commit could not be resolved."""

	def __init__(self, ref: str, message: str | None = None) -> None:
		"""
		Initialize the error.

		Args:
		    ref: The ref that failed to resolve
		    message: Optional message overriding the default one

		"""
		self.ref = ref
		super().__init__(message or f"Could not resolve ref '{ref}'")


class DirtyStateError(RepoError):
	"""An operation requires a clean working tree but found local changes."""


class MalformedDiffError(Exception):
	"""A diff is internally inconsistent (negative counts, unordered hunks)."""

	def __init__(self, path: str, reason: str) -> None:
		"""
		Initialize the error.

		Args:
		    path: Path of the offending file
		    reason: What is inconsistent about it

		"""
		self.path = path
		self.reason = reason
		super().__init__(f"Malformed diff for '{path}': {reason}")
