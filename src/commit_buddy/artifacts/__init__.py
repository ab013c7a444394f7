"""Artifact schemas and response mapping."""

from commit_buddy.artifacts.schemas import ArtifactKind, ArtifactResult, Origin, OutputFormat

__all__ = ["ArtifactKind", "ArtifactResult", "Origin", "OutputFormat"]
