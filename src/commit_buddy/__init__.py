"""commit-buddy - AI-assisted git companion with templated fallbacks."""

from __future__ import annotations

__version__ = "0.3.0"
__author__ = "commit-buddy contributors"
