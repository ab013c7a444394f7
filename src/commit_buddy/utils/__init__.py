"""Utility helpers for commit-buddy."""
