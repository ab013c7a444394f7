"""Global test fixtures and configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from commit_buddy.config import config_loader

if TYPE_CHECKING:
	from pathlib import Path

ISOLATED_ENV_VARS = (
	*config_loader.API_KEY_ENV_VARS,
	config_loader.ENV_DEFAULT_BRANCH,
	config_loader.ENV_MODEL,
	config_loader.ENV_API_BASE,
	"CI",
)


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
	"""
	Keep developer credentials and config files out of every test.

	No test may reach a real backend, so API keys are always removed; tests
	that need one set it explicitly.

	"""
	for name in ISOLATED_ENV_VARS:
		monkeypatch.delenv(name, raising=False)
	xdg_dir = tmp_path / "xdg-config"
	xdg_dir.mkdir()
	monkeypatch.setattr(config_loader, "xdg_config_home", str(xdg_dir))


@pytest.fixture
def temp_dir(tmp_path: Path) -> Path:
	"""Temporary working directory for file system tests."""
	work_dir = tmp_path / "work"
	work_dir.mkdir()
	return work_dir
