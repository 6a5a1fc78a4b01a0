"""Shared pytest fixtures for the stackcast test suite.

Provides reusable fixtures for:
- Temporary project trees (single app and ``apps/web`` + ``apps/api`` monorepo)
- A ``ProjectConfig`` factory
- A mocked package-manager installer
- A fresh error collector per test
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable
from unittest.mock import AsyncMock

import pytest

from stackcast.collector import ErrorCollector
from stackcast.config import Settings
from stackcast.scaffolder.generator import AuthGenerator
from stackcast.scaffolder.models import ProjectConfig
from stackcast.utils import set_verbose


# ---------------------------------------------------------------------------
# Global state
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _quiet_console():
    """Verbose output is module-global; reset it around every test."""
    set_verbose(False)
    yield
    set_verbose(False)


# ---------------------------------------------------------------------------
# Project trees
# ---------------------------------------------------------------------------

def _write_manifest(directory: Path, name: str) -> None:
    directory.mkdir(parents=True, exist_ok=True)
    manifest = {
        "name": name,
        "version": "0.1.0",
        "scripts": {"dev": "next dev", "build": "next build"},
    }
    (directory / "package.json").write_text(json.dumps(manifest, indent=2) + "\n", encoding="utf-8")


@pytest.fixture
def tmp_project_dir(tmp_path: Path) -> Path:
    """Single-app project with a ``package.json`` at the root."""
    project_dir = tmp_path / "my-app"
    _write_manifest(project_dir, "my-app")
    yield project_dir


@pytest.fixture
def tmp_monorepo_dir(tmp_path: Path) -> Path:
    """Monorepo with ``apps/web`` and ``apps/api`` workspaces."""
    project_dir = tmp_path / "my-app"
    _write_manifest(project_dir, "my-app")
    _write_manifest(project_dir / "apps" / "web", "web")
    _write_manifest(project_dir / "apps" / "api", "api")
    yield project_dir


@pytest.fixture
def make_config(tmp_project_dir: Path) -> Callable[..., ProjectConfig]:
    """Factory for ``ProjectConfig`` rooted at ``tmp_project_dir`` by default."""

    def _make(**overrides: Any) -> ProjectConfig:
        values: dict[str, Any] = {
            "name": "my-app",
            "project_path": tmp_project_dir,
            "framework": "next",
            "database": "postgres",
            "auth_provider": "auth.js",
        }
        values.update(overrides)
        return ProjectConfig(**values)

    return _make


# ---------------------------------------------------------------------------
# Collaborators
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_installer() -> AsyncMock:
    """Stand-in for ``install_dependencies`` that records calls and succeeds."""
    return AsyncMock(return_value=None)


@pytest.fixture
def collector() -> ErrorCollector:
    """Fresh, non-debug error collector."""
    return ErrorCollector()


@pytest.fixture
def generator(mock_installer: AsyncMock, collector: ErrorCollector) -> AuthGenerator:
    """``AuthGenerator`` wired to the bundled templates and mocked collaborators."""
    return AuthGenerator(Settings(), install=mock_installer, collector=collector)
