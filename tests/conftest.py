"""Shared pytest fixtures for stencilctl."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from .payloads import DotStencilPayload, ThemeConfigPayload


@pytest.fixture
def dot_stencil_payload() -> DotStencilPayload:
    """Provide a canonical prior `.stencil` configuration without layouts."""
    return {
        "normalStoreUrl": "https://old-store.example.com",
        "port": 4000,
        "username": "old-user",
        "token": "old-token",
    }


@pytest.fixture
def theme_config_payload() -> ThemeConfigPayload:
    """Provide a theme configuration declaring a jspm section."""
    return {
        "name": "Cornerstone",
        "version": "1.0.0",
        "jspm": {
            "dev": {"bootstrap": "js/app"},
            "jspm_packages_path": "assets/jspm_packages",
        },
    }


@pytest.fixture
def jspm_theme_dir(tmp_path: Path, theme_config_payload: ThemeConfigPayload) -> Path:
    """Create a theme directory whose config.json declares jspm bundling."""
    theme_root = tmp_path / "jspm-theme"
    (theme_root / "assets" / "jspm_packages").mkdir(parents=True)
    (theme_root / "config.json").write_text(json.dumps(theme_config_payload), encoding="utf-8")
    return theme_root
