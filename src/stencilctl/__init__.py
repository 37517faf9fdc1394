"""Public exports for the stencilctl package."""

from __future__ import annotations

import tomllib
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as pkg_version
from pathlib import Path

from .bundler import BundleError, BundleOptions, BundleTask, assemble, resolve_jspm_executable
from .config import (
    DOT_STENCIL_FILENAME,
    ConfigError,
    ConfigParseError,
    ConfigWriteError,
    PathConfigError,
    ThemeConfigError,
    apply_layout_defaults,
    ensure_packages_path,
    load_settings,
    load_theme_config,
    merge_config,
    read_dot_stencil,
    write_dot_stencil,
)
from .models import (
    CUSTOM_LAYOUT_SECTIONS,
    JspmDevSettings,
    JspmSettings,
    StencilSettings,
    StoreAnswers,
    ThemeConfig,
    default_custom_layouts,
)
from .validators import validate_port, validate_store_url, validate_token, validate_username


def _load_local_version() -> str:
    """Return the package version declared in pyproject.toml when metadata is unavailable."""
    pyproject_path = Path(__file__).resolve().parents[2] / "pyproject.toml"
    try:
        raw_text = pyproject_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return "0.0.0"

    try:
        data = tomllib.loads(raw_text)
    except tomllib.TOMLDecodeError:
        return "0.0.0"

    project_section = data.get("project")
    if isinstance(project_section, dict):
        version_value = project_section.get("version")
        if isinstance(version_value, str) and version_value.strip():
            return version_value.strip()
    return "0.0.0"


try:
    __version__ = pkg_version("stencilctl")
except PackageNotFoundError:
    __version__ = _load_local_version()

__all__ = [
    "CUSTOM_LAYOUT_SECTIONS",
    "DOT_STENCIL_FILENAME",
    "BundleError",
    "BundleOptions",
    "BundleTask",
    "ConfigError",
    "ConfigParseError",
    "ConfigWriteError",
    "JspmDevSettings",
    "JspmSettings",
    "PathConfigError",
    "StencilSettings",
    "StoreAnswers",
    "ThemeConfig",
    "ThemeConfigError",
    "__version__",
    "apply_layout_defaults",
    "assemble",
    "default_custom_layouts",
    "ensure_packages_path",
    "load_settings",
    "load_theme_config",
    "merge_config",
    "read_dot_stencil",
    "resolve_jspm_executable",
    "validate_port",
    "validate_store_url",
    "validate_token",
    "validate_username",
    "write_dot_stencil",
]
