"""Configuration loading and persistence utilities for stencilctl."""

from __future__ import annotations

import contextlib
import json
import os
import tempfile
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final

from pydantic import ValidationError

from stencilctl.models import StencilSettings, ThemeConfig, default_custom_layouts

DOT_STENCIL_FILENAME: Final[str] = ".stencil"
CUSTOM_LAYOUTS_KEY: Final[str] = "customLayouts"
_JSON_INDENT: Final[int] = 2
_DOT_STENCIL_MODE: Final[int] = 0o600

EnvMapping = Mapping[str, str]


class ConfigError(RuntimeError):
    """Raised when configuration cannot be loaded, parsed, or written."""


class ConfigParseError(ConfigError):
    """Raised when an existing `.stencil` file is not a valid JSON object."""

    def __init__(self, file_name: str, diagnostic: str) -> None:
        super().__init__(f"Unable to parse {file_name}: {diagnostic}")
        self.file_name = file_name
        self.diagnostic = diagnostic


class ConfigWriteError(ConfigError):
    """Raised when the merged configuration cannot be persisted."""


class ThemeConfigError(ConfigError):
    """Raised when the theme's `config.json` cannot be read."""


class PathConfigError(ConfigError):
    """Raised when a path declared in the theme configuration does not exist."""

    def __init__(self, message: str, *, setting: str, config_file: str) -> None:
        super().__init__(message)
        self.setting = setting
        self.config_file = config_file


def read_dot_stencil(config_path: Path) -> dict[str, Any] | None:
    """Return the parsed `.stencil` mapping, or None when the file is absent.

    Args:
        config_path: Location of the local configuration file.

    Returns:
        Parsed mapping or None if no file exists yet.

    Raises:
        ConfigParseError: If the file is not valid UTF-8 JSON or not a JSON object.
        ConfigError: If the file exists but cannot be read.
    """
    target = config_path.expanduser()
    if not target.exists():
        return None

    try:
        raw_text = target.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise ConfigParseError(target.name, f"file is not valid UTF-8 ({exc.reason})") from exc
    except OSError as exc:
        msg = f"Unable to read {target.name}: {exc}"
        raise ConfigError(msg) from exc

    try:
        data = _parse_json(raw_text)
    except json.JSONDecodeError as exc:
        diagnostic = f"{exc.msg} (line {exc.lineno}, column {exc.colno})"
        raise ConfigParseError(target.name, diagnostic) from exc
    except ValueError as exc:
        raise ConfigParseError(target.name, str(exc)) from exc

    if not isinstance(data, dict):
        raise ConfigParseError(target.name, "expected a JSON object at the top level")
    return data


def apply_layout_defaults(prior: Mapping[str, Any] | None, answers: Mapping[str, Any]) -> dict[str, Any]:
    """Return answers with empty `customLayouts` sections when prior config lacks them.

    A null, false, zero, or empty-string `customLayouts` counts as missing. Any
    mapping, even an empty one, is kept so the merge never replaces it.

    Args:
        prior: Previously persisted configuration, if any.
        answers: Freshly collected answers.

    Returns:
        Copy of the answers, possibly extended with `customLayouts`.
    """
    result = dict(answers)
    layouts = None if prior is None else prior.get(CUSTOM_LAYOUTS_KEY)
    if not layouts and not isinstance(layouts, Mapping):
        result[CUSTOM_LAYOUTS_KEY] = default_custom_layouts()
    return result


def merge_config(base: Mapping[str, Any] | None, overlay: Mapping[str, Any]) -> dict[str, Any]:
    """Merge overlay values on top of a base configuration.

    The overlay wins per key. When both sides hold a mapping for the same key the
    merge recurses, so nested keys missing from the overlay keep their base
    values. Neither input is mutated.

    Args:
        base: Prior configuration, or None when there is none.
        overlay: Values that take precedence.

    Returns:
        New merged mapping.
    """
    merged: dict[str, Any] = _copy_mapping(base or {})
    for key, value in overlay.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = merge_config(current, value)
        elif isinstance(value, Mapping):
            merged[key] = _copy_mapping(value)
        else:
            merged[key] = value
    return merged


def write_dot_stencil(config_path: Path, payload: Mapping[str, Any]) -> Path:
    """Atomically persist the configuration as indented JSON.

    The file is created with owner-only permissions because it stores the
    store API token.

    Args:
        config_path: Target file path.
        payload: Configuration mapping to serialize.

    Returns:
        Path to the written file.

    Raises:
        ConfigWriteError: If the file cannot be written.
    """
    content = json.dumps(payload, indent=_JSON_INDENT) + "\n"
    target = config_path.expanduser()
    if target.is_dir():
        msg = f"{target} is a directory"
        raise ConfigWriteError(msg)

    try:
        temp_fd, temp_name = tempfile.mkstemp(dir=target.parent, prefix=f"{target.name}.", suffix=".tmp")
    except OSError as exc:
        msg = f"Unable to write {target.name}: {exc}"
        raise ConfigWriteError(msg) from exc

    try:
        with os.fdopen(temp_fd, "w", encoding="utf-8") as handle:
            handle.write(content)
        os.chmod(temp_name, _DOT_STENCIL_MODE)
        os.replace(temp_name, target)
    except OSError as exc:
        with contextlib.suppress(FileNotFoundError):
            os.unlink(temp_name)
        msg = f"Unable to write {target.name}: {exc}"
        raise ConfigWriteError(msg) from exc
    return target


def load_theme_config(theme_path: Path, *, settings: StencilSettings | None = None) -> ThemeConfig:
    """Read the theme's `config.json` from the provided theme directory.

    Args:
        theme_path: Theme root directory.
        settings: Tool settings naming the theme configuration file.

    Returns:
        Parsed ThemeConfig.

    Raises:
        ThemeConfigError: If the file is missing, malformed, or invalid.
    """
    resolved_settings = settings or StencilSettings()
    config_name = resolved_settings.theme_config_filename
    config_path = theme_path / config_name
    if not config_path.exists():
        msg = f"Missing {config_name} in {theme_path}"
        raise ThemeConfigError(msg)

    try:
        raw = _parse_json(config_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        msg = f"Unable to parse {config_name}: {exc.msg} (line {exc.lineno}, column {exc.colno})"
        raise ThemeConfigError(msg) from exc
    except ValueError as exc:
        msg = f"Unable to parse {config_name}: {exc}"
        raise ThemeConfigError(msg) from exc
    except OSError as exc:
        msg = f"Unable to read {config_name}: {exc}"
        raise ThemeConfigError(msg) from exc

    if not isinstance(raw, dict):
        msg = f"{config_name} must contain a JSON object"
        raise ThemeConfigError(msg)

    try:
        return ThemeConfig.model_validate(raw)
    except ValidationError as exc:
        msg = f"Invalid theme configuration in {config_name}: {exc}"
        raise ThemeConfigError(msg) from exc


def ensure_packages_path(theme_path: Path, theme_config: ThemeConfig, *, settings: StencilSettings | None = None) -> Path:
    """Return the jspm packages directory, verifying it exists.

    Args:
        theme_path: Theme root directory.
        theme_config: Parsed theme configuration with a `jspm` section.
        settings: Tool settings naming the theme configuration file.

    Returns:
        Path to the packages directory.

    Raises:
        PathConfigError: If the configured directory is missing.
    """
    if theme_config.jspm is None:
        msg = "Theme configuration does not declare a jspm section"
        raise ThemeConfigError(msg)

    config_name = (settings or StencilSettings()).theme_config_filename
    packages_path = theme_path / theme_config.jspm.jspm_packages_path
    if not packages_path.is_dir():
        msg = 'The path you specified for your "jspm_packages" folder does not exist.'
        raise PathConfigError(msg, setting="jspm.jspm_packages_path", config_file=config_name)
    return packages_path


def load_settings(env: EnvMapping | None = None, **overrides: Any) -> StencilSettings:
    """Build tool settings, applying environment overrides on top of defaults.

    Args:
        env: Environment mapping, defaults to `os.environ`.
        **overrides: Explicit settings that win over the environment.

    Returns:
        StencilSettings instance.

    Raises:
        ConfigError: If an override holds an invalid value.
    """
    try:
        base = StencilSettings(**overrides)
        env_mapping = os.environ if env is None else env
        env_overrides = _extract_env_overrides(env_mapping, base.env_prefix)
        if not env_overrides:
            return base
        return StencilSettings(**{**env_overrides, **overrides})
    except ValidationError as exc:
        msg = f"Invalid stencilctl settings: {exc}"
        raise ConfigError(msg) from exc


def _extract_env_overrides(env: EnvMapping, prefix: str) -> dict[str, Any]:
    """Return settings overrides sourced from environment variables."""
    upper_env = {key.upper(): value for key, value in env.items()}
    mapping: dict[str, str] = {
        f"{prefix}JSPM_COMMAND": "jspm_command",
        f"{prefix}BUNDLE_TIMEOUT": "bundle_timeout_seconds",
        f"{prefix}START_COMMAND": "start_command",
    }

    overrides: dict[str, Any] = {}
    for env_key, field_name in mapping.items():
        if env_key in upper_env:
            overrides[field_name] = upper_env[env_key].strip()
    return overrides


def _copy_mapping(value: Mapping[str, Any]) -> dict[str, Any]:
    """Return a recursive copy of nested mappings."""
    return {key: _copy_mapping(item) if isinstance(item, Mapping) else item for key, item in value.items()}


def _parse_json(raw_text: str) -> Any:
    """Parse strict JSON, rejecting the NaN and Infinity extensions."""
    return json.loads(raw_text, parse_constant=_reject_constant)


def _reject_constant(name: str) -> Any:
    """Refuse non-standard numeric constants."""
    msg = f"{name} is not valid JSON"
    raise ValueError(msg)
