"""Core data models for the stencilctl CLI."""

from __future__ import annotations

from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from stencilctl.validators import (
    validate_port,
    validate_store_url,
    validate_token,
    validate_username,
)

CUSTOM_LAYOUT_SECTIONS: Final[tuple[str, ...]] = ("products", "search", "brands", "categories")
DEFAULT_PORT: Final[int] = 3000
DEFAULT_BUNDLE_LOCATION: Final[str] = "assets/js/dependency-bundle.js"


def default_custom_layouts() -> dict[str, dict[str, Any]]:
    """Return the empty per-page layout override sections."""
    return {section: {} for section in CUSTOM_LAYOUT_SECTIONS}


class StoreAnswers(BaseModel):
    """Store connection details collected by the init wizard."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    normal_store_url: str = Field(alias="normalStoreUrl")
    port: int = DEFAULT_PORT
    username: str
    token: str

    @field_validator("normal_store_url")
    @classmethod
    def validate_url(cls, value: str) -> str:
        """Require an http:// or https:// store URL."""
        error = validate_store_url(value)
        if error is not None:
            raise ValueError(error)
        return value

    @field_validator("port", mode="before")
    @classmethod
    def validate_port_range(cls, value: Any) -> int:
        """Coerce the port to an integer inside the unprivileged range."""
        error = validate_port(value)
        if error is not None:
            raise ValueError(error)
        return int(str(value).strip())

    @field_validator("username", "token")
    @classmethod
    def validate_credentials(cls, value: str, info: ValidationInfo) -> str:
        """Reject blank credentials."""
        validator = validate_username if info.field_name == "username" else validate_token
        error = validator(value)
        if error is not None:
            raise ValueError(error)
        return value.strip()

    def to_payload(self) -> dict[str, Any]:
        """Return the answers keyed the way `.stencil` stores them."""
        return self.model_dump(by_alias=True)


class JspmDevSettings(BaseModel):
    """Development bundle settings from the theme's `jspm.dev` section."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="allow")

    bootstrap: str

    @field_validator("bootstrap")
    @classmethod
    def validate_bootstrap(cls, value: str) -> str:
        """Ensure the bootstrap module name is present."""
        normalized = value.strip()
        if not normalized:
            msg = "jspm.dev.bootstrap cannot be blank"
            raise ValueError(msg)
        return normalized


class JspmSettings(BaseModel):
    """Bundling section declared by a theme's `config.json`."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="allow")

    dev: JspmDevSettings
    jspm_packages_path: str
    bundle_location: str = DEFAULT_BUNDLE_LOCATION

    @field_validator("jspm_packages_path", "bundle_location")
    @classmethod
    def validate_paths(cls, value: str) -> str:
        """Reject blank relative paths."""
        normalized = value.strip()
        if not normalized:
            msg = "jspm paths cannot be blank"
            raise ValueError(msg)
        return normalized


class ThemeConfig(BaseModel):
    """Theme configuration read from `config.json`.

    Only the optional `jspm` section matters to the CLI; everything else in the
    file is retained as extra fields.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="allow")

    name: str | None = None
    version: str | None = None
    jspm: JspmSettings | None = None


class StencilSettings(BaseModel):
    """Tool configuration derived from environment variables or defaults."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    dot_stencil_filename: str = Field(default=".stencil")
    theme_config_filename: str = Field(default="config.json")
    jspm_command: str = Field(default="jspm")
    bundle_timeout_seconds: int = Field(default=300, ge=1, le=3600)
    start_command: str = Field(default="stencil start")
    env_prefix: str = Field(default="STENCILCTL_")

    @field_validator("dot_stencil_filename", "theme_config_filename", "jspm_command", "start_command")
    @classmethod
    def reject_blank(cls, value: str) -> str:
        """Trim string settings and reject blank values."""
        normalized = value.strip()
        if not normalized:
            msg = "Setting cannot be blank"
            raise ValueError(msg)
        return normalized

    @field_validator("env_prefix")
    @classmethod
    def normalize_prefix(cls, value: str) -> str:
        """Ensure environment prefixes are uppercase and suffixed with an underscore."""
        normalized = value.strip().upper()
        if not normalized:
            msg = "env_prefix cannot be blank"
            raise ValueError(msg)
        if not normalized.endswith("_"):
            normalized = f"{normalized}_"
        return normalized
