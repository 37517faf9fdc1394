"""jspm dependency bundling for theme development."""

from __future__ import annotations

import shutil
import subprocess
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from stencilctl.models import DEFAULT_BUNDLE_LOCATION, JspmSettings, StencilSettings

BundleTask = Callable[[], Path]


class BundleError(RuntimeError):
    """Raised when the dependency bundle cannot be built."""


@dataclass(frozen=True, slots=True)
class BundleOptions:
    """Inputs for a development dependency bundle.

    Attributes:
        bootstrap: Module that boots the theme's JavaScript.
        bundle_location: Output file relative to the theme root.
    """

    bootstrap: str
    bundle_location: str = DEFAULT_BUNDLE_LOCATION

    @classmethod
    def from_settings(cls, jspm: JspmSettings) -> BundleOptions:
        """Build options from the theme's `jspm` section."""
        return cls(bootstrap=jspm.dev.bootstrap, bundle_location=jspm.bundle_location)

    @property
    def expression(self) -> str:
        """Return the jspm arithmetic expression bundling only third-party modules."""
        return f"{self.bootstrap} - [{self.bootstrap}/**/*]"


def assemble(
    options: BundleOptions,
    theme_path: Path,
    *,
    settings: StencilSettings | None = None,
    console: Console | None = None,
) -> BundleTask:
    """Return a task that bundles the theme's jspm dependencies when called.

    Args:
        options: Bootstrap module and output location.
        theme_path: Theme root directory the bundle runs in.
        settings: Tool settings naming the jspm command and timeout.
        console: Optional Rich console used for progress reporting.

    Returns:
        Callable that runs the bundle and returns the bundle path on completion.
    """
    resolved_settings = settings or StencilSettings()

    def run_bundle() -> Path:
        console_to_use = console or Console()
        command = build_bundle_command(options, theme_path, settings=resolved_settings)
        target = theme_path / options.bundle_location
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            msg = f"Unable to create the bundle directory {target.parent}: {exc}"
            raise BundleError(msg) from exc

        progress_columns = (
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            TimeElapsedColumn(),
        )
        with Progress(*progress_columns, console=console_to_use, transient=True) as progress:
            task_id = progress.add_task("Bundling theme dependencies", start=True)
            try:
                _run_bundle_command(command, theme_path, timeout=resolved_settings.bundle_timeout_seconds)
            finally:
                progress.update(task_id, completed=1)
        return target

    return run_bundle


def build_bundle_command(options: BundleOptions, theme_path: Path, *, settings: StencilSettings) -> list[str]:
    """Return the jspm command line that produces the dependency bundle.

    Raises:
        BundleError: If no jspm executable can be found.
    """
    executable = resolve_jspm_executable(theme_path, settings.jspm_command)
    return [executable, "bundle", options.expression, options.bundle_location]


def resolve_jspm_executable(theme_path: Path, command: str) -> str:
    """Locate the jspm executable on PATH or in the theme's node_modules.

    Args:
        theme_path: Theme root directory.
        command: Command name or path configured for jspm.

    Returns:
        Executable path.

    Raises:
        BundleError: If the executable cannot be found.
    """
    found = shutil.which(command)
    if found is not None:
        return found

    local = theme_path / "node_modules" / ".bin" / command
    if local.exists():
        return str(local)

    msg = f"Unable to find the '{command}' executable. Install jspm or run `npm install` in the theme."
    raise BundleError(msg)


def _run_bundle_command(command: list[str], theme_path: Path, *, timeout: int) -> None:
    """Execute the bundle command inside the theme directory.

    Raises:
        BundleError: If the command fails or exceeds the timeout.
    """
    try:
        subprocess.run(command, cwd=theme_path, check=True, capture_output=True, text=True, timeout=timeout)
    except subprocess.TimeoutExpired as exc:
        msg = f"Bundling timed out after {timeout} seconds"
        raise BundleError(msg) from exc
    except subprocess.CalledProcessError as exc:
        details = (exc.stderr or exc.stdout or "").strip()
        msg = f"Bundling failed with exit code {exc.returncode}"
        if details:
            msg = f"{msg}: {details}"
        raise BundleError(msg) from exc
    except OSError as exc:
        msg = f"Unable to run {' '.join(command)}: {exc}"
        raise BundleError(msg) from exc
