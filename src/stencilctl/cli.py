"""Typer CLI application for stencilctl."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.markup import escape

from stencilctl import (
    BundleError,
    BundleOptions,
    ConfigError,
    PathConfigError,
    __version__,
    assemble,
    ensure_packages_path,
    load_settings,
    load_theme_config,
    write_dot_stencil,
)
from stencilctl._internal.commands.init_cmd import (
    build_merged_config,
    collect_answers,
    load_existing_config,
    ready_message,
    render_path_error,
)
from stencilctl._internal.state import CLIState, build_console
from stencilctl.models import StencilSettings

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    pretty_exceptions_enable=False,
    help="Configure local storefront theme development.",
)


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose console output."),
) -> None:
    """Parse global options and configure shared state.

    Args:
        ctx: Typer context that stores shared CLI state.
        verbose: Whether to enable verbose console logging.
    """
    _get_state(ctx, verbose=verbose)


@app.command()
def version(ctx: typer.Context) -> None:
    """Display the installed stencilctl version.

    Args:
        ctx: Typer context for the current invocation.
    """
    state = _ensure_state(ctx)
    state.console.print(f"[success]stencilctl {__version__}[/success]")


@app.command()
def init(
    ctx: typer.Context,
    theme_dir: Path = typer.Option(
        None,
        "--theme-dir",
        "-t",
        help="Theme directory to configure. Defaults to the current directory.",
        file_okay=False,
        exists=True,
    ),
    config_file: Path = typer.Option(
        None,
        "--config-file",
        "-c",
        help="Local configuration file to write. Defaults to .stencil in the theme directory.",
        dir_okay=False,
    ),
    no_bundle: bool = typer.Option(False, "--no-bundle", help="Skip bundling jspm dependencies."),
) -> None:
    """Run the interactive wizard that creates `.stencil`.

    Args:
        ctx: Typer context for the current invocation.
        theme_dir: Theme directory; the working directory when omitted.
        config_file: Override for the `.stencil` location.
        no_bundle: Whether to skip the dependency bundle step.
    """
    state = _ensure_state(ctx)
    console = state.console
    settings = state.settings

    theme_path = (theme_dir or Path.cwd()).resolve()
    config_path = config_file or theme_path / settings.dot_stencil_filename
    state.debug(f"Theme directory: {theme_path}")
    state.debug(f"Configuration file: {config_path}")

    try:
        existing_config = load_existing_config(config_path)
    except ConfigError as exc:
        _abort(state, str(exc))
        return

    if existing_config is not None:
        state.debug(f"Loaded {len(existing_config)} existing settings from {config_path.name}")

    answers = collect_answers(existing_config, console)
    merged = build_merged_config(existing_config, answers)

    try:
        written = write_dot_stencil(config_path, merged)
    except ConfigError as exc:
        _abort(state, str(exc))
        return
    console.print(f"[success]Saved {written.name}[/success]")

    ready = ready_message(settings.start_command)
    if no_bundle:
        console.print("[warning]Skipping dependency bundle because --no-bundle was provided.[/warning]")
        console.print(ready)
        return

    try:
        theme_config = load_theme_config(theme_path, settings=settings)
    except ConfigError as exc:
        _abort(state, str(exc))
        return

    if theme_config.jspm is None:
        state.debug("No jspm section declared; skipping dependency bundle")
        console.print(ready)
        return

    try:
        packages_path = ensure_packages_path(theme_path, theme_config, settings=settings)
    except PathConfigError as exc:
        render_path_error(console, exc)
        raise typer.Exit(code=1) from exc
    state.debug(f"Using jspm packages at {packages_path}")

    bundle_task = assemble(
        BundleOptions.from_settings(theme_config.jspm),
        theme_path,
        settings=settings,
        console=console,
    )
    try:
        bundle_path = bundle_task()
    except BundleError as exc:
        _abort(state, str(exc))
        return

    state.debug(f"Dependency bundle written to {bundle_path}")
    console.print(ready)


def _get_state(ctx: typer.Context, *, verbose: bool) -> CLIState:
    """Return the CLI state, creating or updating it as needed.

    Args:
        ctx: Typer context.
        verbose: Whether verbose logging is enabled.

    Returns:
        CLIState instance.
    """
    state = ctx.obj
    if not isinstance(state, CLIState):
        ctx.obj = state = CLIState(
            console=build_console(verbose),
            settings=_load_settings_or_default(),
            verbose=verbose,
        )
        return state

    state.console = build_console(verbose)
    state.verbose = verbose
    return state


def _load_settings_or_default() -> StencilSettings:
    """Return settings from the environment, aborting on invalid overrides."""
    try:
        return load_settings()
    except ConfigError as exc:
        console = build_console(verbose=False)
        console.print(f"[error]Error:[/error] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc


def _abort(state: CLIState, message: str, *, exit_code: int = 1) -> None:
    """Print a styled error message and exit the CLI.

    Args:
        state: CLI state.
        message: Error message to display.
        exit_code: Exit code to use.
    """
    state.console.print(f"[error]Error:[/error] {escape(message)}")
    raise typer.Exit(code=exit_code)


def _ensure_state(ctx: typer.Context) -> CLIState:
    """Return the CLI state, creating a minimal default if the callback was bypassed.

    Args:
        ctx: Typer context.

    Returns:
        CLIState instance.
    """
    state = ctx.obj
    if isinstance(state, CLIState):
        return state
    fallback_state = CLIState(
        console=build_console(verbose=False),
        settings=_load_settings_or_default(),
        verbose=False,
    )
    ctx.obj = fallback_state
    return fallback_state
