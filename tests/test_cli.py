"""Integration tests for the Typer CLI entrypoint."""

from __future__ import annotations

import json
from pathlib import Path

from pytest_mock import MockerFixture
from typer.testing import CliRunner

from stencilctl import __version__
from stencilctl.bundler import BundleError
from stencilctl.cli import app

from .payloads import DotStencilPayload, ThemeConfigPayload

_READY = "You are now ready to go! To start developing, run $ stencil start"
_EMPTY_LAYOUTS = {"products": {}, "search": {}, "brands": {}, "categories": {}}


def _answers(*values: str) -> str:
    return "\n".join(values) + "\n"


def _write_theme_config(root: Path, payload: dict[str, object] | ThemeConfigPayload | None = None) -> None:
    """Write a theme config.json into the provided directory."""
    (root / "config.json").write_text(
        json.dumps(payload or {"name": "Cornerstone", "version": "1.0.0"}),
        encoding="utf-8",
    )


def test_version_command_prints_version() -> None:
    """`stencilctl version` should display the package version."""
    runner = CliRunner()

    result = runner.invoke(app, ["version"], catch_exceptions=False)

    assert result.exit_code == 0
    assert __version__ in result.stdout


def test_init_creates_config_with_layout_defaults() -> None:
    """A fresh run should write the answers plus empty layout sections."""
    runner = CliRunner()
    with runner.isolated_filesystem():
        _write_theme_config(Path())

        result = runner.invoke(
            app,
            ["init"],
            input=_answers("https://store.example.com", "", "merchant", "secret"),
            catch_exceptions=False,
        )

        assert result.exit_code == 0
        payload = json.loads(Path(".stencil").read_text(encoding="utf-8"))
        assert payload == {
            "normalStoreUrl": "https://store.example.com",
            "port": 3000,
            "username": "merchant",
            "token": "secret",
            "customLayouts": _EMPTY_LAYOUTS,
        }
        assert Path(".stencil").read_text(encoding="utf-8").startswith('{\n  "normalStoreUrl"')
        assert _READY in result.stdout


def test_init_merges_answers_over_existing_config(dot_stencil_payload: DotStencilPayload) -> None:
    """Prior keys survive and existing layouts are never replaced."""
    runner = CliRunner()
    with runner.isolated_filesystem():
        _write_theme_config(Path())
        layouts = {"products": {"shirt": "custom.html"}, "search": {}, "brands": {}, "categories": {}}
        prior = {**dot_stencil_payload, "customLayouts": layouts, "apiHost": "https://api.example.com"}
        Path(".stencil").write_text(json.dumps(prior), encoding="utf-8")

        result = runner.invoke(
            app,
            ["init"],
            input=_answers("", "3005", "", "new-token"),
            catch_exceptions=False,
        )

        assert result.exit_code == 0
        payload = json.loads(Path(".stencil").read_text(encoding="utf-8"))
        assert payload["normalStoreUrl"] == "https://old-store.example.com"
        assert payload["port"] == 3005
        assert payload["username"] == "old-user"
        assert payload["token"] == "new-token"
        assert payload["customLayouts"] == layouts
        assert payload["apiHost"] == "https://api.example.com"


def test_init_reasks_invalid_answers() -> None:
    """Invalid answers should be rejected with the validator message."""
    runner = CliRunner()
    with runner.isolated_filesystem():
        _write_theme_config(Path())

        result = runner.invoke(
            app,
            ["init"],
            input=_answers("ftp://store", "http://store", "1024", "65535", "merchant", "secret"),
            catch_exceptions=False,
        )

        assert result.exit_code == 0
        assert "You must enter a URL" in result.stdout
        assert "The port number must be between 1025 and 65535" in result.stdout
        payload = json.loads(Path(".stencil").read_text(encoding="utf-8"))
        assert payload["normalStoreUrl"] == "http://store"
        assert payload["port"] == 65535


def test_init_aborts_on_malformed_config_without_prompting() -> None:
    """A malformed .stencil should be reported and left untouched."""
    runner = CliRunner()
    with runner.isolated_filesystem():
        _write_theme_config(Path())
        original = b'{"port": 3000,,}'
        Path(".stencil").write_bytes(original)

        result = runner.invoke(app, ["init"], input=_answers("https://x", "", "u", "t"), catch_exceptions=False)

        assert result.exit_code == 1
        assert "Unable to parse .stencil" in result.stdout
        assert "What is the URL" not in result.stdout
        assert Path(".stencil").read_bytes() == original


def test_init_reports_missing_packages_path_without_bundling(
    mocker: MockerFixture, theme_config_payload: ThemeConfigPayload
) -> None:
    """The config is written but bundling is skipped when jspm_packages is missing."""
    runner = CliRunner()
    with runner.isolated_filesystem():
        _write_theme_config(Path(), theme_config_payload)
        assemble_mock = mocker.patch("stencilctl.cli.assemble")

        result = runner.invoke(
            app,
            ["init"],
            input=_answers("https://store.example.com", "", "merchant", "secret"),
            catch_exceptions=False,
        )

        assert result.exit_code == 1
        assert Path(".stencil").exists()
        assert 'The path you specified for your "jspm_packages" folder does not exist.' in result.stdout
        assert "jspm.jspm_packages_path" in result.stdout
        assert "config.json" in result.stdout
        assert _READY not in result.stdout
        assemble_mock.assert_not_called()


def test_init_bundles_dependencies_before_ready_message(
    mocker: MockerFixture, theme_config_payload: ThemeConfigPayload
) -> None:
    """With a jspm section the bundle task runs and completion prints the ready message."""
    runner = CliRunner()
    with runner.isolated_filesystem():
        theme_root = Path().resolve()
        _write_theme_config(theme_root, theme_config_payload)
        (theme_root / "assets" / "jspm_packages").mkdir(parents=True)
        bundle_task = mocker.Mock(return_value=theme_root / "assets" / "js" / "dependency-bundle.js")
        assemble_mock = mocker.patch("stencilctl.cli.assemble", return_value=bundle_task)

        result = runner.invoke(
            app,
            ["init"],
            input=_answers("https://store.example.com", "", "merchant", "secret"),
            catch_exceptions=False,
        )

        assert result.exit_code == 0
        options, path = assemble_mock.call_args.args
        assert options.bootstrap == "js/app"
        assert path == theme_root
        bundle_task.assert_called_once_with()
        assert _READY in result.stdout


def test_init_surfaces_bundle_errors(mocker: MockerFixture, theme_config_payload: ThemeConfigPayload) -> None:
    """Bundle failures should abort with a styled error after the config is saved."""
    runner = CliRunner()
    with runner.isolated_filesystem():
        _write_theme_config(Path(), theme_config_payload)
        Path("assets/jspm_packages").mkdir(parents=True)
        mocker.patch("stencilctl.cli.assemble", return_value=mocker.Mock(side_effect=BundleError("jspm exploded")))

        result = runner.invoke(
            app,
            ["init"],
            input=_answers("https://store.example.com", "", "merchant", "secret"),
            catch_exceptions=False,
        )

        assert result.exit_code == 1
        assert "jspm exploded" in result.stdout
        assert Path(".stencil").exists()
        assert _READY not in result.stdout


def test_init_no_bundle_skips_theme_config(mocker: MockerFixture) -> None:
    """--no-bundle should finish without reading config.json or bundling."""
    runner = CliRunner()
    with runner.isolated_filesystem():
        assemble_mock = mocker.patch("stencilctl.cli.assemble")

        result = runner.invoke(
            app,
            ["init", "--no-bundle"],
            input=_answers("https://store.example.com", "", "merchant", "secret"),
            catch_exceptions=False,
        )

        assert result.exit_code == 0
        assert Path(".stencil").exists()
        assert _READY in result.stdout
        assemble_mock.assert_not_called()


def test_init_accepts_theme_dir_and_config_file(tmp_path: Path) -> None:
    """Explicit paths should be used instead of the working directory."""
    runner = CliRunner()
    theme_root = tmp_path / "theme"
    theme_root.mkdir()
    _write_theme_config(theme_root)
    config_path = tmp_path / "custom.stencil"

    result = runner.invoke(
        app,
        ["init", "--theme-dir", str(theme_root), "--config-file", str(config_path)],
        input=_answers("https://store.example.com", "", "merchant", "secret"),
        catch_exceptions=False,
    )

    assert result.exit_code == 0
    assert json.loads(config_path.read_text(encoding="utf-8"))["username"] == "merchant"
    assert not (theme_root / ".stencil").exists()


def test_init_reports_missing_theme_config() -> None:
    """Without a config.json the run stops after saving the answers."""
    runner = CliRunner()
    with runner.isolated_filesystem():
        result = runner.invoke(
            app,
            ["init"],
            input=_answers("https://store.example.com", "", "merchant", "secret"),
            catch_exceptions=False,
        )

        assert result.exit_code == 1
        assert Path(".stencil").exists()
        assert "Missing config.json" in result.stdout


def test_verbose_flag_logs_paths() -> None:
    """--verbose should emit diagnostic lines."""
    runner = CliRunner()
    with runner.isolated_filesystem():
        _write_theme_config(Path())

        result = runner.invoke(
            app,
            ["--verbose", "init"],
            input=_answers("https://store.example.com", "", "merchant", "secret"),
            catch_exceptions=False,
        )

        assert result.exit_code == 0
        assert "Theme directory:" in result.stdout
        assert "No jspm section declared" in result.stdout


def test_init_reinitializes_null_custom_layouts(dot_stencil_payload: DotStencilPayload) -> None:
    """A null customLayouts in the prior file should be replaced with empty sections."""
    runner = CliRunner()
    with runner.isolated_filesystem():
        _write_theme_config(Path())
        Path(".stencil").write_text(json.dumps({**dot_stencil_payload, "customLayouts": None}), encoding="utf-8")

        result = runner.invoke(app, ["init"], input=_answers("", "", "", ""), catch_exceptions=False)

        assert result.exit_code == 0
        payload = json.loads(Path(".stencil").read_text(encoding="utf-8"))
        assert payload["customLayouts"] == _EMPTY_LAYOUTS


def test_init_aborts_on_undecodable_config_without_prompting() -> None:
    """A .stencil that is not UTF-8 should be reported and left untouched."""
    runner = CliRunner()
    with runner.isolated_filesystem():
        _write_theme_config(Path())
        original = b'{"username": "\xff\xfe"}'
        Path(".stencil").write_bytes(original)

        result = runner.invoke(app, ["init"], input=_answers("https://x", "", "u", "t"), catch_exceptions=False)

        assert result.exit_code == 1
        assert "Unable to parse .stencil" in result.stdout
        assert "What is the URL" not in result.stdout
        assert Path(".stencil").read_bytes() == original


def test_init_reports_unreadable_config_path() -> None:
    """A directory at the .stencil path should abort with a styled error."""
    runner = CliRunner()
    with runner.isolated_filesystem():
        _write_theme_config(Path())
        Path(".stencil").mkdir()

        result = runner.invoke(app, ["init"], input=_answers("https://x", "", "u", "t"), catch_exceptions=False)

        assert result.exit_code == 1
        assert "Unable to read .stencil" in result.stdout
        assert "What is the URL" not in result.stdout
