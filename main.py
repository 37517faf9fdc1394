"""Temporary CLI entrypoint used during early development."""

from __future__ import annotations

from stencilctl.cli import app


def main() -> None:
    """Run the stencilctl CLI."""
    app()


if __name__ == "__main__":
    main()
