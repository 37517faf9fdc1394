"""Init command implementation for interactive configuration setup."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import typer
from rich.console import Console

from stencilctl.config import (
    PathConfigError,
    apply_layout_defaults,
    merge_config,
    read_dot_stencil,
)
from stencilctl.models import DEFAULT_PORT, StoreAnswers
from stencilctl.validators import (
    validate_port,
    validate_store_url,
    validate_token,
    validate_username,
)

Validator = Callable[[Any], str | None]
PromptFn = Callable[..., Any]


@dataclass(frozen=True, slots=True)
class Question:
    """A single wizard question.

    Attributes:
        key: Key the answer is stored under in `.stencil`.
        message: Prompt text shown to the user.
        validate: Returns an error message for invalid answers, otherwise None.
        default: Value used when the user submits an empty answer.
    """

    key: str
    message: str
    validate: Validator
    default: Any = None


def load_existing_config(config_path: Path) -> dict[str, Any] | None:
    """Return the prior `.stencil` contents used for defaults and merging.

    Args:
        config_path: Location of the local configuration file.

    Returns:
        Parsed mapping or None if the file does not exist.

    Raises:
        ConfigParseError: If the file exists but cannot be parsed.
        ConfigError: If the file exists but cannot be read.
    """
    return read_dot_stencil(config_path)


def build_questions(existing: Mapping[str, Any] | None) -> list[Question]:
    """Return the ordered store connection questions.

    Args:
        existing: Prior configuration supplying default answers.

    Returns:
        Questions for store URL, port, username, and token.
    """
    prior = existing or {}
    return [
        Question(
            key="normalStoreUrl",
            message="What is the URL of your store's home page?",
            validate=validate_store_url,
            default=prior.get("normalStoreUrl") or None,
        ),
        Question(
            key="port",
            message="What port would you like to run the server on?",
            validate=validate_port,
            default=prior.get("port") or DEFAULT_PORT,
        ),
        Question(
            key="username",
            message="What is your Stencil Username?",
            validate=validate_username,
            default=prior.get("username") or None,
        ),
        Question(
            key="token",
            message="What is your Stencil Token?",
            validate=validate_token,
            default=prior.get("token") or None,
        ),
    ]


def ask_questions(
    questions: Sequence[Question],
    console: Console,
    *,
    prompt: PromptFn = typer.prompt,
) -> dict[str, Any]:
    """Ask each question in order, re-asking until its validator passes.

    Args:
        questions: Questions to ask.
        console: Rich console for validation messages.
        prompt: Prompt function with the `typer.prompt` signature.

    Returns:
        Mapping of question key to the accepted answer.
    """
    answers: dict[str, Any] = {}
    for question in questions:
        while True:
            if question.default is not None:
                value = prompt(question.message, default=str(question.default))
            else:
                value = prompt(question.message)
            normalized = value.strip() if isinstance(value, str) else value
            error = question.validate(normalized)
            if error is None:
                answers[question.key] = normalized
                break
            console.print(f"[warning]>> {error}[/warning]")
    return answers


def collect_answers(
    existing: Mapping[str, Any] | None,
    console: Console,
    *,
    prompt: PromptFn = typer.prompt,
) -> StoreAnswers:
    """Prompt for the store connection details and return them typed.

    Args:
        existing: Prior configuration supplying default answers.
        console: Rich console for validation messages.
        prompt: Prompt function with the `typer.prompt` signature.

    Returns:
        Validated StoreAnswers.
    """
    raw_answers = ask_questions(build_questions(existing), console, prompt=prompt)
    return StoreAnswers.model_validate(raw_answers)


def build_merged_config(existing: Mapping[str, Any] | None, answers: StoreAnswers) -> dict[str, Any]:
    """Combine prior configuration and fresh answers into the payload to persist.

    Args:
        existing: Prior configuration, if any.
        answers: Answers collected by the wizard.

    Returns:
        Merged configuration mapping.
    """
    overlay = apply_layout_defaults(existing, answers.to_payload())
    return merge_config(existing, overlay)


def render_path_error(console: Console, error: PathConfigError) -> None:
    """Print the packages-path error with the setting the user should check.

    Args:
        console: Rich console for output.
        error: Raised path configuration error.
    """
    console.print(f"[error]Error: {error}[/error]")
    console.print(
        f"[error]Please check your[/error] [info]{error.setting}[/info] "
        f"[error]setting in your theme's[/error] [info]{error.config_file}[/info] "
        "[error]file to make sure it's correct.[/error]"
    )


def ready_message(start_command: str) -> str:
    """Return the message shown once the theme is ready for development."""
    return f"You are now ready to go! To start developing, run $ {start_command}"
