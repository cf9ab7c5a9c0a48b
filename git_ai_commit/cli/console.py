"""Console output formatting and user interaction."""

import json
import logging
from enum import Enum

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Prompt
from rich.status import Status
from rich.text import Text

from ..config.settings import OutputFormat
from ..core.results import Candidate, MessageSource, WorkflowFailure, WorkflowResult

console = Console()
error_console = Console(stderr=True)

# Set when stdout is reserved for the JSON result
_json_output = False


class Action(str, Enum):
    """Choices offered for a suggested commit message."""

    ACCEPT = "accept"
    EDIT = "edit"
    REGENERATE = "regenerate"
    DRY_RUN = "dry-run"
    CANCEL = "cancel"


def setup_logging(debug: bool = False) -> None:
    """Send log records to stderr through rich."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=error_console, show_path=debug)],
        force=True,
    )


def set_output_format(output: OutputFormat) -> None:
    """Route prompts and status lines to stderr when stdout carries JSON."""
    global _json_output
    _json_output = output is OutputFormat.JSON


def _ui_console() -> Console:
    return error_console if _json_output else console


def generating(model: str) -> Status:
    """Spinner shown while the model is working."""
    message = f"[bold blue]🤖 Generating commit message with {model}...[/bold blue]"
    return _ui_console().status(message)


def print_candidate(candidate: Candidate) -> None:
    """Print a suggested commit message."""
    if not candidate.validation.valid:
        print_warning(f"AI output validation failed: {candidate.validation.reason}")

    title = "Suggested commit message"
    if candidate.source is MessageSource.REPAIRED:
        title += " (repaired)"
    panel = Panel(Text(candidate.message), title=title, expand=False, border_style="green")
    _ui_console().print(panel)


def select_action() -> Action | None:
    """Ask what to do with the suggestion; None when the prompt is aborted."""
    try:
        answer = Prompt.ask(
            "\n[bold blue]What next?[/bold blue]",
            choices=[action.value for action in Action],
            default=Action.ACCEPT.value,
            console=_ui_console(),
        )
    except (KeyboardInterrupt, EOFError):
        return None
    return Action(answer)


def edit_message(message: str) -> str | None:
    """Open the message in the user's editor; None when nothing was saved."""
    try:
        edited = click.edit(message, require_save=True)
    except click.ClickException as e:
        print_error(f"Could not open editor: {e.format_message()}")
        return None
    if edited is None or not edited.strip():
        return None
    return edited


def print_result(result: WorkflowResult, output: OutputFormat) -> None:
    """Print the final outcome of a run."""
    if output is OutputFormat.JSON:
        click.echo(json.dumps(result.to_payload()))
        return

    if isinstance(result, WorkflowFailure):
        print_error(f"{result.code}: {result.message}")
        if result.hint:
            print_info(result.hint)
        return

    if result.cancelled:
        print_warning("Cancelled.")
    elif result.committed:
        print_success("Changes committed successfully!")
    else:
        console.print(Text(result.message))


def print_success(message: str) -> None:
    """Print success message."""
    _ui_console().print(f"\n[bold green]✅ {escape(message)}[/bold green]")


def print_error(message: str) -> None:
    """Print error message."""
    _ui_console().print(f"\n[bold red]❌ {escape(message)}[/bold red]")


def print_info(message: str) -> None:
    """Print info message."""
    _ui_console().print(f"\n[bold blue]ℹ️ {escape(message)}[/bold blue]")


def print_warning(message: str) -> None:
    """Print warning message."""
    _ui_console().print(f"\n[bold yellow]⚠️ {escape(message)}[/bold yellow]")
