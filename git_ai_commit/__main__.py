#!/usr/bin/env python3
"""Entry point for running git-ai-commit as a module."""

import sys
from typing import NoReturn

import click

from .config.settings import (
    DEFAULT_HOST,
    DEFAULT_MAX_CHARS,
    DEFAULT_MODEL,
    DEFAULT_RETRIES,
    DEFAULT_TIMEOUT_MS,
    ConfigError,
    OutputFormat,
    WorkflowOptions,
    load_environment,
)
from .core.exit_codes import ExitCode
from .core.results import WorkflowFailure
from .core.validation import ALLOWED_TYPES
from .cli import console
from .cli.cli_handler import GitAICommit

# Load environment variables before options are resolved
load_environment()


def handle_usage_error(message: str, output: str | None) -> NoReturn:
    """Report a configuration error and exit with the usage status."""
    result = WorkflowFailure(
        exit_code=ExitCode.USAGE_ERROR,
        code=ExitCode.USAGE_ERROR.label,
        message=message,
        hint="Run git-ai-commit --help for the accepted options.",
    )
    fmt = OutputFormat.JSON if (output or "").strip().lower() == "json" else OutputFormat.TEXT
    console.print_result(result, fmt)
    sys.exit(int(ExitCode.USAGE_ERROR))


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "-m", "--model", envvar="GIT_AI_COMMIT_MODEL", default=DEFAULT_MODEL, show_default=True,
    help="Ollama model name",
)
@click.option(
    "--host", envvar="OLLAMA_HOST", default=DEFAULT_HOST, show_default=True, help="Ollama host URL"
)
@click.option(
    "--max-chars", envvar="GIT_AI_COMMIT_MAX_CHARS", default=str(DEFAULT_MAX_CHARS),
    show_default=True, help="Max diff characters sent to the model (500-200000)",
)
@click.option("--type", "commit_type", help=f"Force commit type ({'|'.join(ALLOWED_TYPES)})")
@click.option("--scope", help="Optional scope, e.g. api, infra")
@click.option("--dry-run", is_flag=True, help="Print the message only, do not commit")
@click.option("--no-verify", is_flag=True, help="Pass --no-verify to git commit")
@click.option("--ci", is_flag=True, help="Non-interactive: commit or fail without prompting")
@click.option("--allow-invalid", is_flag=True, help="Allow a message that fails validation")
@click.option(
    "--timeout-ms", envvar="GIT_AI_COMMIT_TIMEOUT_MS", default=str(DEFAULT_TIMEOUT_MS),
    show_default=True, help="Model request timeout in milliseconds (1000-300000)",
)
@click.option(
    "--retries", envvar="GIT_AI_COMMIT_RETRIES", default=str(DEFAULT_RETRIES),
    show_default=True, help="Retries on transient model errors (0-5)",
)
@click.option(
    "--output", envvar="GIT_AI_COMMIT_OUTPUT", default=OutputFormat.TEXT.value,
    show_default=True, help="Output format (text|json)",
)
@click.option("-d", "--debug", is_flag=True, help="Enable debug logging")
def main(
    model: str,
    host: str,
    max_chars: str,
    commit_type: str | None,
    scope: str | None,
    dry_run: bool,
    no_verify: bool,
    ci: bool,
    allow_invalid: bool,
    timeout_ms: str,
    retries: str,
    output: str,
    debug: bool,
) -> None:
    """Generate a Conventional Commit message from staged changes using local Ollama."""
    console.setup_logging(debug)

    try:
        options = WorkflowOptions.from_raw(
            model=model,
            host=host,
            max_chars=max_chars,
            commit_type=commit_type,
            scope=scope,
            dry_run=dry_run,
            no_verify=no_verify,
            ci=ci,
            allow_invalid=allow_invalid,
            timeout_ms=timeout_ms,
            retries=retries,
            output=output,
        )
    except ConfigError as e:
        handle_usage_error(str(e), output)

    console.set_output_format(options.output)
    result = GitAICommit().run(options)
    console.print_result(result, options.output)
    sys.exit(int(result.exit_code))


def run() -> None:
    """Console script entry point; click usage errors exit with the usage status."""
    try:
        main.main(standalone_mode=False)
    except click.ClickException as e:
        e.show()
        sys.exit(int(ExitCode.USAGE_ERROR))
    except click.Abort:
        console.print_error("Operation cancelled by user.")
        sys.exit(1)


if __name__ == "__main__":
    run()
