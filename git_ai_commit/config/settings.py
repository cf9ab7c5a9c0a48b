"""Configuration settings for git-ai-commit."""

from dataclasses import dataclass
from enum import Enum

from dotenv import find_dotenv, load_dotenv

from ..core.validation import ALLOWED_TYPES, CommitType

DEFAULT_MODEL = "llama3"
DEFAULT_HOST = "http://localhost:11434"
DEFAULT_MAX_CHARS = 16000
DEFAULT_TIMEOUT_MS = 60000
DEFAULT_RETRIES = 2

MAX_CHARS_BOUNDS = (500, 200_000)
TIMEOUT_MS_BOUNDS = (1000, 300_000)
RETRIES_BOUNDS = (0, 5)

# Model readiness checks never wait longer than this
READINESS_TIMEOUT_MS = 10_000


class ConfigError(ValueError):
    """Invalid command line or environment configuration."""

    pass


class OutputFormat(str, Enum):
    """How the final result is printed."""

    TEXT = "text"
    JSON = "json"


def load_environment() -> None:
    """Load a ``.env`` file from the working directory, if any."""
    load_dotenv(dotenv_path=find_dotenv(usecwd=True))


def parse_bounded_integer(value: str | int, name: str, minimum: int, maximum: int) -> int:
    """
    Parse an integer option and check it lies within bounds.

    Args:
        value: Raw option value
        name: Option name used in error messages
        minimum: Smallest accepted value
        maximum: Largest accepted value

    Returns:
        The parsed integer

    Raises:
        ConfigError: If the value is not a number or out of range
    """
    try:
        parsed = int(str(value).strip())
    except ValueError:
        raise ConfigError(f"{name} must be a number.")

    if parsed < minimum or parsed > maximum:
        raise ConfigError(f"{name} must be between {minimum} and {maximum}.")

    return parsed


def parse_commit_type(value: str | None) -> CommitType | None:
    if not value:
        return None
    try:
        return CommitType(value.strip().lower())
    except ValueError:
        raise ConfigError(f"Invalid --type. Must be one of: {', '.join(ALLOWED_TYPES)}")


def parse_output_format(value: str | None) -> OutputFormat:
    try:
        return OutputFormat((value or OutputFormat.TEXT.value).strip().lower())
    except ValueError:
        raise ConfigError("Invalid --output. Must be one of: text, json")


@dataclass(frozen=True)
class WorkflowOptions:
    """Settings for one invocation, fixed once parsed."""

    model: str = DEFAULT_MODEL
    host: str = DEFAULT_HOST
    max_chars: int = DEFAULT_MAX_CHARS
    commit_type: CommitType | None = None
    scope: str | None = None
    dry_run: bool = False
    no_verify: bool = False
    ci: bool = False
    allow_invalid: bool = False
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    retries: int = DEFAULT_RETRIES
    output: OutputFormat = OutputFormat.TEXT

    @property
    def interactive(self) -> bool:
        return not (self.ci or self.dry_run)

    @property
    def readiness_timeout_ms(self) -> int:
        return min(self.timeout_ms, READINESS_TIMEOUT_MS)

    @classmethod
    def from_raw(
        cls,
        model: str | None = DEFAULT_MODEL,
        host: str | None = DEFAULT_HOST,
        max_chars: str | int = DEFAULT_MAX_CHARS,
        commit_type: str | None = None,
        scope: str | None = None,
        dry_run: bool = False,
        no_verify: bool = False,
        ci: bool = False,
        allow_invalid: bool = False,
        timeout_ms: str | int = DEFAULT_TIMEOUT_MS,
        retries: str | int = DEFAULT_RETRIES,
        output: str | None = None,
    ) -> "WorkflowOptions":
        """Validate raw option values and build the options snapshot."""
        model = (model or "").strip()
        if not model:
            raise ConfigError("--model must not be empty.")

        host = (host or "").strip()
        if not host:
            raise ConfigError("--host must not be empty.")
        # OLLAMA_HOST is commonly set as a bare "host:port"
        if "://" not in host:
            host = f"http://{host}"
        elif not host.startswith(("http://", "https://")):
            raise ConfigError("--host must be an http(s) URL.")

        return cls(
            model=model,
            host=host,
            max_chars=parse_bounded_integer(max_chars, "--max-chars", *MAX_CHARS_BOUNDS),
            commit_type=parse_commit_type(commit_type),
            scope=(scope or "").strip() or None,
            dry_run=dry_run,
            no_verify=no_verify,
            ci=ci,
            allow_invalid=allow_invalid,
            timeout_ms=parse_bounded_integer(timeout_ms, "--timeout-ms", *TIMEOUT_MS_BOUNDS),
            retries=parse_bounded_integer(retries, "--retries", *RETRIES_BOUNDS),
            output=parse_output_format(output),
        )
