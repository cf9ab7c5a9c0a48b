"""Workflow result types and error normalization."""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from .exit_codes import ExitCode
from .validation import ValidationResult, validate_message


class MessageSource(str, Enum):
    """Where the final commit message came from."""

    MODEL = "model"
    REPAIRED = "repaired"


@dataclass(frozen=True)
class Candidate:
    """A single proposed commit message and its validation."""

    message: str
    source: MessageSource
    validation: ValidationResult

    @classmethod
    def build(cls, message: str, source: MessageSource) -> "Candidate":
        """Create a candidate, validating the message it carries."""
        return cls(message=message, source=source, validation=validate_message(message))


@dataclass(frozen=True)
class WorkflowSuccess:
    """Successful end of a workflow run."""

    message: str
    source: MessageSource
    committed: bool
    cancelled: bool = False

    ok = True
    exit_code = ExitCode.SUCCESS

    def to_payload(self) -> dict[str, Any]:
        return {
            "status": "ok",
            "message": self.message,
            "source": self.source.value,
            "committed": self.committed,
            "cancelled": self.cancelled,
        }


@dataclass(frozen=True)
class WorkflowFailure:
    """Failed end of a workflow run."""

    exit_code: ExitCode
    code: str
    message: str
    hint: str | None = None

    ok = False

    def to_payload(self) -> dict[str, Any]:
        return {
            "status": "error",
            "code": self.code,
            "message": self.message,
            "hint": self.hint,
        }


WorkflowResult = WorkflowSuccess | WorkflowFailure


class WorkflowError(Exception):
    """Expected workflow failure carrying its exit status and hint."""

    def __init__(self, exit_code: ExitCode, message: str, hint: str | None = None):
        super().__init__(message)
        self.exit_code = exit_code
        self.code = exit_code.label
        self.hint = hint

    def to_result(self) -> WorkflowFailure:
        return WorkflowFailure(
            exit_code=self.exit_code, code=self.code, message=str(self), hint=self.hint
        )


def normalize_error_message(error: object, fallback: str) -> str:
    """Produce a safe, non-empty message from any raised value."""
    if isinstance(error, BaseException) and str(error).strip():
        return str(error)
    if isinstance(error, str) and error.strip():
        return error
    return fallback
