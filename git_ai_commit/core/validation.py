"""Conventional Commits grammar and message validation."""

import re
from dataclasses import dataclass
from enum import Enum


class CommitType(str, Enum):
    """Commit types accepted in a Conventional Commits subject."""

    FEAT = "feat"
    FIX = "fix"
    CHORE = "chore"
    REFACTOR = "refactor"
    DOCS = "docs"
    TEST = "test"
    PERF = "perf"
    BUILD = "build"
    CI = "ci"

    def __str__(self) -> str:
        return self.value


ALLOWED_TYPES: tuple[str, ...] = tuple(t.value for t in CommitType)

MAX_SUBJECT_LENGTH = 72

SUBJECT_PATTERN = re.compile(r"^([a-z]+)(\([^)]+\))?!?:\s(.+)$")
_TRAILING_WHITESPACE = re.compile(r"[ \t]+$")


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating a commit message."""

    valid: bool
    reason: str | None = None

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(valid=True)

    @classmethod
    def fail(cls, reason: str) -> "ValidationResult":
        return cls(valid=False, reason=reason)


def is_allowed_type(value: str | None) -> bool:
    """Check whether a string is one of the allowed commit types."""
    return value in ALLOWED_TYPES


def normalize_message(text: str | None) -> str:
    """
    Normalize line endings and surrounding whitespace of a message.

    Line endings become ``\\n``, trailing spaces and tabs are removed from
    every line, and blank lines at both ends are dropped.
    """
    unified = (text or "").replace("\r\n", "\n").replace("\r", "\n")
    lines = [_TRAILING_WHITESPACE.sub("", line) for line in unified.split("\n")]

    while lines and lines[0] == "":
        lines.pop(0)
    while lines and lines[-1] == "":
        lines.pop()

    return "\n".join(lines)


def validate_message(message: str | None) -> ValidationResult:
    """
    Validate a commit message against the Conventional Commits grammar.

    Args:
        message: Candidate commit message, possibly with a body

    Returns:
        ValidationResult with the first failing rule as reason
    """
    normalized = normalize_message(message)
    if not normalized:
        return ValidationResult.fail("Message is empty")
    if "```" in normalized:
        return ValidationResult.fail("No markdown/code fences")

    subject = normalized.split("\n")[0].strip()
    if not subject:
        return ValidationResult.fail("Subject line is empty")
    if len(subject) > MAX_SUBJECT_LENGTH:
        return ValidationResult.fail(f"Subject line > {MAX_SUBJECT_LENGTH} chars")
    if subject.endswith("."):
        return ValidationResult.fail("Subject should not end with a period")

    match = SUBJECT_PATTERN.match(subject)
    if match is None:
        return ValidationResult.fail("Not Conventional Commits format")

    if not is_allowed_type(match.group(1)):
        return ValidationResult.fail(f"Type must be one of: {', '.join(ALLOWED_TYPES)}")

    return ValidationResult.ok()
