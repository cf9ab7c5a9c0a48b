"""Deterministic repair of malformed commit messages."""

import logging
import re
from dataclasses import dataclass

from .analyzer import infer_type_from_diff
from .extractor import strip_code_fence
from .validation import CommitType, is_allowed_type, normalize_message

logger = logging.getLogger(__name__)

FALLBACK_DESCRIPTION = "update project files"

TYPED_SUBJECT_PATTERN = re.compile(r"^([A-Za-z]+)(?:\(([^)]+)\))?(!)?:\s*(.+)$")
LOOSE_SUBJECT_PATTERN = re.compile(r"^([A-Za-z]+)\s*[-:]\s*(.+)$")
_WRAPPING_QUOTES = re.compile(r"^[\"'`]+|[\"'`]+$")
_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class RepairResult:
    """Repaired message and whether anything changed."""

    message: str
    did_repair: bool


@dataclass(frozen=True)
class _ParsedSubject:
    commit_type: str | None
    scope: str | None
    description: str
    breaking: bool = False


def normalize_scope(scope: str | None) -> str | None:
    """Turn a user supplied scope into a compact, parenthesis-free token."""
    if not scope:
        return None
    compact = _WHITESPACE.sub("-", scope.strip()).replace("(", "").replace(")", "")
    return compact or None


def normalize_description(description: str) -> str:
    cleaned = description.strip()
    if cleaned.endswith("."):
        cleaned = cleaned[:-1]
    cleaned = _WHITESPACE.sub(" ", cleaned).strip()
    return cleaned or FALLBACK_DESCRIPTION


def _parse_subject(subject: str) -> _ParsedSubject:
    typed = TYPED_SUBJECT_PATTERN.match(subject)
    if typed:
        commit_type = typed.group(1).lower()
        scope = typed.group(2).strip() if typed.group(2) else None
        return _ParsedSubject(
            commit_type=commit_type if is_allowed_type(commit_type) else None,
            scope=scope,
            description=typed.group(4).strip(),
            breaking=bool(typed.group(3)),
        )

    loose = LOOSE_SUBJECT_PATTERN.match(subject)
    if loose and is_allowed_type(loose.group(1).lower()):
        return _ParsedSubject(
            commit_type=loose.group(1).lower(),
            scope=None,
            description=loose.group(2).strip(),
        )

    return _ParsedSubject(commit_type=None, scope=None, description=subject)


def repair_message(
    message: str,
    diff: str = "",
    forced_type: CommitType | str | None = None,
    scope: str | None = None,
) -> RepairResult:
    """
    Rewrite a candidate message into Conventional Commits form.

    Type precedence is forced type, then the type found in the subject, then
    the type inferred from the diff. An explicit scope replaces any scope
    found in the subject. The body is kept as is. Repair is best effort: a
    message for which no type can be determined stays untyped.

    Args:
        message: Candidate message, possibly fenced
        diff: Staged diff used for type inference
        forced_type: Type that overrides everything else
        scope: Scope that overrides a detected one

    Returns:
        RepairResult with the rewritten message
    """
    original = normalize_message(strip_code_fence(message))
    if not original:
        return RepairResult(message=original, did_repair=False)

    lines = original.split("\n")
    subject = _WRAPPING_QUOTES.sub("", lines[0].strip()).strip()
    body = normalize_message("\n".join(lines[1:]))

    forced = CommitType(forced_type).value if forced_type else None
    parsed = _parse_subject(subject)

    selected_type = forced or parsed.commit_type
    if selected_type is None:
        inferred = infer_type_from_diff(diff)
        selected_type = inferred.value if inferred else None

    selected_scope = normalize_scope(scope) or parsed.scope
    description = normalize_description(parsed.description)

    if selected_type:
        scope_part = f"({selected_scope})" if selected_scope else ""
        marker = "!" if parsed.breaking else ""
        repaired_subject = f"{selected_type}{scope_part}{marker}: {description}"
    else:
        repaired_subject = description

    repaired = normalize_message(f"{repaired_subject}\n\n{body}" if body else repaired_subject)
    did_repair = repaired != original
    if did_repair:
        logger.debug("Repaired commit message %r -> %r", original, repaired)

    return RepairResult(message=repaired, did_repair=did_repair)
