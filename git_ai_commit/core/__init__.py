"""Core modules for git-ai-commit.

This module contains the core functionality including:
- Conventional Commits validation
- Model output extraction
- Diff analysis and type inference
- Deterministic message repair
"""

from .analyzer import changed_files_from_diff, clamp_diff, infer_type_from_diff
from .exit_codes import ExitCode
from .extractor import extract_message_from_output, strip_code_fence
from .git import GitError, GitOperations
from .repair import RepairResult, repair_message
from .validation import ALLOWED_TYPES, CommitType, ValidationResult, normalize_message, validate_message

__all__ = [
    "changed_files_from_diff",
    "clamp_diff",
    "infer_type_from_diff",
    "ExitCode",
    "extract_message_from_output",
    "strip_code_fence",
    "GitError",
    "GitOperations",
    "RepairResult",
    "repair_message",
    "ALLOWED_TYPES",
    "CommitType",
    "ValidationResult",
    "normalize_message",
    "validate_message",
]
