"""git-ai-commit - Conventional Commit messages from staged changes with a local model."""

from .cli.cli_handler import GitAICommit
from .config.settings import WorkflowOptions
from .core.analyzer import clamp_diff, infer_type_from_diff
from .core.exit_codes import ExitCode
from .core.extractor import extract_message_from_output
from .core.git import GitError, GitOperations
from .core.repair import RepairResult, repair_message
from .core.results import Candidate, MessageSource, WorkflowFailure, WorkflowSuccess
from .core.validation import CommitType, ValidationResult, normalize_message, validate_message
from .services.ai_service import AIService
from .services.ollama import OllamaClient, OllamaError, OllamaErrorKind

__version__ = "0.1.0"

__all__ = [
    "GitAICommit",
    "WorkflowOptions",
    "clamp_diff",
    "infer_type_from_diff",
    "ExitCode",
    "extract_message_from_output",
    "GitError",
    "GitOperations",
    "RepairResult",
    "repair_message",
    "Candidate",
    "MessageSource",
    "WorkflowFailure",
    "WorkflowSuccess",
    "CommitType",
    "ValidationResult",
    "normalize_message",
    "validate_message",
    "AIService",
    "OllamaClient",
    "OllamaError",
    "OllamaErrorKind",
]
