"""Process exit statuses and their stable string codes."""

from enum import IntEnum
from types import MappingProxyType


class ExitCode(IntEnum):
    """Exit status of one git-ai-commit invocation."""

    SUCCESS = 0
    USAGE_ERROR = 1
    GIT_CONTEXT_ERROR = 2
    OLLAMA_ERROR = 3
    INVALID_AI_OUTPUT = 4
    GIT_COMMIT_ERROR = 5
    INTERNAL_ERROR = 6

    @property
    def label(self) -> str:
        return EXIT_CODE_LABELS[self]


EXIT_CODE_LABELS = MappingProxyType({code: code.name for code in ExitCode})
