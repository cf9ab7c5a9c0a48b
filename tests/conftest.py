"""Common test fixtures."""

from unittest.mock import MagicMock

import pytest

from git_ai_commit.config.settings import WorkflowOptions
from git_ai_commit.core.git import GitOperations
from git_ai_commit.services.ollama import OllamaClient


def make_diff(*paths: str) -> str:
    """Build a minimal unified diff touching the given paths."""
    return "\n".join(
        f"diff --git a/{path} b/{path}\nindex 1111111..2222222 100644\n+changed line" for path in paths
    )


@pytest.fixture
def options():
    """Fixture for building workflow options with overrides."""

    def _create_options(**overrides) -> WorkflowOptions:
        values = {"ci": True, "timeout_ms": 60000, "retries": 2}
        values.update(overrides)
        return WorkflowOptions(**values)

    return _create_options


@pytest.fixture
def mock_git():
    """Fixture for a git collaborator with staged changes."""
    git = MagicMock(spec=GitOperations)
    git.is_repository.return_value = True
    git.has_staged_changes.return_value = True
    git.get_staged_diff.return_value = make_diff("src/a.ts")
    git.create_commit.return_value = None
    return git


@pytest.fixture
def mock_ollama():
    """Fixture for a reachable Ollama client with the model installed."""
    client = MagicMock(spec=OllamaClient)
    client.check_connection.return_value = True
    client.ensure_local_model.return_value = None
    client.chat.return_value = '{"message":"feat: add baseline"}'
    return client
