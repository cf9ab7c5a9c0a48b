"""Tests for the git-ai-commit workflow."""

from unittest.mock import patch

import pytest

from git_ai_commit.cli.cli_handler import GitAICommit
from git_ai_commit.cli.console import Action
from git_ai_commit.core.exit_codes import ExitCode
from git_ai_commit.core.git import GitError
from git_ai_commit.core.results import MessageSource, WorkflowFailure, WorkflowSuccess
from git_ai_commit.services.ollama import OllamaError, OllamaErrorKind

from conftest import make_diff


@pytest.fixture
def mock_console():
    """Fixture for mocked console."""
    with patch("git_ai_commit.cli.cli_handler.console") as console:
        console.select_action.return_value = Action.CANCEL
        yield console


@pytest.fixture
def app(mock_git, mock_ollama):
    """Fixture for GitAICommit wired to mocked collaborators."""
    return GitAICommit(git=mock_git, ollama=mock_ollama)


class TestPreconditions:
    """Test failures before generation."""

    def test_not_a_repository(self, app, mock_git, mock_ollama, options):
        """Outside a repository the run fails with the git context code."""
        mock_git.is_repository.return_value = False

        result = app.run(options())

        assert isinstance(result, WorkflowFailure)
        assert result.exit_code is ExitCode.GIT_CONTEXT_ERROR
        assert result.code == "GIT_CONTEXT_ERROR"
        mock_ollama.chat.assert_not_called()

    @pytest.mark.parametrize(
        "flags",
        [{}, {"dry_run": True}, {"ci": False}, {"allow_invalid": True, "no_verify": True}],
    )
    def test_no_staged_changes(self, app, mock_git, mock_ollama, options, flags):
        """Nothing staged is a git context error whatever the flags."""
        mock_git.has_staged_changes.return_value = False

        result = app.run(options(**flags))

        assert result.exit_code is ExitCode.GIT_CONTEXT_ERROR
        assert "Stage files first" in result.hint
        mock_ollama.check_connection.assert_not_called()

    def test_git_inspection_error(self, app, mock_git, options):
        """A failing git status check is a git context error."""
        mock_git.has_staged_changes.side_effect = GitError("index locked")

        result = app.run(options())

        assert result.exit_code is ExitCode.GIT_CONTEXT_ERROR
        assert "index locked" in result.message

    def test_backend_unreachable(self, app, mock_ollama, options):
        """An unreachable backend maps to the Ollama error code."""
        mock_ollama.check_connection.return_value = False

        result = app.run(options())

        assert result.exit_code is ExitCode.OLLAMA_ERROR
        assert "ollama serve" in result.hint
        mock_ollama.ensure_local_model.assert_not_called()

    def test_model_missing(self, app, mock_ollama, options):
        """A missing model keeps the client's hint."""
        mock_ollama.ensure_local_model.side_effect = OllamaError(
            OllamaErrorKind.MODEL_NOT_FOUND, "Model 'llama3' is not available locally.",
            hint="Run `ollama pull llama3` first.",
        )

        result = app.run(options())

        assert result.exit_code is ExitCode.OLLAMA_ERROR
        assert result.code == "OLLAMA_ERROR"
        assert result.hint == "Run `ollama pull llama3` first."
        mock_ollama.chat.assert_not_called()

    def test_readiness_timeout_is_bounded(self, app, mock_ollama, options):
        """Model readiness waits at most ten seconds."""
        app.run(options(dry_run=True, timeout_ms=120000))

        mock_ollama.ensure_local_model.assert_called_once_with("llama3", 10000)

    def test_diff_is_clamped(self, app, mock_git, mock_ollama, options):
        """The diff sent to the model respects max_chars."""
        mock_git.get_staged_diff.return_value = make_diff("src/a.ts") + "x" * 5000

        app.run(options(dry_run=True, max_chars=500))

        user_turn = mock_ollama.chat.call_args.args[1][1]["content"]
        assert "--- DIFF TRUNCATED ---" in user_turn
        assert "x" * 1000 not in user_turn


class TestNonInteractive:
    """Test CI and dry-run dispositions."""

    def test_commits_valid_message(self, app, mock_git, options):
        """A valid message is committed in CI mode."""
        result = app.run(options(no_verify=True))

        assert result == WorkflowSuccess("feat: add baseline", MessageSource.MODEL, committed=True)
        mock_git.create_commit.assert_called_once_with("feat: add baseline", no_verify=True)

    def test_blocks_invalid_output(self, app, mock_git, mock_ollama, options):
        """Invalid output is never committed unattended."""
        mock_ollama.chat.return_value = '{"message":"this is invalid"}'

        result = app.run(options())

        assert result.exit_code is ExitCode.INVALID_AI_OUTPUT
        assert result.code == "INVALID_AI_OUTPUT"
        assert "--allow-invalid" in result.hint
        mock_git.create_commit.assert_not_called()

    def test_blocks_invalid_output_in_dry_run(self, app, mock_ollama, options):
        """Dry runs fail closed too."""
        mock_ollama.chat.return_value = '{"message":"this is invalid"}'

        result = app.run(options(ci=False, dry_run=True))

        assert result.exit_code is ExitCode.INVALID_AI_OUTPUT

    def test_allow_invalid(self, app, mock_git, mock_ollama, options):
        """The override commits invalid output."""
        mock_ollama.chat.return_value = '{"message":"this is invalid"}'

        result = app.run(options(allow_invalid=True))

        assert result.ok is True
        assert result.committed is True
        mock_git.create_commit.assert_called_once()

    def test_dry_run_does_not_commit(self, app, mock_git, options):
        """Dry runs return the message without committing."""
        result = app.run(options(dry_run=True))

        assert result.ok is True
        assert result.committed is False
        mock_git.create_commit.assert_not_called()

    def test_repaired_docs_message(self, app, mock_git, mock_ollama, options):
        """A docs-only diff repairs an untyped reply."""
        mock_git.get_staged_diff.return_value = make_diff("README.md")
        mock_ollama.chat.return_value = '{"message":"update readme content."}'

        result = app.run(options(ci=True, dry_run=True))

        assert result.ok is True
        assert result.committed is False
        assert result.source is MessageSource.REPAIRED
        assert result.message == "docs: update readme content"

    def test_commit_failure(self, app, mock_git, options):
        """Commit rejections map to the commit error code."""
        mock_git.create_commit.side_effect = GitError("Failed to create commit: hook failed")

        result = app.run(options())

        assert result.exit_code is ExitCode.GIT_COMMIT_ERROR
        assert "hook failed" in result.message
        assert result.hint is not None
        mock_git.create_commit.assert_called_once()

    def test_generation_failure(self, app, mock_git, mock_ollama, options):
        """Backend errors during generation keep their message and hint."""
        mock_ollama.chat.side_effect = OllamaError(
            OllamaErrorKind.TIMEOUT, "Ollama request timed out after 60000ms.",
            retryable=True, hint="Increase --timeout-ms or use a smaller model.",
        )

        result = app.run(options())

        assert result.exit_code is ExitCode.OLLAMA_ERROR
        assert "timed out" in result.message
        assert "--timeout-ms" in result.hint
        mock_git.create_commit.assert_not_called()

    def test_unparseable_json_reply_is_validated_as_text(self, app, mock_ollama, options):
        """A reply the JSON parser rejects falls back to text instead of crashing."""
        mock_ollama.chat.return_value = '{"message": "feat: add x", "n": 1}'

        with patch(
            "git_ai_commit.core.extractor.json.loads",
            side_effect=ValueError("Exceeds the limit (4300 digits) for integer string conversion"),
        ):
            result = app.run(options(dry_run=True))

        assert result.exit_code is ExitCode.INVALID_AI_OUTPUT
        assert result.code == "INVALID_AI_OUTPUT"

    def test_unexpected_error(self, app, mock_git, options):
        """Unexpected exceptions become internal errors."""
        mock_git.is_repository.side_effect = RuntimeError("boom")

        result = app.run(options())

        assert result.exit_code is ExitCode.INTERNAL_ERROR
        assert result.code == "INTERNAL_ERROR"
        assert result.message == "boom"

    def test_unexpected_error_without_message(self, app, mock_git, options):
        """Messageless exceptions get a safe fallback message."""
        mock_git.is_repository.side_effect = RuntimeError()

        result = app.run(options())

        assert result.message == "Unexpected internal error."


class TestInteractive:
    """Test the interactive state machine."""

    def test_accept_commits(self, app, mock_git, mock_console, options):
        """Accepting commits the candidate."""
        mock_console.select_action.return_value = Action.ACCEPT

        result = app.run(options(ci=False))

        assert result.committed is True
        assert result.cancelled is False
        mock_git.create_commit.assert_called_once_with("feat: add baseline", no_verify=False)
        mock_console.print_candidate.assert_called_once()

    def test_cancel(self, app, mock_git, mock_console, options):
        """Cancelling succeeds without committing."""
        result = app.run(options(ci=False))

        assert result.ok is True
        assert result.cancelled is True
        assert result.committed is False
        mock_git.create_commit.assert_not_called()

    def test_aborted_prompt_cancels(self, app, mock_git, mock_console, options):
        """An aborted prompt counts as cancel."""
        mock_console.select_action.return_value = None

        result = app.run(options(ci=False))

        assert result.cancelled is True
        mock_git.create_commit.assert_not_called()

    def test_dry_run_action(self, app, mock_git, mock_console, options):
        """The dry-run action prints only."""
        mock_console.select_action.return_value = Action.DRY_RUN

        result = app.run(options(ci=False))

        assert result.committed is False
        assert result.cancelled is False
        mock_git.create_commit.assert_not_called()

    def test_regenerate(self, app, mock_git, mock_ollama, mock_console, options):
        """Regenerating asks the model again and uses the new candidate."""
        mock_ollama.chat.side_effect = ['{"message":"feat: first try"}', '{"message":"fix: second try"}']
        mock_console.select_action.side_effect = [Action.REGENERATE, Action.ACCEPT]

        result = app.run(options(ci=False))

        assert mock_ollama.chat.call_count == 2
        assert result.message == "fix: second try"
        mock_git.create_commit.assert_called_once_with("fix: second try", no_verify=False)

    def test_edit_commits_edited_message(self, app, mock_git, mock_console, options):
        """An edited message is committed and marked as repaired."""
        mock_console.select_action.return_value = Action.EDIT
        mock_console.edit_message.return_value = "fix(core): adjust parser flow\n"

        result = app.run(options(ci=False))

        mock_git.create_commit.assert_called_once_with("fix(core): adjust parser flow", no_verify=False)
        assert result.source is MessageSource.REPAIRED
        assert result.message == "fix(core): adjust parser flow"

    def test_unchanged_edit_keeps_source(self, app, mock_console, options):
        """Saving the message unchanged keeps the model source."""
        mock_console.select_action.return_value = Action.EDIT
        mock_console.edit_message.return_value = "feat: add baseline"

        result = app.run(options(ci=False))

        assert result.source is MessageSource.MODEL
        assert result.committed is True

    @pytest.mark.parametrize("edited", [None, "", "  \n  "])
    def test_empty_edit_cancels(self, app, mock_git, mock_console, options, edited):
        """An empty or declined edit cancels."""
        mock_console.select_action.return_value = Action.EDIT
        mock_console.edit_message.return_value = edited

        result = app.run(options(ci=False))

        assert result.cancelled is True
        mock_git.create_commit.assert_not_called()

    def test_invalid_accept_loops_to_same_candidate(
        self, app, mock_git, mock_ollama, mock_console, options
    ):
        """Accepting an invalid message re-presents the same candidate."""
        mock_ollama.chat.return_value = '{"message":"invalid message"}'
        mock_console.select_action.side_effect = [Action.ACCEPT, Action.CANCEL]

        result = app.run(options(ci=False))

        assert result.cancelled is True
        assert mock_ollama.chat.call_count == 1
        assert mock_console.print_candidate.call_count == 2
        mock_console.print_error.assert_called_once()
        mock_git.create_commit.assert_not_called()

    def test_invalid_edit_is_rejected(self, app, mock_git, mock_console, options):
        """An invalid edit is not committed without the override."""
        mock_console.select_action.side_effect = [Action.EDIT, Action.CANCEL]
        mock_console.edit_message.return_value = "just some words"

        result = app.run(options(ci=False))

        assert result.cancelled is True
        assert result.message == "feat: add baseline"
        mock_git.create_commit.assert_not_called()

    def test_invalid_accept_with_override(self, app, mock_git, mock_ollama, mock_console, options):
        """The override lets an invalid message through."""
        mock_ollama.chat.return_value = '{"message":"invalid message"}'
        mock_console.select_action.return_value = Action.ACCEPT

        result = app.run(options(ci=False, allow_invalid=True))

        assert result.committed is True
        mock_git.create_commit.assert_called_once_with("invalid message", no_verify=False)

    def test_commit_failure(self, app, mock_git, mock_console, options):
        """Commit failures after accepting are reported, not retried."""
        mock_console.select_action.return_value = Action.ACCEPT
        mock_git.create_commit.side_effect = GitError("hook failed")

        result = app.run(options(ci=False))

        assert result.exit_code is ExitCode.GIT_COMMIT_ERROR
        mock_git.create_commit.assert_called_once()
