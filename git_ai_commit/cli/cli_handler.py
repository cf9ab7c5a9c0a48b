"""Workflow orchestration for git-ai-commit."""

import logging
from enum import Enum

from ..config.settings import WorkflowOptions
from ..core.analyzer import clamp_diff
from ..core.exit_codes import ExitCode
from ..core.git import GitError, GitOperations
from ..core.results import (
    Candidate,
    MessageSource,
    WorkflowError,
    WorkflowFailure,
    WorkflowResult,
    WorkflowSuccess,
    normalize_error_message,
)
from ..core.validation import normalize_message, validate_message
from ..services.ai_service import AIService
from ..services.ollama import OllamaClient, OllamaError
from . import console
from .console import Action

logger = logging.getLogger(__name__)

INVALID_OUTPUT_HINT = "Regenerate/edit the message or pass --allow-invalid to override."
COMMIT_FAILED_HINT = "Resolve git hook or repository errors, then retry."


class _State(Enum):
    GENERATING = "generating"
    PRESENTING = "presenting"


class GitAICommit:
    """Main application class."""

    def __init__(
        self,
        git: GitOperations | None = None,
        ollama: OllamaClient | None = None,
        ai_service: AIService | None = None,
    ):
        """Initialize with optional collaborators; defaults are created per run."""
        self.git = git or GitOperations()
        self.ollama = ollama
        self.ai_service = ai_service

    def _check_preconditions(self, options: WorkflowOptions, ollama: OllamaClient) -> None:
        if not self.git.is_repository():
            raise WorkflowError(
                ExitCode.GIT_CONTEXT_ERROR,
                "Not a git repository.",
                hint="Run git-ai-commit inside a git working tree.",
            )

        try:
            staged = self.git.has_staged_changes()
        except GitError as e:
            raise WorkflowError(ExitCode.GIT_CONTEXT_ERROR, str(e))
        if not staged:
            raise WorkflowError(
                ExitCode.GIT_CONTEXT_ERROR,
                "No staged changes.",
                hint="Stage files first: git add <files>.",
            )

        if not ollama.check_connection():
            raise WorkflowError(
                ExitCode.OLLAMA_ERROR,
                f"Cannot reach Ollama at {options.host}.",
                hint="Start the server with `ollama serve`, or point --host at a running instance.",
            )
        ollama.ensure_local_model(options.model, options.readiness_timeout_ms)
        logger.debug("Preconditions satisfied for model %s", options.model)

    def _load_diff(self, options: WorkflowOptions) -> str:
        try:
            staged_diff = self.git.get_staged_diff()
        except GitError as e:
            raise WorkflowError(ExitCode.GIT_CONTEXT_ERROR, str(e))

        diff = clamp_diff(staged_diff, options.max_chars)
        if len(diff) < len(staged_diff):
            logger.debug("Diff clamped from %d to %d chars", len(staged_diff), len(diff))
        return diff

    def _generate(self, ai_service: AIService, diff: str, options: WorkflowOptions) -> Candidate:
        if options.interactive:
            with console.generating(options.model):
                return ai_service.generate_candidate(diff, options)
        return ai_service.generate_candidate(diff, options)

    def _commit(self, message: str, options: WorkflowOptions) -> None:
        try:
            self.git.create_commit(message, no_verify=options.no_verify)
        except GitError as e:
            raise WorkflowError(
                ExitCode.GIT_COMMIT_ERROR,
                normalize_error_message(e, "git commit failed."),
                hint=COMMIT_FAILED_HINT,
            )

    def _run_non_interactive(
        self, ai_service: AIService, diff: str, options: WorkflowOptions
    ) -> WorkflowSuccess:
        candidate = self._generate(ai_service, diff, options)

        # Unattended runs never commit text that failed validation
        if not candidate.validation.valid and not options.allow_invalid:
            raise WorkflowError(
                ExitCode.INVALID_AI_OUTPUT,
                f"AI output failed validation: {candidate.validation.reason}",
                hint=INVALID_OUTPUT_HINT,
            )

        if options.dry_run:
            return WorkflowSuccess(candidate.message, candidate.source, committed=False)

        self._commit(candidate.message, options)
        return WorkflowSuccess(candidate.message, candidate.source, committed=True)

    def _run_interactive(
        self, ai_service: AIService, diff: str, options: WorkflowOptions
    ) -> WorkflowSuccess:
        state = _State.GENERATING
        candidate: Candidate | None = None

        while True:
            if state is _State.GENERATING or candidate is None:
                candidate = self._generate(ai_service, diff, options)
                state = _State.PRESENTING

            console.print_candidate(candidate)
            action = console.select_action()

            if action is None or action is Action.CANCEL:
                return WorkflowSuccess(
                    candidate.message, candidate.source, committed=False, cancelled=True
                )
            if action is Action.REGENERATE:
                state = _State.GENERATING
                continue
            if action is Action.DRY_RUN:
                return WorkflowSuccess(candidate.message, candidate.source, committed=False)

            final_message = candidate.message
            if action is Action.EDIT:
                edited = console.edit_message(final_message)
                final_message = normalize_message(edited)
                if not final_message:
                    return WorkflowSuccess(
                        candidate.message, candidate.source, committed=False, cancelled=True
                    )

            validation = validate_message(final_message)
            if not validation.valid and not options.allow_invalid:
                console.print_error(f"Cannot commit invalid message: {validation.reason}")
                console.print_info("Use edit/regenerate, or rerun with --allow-invalid to override.")
                continue

            self._commit(final_message, options)
            source = (
                candidate.source if final_message == candidate.message else MessageSource.REPAIRED
            )
            return WorkflowSuccess(final_message, source, committed=True)

    def run(self, options: WorkflowOptions) -> WorkflowResult:
        """
        Run the whole workflow once.

        Every failure is converted into a WorkflowFailure; this method does
        not raise for expected errors.

        Args:
            options: Parsed settings of this invocation

        Returns:
            The single result of this run
        """
        try:
            ollama = self.ollama or OllamaClient(options.host)
            ai_service = self.ai_service or AIService(ollama)

            self._check_preconditions(options, ollama)
            diff = self._load_diff(options)

            if options.interactive:
                return self._run_interactive(ai_service, diff, options)
            return self._run_non_interactive(ai_service, diff, options)

        except WorkflowError as e:
            return e.to_result()
        except OllamaError as e:
            return WorkflowFailure(
                exit_code=ExitCode.OLLAMA_ERROR,
                code=ExitCode.OLLAMA_ERROR.label,
                message=str(e),
                hint=e.hint,
            )
        except Exception as e:
            logger.debug("Unexpected error", exc_info=True)
            return WorkflowFailure(
                exit_code=ExitCode.INTERNAL_ERROR,
                code=ExitCode.INTERNAL_ERROR.label,
                message=normalize_error_message(e, "Unexpected internal error."),
            )
