"""AI service for generating commit messages with a local Ollama model."""

import logging

from ..config.settings import WorkflowOptions
from ..core.extractor import extract_message_from_output
from ..core.repair import repair_message
from ..core.results import Candidate, MessageSource
from ..core.validation import ALLOWED_TYPES, MAX_SUBJECT_LENGTH, CommitType, normalize_message
from .ollama import OllamaClient

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You write excellent git commit messages.\n\n"
    "Rules:\n"
    '- Output ONLY a valid JSON object with exactly one key: { "message": "..." }\n'
    '- Do not include any keys other than "message".\n'
    "- NO markdown and NO commentary.\n"
    "- Use Conventional Commits: type(scope optional): subject\n"
    f"- Allowed types: {', '.join(ALLOWED_TYPES)}\n"
    f"- Subject line: <= {MAX_SUBJECT_LENGTH} chars, imperative mood, present tense, "
    "NO trailing period.\n"
    '- If really useful, add a blank line and a short body explaining "what" and "why".\n'
    "- Never mention that you are an AI.\n"
    "- Keep it short and simple and don't be chatty.\n"
    '- Do not use "!" (breaking change) unless the diff contains significant breaking changes.'
)


class AIService:
    """Service turning a staged diff into a commit message candidate."""

    def __init__(self, client: OllamaClient | None = None):
        self.client = client

    @staticmethod
    def build_messages(
        diff: str, forced_type: CommitType | None = None, scope: str | None = None
    ) -> list[dict[str, str]]:
        """Build the system and user chat turns for a diff."""
        constraints = "\n".join(
            [
                f"Forced type: {forced_type.value}"
                if forced_type
                else "Choose the best type from allowed list.",
                f"Use scope: {scope}" if scope else "Use a scope only if it helps; otherwise omit.",
            ]
        )

        user = (
            "Task: Generate a specific and concise Conventional Commit message "
            "for the following git diff.\n\n"
            f"Constraints:\n{constraints}\n\n"
            "Input Data:\n"
            "--- BEGIN DIFF ---\n"
            f"{diff}\n"
            "--- END DIFF ---\n\n"
            'Return JSON only, exactly in this shape: { "message": "..." }.'
        )

        return [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": user},
        ]

    def generate_candidate(self, diff: str, options: WorkflowOptions) -> Candidate:
        """
        Generate one commit message candidate.

        The raw model reply is extracted, repaired and validated. The
        candidate is marked as repaired when the repair step changed it.

        Raises:
            OllamaError: When the model backend fails
        """
        client = self.client or OllamaClient(options.host)
        messages = self.build_messages(diff, options.commit_type, options.scope)

        raw = client.chat(
            options.model,
            messages,
            json_format=True,
            timeout_ms=options.timeout_ms,
            retries=options.retries,
        ).strip()
        logger.debug("Raw model output: %r", raw)

        extracted = extract_message_from_output(raw)
        repaired = repair_message(
            extracted, diff, forced_type=options.commit_type, scope=options.scope
        )
        source = MessageSource.REPAIRED if repaired.did_repair else MessageSource.MODEL

        return Candidate.build(normalize_message(repaired.message), source)
