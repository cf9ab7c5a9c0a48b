"""HTTP client for a local Ollama server."""

import logging
import time
from enum import Enum
from typing import Any

import requests

logger = logging.getLogger(__name__)

DEFAULT_HOST = "http://localhost:11434"
CONNECTION_CHECK_TIMEOUT_MS = 2000
RETRY_BACKOFF_SECONDS = 0.5


class OllamaErrorKind(str, Enum):
    """Failure classes reported by the Ollama client."""

    UNREACHABLE = "UNREACHABLE"
    TIMEOUT = "TIMEOUT"
    HTTP_ERROR = "HTTP_ERROR"
    MODEL_NOT_FOUND = "MODEL_NOT_FOUND"
    INVALID_RESPONSE = "INVALID_RESPONSE"


class OllamaError(Exception):
    """Ollama request error."""

    def __init__(
        self,
        kind: OllamaErrorKind,
        message: str,
        retryable: bool = False,
        hint: str | None = None,
        status_code: int | None = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.retryable = retryable
        self.hint = hint
        self.status_code = status_code

    @property
    def code(self) -> str:
        return self.kind.value


def is_retryable(error: Exception) -> bool:
    """Only unreachable hosts, timeouts and 5xx responses are worth retrying."""
    return isinstance(error, OllamaError) and error.retryable


def _unreachable(host: str, detail: str) -> OllamaError:
    return OllamaError(
        OllamaErrorKind.UNREACHABLE,
        f"Cannot reach Ollama at {host}: {detail}",
        retryable=True,
        hint="Start the server with `ollama serve`, or point --host at a running instance.",
    )


def _timed_out(timeout_ms: int) -> OllamaError:
    return OllamaError(
        OllamaErrorKind.TIMEOUT,
        f"Ollama request timed out after {timeout_ms}ms.",
        retryable=True,
        hint="Increase --timeout-ms or use a smaller model.",
    )


def _model_not_found(model: str) -> OllamaError:
    return OllamaError(
        OllamaErrorKind.MODEL_NOT_FOUND,
        f"Model '{model}' is not available locally.",
        hint=f"Run `ollama pull {model}` first.",
    )


def _invalid_response(message: str) -> OllamaError:
    return OllamaError(
        OllamaErrorKind.INVALID_RESPONSE,
        message,
        hint="Try again, or use a different model.",
    )


def _http_error(response: requests.Response) -> OllamaError:
    body = response.text.strip() if response.text else ""
    message = f"Ollama error {response.status_code}"
    return OllamaError(
        OllamaErrorKind.HTTP_ERROR,
        f"{message}: {body}" if body else message,
        retryable=response.status_code >= 500,
        hint="Check the Ollama server logs.",
        status_code=response.status_code,
    )


def model_matches(requested: str, available: str) -> bool:
    """Match a requested model name against a locally installed one."""
    if requested == available:
        return True
    # "llama3" is served as "llama3:latest" (or any other tag)
    return ":" not in requested and available.split(":", 1)[0] == requested


class OllamaClient:
    """Client for the Ollama REST API."""

    def __init__(self, host: str = DEFAULT_HOST):
        self.host = host.rstrip("/")

    def _url(self, path: str) -> str:
        return f"{self.host}{path}"

    def _request(self, method: str, path: str, timeout_ms: int, **kwargs: Any) -> requests.Response:
        try:
            return requests.request(method, self._url(path), timeout=timeout_ms / 1000, **kwargs)
        except requests.exceptions.Timeout as e:
            raise _timed_out(timeout_ms) from e
        except requests.exceptions.ConnectionError as e:
            raise _unreachable(self.host, str(e)) from e
        except requests.exceptions.RequestException as e:
            raise OllamaError(OllamaErrorKind.HTTP_ERROR, str(e) or "Ollama request failed.") from e

    def check_connection(self, timeout_ms: int = CONNECTION_CHECK_TIMEOUT_MS) -> bool:
        """Check that the server answers on the lightweight tags endpoint."""
        try:
            response = self._request("GET", "/api/tags", timeout_ms)
        except OllamaError as e:
            logger.debug("Ollama connection check failed: %s", e)
            return False
        return response.ok

    def list_local_models(self, timeout_ms: int) -> list[str]:
        """List the names of locally installed models."""
        response = self._request("GET", "/api/tags", timeout_ms)
        if not response.ok:
            raise _http_error(response)

        try:
            data = response.json()
        except ValueError as e:
            raise _invalid_response("Ollama returned invalid JSON for /api/tags.") from e

        models = data.get("models") if isinstance(data, dict) else None
        if not isinstance(models, list):
            raise _invalid_response("Ollama /api/tags response has no model list.")

        return [m["name"] for m in models if isinstance(m, dict) and isinstance(m.get("name"), str)]

    def ensure_local_model(self, model: str, timeout_ms: int) -> None:
        """Raise MODEL_NOT_FOUND unless the model is installed locally."""
        available = self.list_local_models(timeout_ms)
        if not any(model_matches(model, name) for name in available):
            raise _model_not_found(model)
        logger.debug("Model %s is available locally", model)

    def _chat_once(self, payload: dict[str, Any], timeout_ms: int) -> str:
        response = self._request("POST", "/api/chat", timeout_ms, json=payload)

        if response.status_code == 404:
            raise _model_not_found(payload["model"])
        if not response.ok:
            raise _http_error(response)

        try:
            data = response.json()
        except ValueError as e:
            raise _invalid_response("Ollama returned invalid JSON for /api/chat.") from e

        message = data.get("message") if isinstance(data, dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str) or not content.strip():
            raise _invalid_response("Ollama returned an empty response.")

        return content

    def chat(
        self,
        model: str,
        messages: list[dict[str, str]],
        json_format: bool = False,
        timeout_ms: int = 60000,
        retries: int = 2,
    ) -> str:
        """
        Send a chat request and return the assistant's content.

        Transient failures are retried up to ``retries`` times with an
        exponential backoff; other failures are raised immediately.

        Args:
            model: Name of the local model
            messages: Chat turns with ``role`` and ``content``
            json_format: Ask the server to constrain output to JSON
            timeout_ms: Timeout of each individual request
            retries: Number of retries after the first attempt

        Returns:
            Raw text content of the model's reply

        Raises:
            OllamaError: When the request fails or retries are exhausted
        """
        payload: dict[str, Any] = {"model": model, "messages": messages, "stream": False}
        if json_format:
            payload["format"] = "json"

        attempts = max(0, retries) + 1
        attempt = 0
        while True:
            attempt += 1
            try:
                return self._chat_once(payload, timeout_ms)
            except OllamaError as e:
                if not is_retryable(e) or attempt >= attempts:
                    raise
                delay = RETRY_BACKOFF_SECONDS * (2 ** (attempt - 1))
                logger.debug(
                    "Ollama chat attempt %d/%d failed (%s), retrying in %.1fs",
                    attempt,
                    attempts,
                    e,
                    delay,
                )
                time.sleep(delay)
