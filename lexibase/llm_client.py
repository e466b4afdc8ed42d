"""Utility classes for interacting with chat-completion endpoints."""

from __future__ import annotations

import json
import time
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, List, Optional

import requests

from . import logging_manager as log_mgr
from .config_manager import get_settings

logger = log_mgr.get_logger("llm_client")

TokenUsage = Dict[str, int]
Validator = Callable[[str], bool]

ERROR_TRANSPORT = "transport"
ERROR_HTTP = "http"
ERROR_EMPTY = "empty"
ERROR_VALIDATION = "validation"
ERROR_JSON = "json"
ERROR_CONFIGURATION = "configuration"

RETRYABLE_ERRORS = frozenset({ERROR_TRANSPORT, ERROR_HTTP, ERROR_CONFIGURATION})


@dataclass(frozen=True)
class ClientSettings:
    """Immutable collection of configuration parameters for an :class:`LLMClient`."""

    model: str
    api_url: str
    api_key: Optional[str] = None
    timeout_seconds: float = 90.0
    debug: bool = False

    def with_updates(self, **updates: Any) -> "ClientSettings":
        """Return a copy of the settings with provided keyword overrides applied."""

        return replace(self, **updates)


@dataclass
class LLMResponse:
    """Container for responses returned by :class:`LLMClient.send_chat_request`."""

    text: str
    status_code: int
    token_usage: TokenUsage
    raw: Optional[Any] = None
    error: Optional[str] = None
    error_kind: Optional[str] = None

    @property
    def retryable(self) -> bool:
        return self.error_kind in RETRYABLE_ERRORS


class LLMClient:
    """Stateless helper for issuing chat requests with retries."""

    def __init__(
        self,
        settings: ClientSettings,
        *,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._settings = settings
        self._session = session or requests.Session()

    @property
    def settings(self) -> ClientSettings:
        return self._settings

    @property
    def model(self) -> str:
        return self._settings.model

    @property
    def api_url(self) -> str:
        return self._settings.api_url

    @property
    def debug_enabled(self) -> bool:
        return bool(self._settings.debug)

    # ------------------------------------------------------------------
    # Logging helpers
    # ------------------------------------------------------------------
    def _log_debug(self, message: str, *args: Any) -> None:
        if self.debug_enabled:
            logger.debug(message, *args)

    # ------------------------------------------------------------------
    # Response parsing
    # ------------------------------------------------------------------
    @staticmethod
    def _extract_token_usage(data: Dict[str, Any]) -> TokenUsage:
        usage: TokenUsage = {}
        reported = data.get("usage")
        if isinstance(reported, dict):
            for key in ("prompt_tokens", "completion_tokens", "total_tokens"):
                value = reported.get(key)
                if isinstance(value, int):
                    usage[key] = value
        # Ollama-style counters
        for key in ("prompt_eval_count", "eval_count"):
            value = data.get(key)
            if isinstance(value, int):
                usage[key] = value
        return usage

    @staticmethod
    def _extract_message_text(data: Dict[str, Any]) -> str:
        choices = data.get("choices")
        if isinstance(choices, list) and choices:
            message = choices[0].get("message") if isinstance(choices[0], dict) else None
            if isinstance(message, dict) and isinstance(message.get("content"), str):
                return message["content"]
        message = data.get("message")
        if isinstance(message, dict) and isinstance(message.get("content"), str):
            return message["content"]
        if isinstance(data.get("response"), str):
            return data["response"]
        return ""

    def _parse_json_response(self, response: requests.Response) -> LLMResponse:
        try:
            data = response.json()
        except ValueError as exc:
            return LLMResponse(
                text="",
                status_code=response.status_code,
                token_usage={},
                raw=response.text,
                error=f"Invalid JSON response: {exc}",
                error_kind=ERROR_JSON,
            )
        if not isinstance(data, dict):
            return LLMResponse(
                text="",
                status_code=response.status_code,
                token_usage={},
                raw=data,
                error="Unexpected response body",
                error_kind=ERROR_JSON,
            )

        usage = self._extract_token_usage(data)
        if usage:
            self._log_debug("Token usage: %s", usage)
        return LLMResponse(
            text=self._extract_message_text(data),
            status_code=response.status_code,
            token_usage=usage,
            raw=data,
        )

    # ------------------------------------------------------------------
    # Request execution
    # ------------------------------------------------------------------
    def _execute_request(self, payload: Dict[str, Any], *, timeout: float) -> LLMResponse:
        self._log_debug("Dispatching LLM request to %s", self.api_url)
        self._log_debug("Payload: %s", json.dumps(payload, ensure_ascii=False)[:2000])

        headers: Dict[str, str] = {"Content-Type": "application/json"}
        if self._settings.api_key:
            headers["Authorization"] = f"Bearer {self._settings.api_key}"

        response = self._session.post(self.api_url, json=payload, headers=headers, timeout=timeout)

        if response.status_code != 200:
            body_preview = response.text[:300]
            error_message = f"HTTP {response.status_code}"
            if body_preview:
                error_message = f"{error_message}: {body_preview}"
            return LLMResponse(
                text="",
                status_code=response.status_code,
                token_usage={},
                raw=response.text,
                error=error_message,
                error_kind=ERROR_HTTP,
            )
        return self._parse_json_response(response)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def send_chat_request(
        self,
        messages: List[Dict[str, Any]],
        *,
        max_attempts: int = 3,
        timeout: Optional[float] = None,
        validator: Optional[Validator] = None,
        backoff_seconds: float = 1.0,
        model: Optional[str] = None,
        **options: Any,
    ) -> LLMResponse:
        """Send a chat request with retries and optional response validation."""

        payload: Dict[str, Any] = {"model": model or self.model, "messages": messages}
        payload.update(options)
        timeout = timeout or self._settings.timeout_seconds
        last_error: Optional[str] = None
        last_kind: Optional[str] = None

        for attempt in range(1, max_attempts + 1):
            try:
                result = self._execute_request(payload, timeout=timeout)
            except requests.exceptions.RequestException as exc:
                last_error = str(exc)
                last_kind = ERROR_TRANSPORT
                self._log_debug("Request error on attempt %s/%s: %s", attempt, max_attempts, exc)
            else:
                if result.error:
                    last_error = result.error
                    last_kind = result.error_kind
                    self._log_debug(
                        "LLM returned error on attempt %s/%s: %s", attempt, max_attempts, result.error
                    )
                else:
                    text = result.text.strip()
                    if not text:
                        last_error = "Empty response"
                        last_kind = ERROR_EMPTY
                    elif validator and not validator(text):
                        last_error = "Validation failed"
                        last_kind = ERROR_VALIDATION
                    else:
                        return result
                    self._log_debug(
                        "%s on attempt %s/%s", last_error, attempt, max_attempts
                    )

            if attempt < max_attempts:
                time.sleep(backoff_seconds * attempt)

        return LLMResponse(
            text="",
            status_code=0,
            token_usage={},
            raw=None,
            error=last_error,
            error_kind=last_kind,
        )

    def close(self) -> None:
        """Release any network resources associated with this client."""

        self._session.close()

    def __enter__(self) -> "LLMClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # pragma: no cover - trivial
        self.close()


def create_client(
    *,
    model: Optional[str] = None,
    api_url: Optional[str] = None,
    api_key: Optional[str] = None,
    debug: bool = False,
    session: Optional[requests.Session] = None,
) -> LLMClient:
    """Return a new :class:`LLMClient`, filling gaps from the runtime settings."""

    settings = get_settings()
    client_settings = ClientSettings(
        model=model or settings.analysis_model,
        api_url=api_url or settings.llm_api_url,
        api_key=api_key if api_key is not None else settings.llm_api_key_value(),
        timeout_seconds=settings.llm_timeout_seconds,
        debug=debug or settings.log_level == "DEBUG",
    )
    return LLMClient(client_settings, session=session)


__all__ = [
    "ClientSettings",
    "ERROR_EMPTY",
    "ERROR_HTTP",
    "ERROR_JSON",
    "ERROR_TRANSPORT",
    "ERROR_VALIDATION",
    "LLMClient",
    "LLMResponse",
    "create_client",
]
