"""Sentence analysis oracle backed by a chat-completion model."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Mapping, Optional, Sequence

from pydantic import ValidationError

from .. import logging_manager as log_mgr
from .. import prompt_templates
from ..config_manager import get_settings
from ..llm_client import LLMClient, LLMResponse, create_client
from ..llm_json import parse_json_payload
from .errors import OracleResponseError, OracleUnavailableError
from .imaging import crop_region
from .schemas import (
    OcrResult,
    SentenceSplitResult,
    TranslationReductionResult,
    parse_oracle_result,
)

logger = log_mgr.get_logger("oracle")

_QUOTE_CHARS = "\"'“”‘’「」『』"


def _is_json_reply(text: str) -> bool:
    return parse_json_payload(text) is not None


class LLMSentenceAnalysisOracle:
    """Implements :class:`~lexibase.oracle.base.SentenceAnalysisOracle` over HTTP."""

    def __init__(
        self,
        client: Optional[LLMClient] = None,
        *,
        vision_client: Optional[LLMClient] = None,
        target_language: Optional[str] = None,
        max_attempts: Optional[int] = None,
    ) -> None:
        settings = get_settings()
        self._client = client or create_client(model=settings.analysis_model)
        self._vision_client = vision_client or (
            create_client(model=settings.vision_model) if client is None else client
        )
        self._target_language = target_language or settings.translation_target_language
        if max_attempts is None:
            max_attempts = settings.llm_max_attempts
        self._max_attempts = max(1, max_attempts)

    # ------------------------------------------------------------------
    # Request helpers
    # ------------------------------------------------------------------
    def _send(
        self,
        client: LLMClient,
        messages: List[Dict[str, Any]],
        *,
        expect_json: bool,
        **options: Any,
    ) -> LLMResponse:
        if not client.settings.api_key and "api.openai.com" in client.api_url:
            raise OracleUnavailableError("No API key configured for the analysis model")

        response = client.send_chat_request(
            messages,
            max_attempts=self._max_attempts,
            validator=_is_json_reply if expect_json else None,
            **options,
        )
        if response.error:
            if response.retryable:
                raise OracleUnavailableError(f"Analysis model unavailable: {response.error}")
            raise OracleResponseError(f"Unusable analysis reply: {response.error}")
        return response

    def _request_result(
        self,
        client: LLMClient,
        kind: str,
        messages: List[Dict[str, Any]],
        **options: Any,
    ):
        response = self._send(client, messages, expect_json=True, **options)
        payload = parse_json_payload(response.text)
        if payload is None:
            raise OracleResponseError(f"Reply for {kind} did not contain JSON")
        try:
            return parse_oracle_result(kind, payload)
        except ValidationError as exc:
            logger.debug("Rejected %s payload: %s", kind, response.text[:500])
            raise OracleResponseError(f"Reply for {kind} failed validation: {exc}") from exc

    # ------------------------------------------------------------------
    # Oracle operations
    # ------------------------------------------------------------------
    def analyze_sentence(self, text: str, language: str) -> SentenceSplitResult:
        messages = prompt_templates.make_sentence_payload(
            text,
            system_prompt=prompt_templates.make_sentence_analysis_prompt(
                language, self._target_language
            ),
        )
        result = self._request_result(
            self._client,
            "sentence_split",
            messages,
            temperature=0,
            response_format=prompt_templates.sentence_analysis_response_format(),
        )
        if not result.words:
            raise OracleResponseError("Sentence analysis returned no words")
        return result

    def extract_text(
        self,
        image_base64: str,
        language: str,
        region: Optional[Mapping[str, float]] = None,
    ) -> List[str]:
        if region:
            image_base64 = crop_region(image_base64, region)
        messages = prompt_templates.make_image_payload(
            image_base64,
            system_prompt=prompt_templates.make_ocr_prompt(language),
        )
        result: OcrResult = self._request_result(
            self._vision_client,
            "ocr",
            messages,
            temperature=0,
            response_format={"type": "json_object"},
        )
        return list(result.texts)

    def reduce_translations(
        self,
        word: str,
        translations: Sequence[str],
        source_language: str,
        target_language: str,
    ) -> List[str]:
        content = json.dumps(
            {"word": word, "translations": list(translations)}, ensure_ascii=False
        )
        messages = prompt_templates.make_sentence_payload(
            content,
            system_prompt=prompt_templates.make_translation_reduction_prompt(
                source_language, target_language
            ),
        )
        result: TranslationReductionResult = self._request_result(
            self._client,
            "translation_reduction",
            messages,
            temperature=0,
            response_format={"type": "json_object"},
        )
        return list(result.translations)

    def translate_sentence(
        self,
        sentence: str,
        context_sentences: Sequence[str],
        language: str,
    ) -> str:
        messages = prompt_templates.make_sentence_payload(
            prompt_templates.wrap_source_text(sentence, context_sentences),
            system_prompt=prompt_templates.make_contextual_translation_prompt(
                language, self._target_language
            ),
        )
        response = self._send(self._client, messages, expect_json=False, temperature=0.2)
        translation = response.text.strip().strip(_QUOTE_CHARS).strip()
        if not translation:
            raise OracleResponseError("Translation reply was empty")
        return translation


__all__ = ["LLMSentenceAnalysisOracle"]
