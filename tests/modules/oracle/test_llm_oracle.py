import base64
import io
import json

import pytest
import requests
from PIL import Image

from lexibase import llm_client
from lexibase.database.models import PronunciationType
from lexibase.llm_client import ClientSettings, LLMClient
from lexibase.oracle import (
    LLMSentenceAnalysisOracle,
    OracleResponseError,
    OracleUnavailableError,
    SentenceAnalysisOracle,
)
from lexibase.oracle.imaging import crop_region


class FakeResponse:
    def __init__(self, status_code=200, body=None, text=None):
        self.status_code = status_code
        self._body = body
        self.text = text if text is not None else json.dumps(body or {})

    def json(self):
        if self._body is None:
            raise ValueError("no body")
        return self._body


class FakeSession:
    """Returns queued responses (or raises queued exceptions) in order."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def post(self, url, json=None, headers=None, timeout=None):
        self.requests.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def close(self):
        pass


def _chat(content):
    if not isinstance(content, str):
        content = json.dumps(content, ensure_ascii=False)
    return FakeResponse(
        body={
            "choices": [{"message": {"role": "assistant", "content": content}}],
            "usage": {"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 15},
        }
    )


def _oracle(session, *, api_key="test-key", max_attempts=2):
    client = LLMClient(
        ClientSettings(
            model="test-model",
            api_url="https://api.openai.com/v1/chat/completions",
            api_key=api_key,
        ),
        session=session,
    )
    return LLMSentenceAnalysisOracle(client, target_language="en", max_attempts=max_attempts)


@pytest.fixture(autouse=True)
def no_backoff(monkeypatch):
    monkeypatch.setattr(llm_client.time, "sleep", lambda seconds: None)


def test_oracle_satisfies_protocol() -> None:
    assert isinstance(_oracle(FakeSession()), SentenceAnalysisOracle)


def test_analyze_sentence_parses_words() -> None:
    session = FakeSession(
        _chat(
            {
                "words": [
                    {
                        "word": "猫",
                        "translation": "cat",
                        "pronunciation": "ねこ",
                        "pronunciationType": "Hiragana",
                        "stems": [],
                    },
                    {"word": "が", "translation": None, "stems": None},
                ]
            }
        )
    )

    result = _oracle(session).analyze_sentence("猫が", "ja")

    assert result.split == ["猫", "が"]
    assert result.words[0].pronunciation_type is PronunciationType.HIRAGANA
    assert result.words[1].translation == ""
    request = session.requests[0]
    assert request["headers"]["Authorization"] == "Bearer test-key"
    assert request["json"]["model"] == "test-model"
    assert request["json"]["temperature"] == 0
    assert request["json"]["response_format"]["type"] == "json_schema"
    assert "猫が" in request["json"]["messages"][-1]["content"]


def test_analyze_sentence_retries_server_errors() -> None:
    session = FakeSession(
        FakeResponse(status_code=500, text="upstream down"),
        _chat({"words": [{"word": "hello", "translation": "hola"}]}),
    )

    result = _oracle(session).analyze_sentence("hello", "en")

    assert result.split == ["hello"]
    assert len(session.requests) == 2


def test_repeated_transport_errors_mean_unavailable() -> None:
    session = FakeSession(
        requests.exceptions.ConnectionError("refused"),
        requests.exceptions.ConnectionError("refused"),
    )

    with pytest.raises(OracleUnavailableError):
        _oracle(session).analyze_sentence("hello", "en")


def test_schema_mismatch_is_a_response_error() -> None:
    session = FakeSession(_chat({"words": [{"translation": "cat"}]}))

    with pytest.raises(OracleResponseError):
        _oracle(session, max_attempts=1).analyze_sentence("猫", "ja")


def test_non_json_reply_is_a_response_error() -> None:
    session = FakeSession(_chat("I cannot help with that."), _chat("Still prose."))

    with pytest.raises(OracleResponseError):
        _oracle(session).analyze_sentence("猫", "ja")


def test_empty_word_list_is_rejected() -> None:
    with pytest.raises(OracleResponseError):
        _oracle(FakeSession(_chat({"words": []}))).analyze_sentence("猫", "ja")


def test_missing_api_key_for_hosted_endpoint() -> None:
    session = FakeSession()

    with pytest.raises(OracleUnavailableError):
        _oracle(session, api_key=None).analyze_sentence("猫", "ja")
    assert session.requests == []


def test_reduce_translations_accepts_bare_list() -> None:
    session = FakeSession(_chat('```json\n["run", "dash", "run", " "]\n```'))

    reduced = _oracle(session).reduce_translations("走る", ["run", "running", "dash"], "ja", "en")

    assert reduced == ["run", "dash"]
    sent = json.loads(session.requests[0]["json"]["messages"][-1]["content"])
    assert sent == {"word": "走る", "translations": ["run", "running", "dash"]}


def test_translate_sentence_strips_quotes() -> None:
    session = FakeSession(_chat("「The cat sleeps.」"))

    translation = _oracle(session).translate_sentence("猫が寝る。", ["前の文。"], "ja")

    assert translation == "The cat sleeps."
    content = session.requests[0]["json"]["messages"][-1]["content"]
    assert "猫が寝る。" in content and "前の文。" in content


def test_translate_sentence_rejects_blank_reply() -> None:
    with pytest.raises(OracleResponseError):
        _oracle(FakeSession(_chat('""')), max_attempts=1).translate_sentence("猫", [], "ja")


def _png(width=100, height=50):
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color=(200, 10, 10)).save(buffer, format="PNG")
    return base64.b64encode(buffer.getvalue()).decode("ascii")


def test_crop_region_returns_jpeg_of_requested_size() -> None:
    cropped = crop_region(_png(), {"x": 0.5, "y": 0.0, "width": 0.5, "height": 0.5})

    image = Image.open(io.BytesIO(base64.b64decode(cropped)))
    assert image.format == "JPEG"
    assert image.size == (50, 25)


@pytest.mark.parametrize(
    "region",
    [{"x": 0, "y": 0, "width": 0, "height": 1}, {"x": 0, "y": 0, "width": "wide", "height": 1}, {"x": 0}],
)
def test_crop_region_rejects_bad_regions(region) -> None:
    with pytest.raises(ValueError):
        crop_region(_png(), region)


def test_extract_text_sends_cropped_image() -> None:
    session = FakeSession(_chat({"texts": ["こんにちは", "  ", "世界"]}))

    texts = _oracle(session).extract_text(
        _png(), "ja", region={"x": 0, "y": 0, "width": 0.5, "height": 1}
    )

    assert texts == ["こんにちは", "世界"]
    assert len(session.requests) == 1
