import pytest

from lexibase.llm_json import parse_json_payload


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ('{"words": []}', {"words": []}),
        ('```json\n{"texts": ["a"]}\n```', {"texts": ["a"]}),
        ('Here you go: ["run", "dash"] Hope it helps.', ["run", "dash"]),
        ("", None),
        ("no json here", None),
        ("{broken", None),
    ],
)
def test_parse_json_payload(text, expected) -> None:
    assert parse_json_payload(text) == expected
