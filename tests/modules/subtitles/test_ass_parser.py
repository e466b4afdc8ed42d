import textwrap

import pytest

from lexibase.subtitles.ass import ass_timestamp_to_ms, parse_ass, strip_ass_markup
from lexibase.subtitles.errors import SubtitleParseError

_HEADER = textwrap.dedent(
    """\
    [Script Info]
    Title: Sample
    ScriptType: v4.00+

    [V4+ Styles]
    Format: Name, Fontname, Fontsize
    Style: Default,Arial,20

    [Events]
    Format: Layer, Start, End, Style, Name, MarginL, MarginR, MarginV, Effect, Text
    """
)


def test_ass_timestamp_to_ms_uses_centiseconds() -> None:
    assert ass_timestamp_to_ms("0:00:01.50") == 1500
    assert ass_timestamp_to_ms("1:02:03.04") == 3_723_040


def test_strip_ass_markup() -> None:
    assert strip_ass_markup(r"{\an8}{\i1}Hello{\i0}\Nworld\hagain") == "Hello world again"


def test_parse_ass_keeps_commas_inside_text() -> None:
    payload = _HEADER + "Dialogue: 0,0:00:01.00,0:00:03.50,Default,,0,0,0,,Well, well, well.\n"

    cues = parse_ass(payload)

    assert len(cues) == 1
    assert cues[0].text == "Well, well, well."
    assert (cues[0].start_ms, cues[0].end_ms) == (1000, 3500)


def test_parse_ass_ignores_comments_and_stops_at_next_section() -> None:
    payload = (
        _HEADER
        + "Comment: 0,0:00:00.00,0:00:01.00,Default,,0,0,0,,Translator note\n"
        + "Dialogue: 0,0:00:02.00,0:00:03.00,Default,,0,0,0,,{\\b1}Spoken{\\b0} line\n"
        + "Dialogue: 0,bad,0:00:04.00,Default,,0,0,0,,Broken timing\n"
        + "\n[Fonts]\n"
        + "Dialogue: 0,0:00:05.00,0:00:06.00,Default,,0,0,0,,Not an event\n"
    )

    cues = parse_ass(payload)

    assert [cue.text for cue in cues] == ["Spoken line"]


def test_parse_ass_without_format_line_uses_standard_columns() -> None:
    payload = "[Events]\nDialogue: 0,0:00:01.00,0:00:02.00,Default,,0,0,0,,Hi, there\n"

    cues = parse_ass(payload)

    assert cues[0].text == "Hi, there"


def test_parse_ass_without_dialogue_fails() -> None:
    payload = _HEADER + "Comment: 0,0:00:00.00,0:00:01.00,Default,,0,0,0,,Only a comment\n"

    with pytest.raises(SubtitleParseError) as excinfo:
        parse_ass(payload)
    assert "no valid subtitle entries" in str(excinfo.value)
