import textwrap

import pytest

from lexibase.subtitles.errors import SubtitleParseError, SubtitleTimestampError
from lexibase.subtitles.srt import parse_srt, srt_timestamp_to_ms


def test_srt_timestamp_to_ms_accepts_comma_and_dot() -> None:
    assert srt_timestamp_to_ms("00:00:01,500") == 1500
    assert srt_timestamp_to_ms("01:02:03.004") == 3_723_004


def test_srt_timestamp_to_ms_rejects_garbage() -> None:
    with pytest.raises(SubtitleTimestampError):
        srt_timestamp_to_ms("00:61:00,000")
    with pytest.raises(SubtitleTimestampError):
        srt_timestamp_to_ms("aa:bb:cc,ddd")


def test_parse_srt_strips_markup_and_joins_lines() -> None:
    payload = textwrap.dedent(
        """\
        1
        00:00:01,000 --> 00:00:02,500
        <i>Hello</i>
        <b>world</b>

        2
        00:00:03,000 --> 00:00:04,000
        Second line
        """
    )

    cues = parse_srt(payload)

    assert [(cue.text, cue.start_ms, cue.end_ms) for cue in cues] == [
        ("Hello world", 1000, 2500),
        ("Second line", 3000, 4000),
    ]


def test_parse_srt_skips_malformed_cues_and_handles_crlf() -> None:
    payload = (
        "1\r\n00:00:01,000 --> 00:00:02,000\r\nGood cue\r\n\r\n"
        "2\r\n00:0x:03,000 --> 00:00:04,000\r\nBad timestamp\r\n\r\n"
        "3\r\n00:00:06,000 --> 00:00:05,000\r\nEnds before start\r\n\r\n"
        "00:00:07,000 --> 00:00:08,000\r\nNo index line\r\n"
    )

    cues = parse_srt(payload)

    assert [cue.text for cue in cues] == ["Good cue", "No index line"]


def test_parse_srt_without_cues_fails() -> None:
    with pytest.raises(SubtitleParseError) as excinfo:
        parse_srt("just some words\nwithout timing")
    assert "SRT" in str(excinfo.value)
