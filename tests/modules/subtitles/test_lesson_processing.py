import textwrap

import pytest

from lexibase.subtitles import (
    ProcessedSentence,
    SubtitleCue,
    SubtitleFormat,
    SubtitleParseError,
    detect_format,
    parse_lesson_content,
)
from lexibase.subtitles.text import distribute_cue, split_into_sentences
from lexibase.subtitles.utils import sort_and_deduplicate_cues

_SRT = textwrap.dedent(
    """\
    1
    00:00:01,000 --> 00:00:03,000
    Hello there. How are you?

    2
    00:00:04,000 --> 00:00:05,000
    ﾃｽﾄです
    """
)


@pytest.mark.parametrize(
    ("content", "file_name", "expected"),
    [
        ("[Script Info]\nTitle: x\n", None, SubtitleFormat.ASS),
        ("1\n00:00:01,000 --> 00:00:02,000\nHi\n", "notes.txt", SubtitleFormat.SRT),
        ("plain words", "episode.srt", SubtitleFormat.SRT),
        ("plain words", "episode.SSA", SubtitleFormat.ASS),
        ("plain words", "episode.txt", SubtitleFormat.TXT),
        ("plain words", None, SubtitleFormat.TXT),
    ],
)
def test_detect_format(content: str, file_name, expected: SubtitleFormat) -> None:
    assert detect_format(content, file_name) is expected


def test_one_cue_becomes_one_sentence_by_default() -> None:
    sentences = parse_lesson_content(_SRT, "lesson.srt")

    assert sentences == [
        ProcessedSentence("Hello there. How are you?", 1000, 3000),
        ProcessedSentence("テストです", 4000, 5000),
    ]


def test_split_cues_distributes_time_by_character_count() -> None:
    sentences = parse_lesson_content(_SRT, "lesson.srt", split_cues=True)

    assert sentences[:2] == [
        ProcessedSentence("Hello there.", 1000, 2000),
        ProcessedSentence("How are you?", 2000, 3000),
    ]
    assert sentences[2] == ProcessedSentence("テストです", 4000, 5000)


def test_distribute_cue_last_fragment_ends_at_cue_end() -> None:
    cue = SubtitleCue(text="Hi you. Goodbye now!", start_ms=0, end_ms=1900)

    pieces = distribute_cue(cue, ["Hi you.", "Goodbye now!"])

    assert [(p.start_ms, p.end_ms) for p in pieces] == [(0, 700), (700, 1900)]

    odd = distribute_cue(SubtitleCue("a. b. c.", 0, 1000), ["aaa.", "bbb.", "ccc."])
    assert odd[0].start_ms == 0
    assert odd[-1].end_ms == 1000
    assert all(left.end_ms == right.start_ms for left, right in zip(odd, odd[1:]))


def test_split_into_sentences_handles_cjk_and_short_fragments() -> None:
    assert split_into_sentences("こんにちは。元気ですか？はい。") == [
        "こんにちは。",
        "元気ですか？",
        "はい。",
    ]
    assert split_into_sentences("Ok. This is fine.") == ["This is fine."]
    assert split_into_sentences("Wait... what?! Really") == ["Wait...", "what?!", "Really"]


def test_plain_text_is_split_into_untimed_sentences() -> None:
    sentences = parse_lesson_content("First sentence here. Second one!\r\nThird line?")

    assert [s.text for s in sentences] == ["First sentence here.", "Second one!", "Third line?"]
    assert not any(s.is_timed for s in sentences)


def test_empty_text_is_a_parse_failure() -> None:
    with pytest.raises(SubtitleParseError):
        parse_lesson_content("  \n\r\n ", "empty.txt")


def test_sort_and_deduplicate_cues_merges_repeated_text() -> None:
    cues = [
        SubtitleCue("Again", 3000, 4000),
        SubtitleCue("Hello", 0, 1000),
        SubtitleCue("Hello", 1000, 2000),
    ]

    merged = sort_and_deduplicate_cues(cues)

    assert [(c.text, c.start_ms, c.end_ms) for c in merged] == [
        ("Hello", 0, 2000),
        ("Again", 3000, 4000),
    ]
