"""Script normalization for narrow (half-width) katakana variants.

Half-width katakana is rewritten to its full-width form in two passes.  Voiced
and semi-voiced marks combine with the preceding character in half-width text
(``ｶﾞ``) but are precomposed in full-width text (``ガ``), so the two-character
sequences are folded first; the single-character table then converts whatever
remains, including lone marks.
"""

from __future__ import annotations

from typing import Dict, Mapping

import regex

HALF_WIDTH_VOICED_SEQUENCES: Mapping[str, str] = {
    "ｶﾞ": "ガ",
    "ｷﾞ": "ギ",
    "ｸﾞ": "グ",
    "ｹﾞ": "ゲ",
    "ｺﾞ": "ゴ",
    "ｻﾞ": "ザ",
    "ｼﾞ": "ジ",
    "ｽﾞ": "ズ",
    "ｾﾞ": "ゼ",
    "ｿﾞ": "ゾ",
    "ﾀﾞ": "ダ",
    "ﾁﾞ": "ヂ",
    "ﾂﾞ": "ヅ",
    "ﾃﾞ": "デ",
    "ﾄﾞ": "ド",
    "ﾊﾞ": "バ",
    "ﾋﾞ": "ビ",
    "ﾌﾞ": "ブ",
    "ﾍﾞ": "ベ",
    "ﾎﾞ": "ボ",
    "ﾊﾟ": "パ",
    "ﾋﾟ": "ピ",
    "ﾌﾟ": "プ",
    "ﾍﾟ": "ペ",
    "ﾎﾟ": "ポ",
    "ｳﾞ": "ヴ",
    "ﾜﾞ": "ヷ",
    "ｦﾞ": "ヺ",
}

HALF_WIDTH_KATAKANA: Mapping[str, str] = {
    "･": "・",
    "ｦ": "ヲ",
    "ｧ": "ァ",
    "ｨ": "ィ",
    "ｩ": "ゥ",
    "ｪ": "ェ",
    "ｫ": "ォ",
    "ｬ": "ャ",
    "ｭ": "ュ",
    "ｮ": "ョ",
    "ｯ": "ッ",
    "ｰ": "ー",
    "ｱ": "ア",
    "ｲ": "イ",
    "ｳ": "ウ",
    "ｴ": "エ",
    "ｵ": "オ",
    "ｶ": "カ",
    "ｷ": "キ",
    "ｸ": "ク",
    "ｹ": "ケ",
    "ｺ": "コ",
    "ｻ": "サ",
    "ｼ": "シ",
    "ｽ": "ス",
    "ｾ": "セ",
    "ｿ": "ソ",
    "ﾀ": "タ",
    "ﾁ": "チ",
    "ﾂ": "ツ",
    "ﾃ": "テ",
    "ﾄ": "ト",
    "ﾅ": "ナ",
    "ﾆ": "ニ",
    "ﾇ": "ヌ",
    "ﾈ": "ネ",
    "ﾉ": "ノ",
    "ﾊ": "ハ",
    "ﾋ": "ヒ",
    "ﾌ": "フ",
    "ﾍ": "ヘ",
    "ﾎ": "ホ",
    "ﾏ": "マ",
    "ﾐ": "ミ",
    "ﾑ": "ム",
    "ﾒ": "メ",
    "ﾓ": "モ",
    "ﾔ": "ヤ",
    "ﾕ": "ユ",
    "ﾖ": "ヨ",
    "ﾗ": "ラ",
    "ﾘ": "リ",
    "ﾙ": "ル",
    "ﾚ": "レ",
    "ﾛ": "ロ",
    "ﾜ": "ワ",
    "ﾝ": "ン",
    "ﾞ": "゛",
    "ﾟ": "゜",
}

_SEQUENCE_PATTERN = regex.compile(
    "|".join(regex.escape(sequence) for sequence in HALF_WIDTH_VOICED_SEQUENCES)
)
_SINGLE_TABLE: Dict[int, str] = str.maketrans(dict(HALF_WIDTH_KATAKANA))
_NARROW_CHARACTER_PATTERN = regex.compile(
    "[" + "".join(regex.escape(char) for char in HALF_WIDTH_KATAKANA) + "]"
)


def normalize_script(text: str) -> str:
    """Return ``text`` with half-width katakana folded to full-width."""

    if not text:
        return text
    if not _NARROW_CHARACTER_PATTERN.search(text):
        return text
    folded = _SEQUENCE_PATTERN.sub(lambda match: HALF_WIDTH_VOICED_SEQUENCES[match.group(0)], text)
    return folded.translate(_SINGLE_TABLE)


def has_narrow_variant(text: str) -> bool:
    """Return True when ``text`` contains characters ``normalize_script`` rewrites."""

    return bool(text) and _NARROW_CHARACTER_PATTERN.search(text) is not None


__all__ = [
    "HALF_WIDTH_KATAKANA",
    "HALF_WIDTH_VOICED_SEQUENCES",
    "has_narrow_variant",
    "normalize_script",
]
