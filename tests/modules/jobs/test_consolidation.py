from datetime import datetime

from sqlalchemy import select

from lexibase.database import get_db_session
from lexibase.database.models import SentenceModel, SentenceWordModel, WordModel, WordUserMarkModel
from lexibase.jobs import ConsolidationJob, run_consolidation_pass
from lexibase.services import LexemeStore


def _seed_word(literal, *, translations=(), pronunciations=(), stems=()):
    with get_db_session() as session:
        store = LexemeStore(session)
        word = store.get_or_create_word(literal, "ja")
        for translation in translations:
            store.add_translation(word.id, "en", translation)
        for pronunciation in pronunciations:
            store.add_pronunciation(word.id, pronunciation, "hiragana")
        for stem in stems:
            store.add_stem(word, stem)
        return word.id


def _set_mark(user_id, word_id, mark, updated_at):
    with get_db_session() as session:
        row = LexemeStore(session).upsert_mark(user_id, word_id, mark)
        row.updated_at = updated_at


def _link(word_id, text):
    with get_db_session() as session:
        sentence = SentenceModel(lesson_id=1, original_text=text)
        session.add(sentence)
        session.flush()
        LexemeStore(session).link_sentence(word_id, sentence.id)
        return sentence.id


def _word(literal):
    with get_db_session() as session:
        return LexemeStore(session).find_word(literal, "ja")


def test_variant_is_folded_into_existing_canonical_word(database) -> None:
    canonical_id = _seed_word("ガム", translations=["gum"], pronunciations=["がむ"])
    variant_id = _seed_word(
        "ｶﾞﾑ",
        translations=["gum", "chewing gum"],
        pronunciations=["がむ", "gamu"],
        stems=["ガム", "ｶﾞﾑｼ"],
    )
    _set_mark(1, variant_id, 3, datetime(2024, 1, 1))
    _set_mark(2, canonical_id, 2, datetime(2024, 1, 1))
    shared_sentence = _link(canonical_id, "ガムを噛む。")
    with get_db_session() as session:
        LexemeStore(session).link_sentence(variant_id, shared_sentence)
    variant_only_sentence = _link(variant_id, "ｶﾞﾑ！")

    report = run_consolidation_pass()

    assert report.total == 1 and report.failed == 0
    assert _word("ｶﾞﾑ") is None
    with get_db_session() as session:
        store = LexemeStore(session)
        assert session.get(WordModel, variant_id) is None
        assert store.translations_for(canonical_id, "en") == ["gum", "chewing gum"]
        assert [row.pronunciation for row in store.pronunciations_for(canonical_id)] == ["がむ", "gamu"]
        assert store.stems_for(canonical_id) == ["ｶﾞﾑｼ"]
        assert store.get_mark(1, canonical_id).mark == 3
        assert store.get_mark(2, canonical_id).mark == 2
        links = session.execute(
            select(SentenceWordModel.sentence_id)
            .where(SentenceWordModel.word_id == canonical_id)
            .order_by(SentenceWordModel.sentence_id)
        ).scalars().all()
        assert links == [shared_sentence, variant_only_sentence]
        orphaned = session.execute(
            select(SentenceWordModel).where(SentenceWordModel.word_id == variant_id)
        ).all()
        assert orphaned == []


def test_missing_canonical_word_is_created(database) -> None:
    variant_id = _seed_word("ﾃﾞｰﾀ", translations=["data"])

    canonical_id = ConsolidationJob().merge_word(variant_id)

    canonical = _word("データ")
    assert canonical is not None and canonical.id == canonical_id
    assert _word("ﾃﾞｰﾀ") is None
    with get_db_session() as session:
        assert LexemeStore(session).translations_for(canonical_id, "en") == ["data"]


def test_higher_mark_wins_conflicts(database) -> None:
    canonical_id = _seed_word("パン")
    variant_id = _seed_word("ﾊﾟﾝ")
    _set_mark(1, canonical_id, 4, datetime(2024, 1, 1))
    _set_mark(1, variant_id, 1, datetime(2024, 6, 1))
    _set_mark(2, canonical_id, 1, datetime(2024, 6, 1))
    _set_mark(2, variant_id, 5, datetime(2024, 1, 1))

    ConsolidationJob().merge_word(variant_id)

    with get_db_session() as session:
        store = LexemeStore(session)
        assert store.get_mark(1, canonical_id).mark == 4
        assert store.get_mark(2, canonical_id).mark == 5
        assert len(session.execute(select(WordUserMarkModel)).scalars().all()) == 2


def test_equal_marks_keep_the_most_recently_updated_row(database) -> None:
    canonical_id = _seed_word("メモ")
    variant_id = _seed_word("ﾒﾓ")
    _set_mark(1, canonical_id, 3, datetime(2024, 1, 1))
    _set_mark(1, variant_id, 3, datetime(2024, 3, 1, 12, 30))
    with get_db_session() as session:
        variant_mark_id = LexemeStore(session).get_mark(1, variant_id).id

    ConsolidationJob().merge_word(variant_id)

    with get_db_session() as session:
        kept = LexemeStore(session).get_mark(1, canonical_id)
        assert kept.id == variant_mark_id
        assert kept.updated_at == datetime(2024, 3, 1, 12, 30)


def test_words_without_half_width_text_are_left_alone(database) -> None:
    _seed_word("カタカナ", translations=["katakana"])
    _seed_word("ひらがな")

    report = ConsolidationJob(chunk_size=1).run_consolidation_pass()

    assert report.total == 0
    assert _word("カタカナ") is not None
    assert _word("ひらがな") is not None


def test_scan_pages_through_every_chunk(database) -> None:
    for literal in ("ｱ", "犬", "ｲ", "猫", "ｳ"):
        _seed_word(literal)

    candidates = [candidate.word for candidate in ConsolidationJob(chunk_size=2).iter_candidates()]

    assert candidates == ["ｱ", "ｲ", "ｳ"]
