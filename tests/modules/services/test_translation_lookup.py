from lexibase.database import get_db_session
from lexibase.services import LexemeStore, TranslationLookupService

from tests.helpers.fake_oracle import FakeOracle


def _seed_word(literal: str, language: str, translations, pronunciations=()) -> int:
    with get_db_session() as session:
        store = LexemeStore(session)
        word = store.get_or_create_word(literal, language)
        for translation in translations:
            store.add_translation(word.id, "en", translation)
        for pronunciation, kind in pronunciations:
            store.add_pronunciation(word.id, pronunciation, kind)
        return word.id


def _stored(word_id: int):
    with get_db_session() as session:
        return LexemeStore(session).translations_for(word_id, "en")


def test_small_translation_sets_are_returned_as_stored(database) -> None:
    oracle = FakeOracle()
    _seed_word("犬", "ja", ["dog", "hound"])

    result = TranslationLookupService(oracle, reduce_min=3).lookup_word_translations("犬", "ja")

    assert result.success
    assert result.data == ["dog", "hound"]
    assert oracle.count("reduce_translations") == 0


def test_large_translation_sets_are_reduced_and_persisted(database) -> None:
    oracle = FakeOracle(reductions={"走る": ["run", "dash"]})
    word_id = _seed_word("走る", "ja", ["run", "running", "to run", "dash", "sprint"])
    service = TranslationLookupService(oracle, reduce_min=3)

    first = service.lookup_word_translations("走る", "ja")
    second = service.lookup_word_translations("走る", "ja")

    assert first.data == ["run", "dash"]
    assert second.data == ["run", "dash"]
    assert sorted(_stored(word_id)) == ["dash", "run"]
    assert oracle.count("reduce_translations") == 1
    assert oracle.calls[0][1:] == (
        "走る",
        ["run", "running", "to run", "dash", "sprint"],
        "ja",
        "en",
    )


def test_failed_reduction_keeps_existing_translations(database) -> None:
    oracle = FakeOracle(failing={"本"})
    word_id = _seed_word("本", "ja", ["book", "main", "origin"])

    result = TranslationLookupService(oracle, reduce_min=3).lookup_word_translations("本", "ja")

    assert result.success
    assert result.data == ["book", "main", "origin"]
    assert _stored(word_id) == ["book", "main", "origin"]


def test_empty_reduction_keeps_existing_translations(database) -> None:
    oracle = FakeOracle(reductions={"木": []})
    word_id = _seed_word("木", "ja", ["tree", "wood", "timber"])

    result = TranslationLookupService(oracle, reduce_min=3).lookup_word_translations("木", "ja")

    assert result.data == ["tree", "wood", "timber"]
    assert len(_stored(word_id)) == 3


def test_unknown_word_returns_empty_list(database) -> None:
    result = TranslationLookupService(FakeOracle()).lookup_word_translations("未知", "ja")

    assert result.success
    assert result.data == []


def test_get_word_pronunciations(database) -> None:
    _seed_word("雨", "ja", ["rain"], pronunciations=[("あめ", "hiragana"), ("ame", "romanization")])

    result = TranslationLookupService(FakeOracle()).get_word_pronunciations("雨", "ja")

    assert result.data == [
        {"pronunciation": "あめ", "pronunciation_type": "hiragana"},
        {"pronunciation": "ame", "pronunciation_type": "romanization"},
    ]


def test_reduced_set_is_not_reduced_again(database) -> None:
    oracle = FakeOracle(reductions={"走る": ["run", "dash", "sprint"]})
    word_id = _seed_word("走る", "ja", ["run", "running", "to run", "dash", "sprint"])
    service = TranslationLookupService(oracle, reduce_min=3)

    results = [service.lookup_word_translations("走る", "ja").data for _ in range(3)]

    assert results == [["run", "dash", "sprint"]] * 3
    assert oracle.count("reduce_translations") == 1
    assert _stored(word_id) == ["run", "dash", "sprint"]


def test_new_translation_makes_word_reducible_again(database) -> None:
    oracle = FakeOracle(reductions={"走る": ["run", "dash", "sprint"]})
    word_id = _seed_word("走る", "ja", ["run", "running", "to run", "dash"])
    service = TranslationLookupService(oracle, reduce_min=3)
    service.lookup_word_translations("走る", "ja")

    with get_db_session() as session:
        assert LexemeStore(session).add_translation(word_id, "en", "jog")
    result = service.lookup_word_translations("走る", "ja")

    assert oracle.count("reduce_translations") == 2
    assert oracle.calls[-1][2] == ["run", "dash", "sprint", "jog"]
    assert result.data == ["run", "dash", "sprint"]


def test_explicit_zero_reduce_min_is_respected(database) -> None:
    oracle = FakeOracle()
    _seed_word("猫", "ja", ["cat"])

    service = TranslationLookupService(oracle, reduce_min=0)
    result = service.lookup_word_translations("猫", "ja")

    assert service.reduce_min == 0
    assert result.data == ["cat"]
    assert oracle.count("reduce_translations") == 1
