import pytest
from sqlalchemy import func, select

from lexibase.database import get_db_session, get_or_create
from lexibase.database.models import WordModel, WordUserMarkModel


def test_get_or_create_inserts_once(database) -> None:
    with get_db_session() as session:
        first, created_first = get_or_create(session, WordModel, word="猫", language_code="ja")
        second, created_second = get_or_create(session, WordModel, word="猫", language_code="ja")

    assert created_first is True
    assert created_second is False
    assert first.id == second.id

    with get_db_session() as session:
        count = session.execute(select(func.count()).select_from(WordModel)).scalar_one()
    assert count == 1


def test_get_or_create_applies_defaults_only_on_insert(database) -> None:
    with get_db_session() as session:
        word, _ = get_or_create(session, WordModel, word="犬", language_code="ja")
        mark, created = get_or_create(
            session,
            WordUserMarkModel,
            defaults={"mark": 2, "note": "first"},
            user_id=7,
            word_id=word.id,
        )
        again, created_again = get_or_create(
            session,
            WordUserMarkModel,
            defaults={"mark": 5, "note": "ignored"},
            user_id=7,
            word_id=word.id,
        )

    assert created and not created_again
    assert again.id == mark.id
    assert (again.mark, again.note, again.source) == (2, "first", "manual")


def test_same_literal_in_other_language_is_a_different_word(database) -> None:
    with get_db_session() as session:
        ja, _ = get_or_create(session, WordModel, word="pan", language_code="es")
        en, _ = get_or_create(session, WordModel, word="pan", language_code="en")
    assert ja.id != en.id


def test_get_or_create_requires_a_key(database) -> None:
    with get_db_session() as session:
        with pytest.raises(ValueError):
            get_or_create(session, WordModel)
