import pytest

from lexibase.services import StatusImportService, WordMarkService
from lexibase.services.status_import import StatusCard, card_to_mark


@pytest.mark.parametrize(
    ("status", "extended", "expected"),
    [
        (0, None, 1),
        (1, None, 2),
        (2, 0, 3),
        (3, None, 4),
        (3, 3, 5),
        (4, None, 5),
        (-3, None, 0),
    ],
)
def test_card_to_mark(status, extended, expected) -> None:
    assert card_to_mark(StatusCard(term="x", status=status, extended_status=extended)) == expected


def test_import_cards_creates_imported_marks(database) -> None:
    cards = [
        {"term": "猫", "status": 3, "extended_status": 3, "notes": "from reader"},
        {"term": "犬", "status": 1},
        {"term": "  ", "status": 2},
        {"term": "鳥", "status": "not a number"},
    ]

    report = StatusImportService().import_cards(4, "ja", cards)

    assert report.total == 4
    assert report.succeeded == 2
    assert report.failed == 2
    assert report.errors() == [
        "card[2]: Card has no term",
        "card[3]: Invalid card: invalid literal for int() with base 10: 'not a number'",
    ]

    marks = WordMarkService()
    cat = marks.get_mark(4, "猫", "ja").data
    assert cat["mark"] == 5
    assert cat["source"] == "imported"
    assert cat["note"] == "from reader"
    assert marks.get_mark(4, "犬", "ja").data["mark"] == 2


def test_reimport_overwrites_previous_mark(database) -> None:
    service = StatusImportService()
    service.import_cards(4, "ja", [{"term": "猫", "status": 0}])
    service.import_cards(4, "ja", [{"term": "猫", "status": 2}])

    result = WordMarkService().list_user_marks(4)
    assert result.data["pagination"]["total"] == 1
    assert result.data["marks"][0]["mark"] == 3
