"""Import familiarity statuses exported by third-party reading tools."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional

from .. import logging_manager as log_mgr
from ..database.models import MAX_MARK, MIN_MARK, MarkSource
from ..results import BatchReport
from .word_marks import WordMarkService

logger = log_mgr.get_logger("services.status_import")

# Status 3 with extended status 3 means "learned" rather than merely "familiar".
LEARNED_STATUS = 3


@dataclass(slots=True)
class StatusCard:
    term: str
    status: int
    extended_status: Optional[int] = None
    notes: str = ""
    fragment: str = ""

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "StatusCard":
        extended = data.get("extended_status")
        return cls(
            term=str(data.get("term") or "").strip(),
            status=int(data.get("status", 0)),
            extended_status=int(extended) if extended is not None else None,
            notes=str(data.get("notes") or ""),
            fragment=str(data.get("fragment") or ""),
        )


def card_to_mark(card: StatusCard) -> int:
    """Map a card's status onto the 0-5 mark scale."""

    mark = card.status + 1
    if card.status == LEARNED_STATUS and card.extended_status == LEARNED_STATUS:
        mark += 1
    return min(MAX_MARK, max(MIN_MARK, mark))


class StatusImportService:
    def __init__(self, marks: Optional[WordMarkService] = None) -> None:
        self.marks = marks or WordMarkService()

    def import_cards(
        self,
        user_id: int,
        language_code: str,
        cards: Iterable[Mapping[str, Any]],
    ) -> BatchReport:
        report = BatchReport()
        for index, raw in enumerate(cards):
            try:
                card = StatusCard.from_mapping(raw)
            except (TypeError, ValueError) as exc:
                report.record_failure(f"card[{index}]", f"Invalid card: {exc}")
                continue
            if not card.term:
                report.record_failure(f"card[{index}]", "Card has no term")
                continue

            result = self.marks.create_or_update_mark(
                user_id,
                card.term,
                language_code,
                card_to_mark(card),
                note=card.notes,
                source=MarkSource.IMPORTED,
            )
            if result.success:
                report.record_success(card.term)
            else:
                report.record_failure(card.term, result.message)

        logger.info(
            "Imported %d of %d cards",
            report.succeeded,
            report.total,
            extra={"event": "import.completed", "status": "partial" if report.failed else "ok"},
        )
        return report


__all__ = ["StatusCard", "StatusImportService", "card_to_mark"]
