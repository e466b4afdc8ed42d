"""Structured result containers returned across the package boundary."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, List, Optional, TypeVar

T = TypeVar("T")


@dataclass(slots=True)
class OperationResult(Generic[T]):
    """Success flag, human readable message and optional payload."""

    success: bool
    message: str = ""
    data: Optional[T] = None

    @classmethod
    def ok(cls, data: Optional[T] = None, message: str = "") -> "OperationResult[T]":
        return cls(success=True, message=message, data=data)

    @classmethod
    def fail(cls, message: str, data: Optional[T] = None) -> "OperationResult[T]":
        return cls(success=False, message=message, data=data)


@dataclass(slots=True)
class ItemOutcome:
    """Outcome of processing a single item inside a multi-step loop."""

    key: Any
    ok: bool
    error: Optional[str] = None
    detail: Optional[str] = None


@dataclass(slots=True)
class BatchReport:
    """Collection of per-item outcomes."""

    outcomes: List[ItemOutcome] = field(default_factory=list)

    def record_success(self, key: Any, detail: Optional[str] = None) -> None:
        self.outcomes.append(ItemOutcome(key=key, ok=True, detail=detail))

    def record_failure(self, key: Any, error: str) -> None:
        self.outcomes.append(ItemOutcome(key=key, ok=False, error=error))

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def succeeded(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.ok)

    @property
    def failed(self) -> int:
        return sum(1 for outcome in self.outcomes if not outcome.ok)

    def errors(self, limit: Optional[int] = None) -> List[str]:
        messages = [
            f"{outcome.key}: {outcome.error}" for outcome in self.outcomes if not outcome.ok
        ]
        return messages if limit is None else messages[:limit]


__all__ = ["BatchReport", "ItemOutcome", "OperationResult"]
