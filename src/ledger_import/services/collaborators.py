from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from ..models.sale import ParsedSale

"""Collaborator interfaces consumed by the import workflow.

SalesStore replaces every stored sale of the current tenant in one atomic
call. ImportHistory records the outcome of a run; it is fire-and-forget and
its failures never abort an import. The in-memory implementations back
dry runs and tests.
"""

__all__ = [
    "SalesStore",
    "ImportHistory",
    "MemorySalesStore",
    "MemoryImportHistory",
    "HistoryEntry",
]


@runtime_checkable
class SalesStore(Protocol):
    def replace(self, sales: Sequence[ParsedSale]) -> None:
        """Atomically replace all stored sales. Raises on any rejection."""
        ...


@runtime_checkable
class ImportHistory(Protocol):
    def log(self, source_label: str, record_count: int, outcome: str) -> None:
        """Record an import run; outcome is "success" or "error"."""
        ...


@dataclass
class MemorySalesStore:
    sales: list[ParsedSale] = field(default_factory=list)
    replace_calls: int = 0

    def replace(self, sales: Sequence[ParsedSale]) -> None:
        self.replace_calls += 1
        self.sales = list(sales)


@dataclass(frozen=True)
class HistoryEntry:
    source_label: str
    record_count: int
    outcome: str


@dataclass
class MemoryImportHistory:
    entries: list[HistoryEntry] = field(default_factory=list)

    def log(self, source_label: str, record_count: int, outcome: str) -> None:
        self.entries.append(HistoryEntry(source_label, record_count, outcome))
