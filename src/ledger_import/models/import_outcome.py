from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .sale import ImportRowError, ParsedSale

"""Import outcome models.

ImportOutcome aggregates what a single import run produced: the parsed sales
handed to storage, the row errors shown to the user and the final status
recorded in the import history.
"""

__all__ = [
    "ImportStatus",
    "ImportOutcome",
]


class ImportStatus(Enum):
    """Final status of an import run.

    - SUCCESS: every recognised record was stored
    - PARTIAL: records were stored but some rows failed validation
    - FAILED: nothing was stored (no valid record, or storage rejected them)
    """
    SUCCESS = "Sucesso"
    PARTIAL = "Sucesso Parcial"
    FAILED = "Falha"


@dataclass(frozen=True)
class ImportOutcome:
    source_label: str
    status: ImportStatus
    imported: int  # 保存済み件数
    failed: int  # 失敗件数 (行エラー + ファイルレベルエラー)
    errors: list[ImportRowError] = field(default_factory=list)
    sales: list[ParsedSale] = field(default_factory=list)
    elapsed_seconds: float = 0.0

    @property
    def history_outcome(self) -> str:
        """Outcome label passed to the import history collaborator."""
        return "error" if self.status is ImportStatus.FAILED else "success"
