from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime

from .sale import ImportRowError

"""ErrorRecord model for the JSON Lines error log.

Each ImportRowError surfaced by an import is persisted as one ErrorRecord.
row=0 marks a file-level problem (unrecognised layout, storage failure) where
no specific source line applies.
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        source: Label of the imported source (file name or "Texto Colado")
        row: 1-based source line number, 0 for file-level errors
        message: Human readable description
        data: Raw field map of the failing row
    """
    timestamp: str  # ISO8601 UTC
    source: str
    row: int
    message: str
    data: dict[str, str] = field(default_factory=dict)

    @staticmethod
    def create(source: str, row: int, message: str, data: dict[str, str] | None = None) -> ErrorRecord:
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            source=source,
            row=row,
            message=message,
            data=dict(data or {}),
        )

    @staticmethod
    def from_row_error(source: str, error: ImportRowError) -> ErrorRecord:
        return ErrorRecord.create(source, error.row, error.message, error.data)

    def to_json_line(self) -> str:
        """Serialize to one JSON line (fixed key set, no extras)."""
        return json.dumps(asdict(self), ensure_ascii=False)
