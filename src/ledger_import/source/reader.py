from __future__ import annotations

from collections.abc import Sequence
from datetime import date, datetime
from pathlib import Path
from typing import Any

import pandas as pd

from ..models.sale import SALE_FIELDS, ParsedSale

"""Source reading: turns an uploaded file into the text blob the parser consumes.

- .csv / .tsv / .txt (and unknown suffixes): decoded as text, utf-8 first,
  latin-1 as fallback (ledgers exported by older Windows tools)
- .xlsx: first worksheet only, flattened into tab-separated text so it reads
  exactly like a selection pasted from a spreadsheet
"""

__all__ = [
    "SourceReadError",
    "EXCEL_SUFFIXES",
    "read_source_text",
    "sheet_to_text",
    "sales_frame",
]

EXCEL_SUFFIXES = {".xlsx", ".xlsm"}
TEXT_ENCODINGS = ("utf-8-sig", "latin-1")


class SourceReadError(Exception):
    """Raised when the source file cannot be read."""


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and pd.isna(value):
        return ""
    if value is pd.NaT:
        return ""
    if isinstance(value, (datetime, date)):
        return value.strftime("%d/%m/%Y")
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    # セル内のタブ/改行は区切りと衝突するため空白へ
    return " ".join(str(value).split())


def sheet_to_text(df: pd.DataFrame) -> str:
    """Flatten a raw (header=None) sheet into tab-separated lines."""
    lines = []
    for raw in df.itertuples(index=False, name=None):
        lines.append("\t".join(_cell_text(v) for v in raw))
    return "\n".join(lines)


def _read_text(path: Path) -> str:
    data = path.read_bytes()
    for encoding in TEXT_ENCODINGS:
        try:
            return data.decode(encoding)
        except UnicodeDecodeError:
            continue
    # latin-1 decodes any byte sequence
    raise SourceReadError(f"cannot decode {path}")  # pragma: no cover


def read_source_text(path: Path) -> str:
    """Read `path` and return its content as ledger text.

    Raises:
        SourceReadError: missing file, unreadable workbook or I/O failure
    """
    if not path.exists():
        raise SourceReadError(f"source file not found: {path}")
    if not path.is_file():
        raise SourceReadError(f"source is not a file: {path}")

    if path.suffix.lower() in EXCEL_SUFFIXES:
        try:
            df = pd.read_excel(path, sheet_name=0, header=None, dtype=object, engine="openpyxl")
        except Exception as e:
            raise SourceReadError(f"cannot read workbook {path.name}: {e}") from e
        return sheet_to_text(df)

    try:
        return _read_text(path)
    except OSError as e:
        raise SourceReadError(f"cannot read {path}: {e}") from e


def sales_frame(sales: Sequence[ParsedSale]) -> pd.DataFrame:
    """Tabular preview of parsed sales (one column per sale field)."""
    return pd.DataFrame([s.to_dict() for s in sales], columns=list(SALE_FIELDS))
