from __future__ import annotations

import re
from datetime import date, datetime, timedelta

"""Field normalizers: currency, date and model-year decoding.

All functions are pure and tolerant: malformed input yields a neutral value
(0, 0.0 or None) instead of raising, so one bad cell never aborts an import.
"""

__all__ = [
    "EXCEL_EPOCH",
    "DATE_PATTERNS",
    "parse_currency",
    "parse_date",
    "extract_year",
]

EXCEL_EPOCH = date(1899, 12, 30)
EXCEL_SERIAL_MIN = 20000
EXCEL_SERIAL_MAX = 60000  # exclusive

# Accepted (exclusive) year window for parsed dates
DATE_YEAR_MIN = 1980
DATE_YEAR_MAX = 2100

# (ledger notation, strptime format) in trial order. The patterns are purely
# numeric, so the pt-BR and en-US readings coincide and one pass covers both.
DATE_PATTERNS: tuple[tuple[str, str], ...] = (
    ("dd/MM/yyyy", "%d/%m/%Y"),
    ("dd/MM/yy", "%d/%m/%y"),
    ("d/M/yyyy", "%d/%m/%Y"),
    ("M/d/yyyy", "%m/%d/%Y"),
    ("MM/dd/yyyy", "%m/%d/%Y"),
    ("yyyy-MM-dd", "%Y-%m-%d"),
    ("dd-MM-yyyy", "%d-%m-%Y"),
    ("dd.MM.yyyy", "%d.%m.%Y"),
)

_CURRENCY_NOISE = re.compile(r"R\$|\$|\s")
_NUMBER_PREFIX = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)")
_EXCEL_SERIAL = re.compile(r"\d{5}")
_FULL_YEAR = re.compile(r"\b(?:19|20)\d{2}\b")
_NON_DIGITS = re.compile(r"\D")


def _leading_float(text: str) -> float:
    m = _NUMBER_PREFIX.match(text)
    if not m:
        return 0.0
    try:
        return float(m.group(0))
    except ValueError:  # pragma: no cover - regex guarantees a float literal
        return 0.0


def parse_currency(value: str | None) -> float:
    """Parse a locale-ambiguous money string.

    >>> parse_currency("1.234,56"), parse_currency("1,234.56"), parse_currency("400,00")
    (1234.56, 1234.56, 400.0)

    When both '.' and ',' occur, the rightmost one is the decimal separator.
    A lone ',' is a decimal comma. Empty or unparseable input gives 0.0.
    """
    if not value:
        return 0.0
    clean = _CURRENCY_NOISE.sub("", str(value))
    if not clean:
        return 0.0
    if "," in clean and "." in clean:
        if clean.rfind(".") > clean.rfind(","):
            clean = clean.replace(",", "")  # 1,234.56
        else:
            clean = clean.replace(".", "").replace(",", ".")  # 1.234,56
    elif "," in clean:
        clean = clean.replace(",", ".", 1)
    return _leading_float(clean)


def _year_ok(d: date) -> bool:
    return DATE_YEAR_MIN < d.year < DATE_YEAR_MAX


def parse_date(value: str | None) -> date | None:
    """Decode a sale date.

    Tries an Excel serial day count first (5 digits in [20000, 60000), counted
    from 1899-12-30), then DATE_PATTERNS in order. A candidate is accepted
    only when its year lies strictly between 1980 and 2100.
    """
    if not value:
        return None
    text = str(value).strip()
    if not text:
        return None

    if _EXCEL_SERIAL.fullmatch(text):
        serial = int(text)
        if EXCEL_SERIAL_MIN <= serial < EXCEL_SERIAL_MAX:
            candidate = EXCEL_EPOCH + timedelta(days=serial)
            if _year_ok(candidate):
                return candidate

    for _label, fmt in DATE_PATTERNS:
        try:
            candidate = datetime.strptime(text, fmt).date()
        except ValueError:
            continue
        if _year_ok(candidate):
            return candidate
    return None


def extract_year(value: str | None) -> int:
    """Extract a model year from free text ("2020", "2019/2020", "Civic 20").

    Returns 0 when no year can be recognised.
    """
    if not value:
        return 0
    text = str(value).strip()

    m = _FULL_YEAR.search(text)
    if m:
        return int(m.group(0))

    if "/" in text:
        tail = text.rsplit("/", 1)[1].strip()
        if len(tail) == 4 and tail.isdigit():
            return int(tail)
        if len(tail) == 2 and tail.isdigit():
            return 2000 + int(tail)

    digits = _NON_DIGITS.sub("", text)
    if len(digits) == 4:
        return int(digits)
    if len(digits) == 2:
        return 2000 + int(digits)
    return 0
