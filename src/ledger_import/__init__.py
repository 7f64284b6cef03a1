"""Sales ledger importer.

Parses loosely structured sales ledgers (CSV/TSV/pipe/semicolon text, pasted
spreadsheet selections) into validated sale records and row-level errors.
"""

from .models import ImportRowError, ParsedSale, ParseResult
from .parsing import parse_sales_content

__all__ = [
    "ImportRowError",
    "ParsedSale",
    "ParseResult",
    "parse_sales_content",
]

__version__ = "0.1.0"
