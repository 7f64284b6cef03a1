"""Domain models for the sales ledger importer.

This package contains the record types produced by the parser and the
aggregate types produced by the import workflow.
"""

from .error_record import ErrorRecord
from .import_outcome import ImportOutcome, ImportStatus
from .sale import CLIENT_PLACEHOLDER, SALE_FIELDS, ImportRowError, ParsedSale, ParseResult
from .section import Section

__all__ = [
    # Parser output
    "SALE_FIELDS",
    "CLIENT_PLACEHOLDER",
    "ParsedSale",
    "ImportRowError",
    "ParseResult",
    "Section",
    # Workflow
    "ErrorRecord",
    "ImportOutcome",
    "ImportStatus",
]
