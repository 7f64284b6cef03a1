from .headers import HeaderAnalysis, analyze_header_row, is_stop_row, resolve_field
from .ledger import parse_sales_content
from .normalizers import extract_year, parse_currency, parse_date
from .separator import build_grid, detect_separator, split_line

__all__ = [
    "HeaderAnalysis",
    "analyze_header_row",
    "build_grid",
    "detect_separator",
    "extract_year",
    "is_stop_row",
    "parse_currency",
    "parse_date",
    "parse_sales_content",
    "resolve_field",
    "split_line",
]
