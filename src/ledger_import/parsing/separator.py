from __future__ import annotations

import re

"""Separator detection and line splitting.

The ledger text arrives as one blob (uploaded file or pasted spreadsheet
selection). The dominant delimiter is sniffed from the first lines and each
line is then split into trimmed cells.
"""

__all__ = [
    "SAMPLE_LINES",
    "detect_separator",
    "split_lines",
    "split_line",
    "build_grid",
]

SAMPLE_LINES = 10

_LINE_BREAK = re.compile(r"\r?\n")
_EDGE_QUOTES = re.compile(r'^"|"$')


def split_lines(text: str) -> list[str]:
    return _LINE_BREAK.split(text)


def detect_separator(text: str) -> str:
    """Pick the dominant delimiter among tab, ';', '|' and ','.

    Only the first SAMPLE_LINES lines are inspected. Ties resolve towards
    comma, which is also the answer for empty input.
    """
    sample = "\n".join(split_lines(text)[:SAMPLE_LINES])
    tabs = sample.count("\t")
    semicolons = sample.count(";")
    commas = sample.count(",")
    pipes = sample.count("|")

    if tabs > semicolons and tabs > commas and tabs > pipes:
        return "\t"
    if semicolons > commas and semicolons > pipes:
        return ";"
    if pipes > commas:
        return "|"
    return ","


def _clean_cell(raw: str) -> str:
    return _EDGE_QUOTES.sub("", raw.strip()).strip()


def split_line(line: str, separator: str) -> list[str]:
    """Split one line into cells.

    Tab-separated lines (spreadsheet paste) are split directly. Other
    delimiters honour double-quoted segments: a separator inside quotes is
    kept as text. Always returns at least one cell.
    """
    if separator == "\t":
        return [cell.strip() for cell in line.split("\t")]

    cells: list[str] = []
    current: list[str] = []
    in_quotes = False
    for ch in line:
        if ch == '"':
            in_quotes = not in_quotes
            current.append(ch)
        elif ch == separator and not in_quotes:
            cells.append(_clean_cell("".join(current)))
            current = []
        else:
            current.append(ch)
    cells.append(_clean_cell("".join(current)))
    return cells


def build_grid(text: str, separator: str) -> list[list[str]]:
    """Materialise the whole text as a grid of trimmed cells (one row per line)."""
    return [split_line(line, separator) for line in split_lines(text)]
