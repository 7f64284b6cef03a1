from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass

from ..config.vocabulary import Vocabulary, default_vocabulary
from ..models.section import Section

"""Header analysis: alias resolution, section partitioning, stop rows."""

__all__ = [
    "HeaderAnalysis",
    "normalize_label",
    "resolve_field",
    "analyze_header_row",
    "is_stop_row",
]

_SEPARATORS = re.compile(r"[_\s]+")


@dataclass(frozen=True)
class HeaderAnalysis:
    is_header: bool
    sections: tuple[Section, ...]


def normalize_label(cell: str) -> str:
    """Lower-case and trim; underscores and runs of whitespace become one space."""
    return _SEPARATORS.sub(" ", cell).strip().lower()


def resolve_field(cell: str, vocabulary: Vocabulary | None = None) -> str | None:
    """Map a header label to a canonical sale field.

    Exact matches win over substring matches. Within each pass the longest
    alias is tried first, so "Ano Modelo" resolves to ano_carro even though
    "modelo" alone is a car alias.
    """
    label = normalize_label(cell)
    if not label:
        return None
    pairs = (vocabulary or default_vocabulary()).aliases
    for field_name, alias in pairs:
        if label == alias:
            return field_name
    for field_name, alias in pairs:
        if alias in label:
            return field_name
    return None


def analyze_header_row(cells: Sequence[str], vocabulary: Vocabulary | None = None) -> HeaderAnalysis:
    """Detect a header row and split it into side-by-side sections.

    A field that repeats within the row starts a new section (a second table
    placed next to the first). Sections without two fields or without a date
    or car column are discarded.
    """
    sections: list[Section] = []
    current: dict[str, int] = {}

    def finalize() -> None:
        if current:
            section = Section.from_mapping(current)
            if section.is_valid:
                sections.append(section)

    for idx, cell in enumerate(cells):
        field_name = resolve_field(cell, vocabulary)
        if field_name is None:
            continue
        if field_name in current:
            finalize()
            current = {}
        current[field_name] = idx
    finalize()

    return HeaderAnalysis(is_header=bool(sections), sections=tuple(sections))


def is_stop_row(cells: Sequence[str], vocabulary: Vocabulary | None = None) -> bool:
    """True when the first non-empty cell starts with a summary keyword (Total, Saldo...)."""
    first = next((c for c in cells if c.strip()), "")
    if not first:
        return False
    label = first.strip().lower()
    stop_words = (vocabulary or default_vocabulary()).stop_words
    return any(label.startswith(word) for word in stop_words)
