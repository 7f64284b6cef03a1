from __future__ import annotations

import logging
import re
from datetime import date

from ..config.vocabulary import Vocabulary, default_vocabulary
from ..models.sale import CLIENT_PLACEHOLDER, ImportRowError, ParsedSale, ParseResult
from ..models.section import Section
from .headers import analyze_header_row, is_stop_row
from .normalizers import extract_year, parse_currency, parse_date
from .separator import build_grid, detect_separator

"""Grid walker: turns a free-text sales ledger into ParsedSale records.

Rows are walked top to bottom. Header rows (re)define the active sections;
data rows are read once per active section, so a row of two side-by-side
tables yields two sales. Skips (blank rows, rows before any header, summary
rows, empty section slices) are silent; rows that look like data but fail
validation are reported as ImportRowError and the walk continues.
"""

__all__ = [
    "YEAR_MIN",
    "parse_sales_content",
]

logger = logging.getLogger(__name__)

YEAR_MIN = 1980
# 日付エラーを報告する車名の最小長 (これ以下はノイズ行とみなす)
DATA_LIKE_CAR_LENGTH = 3

PURCHASE_MARKERS = frozenset({"c", "x", "sim", "s"})
GESTAUTO_YES = frozenset({"sim", "s", "yes", "true", "x", "ok", "com"})

_PLATE_JUNK = re.compile(r"[^A-Z0-9-]")


def _year_max() -> int:
    return date.today().year + 1


def _operation_type(raw: str) -> str:
    value = raw.strip().lower()
    if "compra" in value or value in PURCHASE_MARKERS:
        return "Compra"
    return "Venda"


def _gestauto_flag(raw: str) -> str:
    return "Sim" if raw.strip().lower() in GESTAUTO_YES else "Não"


def _plate(raw: str) -> str | None:
    plate = _PLATE_JUNK.sub("", raw.upper())
    return plate or None


def _extract(row: list[str], section: Section) -> dict[str, str]:
    return {
        name: (row[idx] if idx < len(row) else "")
        for name, idx in section.columns()
    }


def _read_section(
    row_number: int, row: list[str], section: Section, errors: list[ImportRowError]
) -> ParsedSale | None:
    if "data_venda" not in section or "carro" not in section:
        return None

    raw = _extract(row, section)
    if not any(v.strip() for v in raw.values()):
        return None
    date_raw = raw.get("data_venda", "").strip()
    car = raw.get("carro", "").strip()
    if not date_raw and not car:
        return None

    sale_date = parse_date(date_raw)
    if sale_date is None:
        # ポリシー: 車名が短い行はコメント/ノイズ扱いで黙ってスキップ
        if len(car) > DATA_LIKE_CAR_LENGTH:
            errors.append(ImportRowError(
                row=row_number,
                message=f"Data inválida ou ausente: '{date_raw}'",
                data=raw,
            ))
        return None
    if not car:
        return None

    year_raw = raw.get("ano_carro", "").strip()
    year = extract_year(year_raw) if year_raw else sale_date.year
    if not YEAR_MIN <= year <= _year_max():
        errors.append(ImportRowError(
            row=row_number,
            message=f"Ano do veículo inválido: '{year_raw or year}'",
            data=raw,
        ))
        return None

    commission = parse_currency(raw.get("valor_comissao", ""))
    if commission < 0:
        errors.append(ImportRowError(
            row=row_number,
            message=f"Comissão inválida (negativa): {commission:.2f}",
            data=raw,
        ))
        return None

    financed = parse_currency(raw.get("valor_financiado", ""))
    retorno = raw.get("retorno", "").strip()
    client = raw.get("nome_cliente", "").strip()

    return ParsedSale(
        data_venda=sale_date.isoformat(),
        carro=car,
        ano_carro=year,
        placa=_plate(raw.get("placa", "")),
        nome_cliente=client or CLIENT_PLACEHOLDER,
        gestauto=_gestauto_flag(raw.get("gestauto", "")),
        valor_financiado=financed or None,
        retorno=retorno or None,
        tipo_operacao=_operation_type(raw.get("tipo_operacao", "")),
        valor_comissao=commission,
    )


def parse_sales_content(content: str, vocabulary: Vocabulary | None = None) -> ParseResult:
    """Parse a whole ledger text blob.

    Args:
        content: Entire file content or pasted selection
        vocabulary: Alias/stop-word tables (defaults to the built-in ones)

    Returns:
        ParseResult with the accepted sales and the row-level errors

    Raises:
        TypeError: content is not a str
    """
    if not isinstance(content, str):
        raise TypeError(f"content must be str, got {type(content).__name__}")
    vocab = vocabulary or default_vocabulary()

    separator = detect_separator(content)
    grid = build_grid(content, separator)
    logger.debug("separator=%r rows=%d", separator, len(grid))

    sales: list[ParsedSale] = []
    errors: list[ImportRowError] = []
    active: tuple[Section, ...] = ()
    header_seen = False

    for row_number, row in enumerate(grid, start=1):
        if not any(cell for cell in row):
            continue

        analysis = analyze_header_row(row, vocab)
        if analysis.is_header:
            active = analysis.sections
            header_seen = True
            logger.debug("row %d: header with %d section(s)", row_number, len(active))
            continue

        if not header_seen:
            continue
        if is_stop_row(row, vocab):
            continue

        for section in active:
            sale = _read_section(row_number, row, section, errors)
            if sale is not None:
                sales.append(sale)

    return ParseResult(sales=sales, errors=errors)
