from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from psycopg2.extras import execute_values

from ..models.sale import SALE_FIELDS, ParsedSale

"""PostgreSQL collaborators: full replacement of sales and import history.

replace_sales() runs DELETE + batched INSERT inside one explicit transaction,
so storage ends up either with exactly the new set of sales or untouched.
"""

__all__ = [
    "SALES_TABLE",
    "HISTORY_TABLE",
    "ReplaceError",
    "ImportHistoryError",
    "ReplaceResult",
    "replace_sales",
    "PostgresSalesStore",
    "PostgresImportHistory",
]

logger = logging.getLogger(__name__)

SALES_TABLE = "vendas"
HISTORY_TABLE = "historico_importacoes"

# 履歴テーブルの status 列は小文字ポルトガル語
_HISTORY_STATUS = {"success": "sucesso", "error": "erro"}


class ReplaceError(Exception):
    pass


class ImportHistoryError(Exception):
    pass


@dataclass(frozen=True)
class ReplaceResult:
    deleted_rows: int
    inserted_rows: int
    elapsed_seconds: float


def _sale_row(sale: ParsedSale, user_id: str | None) -> tuple[Any, ...]:
    values = tuple(getattr(sale, name) for name in SALE_FIELDS)
    return values + (user_id,) if user_id is not None else values


def _rollback(cursor: Any) -> None:
    try:
        cursor.execute("ROLLBACK")
    except Exception:  # pragma: no cover
        logger.debug("rollback failed", exc_info=True)


def replace_sales(
    cursor: Any,
    sales: Sequence[ParsedSale],
    user_id: str | None = None,
    page_size: int = 1000,
) -> ReplaceResult:
    """Replace every stored sale (of `user_id` when given) with `sales`.

    Parameters
    ----------
    cursor: psycopg2 cursor (autocommit off)
    sales: validated sales; may be empty, which clears the table scope
    user_id: tenant scope; None replaces the whole table
    page_size: execute_values page size

    Raises
    ------
    ReplaceError: any database failure; the transaction is rolled back
    """
    columns = list(SALE_FIELDS)
    if user_id is not None:
        columns.append("usuario_id")
    cols_sql = ",".join(f'"{c}"' for c in columns)
    rows = [_sale_row(s, user_id) for s in sales]

    start = time.time()
    try:
        cursor.execute("BEGIN")
        if user_id is not None:
            cursor.execute(f"DELETE FROM {SALES_TABLE} WHERE usuario_id = %s", (user_id,))
        else:
            cursor.execute(f"DELETE FROM {SALES_TABLE}")
        deleted = cursor.rowcount if isinstance(cursor.rowcount, int) and cursor.rowcount > 0 else 0
        if rows:
            execute_values(
                cursor,
                f"INSERT INTO {SALES_TABLE} ({cols_sql}) VALUES %s",
                rows,
                page_size=page_size,
            )
        cursor.execute("COMMIT")
    except Exception as e:
        _rollback(cursor)
        raise ReplaceError(str(e)) from e

    elapsed = time.time() - start
    logger.debug("replaced sales deleted=%d inserted=%d elapsed=%.3fs", deleted, len(rows), elapsed)
    return ReplaceResult(deleted_rows=deleted, inserted_rows=len(rows), elapsed_seconds=elapsed)


class PostgresSalesStore:
    """SalesStore backed by the `vendas` table."""

    def __init__(self, cursor: Any, user_id: str | None = None, page_size: int = 1000) -> None:
        self._cursor = cursor
        self._user_id = user_id
        self._page_size = page_size

    def replace(self, sales: Sequence[ParsedSale]) -> None:
        replace_sales(self._cursor, sales, user_id=self._user_id, page_size=self._page_size)


class PostgresImportHistory:
    """ImportHistory backed by the `historico_importacoes` table."""

    def __init__(self, cursor: Any, user_id: str | None = None) -> None:
        self._cursor = cursor
        self._user_id = user_id

    def log(self, source_label: str, record_count: int, outcome: str) -> None:
        status = _HISTORY_STATUS.get(outcome, "erro")
        try:
            self._cursor.execute(
                f"INSERT INTO {HISTORY_TABLE} (arquivo, registros, status, usuario_id) "
                "VALUES (%s, %s, %s, %s)",
                (source_label, record_count, status, self._user_id),
            )
            self._cursor.execute("COMMIT")
        except Exception as e:
            _rollback(self._cursor)
            raise ImportHistoryError(str(e)) from e
