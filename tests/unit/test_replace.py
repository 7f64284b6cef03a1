from __future__ import annotations

from typing import Any

import pytest

from ledger_import.db import replace as rp
from ledger_import.db.replace import (
    ImportHistoryError,
    PostgresImportHistory,
    PostgresSalesStore,
    ReplaceError,
    ReplaceResult,
    replace_sales,
)
from ledger_import.models.sale import ParsedSale


class DummyCursor:
    def __init__(self, fail_on: str | None = None) -> None:
        self.statements: list[tuple[str, Any]] = []
        self.rowcount = -1
        self.fail_on = fail_on

    def execute(self, sql: str, params: Any = None) -> None:
        self.statements.append((sql, params))
        if self.fail_on and sql.startswith(self.fail_on):
            raise RuntimeError(f"forced failure on {self.fail_on}")
        if sql.startswith("DELETE"):
            self.rowcount = 3

    @property
    def sql(self) -> list[str]:
        return [s for s, _ in self.statements]


@pytest.fixture(autouse=True)
def patch_execute_values(monkeypatch):
    # psycopg2 の実接続なしで execute_values 呼び出しを記録
    def fake_execute_values(cursor, sql, rows, page_size=1000, template=None):
        if getattr(cursor, "fail_on", None) == "INSERT":
            raise RuntimeError("duplicate key")
        cursor.statements.append((sql, list(rows)))
    monkeypatch.setattr(rp, "execute_values", fake_execute_values)
    return fake_execute_values


def _sale(carro: str = "Honda Civic") -> ParsedSale:
    return ParsedSale(
        data_venda="2025-01-16",
        carro=carro,
        ano_carro=2024,
        placa="ABC1D23",
        nome_cliente="João Silva",
        gestauto="Sim",
        valor_financiado=None,
        retorno=None,
        tipo_operacao="Venda",
        valor_comissao=500.0,
    )


def test_replace_sales_runs_in_one_transaction():
    cur = DummyCursor()
    res = replace_sales(cur, [_sale(), _sale("Fiat Uno")])
    assert isinstance(res, ReplaceResult)
    assert res.inserted_rows == 2
    assert res.deleted_rows == 3
    assert cur.sql[0] == "BEGIN"
    assert cur.sql[1] == "DELETE FROM vendas"
    assert cur.sql[2].startswith('INSERT INTO vendas ("data_venda","carro",')
    assert cur.sql[-1] == "COMMIT"
    rows = cur.statements[2][1]
    assert rows[0][:3] == ("2025-01-16", "Honda Civic", 2024)
    assert len(rows[0]) == 10


def test_replace_sales_scoped_by_user():
    cur = DummyCursor()
    replace_sales(cur, [_sale()], user_id="u-1")
    assert cur.statements[1] == ("DELETE FROM vendas WHERE usuario_id = %s", ("u-1",))
    assert '"usuario_id"' in cur.sql[2]
    assert cur.statements[2][1][0][-1] == "u-1"


def test_replace_sales_empty_list_only_clears():
    cur = DummyCursor()
    res = replace_sales(cur, [])
    assert res.inserted_rows == 0
    assert cur.sql == ["BEGIN", "DELETE FROM vendas", "COMMIT"]


def test_replace_sales_rolls_back_on_insert_failure():
    cur = DummyCursor(fail_on="INSERT")
    with pytest.raises(ReplaceError, match="duplicate key"):
        replace_sales(cur, [_sale()])
    assert cur.sql[-1] == "ROLLBACK"
    assert "COMMIT" not in cur.sql


def test_replace_sales_rolls_back_on_delete_failure():
    cur = DummyCursor(fail_on="DELETE")
    with pytest.raises(ReplaceError):
        replace_sales(cur, [_sale()])
    assert cur.sql == ["BEGIN", "DELETE FROM vendas", "ROLLBACK"]


def test_postgres_sales_store_delegates():
    cur = DummyCursor()
    PostgresSalesStore(cur, user_id="u-2").replace([_sale()])
    assert cur.statements[1][1] == ("u-2",)
    assert cur.sql[-1] == "COMMIT"


@pytest.mark.parametrize("outcome, status", [("success", "sucesso"), ("error", "erro")])
def test_import_history_insert(outcome: str, status: str):
    cur = DummyCursor()
    PostgresImportHistory(cur, user_id="u-3").log("vendas.csv", 12, outcome)
    sql, params = cur.statements[0]
    assert sql.startswith("INSERT INTO historico_importacoes")
    assert params == ("vendas.csv", 12, status, "u-3")
    assert cur.sql[-1] == "COMMIT"


def test_import_history_failure_raises_history_error():
    cur = DummyCursor(fail_on="INSERT")
    with pytest.raises(ImportHistoryError):
        PostgresImportHistory(cur).log("vendas.csv", 1, "success")
    assert cur.sql[-1] == "ROLLBACK"
