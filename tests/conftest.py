# Shared pytest fixtures
from __future__ import annotations

import tempfile
from pathlib import Path

import pytest

from ledger_import.logging.init import reset_logging


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture(autouse=True)
def _fresh_logging():
    # capsys が差し替えた stdout にハンドラを張り直す
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def sample_config_yaml() -> str:
    return """user_id: 7f1c2d7e-0000-4000-8000-000000000001
error_log_dir: ./logs
database:
  host: localhost
  port: 5432
  user: appuser
  password: secret
  database: dashboard
vocabulary:
  aliases:
    carro: [automovel]
  stop_words: [media]
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "import.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def clean_ledger() -> str:
    return (
        "Data;Carro;Ano;Placa;Cliente;Gestauto;Valor Financiado;Retorno;Tipo;Comissão\n"
        "16/01/2025;Honda Civic;2024;ABC-1234;João Silva;Sim;50.000,00;R1;Venda;1.500,00\n"
        "17/01/2025;Fiat Uno;2020;;Maria Souza;Não;;;Compra;0\n"
    )


@pytest.fixture()
def partial_ledger() -> str:
    return (
        "Data;Carro;Ano;Comissão\n"
        "16/01/2025;Honda Civic;2024;1.500,00\n"
        "17/01/2025;Toyota Corolla;2023;-50\n"
        "18/01/2025;Fiat Uno;1975;300\n"
    )
