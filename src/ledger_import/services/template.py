from __future__ import annotations

from pathlib import Path

"""Downloadable import template (header + one example row, ';' separated)."""

TEMPLATE_HEADER = "Data;Carro;Ano;Placa;Cliente;Gestauto;Valor Financiado;Retorno;Tipo;Comissão"
TEMPLATE_EXAMPLE = "15/12/2023;Honda Civic;2020;ABC-1234;João Silva;Sim;50000,00;R1;Venda;1500,00"
TEMPLATE_FILENAME = "modelo_importacao_vendas.csv"


def render_template_csv() -> str:
    return "\n".join([TEMPLATE_HEADER, TEMPLATE_EXAMPLE])


def write_template(path: Path) -> Path:
    """Write the template (utf-8 with BOM so spreadsheet tools keep the accents)."""
    if path.is_dir():
        path = path / TEMPLATE_FILENAME
    path.write_text(render_template_csv() + "\n", encoding="utf-8-sig")
    return path
