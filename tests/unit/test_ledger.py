from __future__ import annotations

from datetime import date, timedelta

import pytest

from ledger_import.config.vocabulary import build_vocabulary
from ledger_import.models.sale import CLIENT_PLACEHOLDER, ParsedSale
from ledger_import.parsing.ledger import parse_sales_content
from ledger_import.parsing.normalizers import EXCEL_EPOCH


def test_clean_csv_round_trip():
    text = "data,carro,ano_carro,valor_comissao\n16/01/2025,Honda Civic,2024,500"
    result = parse_sales_content(text)
    assert result.errors == []
    assert result.sales == [
        ParsedSale(
            data_venda="2025-01-16",
            carro="Honda Civic",
            ano_carro=2024,
            placa=None,
            nome_cliente=CLIENT_PLACEHOLDER,
            gestauto="Não",
            valor_financiado=None,
            retorno=None,
            tipo_operacao="Venda",
            valor_comissao=500.0,
        )
    ]


def test_full_layout_normalization(clean_ledger: str):
    result = parse_sales_content(clean_ledger)
    assert result.errors == []
    civic, uno = result.sales
    assert civic.placa == "ABC-1234"
    assert civic.nome_cliente == "João Silva"
    assert civic.gestauto == "Sim"
    assert civic.valor_financiado == pytest.approx(50000.0)
    assert civic.retorno == "R1"
    assert civic.tipo_operacao == "Venda"
    assert civic.valor_comissao == pytest.approx(1500.0)
    assert uno.tipo_operacao == "Compra"
    assert uno.gestauto == "Não"
    assert uno.placa is None
    assert uno.valor_financiado is None
    assert uno.valor_comissao == 0.0  # zero commission is accepted


def test_excel_serial_date_under_date_column():
    result = parse_sales_content("data,carro,ano,valor\n45321,Fiat Argo,2023,300")
    assert result.errors == []
    assert result.sales[0].data_venda == (EXCEL_EPOCH + timedelta(days=45321)).isoformat()


def test_side_by_side_tables_yield_two_sales_per_row():
    text = (
        "data,carro,valor,data,carro,valor\n"
        "16/01/2025,Honda Civic,500,17/01/2025,Fiat Uno,300\n"
    )
    result = parse_sales_content(text)
    assert result.errors == []
    assert [(s.carro, s.data_venda, s.valor_comissao) for s in result.sales] == [
        ("Honda Civic", "2025-01-16", 500.0),
        ("Fiat Uno", "2025-01-17", 300.0),
    ]
    # no year column: model year falls back to the sale date's year
    assert [s.ano_carro for s in result.sales] == [2025, 2025]


def test_side_by_side_tables_pipe_delimited_with_half_empty_row():
    text = (
        "Data|Carro|Valor|Data|Carro|Valor\n"
        "16/01/2025|Honda Civic|500|17/01/2025|Fiat Uno|300\n"
        "18/01/2025|VW Gol|200|||\n"
    )
    result = parse_sales_content(text)
    assert result.errors == []
    assert [s.carro for s in result.sales] == ["Honda Civic", "Fiat Uno", "VW Gol"]


def test_negative_commission_rejected_and_parsing_continues():
    text = (
        "data,carro,ano,valor\n"
        "16/01/2025,Honda Civic,2024,-50\n"
        "17/01/2025,Fiat Uno,2020,300\n"
    )
    result = parse_sales_content(text)
    assert [s.carro for s in result.sales] == ["Fiat Uno"]
    assert len(result.errors) == 1
    err = result.errors[0]
    assert err.row == 2
    assert "Comissão" in err.message
    assert err.data["carro"] == "Honda Civic"
    assert err.data["valor_comissao"] == "-50"


@pytest.mark.parametrize("year", ["1899", "2099"])
def test_invalid_year_rejected(year: str):
    text = f"data,carro,ano modelo,valor\n16/01/2025,Honda Civic,{year},500\n"
    result = parse_sales_content(text)
    assert result.sales == []
    assert len(result.errors) == 1
    assert "Ano" in result.errors[0].message


def test_year_bounds_follow_current_year():
    next_year = date.today().year + 1
    text = (
        "data,carro,ano,valor\n"
        f"16/01/2025,Honda Civic,{next_year},500\n"
        f"16/01/2025,Fiat Uno,{next_year + 1},500\n"
        "16/01/2025,VW Gol,1980,500\n"
    )
    result = parse_sales_content(text)
    assert [s.carro for s in result.sales] == ["Honda Civic", "VW Gol"]
    assert [e.row for e in result.errors] == [3]


def test_stop_row_skipped_without_error():
    text = (
        "data,carro,ano,valor\n"
        "16/01/2025,Honda Civic,2024,500\n"
        "Total de vendas,Resumo do mês,,500\n"
        "17/01/2025,Fiat Uno,2020,300\n"
    )
    result = parse_sales_content(text)
    assert result.errors == []
    assert [s.carro for s in result.sales] == ["Honda Civic", "Fiat Uno"]


def test_second_header_replaces_layout():
    text = (
        "data,carro,valor\n"
        "16/01/2025,Honda Civic,500\n"
        "carro,data,ano,valor\n"
        "Fiat Uno,17/01/2025,2020,300\n"
    )
    result = parse_sales_content(text)
    assert result.errors == []
    uno = result.sales[1]
    assert (uno.carro, uno.data_venda, uno.ano_carro, uno.valor_comissao) == (
        "Fiat Uno", "2025-01-17", 2020, 300.0,
    )


def test_rows_before_first_header_are_ignored():
    text = (
        "Relatório de vendas\n"
        "16/01/2025,Honda Civic,2024,500\n"
        "\n"
        "data,carro,ano,valor\n"
        "17/01/2025,Fiat Uno,2020,-1\n"
    )
    result = parse_sales_content(text)
    assert result.sales == []
    # row numbers count blank lines too
    assert [e.row for e in result.errors] == [5]


@pytest.mark.policy
def test_bad_date_reported_only_for_data_looking_rows():
    text = (
        "data,carro,valor\n"
        "ontem,Honda Civic,500\n"
        "ontem,Gol,500\n"
        ",Toyota Corolla,500\n"
    )
    result = parse_sales_content(text)
    assert result.sales == []
    assert [e.row for e in result.errors] == [2, 4]
    assert all("Data" in e.message for e in result.errors)


def test_blank_and_partial_rows_skip_silently():
    text = (
        "data,carro,valor\n"
        ",,\n"
        "16/01/2025,,500\n"
        ",,500\n"
        "   \n"
    )
    result = parse_sales_content(text)
    assert result.sales == []
    assert result.errors == []


def test_operation_type_and_gestauto_normalization():
    text = (
        "Data;Carro;Gestauto;Tipo;Comissão\n"
        "16/01/2025;Honda Civic;x;C;100\n"
        "16/01/2025;Honda Fit;OK;s;100\n"
        "16/01/2025;Fiat Uno;COM;Compra à vista;100\n"
        "16/01/2025;VW Gol;nao;venda;100\n"
        "16/01/2025;Ford Ka;;;100\n"
    )
    result = parse_sales_content(text)
    assert result.errors == []
    assert [(s.gestauto, s.tipo_operacao) for s in result.sales] == [
        ("Sim", "Compra"),
        ("Sim", "Compra"),
        ("Sim", "Compra"),
        ("Não", "Venda"),
        ("Não", "Venda"),
    ]


def test_plate_is_uppercased_and_stripped():
    text = "Data;Carro;Placa;Comissão\n16/01/2025;Honda Civic;abc 1d23;100\n16/01/2025;Fiat Uno;  ;100\n"
    result = parse_sales_content(text)
    assert [s.placa for s in result.sales] == ["ABC1D23", None]


def test_tab_separated_paste():
    text = "Data\tCarro\tAno\tComissão\n16/01/2025\tHonda Civic\t2024\tR$ 1.500,00\n"
    result = parse_sales_content(text)
    assert result.sales[0].valor_comissao == pytest.approx(1500.0)


def test_quoted_csv_cells():
    text = 'data,carro,cliente,valor\n16/01/2025,"Civic, EXL","Silva, João","1.500,00"\n'
    sale = parse_sales_content(text).sales[0]
    assert sale.carro == "Civic, EXL"
    assert sale.nome_cliente == "Silva, João"
    assert sale.valor_comissao == pytest.approx(1500.0)


def test_extended_vocabulary_is_honoured():
    vocab = build_vocabulary(extra_aliases={"carro": ["automovel"]}, extra_stop_words=["media"])
    text = (
        "Data;Automovel;Comissão\n"
        "16/01/2025;Honda Civic;100\n"
        "Media;Qualquer coisa;50\n"
    )
    result = parse_sales_content(text, vocab)
    assert [s.carro for s in result.sales] == ["Honda Civic"]
    assert result.errors == []


@pytest.mark.parametrize("text", ["", "   ", "\n\n\n", "sem cabeçalho nenhum\n1,2,3"])
def test_empty_or_headerless_input(text: str):
    result = parse_sales_content(text)
    assert result.sales == []
    assert result.errors == []


@pytest.mark.parametrize("bad", [None, b"data,carro", 42])
def test_non_string_input_raises_type_error(bad):
    with pytest.raises(TypeError):
        parse_sales_content(bad)  # type: ignore[arg-type]


def test_parse_is_deterministic(clean_ledger: str, partial_ledger: str):
    for text in (clean_ledger, partial_ledger):
        assert parse_sales_content(text) == parse_sales_content(text)
