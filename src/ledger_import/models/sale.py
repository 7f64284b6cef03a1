from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

"""Sale record models for the sales ledger importer.

ParsedSale is the validated output record handed to the storage collaborator.
ImportRowError describes a single row that could not be interpreted; row=0 is
reserved for file-level problems reported by the import service.
"""

__all__ = [
    "SALE_FIELDS",
    "CLIENT_PLACEHOLDER",
    "ParsedSale",
    "ImportRowError",
    "ParseResult",
]

# 正規フィールド名 (閉じた集合)
SALE_FIELDS: tuple[str, ...] = (
    "data_venda",
    "carro",
    "ano_carro",
    "placa",
    "nome_cliente",
    "gestauto",
    "valor_financiado",
    "retorno",
    "tipo_operacao",
    "valor_comissao",
)

CLIENT_PLACEHOLDER = "Não informado"


@dataclass(frozen=True)
class ParsedSale:
    """One validated sale row.

    Attributes:
        data_venda: ISO date string (YYYY-MM-DD)
        carro: Vehicle description as written in the ledger
        ano_carro: Model year within [1980, current_year + 1]
        placa: Uppercase plate restricted to [A-Z0-9-], or None
        nome_cliente: Client name (placeholder when blank)
        gestauto: "Sim" or "Não"
        valor_financiado: Financed amount, or None when absent/zero
        retorno: Return code, or None
        tipo_operacao: "Venda" or "Compra"
        valor_comissao: Commission, never negative
    """
    data_venda: str
    carro: str
    ano_carro: int
    placa: str | None
    nome_cliente: str
    gestauto: str
    valor_financiado: float | None
    retorno: str | None
    tipo_operacao: str
    valor_comissao: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ImportRowError:
    """Row-level validation failure.

    Attributes:
        row: 1-based source line number (0 = file-level)
        message: Human readable description
        data: Raw field map extracted for the failing row
    """
    row: int
    message: str
    data: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ParseResult:
    sales: list[ParsedSale]
    errors: list[ImportRowError]

    @property
    def total_records(self) -> int:
        return len(self.sales) + len(self.errors)
