from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, fields

from .sale import SALE_FIELDS

"""Section model: one logical table detected inside a header row.

A header row may carry several side-by-side tables (e.g. two "Data" columns).
Each table becomes a Section mapping canonical field names to column indices.
The field set is closed, so Section is a fixed record of optional indices
rather than a free-form dict.
"""

__all__ = [
    "Section",
]

MANDATORY_ANY = ("data_venda", "carro")


@dataclass(frozen=True)
class Section:
    data_venda: int | None = None
    carro: int | None = None
    ano_carro: int | None = None
    placa: int | None = None
    nome_cliente: int | None = None
    gestauto: int | None = None
    valor_financiado: int | None = None
    retorno: int | None = None
    tipo_operacao: int | None = None
    valor_comissao: int | None = None

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, int]) -> Section:
        return cls(**dict(mapping))

    def columns(self) -> Iterator[tuple[str, int]]:
        """Yield (field, column index) pairs for mapped fields, in field order."""
        for f in fields(self):
            idx = getattr(self, f.name)
            if idx is not None:
                yield f.name, idx

    def column_of(self, field_name: str) -> int | None:
        return getattr(self, field_name)

    def __contains__(self, field_name: object) -> bool:
        return field_name in SALE_FIELDS and getattr(self, field_name) is not None

    def __len__(self) -> int:
        return sum(1 for _ in self.columns())

    @property
    def is_valid(self) -> bool:
        """A section counts only with >=2 fields and a date or car column."""
        return len(self) >= 2 and any(name in self for name in MANDATORY_ANY)
