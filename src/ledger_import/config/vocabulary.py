from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType

from ..models.sale import SALE_FIELDS

"""Header vocabulary: field aliases and stop-row keywords.

The default tables hold the mixed Portuguese/English labels seen in the
dealership ledgers. They are process-wide constants; a Vocabulary instance is
immutable and carries the alias list pre-sorted longest first so that
"ano modelo" is tried before "modelo".

Deployments may extend both tables through the `vocabulary` section of the
YAML config (see config.loader); extensions are merged into a new Vocabulary,
never patched into the defaults.
"""

__all__ = [
    "DEFAULT_ALIASES",
    "DEFAULT_STOP_WORDS",
    "Vocabulary",
    "build_vocabulary",
    "default_vocabulary",
]

DEFAULT_ALIASES: Mapping[str, tuple[str, ...]] = MappingProxyType({
    "data_venda": ("data", "data venda", "dt venda", "dia", "date"),
    "carro": ("carro", "veiculo", "modelo", "descrição", "descricao", "car"),
    "ano_carro": ("ano", "ano car", "ano modelo", "year"),
    "placa": ("placa", "plate"),
    "nome_cliente": ("cliente", "nome", "nome cli", "comprador", "client"),
    "gestauto": ("gestauto", "garantia"),
    "valor_financiado": (
        "valor financiado",
        "financiado",
        "finan",
        "vlr financiado",
        "financed",
    ),
    "retorno": ("retorno", "ret", "return"),
    "tipo_operacao": ("tipo", "operacao", "tipo operacao", "compra/venda", "type"),
    "valor_comissao": (
        "comissao",
        "comissão",
        "valor",
        "vlr",
        "valor comissao",
        "lucro",
        "commission",
    ),
})

DEFAULT_STOP_WORDS: tuple[str, ...] = (
    "total",
    "subtotal",
    "resumo",
    "saldo",
    "carros vendidos",
    "comissões",
    "comissoes",
)


@dataclass(frozen=True)
class Vocabulary:
    """Immutable alias/stop-word tables used by the parser.

    aliases: (field, alias) pairs sorted by alias length, longest first.
    Ties keep table order (sorted() is stable).
    """
    aliases: tuple[tuple[str, str], ...]
    stop_words: tuple[str, ...]


def _sorted_pairs(table: Mapping[str, Iterable[str]]) -> tuple[tuple[str, str], ...]:
    pairs: list[tuple[str, str]] = []
    seen: set[tuple[str, str]] = set()
    for field_name, aliases in table.items():
        for alias in aliases:
            key = (field_name, alias.strip().lower())
            if not key[1] or key in seen:
                continue
            seen.add(key)
            pairs.append(key)
    return tuple(sorted(pairs, key=lambda p: len(p[1]), reverse=True))


def build_vocabulary(
    extra_aliases: Mapping[str, Iterable[str]] | None = None,
    extra_stop_words: Iterable[str] | None = None,
) -> Vocabulary:
    """Build a Vocabulary from the defaults plus optional extensions.

    Raises:
        ValueError: an extension names a field outside SALE_FIELDS
    """
    merged: dict[str, list[str]] = {k: list(v) for k, v in DEFAULT_ALIASES.items()}
    for field_name, aliases in (extra_aliases or {}).items():
        if field_name not in SALE_FIELDS:
            raise ValueError(f"unknown sale field in vocabulary: {field_name}")
        merged[field_name].extend(aliases)

    stop_words = list(DEFAULT_STOP_WORDS)
    for word in extra_stop_words or ():
        w = word.strip().lower()
        if w and w not in stop_words:
            stop_words.append(w)

    return Vocabulary(aliases=_sorted_pairs(merged), stop_words=tuple(stop_words))


@lru_cache(maxsize=1)
def default_vocabulary() -> Vocabulary:
    return build_vocabulary()
