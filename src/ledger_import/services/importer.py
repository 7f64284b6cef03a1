from __future__ import annotations

import logging
import time

from ..config.vocabulary import Vocabulary
from ..models.import_outcome import ImportOutcome, ImportStatus
from ..models.sale import ImportRowError, ParsedSale
from ..parsing.ledger import parse_sales_content
from .collaborators import ImportHistory, SalesStore

"""Import workflow: parse, store, record history.

The parser never raises on malformed text, so the outcome is driven by two
questions: did any sale survive validation, and did storage accept them?
Storage is a full replacement, so the run is all-or-nothing at that boundary.
"""

__all__ = [
    "UNRECOGNIZED_LAYOUT_MESSAGE",
    "run_import",
]

logger = logging.getLogger(__name__)

UNRECOGNIZED_LAYOUT_MESSAGE = (
    "Não foi possível identificar nenhum registro de venda válido. "
    'Verifique se o cabeçalho contém "Data" e "Carro".'
)


def _record_history(history: ImportHistory | None, outcome: ImportOutcome) -> None:
    if history is None:
        return
    try:
        history.log(outcome.source_label, outcome.imported, outcome.history_outcome)
    except Exception as e:
        # 履歴記録の失敗でインポート結果は変えない
        logger.warning(f"import history not recorded: {e}")


def run_import(
    content: str,
    source_label: str,
    store: SalesStore,
    history: ImportHistory | None = None,
    vocabulary: Vocabulary | None = None,
) -> ImportOutcome:
    """Run one import of `content` into `store`.

    Args:
        content: Ledger text (file content or pasted selection)
        source_label: Label shown in the import history (file name, "Texto Colado")
        store: Storage collaborator receiving the full replacement set
        history: Optional import history collaborator
        vocabulary: Optional alias/stop-word tables

    Returns:
        ImportOutcome; never raises for parse or storage failures
    """
    start = time.time()
    sales: list[ParsedSale] = []
    errors: list[ImportRowError] = []

    try:
        result = parse_sales_content(content, vocabulary)
        sales = result.sales
        errors = list(result.errors)
    except Exception as e:
        logger.error(f"parse: {e}")
        errors.append(ImportRowError(row=0, message=f"Erro crítico no processamento do arquivo: {e}"))

    total_records = len(sales) + len(errors)
    imported = 0

    if sales:
        try:
            store.replace(sales)
        except Exception as e:
            logger.error(f"storage: {e}")
            errors.append(ImportRowError(
                row=0,
                message=f"Erro crítico no banco de dados: {str(e) or 'Desconhecido'}",
            ))
            status = ImportStatus.FAILED
            failed = total_records or 1
        else:
            imported = len(sales)
            failed = len(errors)
            status = ImportStatus.SUCCESS if not errors else ImportStatus.PARTIAL
    else:
        status = ImportStatus.FAILED
        if total_records == 0 and content.strip():
            errors.append(ImportRowError(row=0, message=UNRECOGNIZED_LAYOUT_MESSAGE))
        failed = len(errors) or 1

    outcome = ImportOutcome(
        source_label=source_label,
        status=status,
        imported=imported,
        failed=failed,
        errors=errors,
        sales=sales if imported else [],
        elapsed_seconds=time.time() - start,
    )
    _record_history(history, outcome)
    logger.info(f"import source={source_label} status={status.value} imported={imported} failed={failed}")
    return outcome
