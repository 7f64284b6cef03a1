from __future__ import annotations

from ..models.import_outcome import ImportOutcome

"""SUMMARY line rendering for the import CLI."""

MAX_LISTED_ERRORS = 10


def _format_seconds(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # 指数表記を避ける
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.3f}".rstrip("0").rstrip(".")


def render_summary_line(outcome: ImportOutcome) -> str:
    """Render the SUMMARY line for one import run.

    Format:
    SUMMARY source={label} status={status} imported={n} failed={n} errors={n} elapsed_sec={x}

    The status value may contain a space ("Sucesso Parcial"); it is rendered
    with underscores to keep the line whitespace-delimited.

    Examples:
        >>> from ledger_import.models.import_outcome import ImportOutcome, ImportStatus
        >>> outcome = ImportOutcome(
        ...     source_label="vendas.csv", status=ImportStatus.SUCCESS,
        ...     imported=3, failed=0, elapsed_seconds=2.0,
        ... )
        >>> render_summary_line(outcome)
        'SUMMARY source=vendas.csv status=Sucesso imported=3 failed=0 errors=0 elapsed_sec=2'
    """
    label = "_".join(outcome.source_label.split()) or "-"
    status = outcome.status.value.replace(" ", "_")
    return (
        f"SUMMARY source={label} "
        f"status={status} "
        f"imported={outcome.imported} "
        f"failed={outcome.failed} "
        f"errors={len(outcome.errors)} "
        f"elapsed_sec={_format_seconds(outcome.elapsed_seconds)}"
    )


def render_error_lines(outcome: ImportOutcome, limit: int = MAX_LISTED_ERRORS) -> list[str]:
    """Human readable error list, truncated after `limit` entries."""
    lines = [f"Linha {e.row}: {e.message}" for e in outcome.errors[:limit]]
    remaining = len(outcome.errors) - limit
    if remaining > 0:
        lines.append(f"... e mais {remaining} erros.")
    return lines
