from __future__ import annotations

import argparse
import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import psycopg2
from dotenv import load_dotenv

from ledger_import.config.loader import DEFAULT_CONFIG_PATH, AppConfig, ConfigError, load_config
from ledger_import.db.replace import PostgresImportHistory, PostgresSalesStore
from ledger_import.logging.error_log import ErrorLogBuffer
from ledger_import.logging.init import log_summary, setup_logging
from ledger_import.models.import_outcome import ImportStatus
from ledger_import.parsing.ledger import parse_sales_content
from ledger_import.services.collaborators import MemoryImportHistory, MemorySalesStore
from ledger_import.services.importer import run_import
from ledger_import.services.summary import render_error_lines, render_summary_line
from ledger_import.services.template import write_template
from ledger_import.source.reader import SourceReadError, read_source_text, sales_frame

"""CLI entrypoint.

Flow:
- Load .env and config/import.yml (optional unless --config is given)
- Read the ledger file (text or first worksheet of an .xlsx)
- Parse, replace stored sales, record import history
- Flush row errors to the JSON Lines error log and print the SUMMARY line
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1
EXIT_PARTIAL_FAILURE = 2

PASTED_TEXT_LABEL = "Texto Colado"


@contextmanager
def _db_connection(cfg: AppConfig) -> Iterator[Any]:  # pragma: no cover (thin wrapper)
    """Provide a psycopg2 cursor.

    Resolution order:
        1. DATABASE_URL / PGDSN (the .env file overrides the process env)
        2. PGHOST / PGPORT / PGUSER / PGPASSWORD / PGDATABASE
        3. database section of the config file
    """
    db_cfg = cfg.database
    dsn = os.getenv("DATABASE_URL") or os.getenv("PGDSN") or db_cfg.dsn
    if not dsn:
        host = os.getenv("PGHOST", db_cfg.host or "localhost")
        port = os.getenv("PGPORT", str(db_cfg.port) if db_cfg.port else "5432")
        user = os.getenv("PGUSER", db_cfg.user or "postgres")
        password = os.getenv("PGPASSWORD", db_cfg.password or "")
        database = os.getenv("PGDATABASE", db_cfg.database or "postgres")
        dsn = f"host={host} port={port} user={user} dbname={database}"
        if password:
            dsn += f" password={password}"

    conn = psycopg2.connect(dsn)
    # BEGIN/COMMIT は db.replace 側で明示
    conn.autocommit = True
    cur = conn.cursor()
    try:
        yield cur
    finally:
        cur.close()
        conn.close()


def _load_env_file(path: Path, override: bool = True) -> None:
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Sales ledger importer (CSV/TSV/pasted text/.xlsx)")
    p.add_argument("source", nargs="?", help="Ledger file to import ('-' reads stdin)")
    p.add_argument("--config", type=Path, default=None, help="YAML config (default: config/import.yml)")
    p.add_argument("--label", default=None, help="Source label recorded in the import history")
    p.add_argument("--dry-run", action="store_true", help="Parse and report without touching the database")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print parsed sales & errors then exit")
    p.add_argument("--template", type=Path, default=None, help="Write the import template CSV and exit")
    return p.parse_args(argv)


def _resolve_config(path: Path | None) -> AppConfig:
    if path is not None:
        return load_config(path)
    if DEFAULT_CONFIG_PATH.exists():
        return load_config(DEFAULT_CONFIG_PATH)
    return AppConfig()


def _read_content(source: str) -> tuple[str, str]:
    if source == "-":
        return sys.stdin.read(), PASTED_TEXT_LABEL
    path = Path(source)
    return read_source_text(path), path.name


def _inspect_data(content: str, cfg: AppConfig) -> int:
    result = parse_sales_content(content, cfg.vocabulary)
    print(f"sales={len(result.sales)} errors={len(result.errors)}")
    if result.sales:
        print(sales_frame(result.sales).to_string(index=False))
    for err in result.errors:
        print(f"  Linha {err.row}: {err.message} data={err.data}")
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    # 空リスト [] を渡された場合に sys.argv を読まないよう None のときだけ参照
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    logger = setup_logging(debug=args.debug)
    if args.debug:
        logger.debug("debug mode enabled")

    _load_env_file(Path(".env"), override=True)

    if args.template is not None:
        written = write_template(args.template)
        logger.info(f"template written: {written}")
        return EXIT_SUCCESS

    if not args.source:
        logger.error("no source file given")
        return EXIT_FATAL

    try:
        cfg = _resolve_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    try:
        content, default_label = _read_content(args.source)
    except SourceReadError as e:
        logger.error(f"source: {e}")
        return EXIT_FATAL
    label = args.label or default_label
    logger.info(f"Importing sales from: {label}")

    if args.inspect_data:
        return _inspect_data(content, cfg)

    # DB を使わない場合 (--dry-run / DISABLE_DB_CONNECT=1) はメモリ実装
    disable_db = args.dry_run or os.getenv("DISABLE_DB_CONNECT") == "1"
    mode = "dry-run"
    if disable_db:
        outcome = run_import(content, label, MemorySalesStore(), MemoryImportHistory(), cfg.vocabulary)
    else:
        try:
            with _db_connection(cfg) as cur:
                mode = "live"
                outcome = run_import(
                    content,
                    label,
                    PostgresSalesStore(cur, cfg.user_id),
                    PostgresImportHistory(cur, cfg.user_id),
                    cfg.vocabulary,
                )
        except psycopg2.Error as db_e:
            if mode == "live":
                logger.error(f"database: {db_e}")
                return EXIT_FATAL
            logger.info(f"DB connection failed -> fallback to dry-run mode: {db_e}")
            outcome = run_import(content, label, MemorySalesStore(), MemoryImportHistory(), cfg.vocabulary)

    logger.info(f"mode={mode} imported={outcome.imported}")

    if outcome.errors:
        buffer = ErrorLogBuffer(Path(cfg.error_log_dir))
        buffer.extend_from(label, outcome.errors)
        log_path = buffer.flush()
        for line in render_error_lines(outcome):
            logger.warning(line)
        logger.info(f"error log: {log_path}")

    log_summary(render_summary_line(outcome)[len("SUMMARY "):])

    if outcome.status is ImportStatus.SUCCESS:
        return EXIT_SUCCESS
    return EXIT_PARTIAL_FAILURE


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
