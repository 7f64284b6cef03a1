from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from .vocabulary import Vocabulary, build_vocabulary, default_vocabulary

"""Config loader.

Responsibilities:
- Load the YAML config (default: config/import.yml)
- Validate it against CONFIG_SCHEMA with jsonschema
- Apply defaults (error_log_dir=./logs, empty vocabulary extensions)
- Build the Vocabulary used by the parser
"""

DEFAULT_CONFIG_PATH = Path("config/import.yml")

CONFIG_SCHEMA: dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "user_id": {"type": ["string", "null"]},
        "error_log_dir": {"type": "string", "minLength": 1},
        "database": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "host": {"type": ["string", "null"]},
                "port": {"type": ["integer", "null"]},
                "user": {"type": ["string", "null"]},
                "password": {"type": ["string", "null"]},
                "database": {"type": ["string", "null"]},
                "dsn": {"type": ["string", "null"]},
            },
        },
        "vocabulary": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "aliases": {
                    "type": "object",
                    "additionalProperties": {
                        "type": "array",
                        "items": {"type": "string", "minLength": 1},
                    },
                },
                "stop_words": {
                    "type": "array",
                    "items": {"type": "string", "minLength": 1},
                },
            },
        },
    },
}


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class DatabaseConfig:
    """Database connection fallback; environment variables take precedence."""
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None


@dataclass(frozen=True)
class AppConfig:
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    user_id: str | None = None  # 置換対象テナント (None = 全件)
    error_log_dir: str = "./logs"
    vocabulary: Vocabulary = field(default_factory=default_vocabulary)


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against CONFIG_SCHEMA.

    Raises:
        ConfigError: when the data violates the schema (missing/extra keys,
            wrong types)
    """
    try:
        jsonschema.validate(data, CONFIG_SCHEMA)
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def load_config(path: Path | None = None) -> AppConfig:
    path = path or DEFAULT_CONFIG_PATH
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping: {path}")

    _validate_config_schema(data)

    db_raw = data.get("database") or {}
    db = DatabaseConfig(
        host=db_raw.get("host"),
        port=db_raw.get("port"),
        user=db_raw.get("user"),
        password=db_raw.get("password"),
        database=db_raw.get("database"),
        dsn=db_raw.get("dsn"),
    )

    vocab_raw = data.get("vocabulary") or {}
    if vocab_raw:
        try:
            vocabulary = build_vocabulary(
                extra_aliases=vocab_raw.get("aliases"),
                extra_stop_words=vocab_raw.get("stop_words"),
            )
        except ValueError as e:
            raise ConfigError(f"config validation failed: {e}") from e
    else:
        vocabulary = default_vocabulary()

    return AppConfig(
        database=db,
        user_id=data.get("user_id"),
        error_log_dir=data.get("error_log_dir", "./logs"),
        vocabulary=vocabulary,
    )
