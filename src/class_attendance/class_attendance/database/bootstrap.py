from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterator

import mysql.connector

from .connection import DBConfig

logger = logging.getLogger(__name__)

_DEFAULTS = {"host": "localhost", "port": 3306, "user": "root", "password": "", "database": "class_attendance"}


def _as_config(db_config: dict) -> DBConfig:
    merged = dict(_DEFAULTS)
    merged.update({k: v for k, v in db_config.items() if v is not None})
    return DBConfig.from_mapping(merged)


def _strip_create_db_and_use(sql: str) -> str:
    # schema.sql names its own database; the configured one wins.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    return re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)


def _iter_sql_statements(sql: str) -> Iterator[str]:
    """Split a script on ';' outside quoted strings, dropping '--' comments."""
    stmt: list[str] = []
    quote = None
    i = 0
    while i < len(sql):
        ch = sql[i]
        if quote:
            stmt.append(ch)
            if ch == "\\" and i + 1 < len(sql):
                stmt.append(sql[i + 1])
                i += 1
            elif ch == quote:
                quote = None
        elif ch in ("'", '"'):
            quote = ch
            stmt.append(ch)
        elif sql.startswith("--", i):
            end = sql.find("\n", i)
            i = len(sql) if end == -1 else end
            continue
        elif ch == ";":
            text = "".join(stmt).strip()
            if text:
                yield text
            stmt = []
        else:
            stmt.append(ch)
        i += 1

    tail = "".join(stmt).strip()
    if tail:
        yield tail


def _connect(cfg: DBConfig, *, with_database: bool = True):
    kwargs = dict(host=cfg.host, port=cfg.port, user=cfg.user, password=cfg.password, use_pure=True)
    if with_database:
        kwargs["database"] = cfg.database
    return mysql.connector.connect(**kwargs)


def ensure_database_exists(db_config: dict) -> None:
    cfg = _as_config(db_config)
    conn = _connect(cfg, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(f"CREATE DATABASE IF NOT EXISTS `{cfg.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci")
        conn.commit()
    finally:
        conn.close()


def _run_sql_file(db_config: dict, path: str | Path) -> int:
    sql = _strip_create_db_and_use(Path(path).read_text(encoding="utf-8"))
    conn = _connect(_as_config(db_config))
    count = 0
    try:
        cur = conn.cursor()
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)
            count += 1
        conn.commit()
    finally:
        conn.close()
    return count


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    count = _run_sql_file(db_config, schema_path)
    logger.info("Applied %d statements from %s", count, schema_path)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    count = _run_sql_file(db_config, seed_path)
    logger.info("Applied %d seed statements from %s", count, seed_path)


def list_tables(db_config: dict) -> list[str]:
    conn = _connect(_as_config(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
