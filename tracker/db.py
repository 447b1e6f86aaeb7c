"""DuckDB storage for the tracker snapshot (applications, essays, tags)."""
from __future__ import annotations

import logging
from datetime import datetime, timezone

import duckdb

from tracker.config import settings

logger = logging.getLogger(__name__)

COLLECTIONS = ("applications", "essays", "tags")

_con: duckdb.DuckDBPyConnection | None = None


def get_connection() -> duckdb.DuckDBPyConnection:
    global _con
    if _con is None:
        settings.db_path.parent.mkdir(parents=True, exist_ok=True)
        _con = duckdb.connect(str(settings.db_path))
        _initialize_tables(_con)
        logger.info("DuckDB connected at %s", settings.db_path)
    return _con


def _initialize_tables(con: duckdb.DuckDBPyConnection) -> None:
    for table in COLLECTIONS:
        # one JSON document per entity; position keeps collection order
        con.execute(f"""
            CREATE TABLE IF NOT EXISTS {table} (
                id VARCHAR PRIMARY KEY,
                position INTEGER,
                payload VARCHAR
            )
        """)
    con.execute("""
        CREATE TABLE IF NOT EXISTS snapshot_meta (
            key VARCHAR PRIMARY KEY,
            value VARCHAR
        )
    """)


def has_snapshot() -> bool:
    """True once a snapshot has been written, even if every collection is empty."""
    row = get_connection().execute(
        "SELECT value FROM snapshot_meta WHERE key = 'saved_at'"
    ).fetchone()
    return row is not None


def read_collections() -> dict[str, list[str]] | None:
    """Raw JSON payloads per collection in saved order, or None if nothing was ever saved."""
    if not has_snapshot():
        return None
    con = get_connection()
    return {
        table: [row[0] for row in con.execute(f"SELECT payload FROM {table} ORDER BY position").fetchall()]
        for table in COLLECTIONS
    }


def write_collections(collections: dict[str, list[tuple[str, str]]]) -> None:
    """Replace every collection with ``(id, payload)`` rows in one transaction."""
    con = get_connection()
    con.begin()
    try:
        for table in COLLECTIONS:
            con.execute(f"DELETE FROM {table}")
            rows = [
                (entity_id, position, payload)
                for position, (entity_id, payload) in enumerate(collections.get(table, []))
            ]
            if rows:
                con.executemany(f"INSERT INTO {table} VALUES (?, ?, ?)", rows)
        con.execute("DELETE FROM snapshot_meta WHERE key = 'saved_at'")
        con.execute(
            "INSERT INTO snapshot_meta VALUES ('saved_at', ?)",
            [datetime.now(timezone.utc).isoformat()],
        )
        con.commit()
    except Exception:
        con.rollback()
        raise


def close() -> None:
    global _con
    if _con:
        _con.close()
        _con = None
