"""Create the ``script_state`` table and install the encounter document.

Run once per database before starting the API with a PostgreSQL store. The
state row for the configured namespace is installed here as well, so the
first chat command does not pay for it.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from randomencounter.backend.config import load_settings, setup_logging
from randomencounter.backend.store import PostgresStateStore

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).with_name("db_schema.sql")


def apply_schema(conn: Any, schema_sql: str | None = None) -> None:
    sql = schema_sql if schema_sql is not None else SCHEMA_PATH.read_text(encoding="utf-8")
    with conn.cursor() as cur:
        cur.execute(sql)
    conn.commit()


def main() -> None:
    settings = load_settings()
    setup_logging(settings.log_level)
    if not settings.database_url:
        raise RuntimeError("RANDOMENCOUNTER_DATABASE_URL must point at PostgreSQL to create the encounter store")

    import psycopg

    with psycopg.connect(settings.database_url) as conn:
        apply_schema(conn)
    logger.info("Applied %s", SCHEMA_PATH.name)

    state = PostgresStateStore(database_url=settings.database_url, namespace=settings.namespace).load()
    logger.info("Namespace %s holds %d categories", settings.namespace, len(state.get("encounters", {})))


if __name__ == "__main__":
    main()
