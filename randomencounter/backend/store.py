"""Persistence interfaces and implementations for the encounter state document."""

from __future__ import annotations

import copy
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Protocol

from .config import DEFAULT_NAMESPACE
from .state import build_initial_state

logger = logging.getLogger(__name__)


class StateStore(Protocol):
    def load(self) -> dict[str, Any]:
        """Return the state document, installing the initial state if absent."""

    def save(self, state: dict[str, Any]) -> None:
        """Persist the full state document."""


@dataclass
class InMemoryStateStore:
    namespace: str = DEFAULT_NAMESPACE

    def __post_init__(self) -> None:
        self._documents: dict[str, dict[str, Any]] = {}

    def load(self) -> dict[str, Any]:
        if self.namespace not in self._documents:
            logger.info("Installing initial state for %s", self.namespace)
            self._documents[self.namespace] = build_initial_state()
        return copy.deepcopy(self._documents[self.namespace])

    def save(self, state: dict[str, Any]) -> None:
        self._documents[self.namespace] = copy.deepcopy(state)


@dataclass
class PostgresStateStore:
    database_url: str
    namespace: str = DEFAULT_NAMESPACE

    def _connect(self) -> Any:
        import psycopg

        return psycopg.connect(self.database_url)

    def load(self) -> dict[str, Any]:
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    SELECT state_json
                    FROM script_state
                    WHERE namespace = %s
                    """,
                    (self.namespace,),
                )
                row = cur.fetchone()
                if row is not None:
                    state_json = row[0]
                    return state_json if isinstance(state_json, dict) else json.loads(state_json)

                logger.info("Installing initial state for %s", self.namespace)
                state = build_initial_state()
                cur.execute(
                    """
                    INSERT INTO script_state (namespace, version, state_json, updated_at)
                    VALUES (%s, %s, %s::jsonb, %s)
                    ON CONFLICT (namespace) DO NOTHING
                    """,
                    (self.namespace, state["version"], json.dumps(state), datetime.now(timezone.utc)),
                )
            conn.commit()
        return state

    def save(self, state: dict[str, Any]) -> None:
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO script_state (namespace, version, state_json, updated_at)
                    VALUES (%s, %s, %s::jsonb, %s)
                    ON CONFLICT (namespace)
                    DO UPDATE SET version = EXCLUDED.version,
                                  state_json = EXCLUDED.state_json,
                                  updated_at = EXCLUDED.updated_at
                    """,
                    (self.namespace, state.get("version"), json.dumps(state), datetime.now(timezone.utc)),
                )
            conn.commit()


def create_store(database_url: str | None, namespace: str = DEFAULT_NAMESPACE) -> StateStore:
    if database_url:
        return PostgresStateStore(database_url=database_url, namespace=namespace)
    return InMemoryStateStore(namespace=namespace)
