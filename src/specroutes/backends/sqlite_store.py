from __future__ import annotations

import hashlib
import sqlite3
import time
from contextlib import closing, contextmanager
from pathlib import Path
from typing import AbstractSet, Iterator, Optional

from specroutes.backends.base import sorted_methods, validate_route_path
from specroutes.errors import RouteConflictError
from specroutes.routing.specs import AuthorizerRef, HandlerRef
from specroutes.routing.verbs import CanonicalMethod


def _now_ts() -> int:
    return int(time.time())


class SQLiteRoutingBackend:
    """Project-local SQLite route table.

    Schema notes:
    - One row per (method, http_path); the pair is UNIQUE, so re-registering
      an existing route fails instead of overwriting it.
    - Every call opens its own connection and closes it on exit.
    """

    SCHEMA_VERSION = "1.0"

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    @staticmethod
    def db_path_for_project(project_root: Path) -> Path:
        return project_root / ".specroutes" / "routes.db"

    # ----------------------------
    # Connection / schema
    # ----------------------------

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        con = sqlite3.connect(str(self.db_path))
        con.row_factory = sqlite3.Row
        # commit/rollback first, then close
        with closing(con), con:
            yield con

    def _init_db(self) -> None:
        with self._connect() as con:
            con.execute("PRAGMA journal_mode=WAL;")

            con.execute(
                """
                CREATE TABLE IF NOT EXISTS meta (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                );
                """
            )

            con.execute(
                """
                CREATE TABLE IF NOT EXISTS routes (
                    id TEXT PRIMARY KEY,
                    seq INTEGER NOT NULL,
                    method TEXT NOT NULL,
                    http_path TEXT NOT NULL,
                    handler_name TEXT NOT NULL,
                    authorizer_name TEXT,
                    registered_at INTEGER NOT NULL,
                    UNIQUE(method, http_path)
                );
                """
            )
            con.execute("CREATE INDEX IF NOT EXISTS idx_routes_path ON routes(http_path);")

            if self._get_meta(con, "schema_version") is None:
                self._set_meta(con, "schema_version", self.SCHEMA_VERSION)

    def schema_version(self) -> Optional[str]:
        with self._connect() as con:
            return self._get_meta(con, "schema_version")

    # ----------------------------
    # Routes
    # ----------------------------

    def _route_id(self, method: str, http_path: str) -> str:
        return hashlib.sha1(f"{method} {http_path}".encode("utf-8")).hexdigest()

    def register_route(
        self,
        path: str,
        methods: AbstractSet[CanonicalMethod],
        handler: HandlerRef,
        authorizer: Optional[AuthorizerRef] = None,
    ) -> None:
        """Insert one row per method. All-or-nothing within the call."""
        validate_route_path(path)
        ts = _now_ts()
        auth_name = authorizer.name if authorizer is not None else None

        with self._connect() as con:
            seq = con.execute("SELECT COALESCE(MAX(seq), 0) FROM routes").fetchone()[0]
            for m in sorted_methods(methods):
                seq += 1
                try:
                    con.execute(
                        """
                        INSERT INTO routes(
                            id, seq, method, http_path, handler_name,
                            authorizer_name, registered_at
                        )
                        VALUES(?,?,?,?,?,?,?)
                        """,
                        (
                            self._route_id(m.value, path),
                            seq,
                            m.value,
                            path,
                            handler.name,
                            auth_name,
                            ts,
                        ),
                    )
                except sqlite3.IntegrityError as exc:
                    # the connection context manager rolls back the whole call
                    raise RouteConflictError(path, m.value) from exc

    def list_routes(
        self,
        method: Optional[str] = None,
        http_path: Optional[str] = None,  # exact
        path_contains: Optional[str] = None,
        handler_contains: Optional[str] = None,
        limit: int = 200,
    ) -> list[dict]:
        q = """
        SELECT id, seq, method, http_path, handler_name, authorizer_name, registered_at
        FROM routes
        """
        where: list[str] = []
        params: list[object] = []

        if method:
            where.append("method = ?")
            params.append(method.upper())
        if http_path:
            where.append("http_path = ?")
            params.append(http_path)
        if path_contains:
            where.append("http_path LIKE ?")
            params.append(f"%{path_contains}%")
        if handler_contains:
            where.append("handler_name LIKE ?")
            params.append(f"%{handler_contains}%")

        if where:
            q += " WHERE " + " AND ".join(where)

        # registration order
        q += " ORDER BY seq LIMIT ?"
        params.append(int(limit))

        with self._connect() as con:
            rows = con.execute(q, tuple(params)).fetchall()
            return [dict(r) for r in rows]

    def count_routes(self) -> int:
        with self._connect() as con:
            return int(con.execute("SELECT COUNT(*) FROM routes").fetchone()[0])

    def clear_routes(self) -> int:
        """Delete every route. Returns the number removed."""
        with self._connect() as con:
            cur = con.execute("DELETE FROM routes")
            return cur.rowcount

    # ----------------------------
    # internal helpers
    # ----------------------------

    def _get_meta(self, con: sqlite3.Connection, key: str) -> Optional[str]:
        row = con.execute("SELECT value FROM meta WHERE key=?", (key,)).fetchone()
        return row[0] if row else None

    def _set_meta(self, con: sqlite3.Connection, key: str, value: str) -> None:
        con.execute(
            """
            INSERT INTO meta(key, value) VALUES(?, ?)
            ON CONFLICT(key) DO UPDATE SET value=excluded.value
            """,
            (key, value),
        )
