"""SQLite-backed substitute for the DynamoDB token table."""

from __future__ import annotations

import sqlite3
from contextlib import closing
from pathlib import Path
from typing import Callable, List, Optional

from patservice.core.errors import OperationCancelled, StoreError
from patservice.models import TokenRecord


class SQLiteTokenStore:
    """Token table keyed by token with a (repo_id, username) index."""

    def __init__(self, db_path: str, *, page_size: int = 100) -> None:
        if page_size < 1:
            raise ValueError("page_size must be positive")
        self._db_path = Path(db_path)
        self._page_size = page_size
        if self._db_path.parent and not self._db_path.parent.exists():
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        with closing(self._connect()) as conn, conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS access_tokens (
                    token TEXT PRIMARY KEY,
                    repo_id TEXT NOT NULL,
                    username TEXT NOT NULL,
                    expiration INTEGER NOT NULL
                )
                """
            )
            conn.execute(
                """
                CREATE INDEX IF NOT EXISTS access_tokens_repo_idx
                ON access_tokens (repo_id, username)
                """
            )

    def put(self, record: TokenRecord) -> None:
        try:
            with closing(self._connect()) as conn, conn:
                conn.execute(
                    """
                    INSERT INTO access_tokens (token, repo_id, username, expiration)
                    VALUES (?, ?, ?, ?)
                    ON CONFLICT(token) DO UPDATE SET
                        repo_id = excluded.repo_id,
                        username = excluded.username,
                        expiration = excluded.expiration
                    """,
                    (record.token, record.repo_id, record.username, record.expiration),
                )
        except sqlite3.Error as exc:
            raise StoreError("Unable to persist token record.") from exc

    def _read_page(
        self, repo_id: str, username: Optional[str], after: Optional[int]
    ) -> tuple[list[sqlite3.Row], Optional[int]]:
        clauses = ["repo_id = ?"]
        params: list = [repo_id]
        if username:
            clauses.append("username = ?")
            params.append(username)
        if after is not None:
            clauses.append("rowid > ?")
            params.append(after)
        params.append(self._page_size)
        query = (
            "SELECT rowid, token, repo_id, username, expiration FROM access_tokens "
            f"WHERE {' AND '.join(clauses)} ORDER BY rowid LIMIT ?"
        )
        with closing(self._connect()) as conn, conn:
            rows = conn.execute(query, params).fetchall()
        # A short page is the last one; a full page may have a successor.
        next_marker = rows[-1]["rowid"] if len(rows) == self._page_size else None
        return rows, next_marker

    def query_by_repo(
        self,
        repo_id: str,
        username: Optional[str] = None,
        *,
        should_stop: Optional[Callable[[], bool]] = None,
    ) -> List[TokenRecord]:
        records: List[TokenRecord] = []
        marker: Optional[int] = None
        while True:
            if should_stop is not None and should_stop():
                raise OperationCancelled(f"Query for repo {repo_id} cancelled.")
            try:
                rows, marker = self._read_page(repo_id, username, marker)
            except sqlite3.Error as exc:
                raise StoreError("Unable to query token records.") from exc
            records.extend(
                TokenRecord(
                    token=row["token"],
                    repo_id=row["repo_id"],
                    username=row["username"],
                    expiration=row["expiration"],
                )
                for row in rows
            )
            if marker is None:
                return records

    def delete_by_token(self, token: str) -> bool:
        try:
            with closing(self._connect()) as conn, conn:
                conn.execute("DELETE FROM access_tokens WHERE token = ?", (token,))
        except sqlite3.Error as exc:
            raise StoreError("Unable to delete token record.") from exc
        return True


__all__ = ["SQLiteTokenStore"]
