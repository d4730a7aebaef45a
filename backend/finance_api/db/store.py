"""Key-value record store gateway.

Every resource lives in its own table of JSON documents keyed by ``id``.
Mutations can carry equality conditions that are checked by the database at
write time; when they do not hold the write is rejected and the caller gets
``CONFLICT`` back instead of a record. The reasons a condition can fail
(missing row, wrong owner, stale version, ...) are deliberately not reported.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from psycopg import sql
from psycopg.types.json import Jsonb


@dataclass(frozen=True)
class Applied:
    record: dict[str, Any]


@dataclass(frozen=True)
class Conflict:
    pass


CONFLICT = Conflict()

WriteResult = Applied | Conflict


@dataclass(frozen=True)
class Page:
    items: list[dict[str, Any]]
    last_key: str | None = None


class RecordStore(ABC):
    @abstractmethod
    def get(self, table: str, key: str) -> dict[str, Any] | None:
        ...

    @abstractmethod
    def put(self, table: str, record: dict[str, Any], *, if_absent: bool = False) -> WriteResult:
        """Insert ``record`` (or replace it, unless ``if_absent`` is set)."""

    @abstractmethod
    def update(
        self,
        table: str,
        key: str,
        changes: dict[str, Any],
        *,
        conditions: dict[str, Any] | None = None,
    ) -> WriteResult:
        """Merge ``changes`` into the stored record when every condition matches."""

    @abstractmethod
    def delete(self, table: str, key: str, *, conditions: dict[str, Any] | None = None) -> WriteResult:
        ...

    @abstractmethod
    def scan(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        *,
        limit: int | None = None,
        start_key: str | None = None,
    ) -> Page:
        """Return records matching ``filters`` in key order, after ``start_key``.

        ``Page.last_key`` is set only when more matching records remain.
        """

    def scan_all(self, table: str, filters: dict[str, Any] | None = None, page_size: int = 500) -> list[dict[str, Any]]:
        items: list[dict[str, Any]] = []
        start_key = None
        while True:
            page = self.scan(table, filters, limit=page_size, start_key=start_key)
            items.extend(page.items)
            if page.last_key is None:
                return items
            start_key = page.last_key


class PostgresRecordStore(RecordStore):
    def __init__(self, connect) -> None:
        self._connect = connect

    def ensure_tables(self, tables: list[str]) -> None:
        with self._connect() as conn, conn.cursor() as cur:
            for table in tables:
                cur.execute(
                    sql.SQL("CREATE TABLE IF NOT EXISTS {} (id text PRIMARY KEY, doc jsonb NOT NULL)").format(
                        sql.Identifier(table)
                    )
                )
            conn.commit()

    def get(self, table: str, key: str) -> dict[str, Any] | None:
        with self._connect() as conn, conn.cursor() as cur:
            cur.execute(sql.SQL("SELECT doc FROM {} WHERE id=%s").format(sql.Identifier(table)), (key,))
            row = cur.fetchone()
        return row["doc"] if row else None

    def put(self, table: str, record: dict[str, Any], *, if_absent: bool = False) -> WriteResult:
        on_conflict = "DO NOTHING" if if_absent else "DO UPDATE SET doc=EXCLUDED.doc"
        query = sql.SQL("INSERT INTO {} (id, doc) VALUES (%s, %s) ON CONFLICT (id) " + on_conflict + " RETURNING doc")
        with self._connect() as conn, conn.cursor() as cur:
            cur.execute(query.format(sql.Identifier(table)), (record["id"], Jsonb(record)))
            row = cur.fetchone()
            conn.commit()
        return Applied(row["doc"]) if row else CONFLICT

    def update(
        self,
        table: str,
        key: str,
        changes: dict[str, Any],
        *,
        conditions: dict[str, Any] | None = None,
    ) -> WriteResult:
        query = sql.SQL("UPDATE {} SET doc = doc || %s WHERE id=%s AND doc @> %s RETURNING doc").format(
            sql.Identifier(table)
        )
        with self._connect() as conn, conn.cursor() as cur:
            cur.execute(query, (Jsonb(changes), key, Jsonb(conditions or {})))
            row = cur.fetchone()
            conn.commit()
        return Applied(row["doc"]) if row else CONFLICT

    def delete(self, table: str, key: str, *, conditions: dict[str, Any] | None = None) -> WriteResult:
        query = sql.SQL("DELETE FROM {} WHERE id=%s AND doc @> %s RETURNING doc").format(sql.Identifier(table))
        with self._connect() as conn, conn.cursor() as cur:
            cur.execute(query, (key, Jsonb(conditions or {})))
            row = cur.fetchone()
            conn.commit()
        return Applied(row["doc"]) if row else CONFLICT

    def scan(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        *,
        limit: int | None = None,
        start_key: str | None = None,
    ) -> Page:
        clauses = [sql.SQL("doc @> %s")]
        params: list[Any] = [Jsonb(filters or {})]
        if start_key is not None:
            clauses.append(sql.SQL("id > %s"))
            params.append(start_key)
        query = sql.SQL("SELECT id, doc FROM {} WHERE {} ORDER BY id").format(
            sql.Identifier(table),
            sql.SQL(" AND ").join(clauses),
        )
        if limit is not None:
            # One extra row tells us whether another page exists.
            query = query + sql.SQL(" LIMIT %s")
            params.append(limit + 1)

        with self._connect() as conn, conn.cursor() as cur:
            cur.execute(query, params)
            rows = cur.fetchall()

        if limit is not None and len(rows) > limit:
            rows = rows[:limit]
            return Page([r["doc"] for r in rows], rows[-1]["id"])
        return Page([r["doc"] for r in rows])
