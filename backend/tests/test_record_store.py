import pathlib
import sys
import unittest

BACKEND_ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from psycopg import sql
from psycopg.types.json import Jsonb

from finance_api.db.store import CONFLICT, Applied, Page, PostgresRecordStore
from support import MemoryRecordStore, spy_connect


class PostgresRecordStoreTests(unittest.TestCase):
    def test_conditional_update_sends_changes_and_conditions_as_jsonb(self):
        connect, conn, cursor = spy_connect([{"doc": {"id": "a1", "version": 2}}])
        store = PostgresRecordStore(connect)

        result = store.update("accounts", "a1", {"version": 2}, conditions={"ownerId": "u1", "version": 1})

        self.assertEqual(result, Applied({"id": "a1", "version": 2}))
        query, params = cursor.calls[0]
        self.assertIsInstance(query, sql.Composed)
        self.assertIsInstance(params[0], Jsonb)
        self.assertEqual(params[0].obj, {"version": 2})
        self.assertEqual(params[1], "a1")
        self.assertEqual(params[2].obj, {"ownerId": "u1", "version": 1})
        self.assertEqual(conn.commits, 1)

    def test_update_without_matching_row_is_a_conflict(self):
        connect, _, _ = spy_connect([])
        store = PostgresRecordStore(connect)

        self.assertIs(store.update("accounts", "a1", {"active": False}), CONFLICT)

    def test_update_without_conditions_matches_any_row(self):
        connect, _, cursor = spy_connect([])
        PostgresRecordStore(connect).update("users", "u1", {"name": "Ada"})

        self.assertEqual(cursor.calls[0][1][2].obj, {})

    def test_put_if_absent_reports_existing_row_as_conflict(self):
        connect, _, cursor = spy_connect([])
        store = PostgresRecordStore(connect)

        result = store.put("users", {"id": "u1", "name": "Ada"}, if_absent=True)

        self.assertIs(result, CONFLICT)
        self.assertEqual(cursor.calls[0][1][0], "u1")
        self.assertEqual(cursor.calls[0][1][1].obj, {"id": "u1", "name": "Ada"})

    def test_delete_returns_removed_document(self):
        connect, _, cursor = spy_connect([{"doc": {"id": "t1", "ownerId": "u1"}}])

        result = PostgresRecordStore(connect).delete("transactions", "t1", conditions={"ownerId": "u1"})

        self.assertEqual(result.record, {"id": "t1", "ownerId": "u1"})
        self.assertEqual(cursor.calls[0][1][1].obj, {"ownerId": "u1"})

    def test_get_missing_row(self):
        connect, _, _ = spy_connect([])

        self.assertIsNone(PostgresRecordStore(connect).get("goals", "g1"))

    def test_scan_fetches_one_extra_row_to_detect_more(self):
        rows = [{"id": f"k{i}", "doc": {"id": f"k{i}"}} for i in range(3)]
        connect, _, cursor = spy_connect(rows)

        page = PostgresRecordStore(connect).scan("accounts", {"ownerId": "u1"}, limit=2, start_key="k0")

        self.assertEqual(page, Page([{"id": "k0"}, {"id": "k1"}], "k1"))
        params = cursor.calls[0][1]
        self.assertEqual(params[0].obj, {"ownerId": "u1"})
        self.assertEqual(params[1:], ["k0", 3])

    def test_scan_last_page_has_no_key(self):
        connect, _, cursor = spy_connect([{"id": "k1", "doc": {"id": "k1"}}])

        page = PostgresRecordStore(connect).scan("accounts", limit=2)

        self.assertEqual(page, Page([{"id": "k1"}]))
        self.assertEqual(cursor.calls[0][1][1:], [3])

    def test_ensure_tables_creates_each_table(self):
        connect, conn, cursor = spy_connect()

        PostgresRecordStore(connect).ensure_tables(["users", "accounts"])

        self.assertEqual(len(cursor.calls), 2)
        self.assertEqual(conn.commits, 1)


class ScanAllTests(unittest.TestCase):
    def test_follows_pages_until_exhausted(self):
        store = MemoryRecordStore()
        for i in range(7):
            store.put("transactions", {"id": f"t{i}", "ownerId": "u1" if i % 2 == 0 else "u2"})

        items = store.scan_all("transactions", {"ownerId": "u1"}, page_size=2)

        self.assertEqual([item["id"] for item in items], ["t0", "t2", "t4", "t6"])
        self.assertEqual(sum(1 for op, _ in store.calls if op == "scan"), 2)


if __name__ == "__main__":
    unittest.main()
