import csv
import io
from typing import Any

from finance_api.core.clock import iso_now, parse_iso_datetime
from finance_api.core.errors import NotFound
from finance_api.core.logs import get_logger
from finance_api.db.store import RecordStore

CSV_HEADER = ["Date", "Amount", "Category", "Description"]

logger = get_logger("transaction-export")


def format_amount(amount: Any) -> str:
    return f"{float(amount):.2f}"


def transactions_to_csv(transactions: list[dict[str, Any]]) -> str:
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    # Chronological by UTC instant; dates may carry different offsets.
    for t in sorted(transactions, key=lambda item: (parse_iso_datetime(item["date"]), str(item.get("id") or ""))):
        writer.writerow(
            [
                t["date"],
                format_amount(t.get("amount") or 0),
                t.get("category") or "",
                t.get("description") or "",
            ]
        )
    return output.getvalue()


def export_filename(owner: str) -> str:
    return f"export_{owner}_{iso_now()}.csv"


class ExportService:
    def __init__(self, store: RecordStore, table: str, blobs) -> None:
        self._store = store
        self._table = table
        self._blobs = blobs

    def export(self, owner: str) -> str:
        transactions = self._store.scan_all(self._table, {"ownerId": owner})
        logger.info("transactions retrieved", userId=owner, count=len(transactions))
        if not transactions:
            logger.info("no transactions found for user", userId=owner)
            raise NotFound(detail="No transactions found")

        filename = export_filename(owner)
        self._blobs.put(filename, transactions_to_csv(transactions).encode("utf-8"))
        logger.info("export successful", userId=owner, filename=filename)
        return filename
