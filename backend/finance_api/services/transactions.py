from typing import Any

from finance_api.core.clock import parse_iso_datetime
from finance_api.core.errors import ValidationFailed
from finance_api.core.logs import get_logger
from finance_api.db.store import RecordStore
from finance_api.models.schemas import TransactionPayload
from finance_api.services.records import OwnedRecordService


def _parse_bound(value: str | None, field_name: str):
    if not value:
        return None
    try:
        return parse_iso_datetime(value).date()
    except ValueError:
        raise ValidationFailed(f"{field_name}: must be a valid ISO-8601 date")


class TransactionService(OwnedRecordService):
    resource = "Transaction"
    payload_model = TransactionPayload

    def __init__(self, store: RecordStore, table: str) -> None:
        super().__init__(store, table, get_logger("transaction"))

    def list(
        self,
        owner: str,
        *,
        category: str | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> list[dict[str, Any]]:
        start = _parse_bound(start_date, "startDate")
        end = _parse_bound(end_date, "endDate")

        filters: dict[str, Any] = {"ownerId": owner}
        if category:
            filters["category"] = category
        items = self._store.scan_all(self._table, filters)

        if start or end:
            kept = []
            for item in items:
                day = parse_iso_datetime(item["date"]).date()
                if start and day < start:
                    continue
                if end and day > end:
                    continue
                kept.append(item)
            items = kept

        self._logger.info("transactions retrieved", userId=owner, count=len(items))
        return items
