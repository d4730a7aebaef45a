import uuid
from typing import Any

from finance_api.core.clock import iso_now
from finance_api.core.errors import NotFound
from finance_api.db.store import Conflict, RecordStore
from finance_api.models.schemas import Payload, require_valid


class OwnedRecordService:
    """CRUD for records that belong to exactly one caller.

    Ownership on update/delete is either folded into the write as a condition
    (the default) or checked with a read first when ``read_before_write`` is
    set. Either way an absent record and someone else's record both surface as
    ``NotFound``.
    """

    resource = "Record"
    payload_model: type[Payload] = Payload
    read_before_write = False

    def __init__(self, store: RecordStore, table: str, logger) -> None:
        self._store = store
        self._table = table
        self._logger = logger

    def list(self, owner: str) -> list[dict[str, Any]]:
        items = self._store.scan_all(self._table, {"ownerId": owner})
        self._logger.info(f"{self.resource.lower()}s retrieved", userId=owner, count=len(items))
        return items

    def get(self, owner: str, record_id: str) -> dict[str, Any]:
        record = self._store.get(self._table, record_id)
        if not record or record.get("ownerId") != owner:
            self._logger.warning(f"{self.resource.lower()} not found or unauthorized", userId=owner, id=record_id)
            raise NotFound(self.resource)
        return record

    def create(self, owner: str, payload: Any) -> dict[str, Any]:
        values = require_valid(self.payload_model, payload)
        now = iso_now()
        record = {
            **values.to_record(),
            "id": str(uuid.uuid4()),
            "ownerId": owner,
            "createdAt": now,
            "updatedAt": now,
        }
        self._store.put(self._table, record)
        self._logger.info(f"{self.resource.lower()} created", userId=owner, id=record["id"])
        return record

    def update(self, owner: str, record_id: str, payload: Any) -> dict[str, Any]:
        values = require_valid(self.payload_model, payload)
        changes = {**values.to_record(), "updatedAt": iso_now()}
        if self.read_before_write:
            self.get(owner, record_id)
            result = self._store.update(self._table, record_id, changes)
        else:
            result = self._store.update(self._table, record_id, changes, conditions={"ownerId": owner})
        if isinstance(result, Conflict):
            self._logger.warning(f"{self.resource.lower()} not found or unauthorized", userId=owner, id=record_id)
            raise NotFound(self.resource)
        self._logger.info(f"{self.resource.lower()} updated", userId=owner, id=record_id)
        return result.record

    def delete(self, owner: str, record_id: str) -> None:
        if self.read_before_write:
            self.get(owner, record_id)
            result = self._store.delete(self._table, record_id)
        else:
            result = self._store.delete(self._table, record_id, conditions={"ownerId": owner})
        if isinstance(result, Conflict):
            self._logger.warning(f"{self.resource.lower()} not found or unauthorized", userId=owner, id=record_id)
            raise NotFound(self.resource)
        self._logger.info(f"{self.resource.lower()} deleted", userId=owner, id=record_id)
