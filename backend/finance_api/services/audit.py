import uuid
from typing import Any

from finance_api.core.clock import iso_now
from finance_api.core.logs import get_logger
from finance_api.db.store import RecordStore

CREATE_ACCOUNT = "CREATE_ACCOUNT"
UPDATE_ACCOUNT = "UPDATE_ACCOUNT"
DELETE_ACCOUNT = "DELETE_ACCOUNT"

logger = get_logger("audit")


class AuditTrail:
    """Append-only audit events, written after the mutation they describe.

    A failed write is logged and reported as ``None``; it never undoes or
    fails the mutation that triggered it.
    """

    def __init__(self, store: RecordStore, table: str) -> None:
        self._store = store
        self._table = table

    def record(self, user_id: str, action: str, details: dict[str, Any]) -> dict[str, Any] | None:
        event = {
            "id": str(uuid.uuid4()),
            "userId": user_id,
            "action": action,
            "timestamp": iso_now(),
            "details": details,
        }
        try:
            self._store.put(self._table, event, if_absent=True)
        except Exception:
            logger.exception("audit write failed", userId=user_id, action=action, details=details)
            return None
        logger.info("audit event written", userId=user_id, action=action, eventId=event["id"])
        return event
