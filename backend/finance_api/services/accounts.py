import base64
import json
import uuid
from typing import Any

from finance_api.core.clock import iso_now
from finance_api.core.errors import ConcurrencyConflict, NotFound, ValidationFailed
from finance_api.core.logs import get_logger
from finance_api.db.store import Conflict, RecordStore
from finance_api.models.schemas import AccountPayload, AccountUpdatePayload, require_valid
from finance_api.services.audit import CREATE_ACCOUNT, DELETE_ACCOUNT, UPDATE_ACCOUNT, AuditTrail

logger = get_logger("account")


def encode_cursor(last_key: str) -> str:
    raw = json.dumps({"lastKey": last_key}, separators=(",", ":")).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("utf-8").rstrip("=")


def decode_cursor(token: str | None) -> str | None:
    if not token:
        return None
    padded = token + "=" * (-len(token) % 4)
    try:
        decoded = base64.urlsafe_b64decode(padded.encode("utf-8")).decode("utf-8")
        payload = json.loads(decoded)
    except (ValueError, UnicodeDecodeError):
        raise ValidationFailed("cursor: invalid cursor")
    if not isinstance(payload, dict) or not isinstance(payload.get("lastKey"), str):
        raise ValidationFailed("cursor: invalid cursor")
    return payload["lastKey"]


class AccountService:
    """Accounts with optimistic concurrency.

    Every mutation is a single conditional write against the stored owner,
    active flag and (for updates) version. A losing writer gets a conflict and
    has to re-read before retrying; nothing here retries on its behalf.
    """

    def __init__(
        self,
        store: RecordStore,
        table: str,
        audit: AuditTrail,
        *,
        default_page_size: int = 20,
        max_page_size: int = 100,
    ) -> None:
        self._store = store
        self._table = table
        self._audit = audit
        self._default_page_size = default_page_size
        self._max_page_size = max_page_size

    def list_page(self, owner: str, cursor: str | None = None, page_size: int | None = None) -> dict[str, Any]:
        start_key = decode_cursor(cursor)
        if page_size is None:
            limit = self._default_page_size
        else:
            limit = max(1, min(self._max_page_size, page_size))

        page = self._store.scan(
            self._table,
            {"ownerId": owner, "active": True},
            limit=limit,
            start_key=start_key,
        )
        logger.info("accounts retrieved", userId=owner, count=len(page.items))
        return {
            "accounts": page.items,
            "nextCursor": encode_cursor(page.last_key) if page.last_key else None,
        }

    def get(self, owner: str, account_id: str) -> dict[str, Any]:
        account = self._store.get(self._table, account_id)
        if not account or account.get("ownerId") != owner or not account.get("active"):
            logger.warning("account not found or unauthorized", userId=owner, accountId=account_id)
            raise NotFound("Account")
        return account

    def create(self, owner: str, payload: Any) -> dict[str, Any]:
        values = require_valid(AccountPayload, payload)
        now = iso_now()
        account = {
            **values.to_record(),
            "id": str(uuid.uuid4()),
            "ownerId": owner,
            "active": True,
            "version": 1,
            "createdAt": now,
            "updatedAt": now,
        }
        self._store.put(self._table, account, if_absent=True)
        logger.info("account created", userId=owner, accountId=account["id"])
        self._audit.record(owner, CREATE_ACCOUNT, {"accountId": account["id"], "version": 1})
        return account

    def update(self, owner: str, account_id: str, payload: Any) -> dict[str, Any]:
        values = require_valid(AccountUpdatePayload, payload)
        expected = values.expected_version
        changes = {**values.to_record(), "version": expected + 1, "updatedAt": iso_now()}

        result = self._store.update(
            self._table,
            account_id,
            changes,
            conditions={"ownerId": owner, "active": True, "version": expected},
        )
        if isinstance(result, Conflict):
            logger.warning("account update rejected", userId=owner, accountId=account_id, expectedVersion=expected)
            raise ConcurrencyConflict()

        logger.info("account updated", userId=owner, accountId=account_id, version=expected + 1)
        self._audit.record(
            owner,
            UPDATE_ACCOUNT,
            {"accountId": account_id, "oldVersion": expected, "newVersion": expected + 1},
        )
        return result.record

    def soft_delete(self, owner: str, account_id: str) -> None:
        result = self._store.update(
            self._table,
            account_id,
            {"active": False, "updatedAt": iso_now()},
            conditions={"ownerId": owner, "active": True},
        )
        if isinstance(result, Conflict):
            logger.warning("account not found or unauthorized", userId=owner, accountId=account_id)
            raise NotFound("Account")

        logger.info("account deleted", userId=owner, accountId=account_id)
        self._audit.record(owner, DELETE_ACCOUNT, {"accountId": account_id, "version": result.record.get("version")})
