from typing import Any

from finance_api.core.clock import iso_now
from finance_api.core.errors import AlreadyExists, NotFound
from finance_api.core.logs import get_logger
from finance_api.db.store import Conflict, RecordStore
from finance_api.models.schemas import UserPayload, require_valid

logger = get_logger("user")


class UserService:
    """Profile records keyed by the caller identity itself."""

    def __init__(self, store: RecordStore, table: str) -> None:
        self._store = store
        self._table = table

    def _require_self(self, owner: str, user_id: str) -> None:
        if user_id != owner:
            logger.warning("user not found or unauthorized", userId=owner, requestedId=user_id)
            raise NotFound("User")

    def list(self, owner: str) -> list[dict[str, Any]]:
        user = self._store.get(self._table, owner)
        return [user] if user else []

    def get(self, owner: str, user_id: str) -> dict[str, Any]:
        self._require_self(owner, user_id)
        user = self._store.get(self._table, owner)
        if not user:
            logger.warning("user not found", userId=owner)
            raise NotFound("User")
        logger.info("user retrieved", userId=owner)
        return user

    def create(self, owner: str, payload: Any) -> dict[str, Any]:
        values = require_valid(UserPayload, payload)
        user = {**values.to_record(), "id": owner, "createdAt": iso_now()}
        result = self._store.put(self._table, user, if_absent=True)
        if isinstance(result, Conflict):
            logger.warning("user already exists", userId=owner)
            raise AlreadyExists("User")
        logger.info("user created", userId=owner)
        return user

    def update(self, owner: str, user_id: str, payload: Any) -> dict[str, Any]:
        values = require_valid(UserPayload, payload)
        self._require_self(owner, user_id)
        result = self._store.update(self._table, owner, {**values.to_record(), "updatedAt": iso_now()})
        if isinstance(result, Conflict):
            logger.warning("user not found", userId=owner)
            raise NotFound("User")
        logger.info("user updated", userId=owner)
        return result.record

    def delete(self, owner: str, user_id: str) -> None:
        self._require_self(owner, user_id)
        result = self._store.delete(self._table, owner)
        if isinstance(result, Conflict):
            logger.warning("user not found", userId=owner)
            raise NotFound("User")
        logger.info("user deleted", userId=owner)
