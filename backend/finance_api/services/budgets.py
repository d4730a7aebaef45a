from finance_api.core.logs import get_logger
from finance_api.db.store import RecordStore
from finance_api.models.schemas import BudgetPayload
from finance_api.services.records import OwnedRecordService


class BudgetService(OwnedRecordService):
    resource = "Budget"
    payload_model = BudgetPayload
    read_before_write = True

    def __init__(self, store: RecordStore, table: str) -> None:
        super().__init__(store, table, get_logger("budget"))
