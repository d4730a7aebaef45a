from dataclasses import dataclass

from finance_api.core.config import Settings
from finance_api.db.store import RecordStore
from finance_api.services.accounts import AccountService
from finance_api.services.analytics import AnalyticsService
from finance_api.services.audit import AuditTrail
from finance_api.services.budgets import BudgetService
from finance_api.services.exporter import ExportService
from finance_api.services.goals import GoalService
from finance_api.services.transactions import TransactionService
from finance_api.services.users import UserService


@dataclass(frozen=True)
class AppServices:
    users: UserService
    accounts: AccountService
    transactions: TransactionService
    budgets: BudgetService
    goals: GoalService
    analytics: AnalyticsService
    exports: ExportService


def build_services(settings: Settings, store: RecordStore, blobs) -> AppServices:
    tables = settings.tables
    audit = AuditTrail(store, tables.audit)
    return AppServices(
        users=UserService(store, tables.users),
        accounts=AccountService(
            store,
            tables.accounts,
            audit,
            default_page_size=settings.default_page_size,
            max_page_size=settings.max_page_size,
        ),
        transactions=TransactionService(store, tables.transactions),
        budgets=BudgetService(store, tables.budgets),
        goals=GoalService(store, tables.goals),
        analytics=AnalyticsService(store, tables),
        exports=ExportService(store, tables.transactions, blobs),
    )
