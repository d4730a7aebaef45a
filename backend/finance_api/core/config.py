import os
import re
from dataclasses import dataclass, field

_IDENTIFIER_RE = re.compile(r"^[a-z_][a-z0-9_]{0,62}$")


@dataclass(frozen=True)
class TableNames:
    users: str = "users"
    accounts: str = "accounts"
    transactions: str = "transactions"
    budgets: str = "budgets"
    goals: str = "goals"
    audit: str = "audit_events"

    def all(self) -> list[str]:
        return [self.users, self.accounts, self.transactions, self.budgets, self.goals, self.audit]


@dataclass(frozen=True)
class Settings:
    database_url: str
    stage: str = "dev"
    log_level: str = "INFO"
    identity_header: str = "X-Caller-Id"
    tables: TableNames = field(default_factory=TableNames)
    export_dir: str = "/app/storage/exports"
    db_pool_min: int = 1
    db_pool_max: int = 10
    db_pool_timeout: float = 30.0
    default_page_size: int = 20
    max_page_size: int = 100


def _table_name(env_name: str, default: str) -> str:
    value = (os.getenv(env_name) or "").strip() or default
    if not _IDENTIFIER_RE.fullmatch(value):
        raise RuntimeError(f"{env_name} must be a plain lowercase SQL identifier")
    return value


def load_settings() -> Settings:
    database_url = os.getenv("DATABASE_URL", "")
    if not database_url:
        raise RuntimeError("DATABASE_URL is required")

    db_pool_min = max(1, int(os.getenv("DB_POOL_MIN", "1")))
    db_pool_max = max(db_pool_min, int(os.getenv("DB_POOL_MAX", "10")))
    max_page_size = max(1, int(os.getenv("MAX_PAGE_SIZE", "100")))

    tables = TableNames(
        users=_table_name("USER_TABLE", "users"),
        accounts=_table_name("ACCOUNT_TABLE", "accounts"),
        transactions=_table_name("TRANSACTION_TABLE", "transactions"),
        budgets=_table_name("BUDGET_TABLE", "budgets"),
        goals=_table_name("GOAL_TABLE", "goals"),
        audit=_table_name("AUDIT_TABLE", "audit_events"),
    )

    return Settings(
        database_url=database_url,
        stage=(os.getenv("STAGE") or "dev").strip().lower() or "dev",
        log_level=(os.getenv("LOG_LEVEL") or "INFO").strip().upper() or "INFO",
        identity_header=(os.getenv("IDENTITY_HEADER") or "X-Caller-Id").strip() or "X-Caller-Id",
        tables=tables,
        export_dir=(os.getenv("EXPORT_DIR") or "/app/storage/exports").strip() or "/app/storage/exports",
        db_pool_min=db_pool_min,
        db_pool_max=db_pool_max,
        db_pool_timeout=float(os.getenv("DB_POOL_TIMEOUT", "30")),
        default_page_size=max(1, min(max_page_size, int(os.getenv("DEFAULT_PAGE_SIZE", "20")))),
        max_page_size=max_page_size,
    )
