from contextlib import contextmanager

from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

from finance_api.core.config import Settings


def create_db_pool(settings: Settings) -> ConnectionPool:
    return ConnectionPool(
        settings.database_url,
        min_size=settings.db_pool_min,
        max_size=settings.db_pool_max,
        timeout=settings.db_pool_timeout,
        open=False,
        kwargs={"row_factory": dict_row},
    )


def connection_factory(pool: ConnectionPool):
    @contextmanager
    def db_conn():
        with pool.connection() as conn:
            yield conn

    return db_conn
