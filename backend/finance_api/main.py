from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from finance_api.core.config import Settings, load_settings
from finance_api.core.logs import configure_logging, get_logger
from finance_api.db.pool import connection_factory, create_db_pool
from finance_api.db.store import PostgresRecordStore, RecordStore
from finance_api.routers.accounts import router as account_router
from finance_api.routers.deps import caller_identity
from finance_api.routers.planning import budget_router, goal_router
from finance_api.routers.reports import router as report_router
from finance_api.routers.transactions import router as transaction_router
from finance_api.routers.users import router as user_router
from finance_api.services.blobs import FilesystemBlobStore
from finance_api.services.state import build_services

CORS_HEADERS = {"Access-Control-Allow-Origin": "*"}

logger = get_logger("api")


def json_message(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message}, headers=CORS_HEADERS)


def create_app(
    settings: Settings | None = None,
    store: RecordStore | None = None,
    blobs=None,
) -> FastAPI:
    """Build the API.

    Without an explicit ``store`` a Postgres pool is created from ``settings``
    and opened for the lifetime of the app. Run with
    ``uvicorn finance_api.main:create_app --factory``.
    """
    settings = settings or load_settings()
    configure_logging(settings.log_level)

    pool = None
    if store is None:
        pool = create_db_pool(settings)
        store = PostgresRecordStore(connection_factory(pool))
    if blobs is None:
        blobs = FilesystemBlobStore(settings.export_dir)

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        if pool is not None:
            pool.open()
            store.ensure_tables(settings.tables.all())
        try:
            yield
        finally:
            if pool is not None:
                pool.close()

    app = FastAPI(lifespan=lifespan)
    app.state.settings = settings
    app.state.services = build_services(settings, store, blobs)

    @app.middleware("http")
    async def log_and_tag_response(request: Request, call_next):
        logger.info("request received", method=request.method, path=request.url.path)
        response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response

    app.include_router(report_router)
    app.include_router(user_router)
    app.include_router(account_router)
    app.include_router(transaction_router)
    app.include_router(budget_router)
    app.include_router(goal_router)

    @app.exception_handler(StarletteHTTPException)
    def http_exc_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 405:
            if caller_identity(request) is None:
                return json_message(401, "Unauthorized")
            logger.warning("unsupported HTTP method", method=request.method, path=request.url.path)
            return json_message(400, "Unsupported HTTP method")
        if exc.status_code == 404 and exc.detail == "Not Found":
            return json_message(404, "Not found")
        return json_message(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    def request_validation_handler(request: Request, exc: RequestValidationError):
        if caller_identity(request) is None:
            return json_message(401, "Unauthorized")
        errors = exc.errors()
        if not errors:
            return json_message(400, "Invalid request")
        first = errors[0]
        fields = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
        message = f"{'.'.join(fields)}: {first.get('msg')}" if fields else str(first.get("msg"))
        return json_message(400, message)

    @app.exception_handler(Exception)
    def unhandled_exc_handler(request: Request, exc: Exception):
        logger.error("unhandled error", method=request.method, path=request.url.path, exc_info=exc)
        return json_message(500, "Internal server error")

    return app
