from fastapi import Request

from finance_api.core.errors import Unauthorized
from finance_api.services.state import AppServices


def caller_identity(req: Request) -> str | None:
    header = req.app.state.settings.identity_header
    caller = (req.headers.get(header) or "").strip()
    return caller or None


def require_caller(req: Request) -> str:
    caller = caller_identity(req)
    if not caller:
        raise Unauthorized()
    return caller


def services(req: Request) -> AppServices:
    return req.app.state.services
