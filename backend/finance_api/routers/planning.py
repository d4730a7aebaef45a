"""Budget and goal routes.

Both resources share the same shape; ``build_router`` wires one of them to
the matching service on ``app.state.services``.
"""

from typing import Any

from fastapi import APIRouter, Body, Request

from finance_api.routers.deps import require_caller, services


def build_router(resource: str, service_attr: str) -> APIRouter:
    label = resource.capitalize()
    router = APIRouter(prefix=f"/{resource}")

    def service(req: Request):
        return getattr(services(req), service_attr)

    @router.get("")
    def list_records(req: Request):
        owner = require_caller(req)
        return service(req).list(owner)

    @router.get("/{record_id}")
    def get_record(record_id: str, req: Request):
        owner = require_caller(req)
        return service(req).get(owner, record_id)

    @router.post("", status_code=201)
    def create_record(req: Request, payload: Any = Body(default=None)):
        owner = require_caller(req)
        record = service(req).create(owner, payload)
        return {"message": f"{label} created successfully", resource: record}

    @router.put("/{record_id}")
    def update_record(record_id: str, req: Request, payload: Any = Body(default=None)):
        owner = require_caller(req)
        record = service(req).update(owner, record_id, payload)
        return {"message": f"{label} updated successfully", resource: record}

    @router.delete("/{record_id}")
    def delete_record(record_id: str, req: Request):
        owner = require_caller(req)
        service(req).delete(owner, record_id)
        return {"message": f"{label} deleted successfully"}

    return router


budget_router = build_router("budget", "budgets")
goal_router = build_router("goal", "goals")
