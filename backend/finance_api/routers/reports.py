from fastapi import APIRouter, Request

from finance_api.routers.deps import require_caller, services

router = APIRouter()


@router.get("/health")
def health():
    return {"ok": True}


@router.get("/analytics/summary")
def analytics_summary(req: Request):
    owner = require_caller(req)
    return services(req).analytics.summary(owner)


@router.get("/export")
def export_transactions(req: Request):
    owner = require_caller(req)
    filename = services(req).exports.export(owner)
    return {"message": "Export successful", "filename": filename}
