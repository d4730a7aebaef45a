from typing import Any

from fastapi import APIRouter, Body, Query, Request

from finance_api.routers.deps import require_caller, services

router = APIRouter(prefix="/transaction")


@router.get("")
def list_transactions(
    req: Request,
    category: str | None = None,
    start_date: str | None = Query(default=None, alias="startDate"),
    end_date: str | None = Query(default=None, alias="endDate"),
):
    owner = require_caller(req)
    return services(req).transactions.list(owner, category=category, start_date=start_date, end_date=end_date)


@router.get("/{transaction_id}")
def get_transaction(transaction_id: str, req: Request):
    owner = require_caller(req)
    return services(req).transactions.get(owner, transaction_id)


@router.post("", status_code=201)
def create_transaction(req: Request, payload: Any = Body(default=None)):
    owner = require_caller(req)
    transaction = services(req).transactions.create(owner, payload)
    return {"message": "Transaction created successfully", "transaction": transaction}


@router.put("/{transaction_id}")
def update_transaction(transaction_id: str, req: Request, payload: Any = Body(default=None)):
    owner = require_caller(req)
    transaction = services(req).transactions.update(owner, transaction_id, payload)
    return {"message": "Transaction updated successfully", "transaction": transaction}


@router.delete("/{transaction_id}")
def delete_transaction(transaction_id: str, req: Request):
    owner = require_caller(req)
    services(req).transactions.delete(owner, transaction_id)
    return {"message": "Transaction deleted successfully"}
