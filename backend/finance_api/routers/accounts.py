from typing import Any

from fastapi import APIRouter, Body, Query, Request

from finance_api.routers.deps import require_caller, services

router = APIRouter(prefix="/account")


@router.get("")
def list_accounts(
    req: Request,
    cursor: str | None = None,
    page_size: int | None = Query(default=None, alias="pageSize"),
):
    owner = require_caller(req)
    return services(req).accounts.list_page(owner, cursor, page_size)


@router.get("/{account_id}")
def get_account(account_id: str, req: Request):
    owner = require_caller(req)
    return services(req).accounts.get(owner, account_id)


@router.post("", status_code=201)
def create_account(req: Request, payload: Any = Body(default=None)):
    owner = require_caller(req)
    account = services(req).accounts.create(owner, payload)
    return {"message": "Account created successfully", "account": account}


@router.put("/{account_id}")
def update_account(account_id: str, req: Request, payload: Any = Body(default=None)):
    owner = require_caller(req)
    account = services(req).accounts.update(owner, account_id, payload)
    return {"message": "Account updated successfully", "account": account}


@router.delete("/{account_id}")
def delete_account(account_id: str, req: Request):
    owner = require_caller(req)
    services(req).accounts.soft_delete(owner, account_id)
    return {"message": "Account deleted successfully"}
