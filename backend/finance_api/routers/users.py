from typing import Any

from fastapi import APIRouter, Body, Request

from finance_api.routers.deps import require_caller, services

router = APIRouter(prefix="/user")


@router.get("")
def list_users(req: Request):
    owner = require_caller(req)
    return services(req).users.list(owner)


@router.get("/{user_id}")
def get_user(user_id: str, req: Request):
    owner = require_caller(req)
    return services(req).users.get(owner, user_id)


@router.post("", status_code=201)
def create_user(req: Request, payload: Any = Body(default=None)):
    owner = require_caller(req)
    user = services(req).users.create(owner, payload)
    return {"message": "User created successfully", "user": user}


@router.put("/{user_id}")
def update_user(user_id: str, req: Request, payload: Any = Body(default=None)):
    owner = require_caller(req)
    user = services(req).users.update(owner, user_id, payload)
    return {"message": "User updated successfully", "user": user}


@router.delete("/{user_id}")
def delete_user(user_id: str, req: Request):
    owner = require_caller(req)
    services(req).users.delete(owner, user_id)
    return {"message": "User deleted successfully"}
