from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Request, status

from inventory_api.core.envelope import respond
from inventory_api.core.security import Principal
from inventory_api.handlers.users import UserHandler
from inventory_api.routers.deps import current_principal, get_user_handler

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("")
async def list_users(
    request: Request,
    caller: Principal = Depends(current_principal),
    users: UserHandler = Depends(get_user_handler),
):
    return respond(request, await users.list(caller))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_user(
    request: Request,
    payload: Dict[str, Any] = Body(...),
    caller: Principal = Depends(current_principal),
    users: UserHandler = Depends(get_user_handler),
):
    return respond(request, await users.create(caller, payload), status.HTTP_201_CREATED)


@router.get("/{user_id}")
async def get_user(
    request: Request,
    user_id: str,
    caller: Principal = Depends(current_principal),
    users: UserHandler = Depends(get_user_handler),
):
    return respond(request, await users.get(caller, user_id))


@router.put("/{user_id}")
async def update_user(
    request: Request,
    user_id: str,
    payload: Dict[str, Any] = Body(...),
    caller: Principal = Depends(current_principal),
    users: UserHandler = Depends(get_user_handler),
):
    return respond(request, await users.update(caller, user_id, payload))


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    request: Request,
    user_id: str,
    caller: Principal = Depends(current_principal),
    users: UserHandler = Depends(get_user_handler),
):
    return respond(request, await users.delete(caller, user_id), status.HTTP_204_NO_CONTENT)
