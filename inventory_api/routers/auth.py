from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Request, status

from inventory_api.core.envelope import respond
from inventory_api.handlers.users import AccountService
from inventory_api.routers.deps import get_account_service

router = APIRouter(prefix="/api/users", tags=["auth"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    request: Request,
    payload: Dict[str, Any] = Body(...),
    accounts: AccountService = Depends(get_account_service),
):
    return respond(request, await accounts.register(payload), status.HTTP_201_CREATED)


@router.post("/login")
async def login(
    request: Request,
    payload: Dict[str, Any] = Body(...),
    accounts: AccountService = Depends(get_account_service),
):
    return respond(request, await accounts.login(payload))
