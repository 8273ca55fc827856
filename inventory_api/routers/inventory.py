# inventory_api/routers/inventory.py
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Request, status

from inventory_api.core.envelope import respond
from inventory_api.core.security import Principal
from inventory_api.handlers.base import ResourceHandler
from inventory_api.routers.deps import current_principal, get_inventory_handler

router = APIRouter(prefix="/api/inventory", tags=["inventory"])


@router.get("")
async def list_items(request: Request, items: ResourceHandler = Depends(get_inventory_handler)):
    return respond(request, await items.list(None))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_item(
    request: Request,
    payload: Dict[str, Any] = Body(...),
    caller: Principal = Depends(current_principal),
    items: ResourceHandler = Depends(get_inventory_handler),
):
    return respond(request, await items.create(caller, payload), status.HTTP_201_CREATED)


@router.get("/{item_id}")
async def get_item(request: Request, item_id: str, items: ResourceHandler = Depends(get_inventory_handler)):
    return respond(request, await items.get(None, item_id))


@router.put("/{item_id}")
async def update_item(
    request: Request,
    item_id: str,
    payload: Dict[str, Any] = Body(...),
    caller: Principal = Depends(current_principal),
    items: ResourceHandler = Depends(get_inventory_handler),
):
    return respond(request, await items.update(caller, item_id, payload))


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item(
    request: Request,
    item_id: str,
    caller: Principal = Depends(current_principal),
    items: ResourceHandler = Depends(get_inventory_handler),
):
    return respond(request, await items.delete(caller, item_id), status.HTTP_204_NO_CONTENT)
