"""GraphQL surface for inventory items.

Resolvers call the same handler as the REST routes. Failures become GraphQL
errors whose ``extensions`` hold the usual error envelope.
"""

from typing import Any, Dict, List, Optional

import strawberry
from fastapi import Depends, Request
from graphql import GraphQLError
from strawberry.fastapi import GraphQLRouter
from strawberry.types import Info

from inventory_api.core.envelope import error_body
from inventory_api.core.result import Err, Result
from inventory_api.core.security import Principal
from inventory_api.handlers.base import ResourceHandler
from inventory_api.routers.deps import get_inventory_handler, optional_principal


@strawberry.type
class Inventory:
    id: strawberry.ID
    name: str
    category: str
    quantity: int
    price: float
    description: Optional[str] = None
    supplier: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_item(cls, item: Dict[str, Any]) -> "Inventory":
        return cls(
            id=strawberry.ID(item["id"]),
            name=item["name"],
            category=item["category"],
            quantity=item["stock"],
            price=item["price"],
            description=item.get("description"),
            supplier=item.get("supplier"),
            created_at=item.get("createdAt"),
            updated_at=item.get("updatedAt"),
        )


def _unwrap(info: Info, result: Result) -> Any:
    if isinstance(result, Err):
        raise GraphQLError(result.error.message, extensions=error_body(result.error, info.context["debug"]))
    return result.value


def _payload(**fields: Any) -> Dict[str, Any]:
    """Arguments left out of the query are dropped; an explicit null is kept."""
    payload = {k: v for k, v in fields.items() if v is not strawberry.UNSET}
    if "quantity" in payload:
        payload["stock"] = payload.pop("quantity")
    return payload


@strawberry.type
class Query:
    @strawberry.field
    async def inventory(self, info: Info, id: strawberry.ID) -> Inventory:
        handler: ResourceHandler = info.context["inventory"]
        return Inventory.from_item(_unwrap(info, await handler.get(info.context["caller"], str(id))))

    @strawberry.field
    async def inventories(self, info: Info) -> List[Inventory]:
        handler: ResourceHandler = info.context["inventory"]
        return [Inventory.from_item(item) for item in _unwrap(info, await handler.list(info.context["caller"]))]


@strawberry.type
class Mutation:
    @strawberry.mutation
    async def add_inventory(
        self,
        info: Info,
        name: str,
        category: str,
        quantity: int,
        price: float,
        description: Optional[str] = None,
        supplier: Optional[str] = None,
    ) -> Inventory:
        handler: ResourceHandler = info.context["inventory"]
        payload = _payload(
            name=name,
            category=category,
            quantity=quantity,
            price=price,
            description=description,
            supplier=supplier,
        )
        return Inventory.from_item(_unwrap(info, await handler.create(info.context["caller"], payload)))

    @strawberry.mutation
    async def update_inventory(
        self,
        info: Info,
        id: strawberry.ID,
        name: Optional[str] = strawberry.UNSET,
        category: Optional[str] = strawberry.UNSET,
        quantity: Optional[int] = strawberry.UNSET,
        price: Optional[float] = strawberry.UNSET,
        description: Optional[str] = strawberry.UNSET,
        supplier: Optional[str] = strawberry.UNSET,
    ) -> Inventory:
        handler: ResourceHandler = info.context["inventory"]
        payload = _payload(
            name=name,
            category=category,
            quantity=quantity,
            price=price,
            description=description,
            supplier=supplier,
        )
        return Inventory.from_item(_unwrap(info, await handler.update(info.context["caller"], str(id), payload)))


schema = strawberry.Schema(query=Query, mutation=Mutation)


async def get_context(
    request: Request,
    caller: Optional[Principal] = Depends(optional_principal),
    inventory: ResourceHandler = Depends(get_inventory_handler),
) -> Dict[str, Any]:
    settings = request.app.state.settings
    return {"caller": caller, "inventory": inventory, "debug": settings.debug}


def build_graphql_router() -> GraphQLRouter:
    return GraphQLRouter(schema, context_getter=get_context)
