from inventory_api.core.policy import Access
from inventory_api.db import DocumentRepository
from inventory_api.handlers.base import ResourceHandler
from inventory_api.models.inventory import InventoryItemCreate, InventoryItemDB

INVENTORY_RULES = {
    "list": Access.PUBLIC,
    "get": Access.PUBLIC,
    "create": Access.AUTHENTICATED,
    "update": Access.AUTHENTICATED,
    "delete": Access.ADMIN,
}


def build_inventory_handler(repository: DocumentRepository) -> ResourceHandler:
    # an update is re-validated as a complete item after merging
    return ResourceHandler(
        "item",
        repository,
        create_shape=InventoryItemCreate,
        update_shape=InventoryItemCreate,
        output=InventoryItemDB,
        rules=INVENTORY_RULES,
    )
