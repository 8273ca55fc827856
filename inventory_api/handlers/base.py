"""Generic CRUD pipeline shared by every resource.

Each operation runs the same stages: authorize, validate, persist, shape the
output. Every stage yields ``Ok`` or ``Err`` and the first ``Err`` is returned
unchanged; nothing here builds a response.
"""

from typing import Any, Awaitable, Dict, List, Mapping, Optional, Type, TypeVar

from bson.errors import InvalidId
from pydantic import BaseModel
from pymongo.errors import DuplicateKeyError, PyMongoError

from inventory_api.core.errors import Conflict, InternalError, InvalidIdentifier, NotFound
from inventory_api.core.logging import get_logger
from inventory_api.core.policy import Access, authorize
from inventory_api.core.result import Err, Ok, Result
from inventory_api.core.security import Principal
from inventory_api.db import DocumentRepository
from inventory_api.models.user import Role
from inventory_api.validation import validate

logger = get_logger(__name__)

T = TypeVar("T")

OPERATIONS = ("list", "get", "create", "update", "delete")


async def guard_store(repository: DocumentRepository, operation: Awaitable[T]) -> Result[T]:
    """Await a store call and translate store failures into pipeline errors."""
    try:
        return Ok(await operation)
    except InvalidId:
        return Err(InvalidIdentifier())
    except DuplicateKeyError as exc:
        field = repository.duplicate_field(exc)
        return Err(Conflict(f"Duplicate value entered for field '{field}'"))
    except PyMongoError as exc:
        logger.error("Store operation failed", collection=repository.collection.name, error=str(exc))
        return Err(InternalError(cause=exc))


class ResourceHandler:
    def __init__(
        self,
        name: str,
        repository: DocumentRepository,
        create_shape: Type[BaseModel],
        update_shape: Type[BaseModel],
        output: Type[BaseModel],
        rules: Mapping[str, Access],
    ):
        missing = [op for op in OPERATIONS if op not in rules]
        if missing:
            raise ValueError(f"No access rule for {', '.join(missing)}")
        self.name = name
        self.repository = repository
        self.create_shape = create_shape
        self.update_shape = update_shape
        self.output = output
        self.rules = dict(rules)

    # ---- hooks ----

    def prepare(self, caller: Optional[Principal], data: Dict[str, Any], existing: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """Turn validated input into the document to store."""
        return data

    def restrict(self, caller: Optional[Principal], changes: Dict[str, Any]) -> Dict[str, Any]:
        """Drop update fields the caller may not change."""
        return changes

    def present(self, document: Dict[str, Any]) -> Dict[str, Any]:
        return self.output.model_validate(document).model_dump(mode="json", by_alias=True)

    # ---- stages ----

    def check_access(self, operation: str, caller: Optional[Principal], target: Optional[str] = None) -> Optional[Err]:
        access = self.rules[operation]
        if access is Access.PUBLIC:
            return None
        decision = authorize(
            caller.role if caller else None,
            caller.identity if caller else None,
            target_identity=target if access is Access.OWNER else None,
            required_role=Role.ADMIN if access is Access.ADMIN else None,
        )
        if decision.allowed:
            return None
        logger.info(
            "Access denied",
            resource=self.name,
            operation=operation,
            reason=decision.reason.value,
            caller=caller.identity if caller else None,
        )
        return Err(decision.to_error())

    def _not_found(self) -> Err:
        return Err(NotFound(f"{self.name.capitalize()} not found"))

    def _wire_keys(self, shape: Type[BaseModel], data: Mapping[str, Any]) -> Dict[str, Any]:
        """Re-key ``data`` (camelCase or snake_case) by the shape's wire names.

        Validation error locations follow the keys supplied, so a merged
        update must use the same keys a client would.
        """
        keys = {}
        for field_name, info in shape.model_fields.items():
            wire = info.alias or field_name
            keys[field_name] = wire
            keys[wire] = wire
        return {keys.get(key, key): value for key, value in data.items()}

    # ---- operations ----

    async def list(self, caller: Optional[Principal] = None) -> Result[List[Dict[str, Any]]]:
        denied = self.check_access("list", caller)
        if denied:
            return denied
        found = await guard_store(self.repository, self.repository.find_all())
        if isinstance(found, Err):
            return found
        return Ok([self.present(doc) for doc in found.value])

    async def get(self, caller: Optional[Principal], identifier: str) -> Result[Dict[str, Any]]:
        denied = self.check_access("get", caller, identifier)
        if denied:
            return denied
        found = await guard_store(self.repository, self.repository.find_by_id(identifier))
        if isinstance(found, Err):
            return found
        if found.value is None:
            return self._not_found()
        return Ok(self.present(found.value))

    async def create(self, caller: Optional[Principal], payload: Any) -> Result[Dict[str, Any]]:
        denied = self.check_access("create", caller)
        if denied:
            return denied
        return await self.insert(caller, payload)

    async def insert(self, caller: Optional[Principal], payload: Any) -> Result[Dict[str, Any]]:
        """Validate and store a new entity without an access check."""
        validated = validate(payload, self.create_shape)
        if isinstance(validated, Err):
            return validated
        document = self.prepare(caller, validated.value.model_dump(mode="json"), None)
        stored = await guard_store(self.repository, self.repository.insert(document))
        if isinstance(stored, Err):
            return stored
        logger.info(f"{self.name.capitalize()} created", resource=self.name, id=stored.value["id"])
        return Ok(self.present(stored.value))

    async def update(self, caller: Optional[Principal], identifier: str, payload: Any) -> Result[Dict[str, Any]]:
        denied = self.check_access("update", caller, identifier)
        if denied:
            return denied
        if not isinstance(payload, Mapping):
            # let the validator report the shape problem
            return validate(payload, self.update_shape)

        found = await guard_store(self.repository, self.repository.find_by_id(identifier))
        if isinstance(found, Err):
            return found
        existing = found.value
        if existing is None:
            return self._not_found()

        changes = self.restrict(caller, self._wire_keys(self.update_shape, payload))
        current = self._wire_keys(
            self.update_shape,
            {k: v for k, v in existing.items() if k in self.update_shape.model_fields},
        )
        validated = validate({**current, **changes}, self.update_shape)
        if isinstance(validated, Err):
            return validated

        document = self.prepare(caller, validated.value.model_dump(mode="json"), existing)
        updated = await guard_store(self.repository, self.repository.update_by_id(identifier, document))
        if isinstance(updated, Err):
            return updated
        if updated.value is None:
            return self._not_found()
        logger.info(f"{self.name.capitalize()} updated", resource=self.name, id=identifier)
        return Ok(self.present(updated.value))

    async def delete(self, caller: Optional[Principal], identifier: str) -> Result[None]:
        denied = self.check_access("delete", caller, identifier)
        if denied:
            return denied
        deleted = await guard_store(self.repository, self.repository.delete_by_id(identifier))
        if isinstance(deleted, Err):
            return deleted
        if not deleted.value:
            return self._not_found()
        logger.info(f"{self.name.capitalize()} deleted", resource=self.name, id=identifier)
        return Ok(None)
