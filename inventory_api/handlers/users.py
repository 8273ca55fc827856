from typing import Any, Dict, Optional

from inventory_api.core.errors import Unauthorized
from inventory_api.core.logging import get_logger
from inventory_api.core.policy import Access, can_assign_role
from inventory_api.core.result import Err, Ok, Result
from inventory_api.core.security import PasswordHasher, Principal, TokenService
from inventory_api.db import DocumentRepository
from inventory_api.handlers.base import ResourceHandler, guard_store
from inventory_api.models.user import Role, Token, UserCreate, UserInDB, UserLogin, UserUpdate
from inventory_api.validation import validate

logger = get_logger(__name__)

USER_RULES = {
    "list": Access.ADMIN,
    "get": Access.OWNER,
    "create": Access.ADMIN,
    "update": Access.OWNER,
    "delete": Access.OWNER,
}

INVALID_CREDENTIALS = "Invalid email or password"


class UserHandler(ResourceHandler):
    def __init__(self, repository: DocumentRepository, hasher: PasswordHasher):
        super().__init__("user", repository, UserCreate, UserUpdate, UserInDB, USER_RULES)
        self.hasher = hasher

    def restrict(self, caller: Optional[Principal], changes: Dict[str, Any]) -> Dict[str, Any]:
        if "role" in changes and not can_assign_role(caller.role if caller else None):
            logger.info("Role change ignored", caller=caller.identity if caller else None)
            changes = {k: v for k, v in changes.items() if k != "role"}
        return changes

    def prepare(self, caller: Optional[Principal], data: Dict[str, Any], existing: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        data = dict(data)
        data["email"] = data["email"].lower()

        password = data.pop("password", None)
        if password:
            data["password_hash"] = self.hasher.hash_password(password)

        if not can_assign_role(caller.role if caller else None):
            data["role"] = existing["role"] if existing else Role.USER.value
        return data


class AccountService:
    """Self-service registration and login on top of the user handler."""

    def __init__(self, users: UserHandler, tokens: TokenService):
        self.users = users
        self.tokens = tokens

    @property
    def repository(self) -> DocumentRepository:
        return self.users.repository

    def _session(self, user: Dict[str, Any]) -> Dict[str, Any]:
        token = Token(access_token=self.tokens.issue_token(user["id"], Role(user["role"])))
        return {"user": user, **token.model_dump(by_alias=True)}

    async def register(self, payload: Any) -> Result[Dict[str, Any]]:
        created = await self.users.insert(None, payload)
        if isinstance(created, Err):
            return created
        return Ok(self._session(created.value))

    async def login(self, payload: Any) -> Result[Dict[str, Any]]:
        credentials = validate(payload, UserLogin)
        if isinstance(credentials, Err):
            return credentials

        email = credentials.value.email.lower()
        found = await guard_store(self.repository, self.repository.find_one(email=email))
        if isinstance(found, Err):
            return found

        account = found.value
        if not self.users.hasher.verify_password(credentials.value.password, account.get("password_hash") if account else None):
            logger.info("Login failed")
            return Err(Unauthorized(INVALID_CREDENTIALS))
        return Ok(self._session(self.users.present(account)))

    async def ensure_admin(self, email: str, password: str, first_name: str, last_name: str) -> Result[Dict[str, Any]]:
        """Create the bootstrap administrator unless the email is taken."""
        found = await guard_store(self.repository, self.repository.find_one(email=email.lower()))
        if isinstance(found, Err):
            return found
        if found.value is not None:
            return Ok(self.users.present(found.value))

        system = Principal(identity="system", role=Role.ADMIN)
        created = await self.users.insert(
            system,
            {"firstName": first_name, "lastName": last_name, "email": email, "password": password, "role": Role.ADMIN.value},
        )
        if isinstance(created, Ok):
            logger.info("Administrator account created", id=created.value["id"])
        return created
