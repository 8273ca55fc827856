from typing import Optional

from bson.errors import InvalidId
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from inventory_api.core.errors import Unauthorized
from inventory_api.core.logging import get_logger
from inventory_api.core.result import Err
from inventory_api.core.security import Principal
from inventory_api.handlers.base import ResourceHandler
from inventory_api.handlers.users import AccountService, UserHandler
from inventory_api.models.user import Role

logger = get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_inventory_handler(request: Request) -> ResourceHandler:
    return request.app.state.inventory


def get_user_handler(request: Request) -> UserHandler:
    return request.app.state.users


def get_account_service(request: Request) -> AccountService:
    return request.app.state.accounts


async def optional_principal(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[Principal]:
    """The caller behind the bearer token, or None when no token was sent.

    A token that is present but invalid, expired, or names a user that no
    longer exists is rejected outright.
    """
    if credentials is None:
        return None

    verified = request.app.state.tokens.verify_token(credentials.credentials)
    if isinstance(verified, Err):
        logger.info("Token rejected", reason=verified.error.message)
        raise verified.error

    try:
        account = await request.app.state.users.repository.find_by_id(verified.value.identity)
    except InvalidId:
        raise Unauthorized("Invalid token")
    if account is None:
        raise Unauthorized("User no longer exists")
    return Principal(identity=account["id"], role=Role(account["role"]))


async def current_principal(principal: Optional[Principal] = Depends(optional_principal)) -> Principal:
    if principal is None:
        raise Unauthorized("Authentication required")
    return principal
