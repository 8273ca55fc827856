"""Authorization rules.

Admins may act on anything. Everyone else may act only on their own user
record, and only when the operation does not demand a role they lack.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from inventory_api.core.errors import ApiError, Forbidden, Unauthorized
from inventory_api.models.user import Role


class Access(str, Enum):
    PUBLIC = "public"
    AUTHENTICATED = "authenticated"
    OWNER = "owner"
    ADMIN = "admin"


class DenyReason(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: Optional[DenyReason] = None
    message: Optional[str] = None

    def to_error(self) -> ApiError:
        if self.reason is DenyReason.UNAUTHENTICATED:
            return Unauthorized(self.message or "Authentication required")
        return Forbidden(self.message or "You do not have permission to perform this action")


ALLOW = Decision(True)


def authorize(
    caller_role: Optional[Role],
    caller_identity: Optional[str],
    target_identity: Optional[str] = None,
    required_role: Optional[Role] = None,
) -> Decision:
    if caller_role is None or not caller_identity:
        return Decision(False, DenyReason.UNAUTHENTICATED)
    if caller_role is Role.ADMIN:
        return ALLOW
    if required_role is not None and caller_role is not required_role:
        return Decision(False, DenyReason.FORBIDDEN, f"{required_role.value.capitalize()} role required")
    if target_identity is not None and caller_identity != target_identity:
        return Decision(False, DenyReason.FORBIDDEN)
    return ALLOW


def can_assign_role(caller_role: Optional[Role]) -> bool:
    return caller_role is Role.ADMIN
