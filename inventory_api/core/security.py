# inventory_api/core/security.py
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from inventory_api.core.config import Settings
from inventory_api.core.errors import Unauthorized
from inventory_api.core.result import Err, Ok, Result
from inventory_api.models.user import Role


@dataclass(frozen=True)
class Principal:
    """The authenticated caller, as asserted by a verified token."""

    identity: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


class PasswordHasher:
    def __init__(self, rounds: int = 12):
        self._context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)
        self._dummy_hash: Optional[str] = None

    def hash_password(self, password: str) -> str:
        return self._context.hash(password)

    def verify_password(self, plain_password: str, hashed_password: Optional[str]) -> bool:
        if not hashed_password:
            # keep the cost of a miss close to the cost of a real check
            if self._dummy_hash is None:
                self._dummy_hash = self.hash_password("not-a-real-password")
            self._context.verify(plain_password, self._dummy_hash)
            return False
        try:
            return self._context.verify(plain_password, hashed_password)
        except ValueError:
            return False


class TokenService:
    def __init__(self, secret_key: str, algorithm: str = "HS256", expires_delta: timedelta = timedelta(minutes=60)):
        self._secret_key = secret_key
        self._algorithm = algorithm
        self.expires_delta = expires_delta

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        return cls(
            settings.secret_key,
            settings.algorithm,
            timedelta(minutes=settings.access_token_expire_minutes),
        )

    def issue_token(self, identity: str, role: Role, now: Optional[datetime] = None) -> str:
        issued_at = now or datetime.now(timezone.utc)
        to_encode = {
            "sub": identity,
            "role": Role(role).value,
            "iat": issued_at,
            "exp": issued_at + self.expires_delta,
        }
        return jwt.encode(to_encode, self._secret_key, algorithm=self._algorithm)

    def verify_token(self, token: str) -> Result[Principal]:
        try:
            claims = jwt.decode(token, self._secret_key, algorithms=[self._algorithm])
        except ExpiredSignatureError:
            return Err(Unauthorized("Token has expired"))
        except JWTError:
            return Err(Unauthorized("Invalid token"))

        identity = claims.get("sub")
        role = claims.get("role")
        if not identity or role not in {r.value for r in Role}:
            return Err(Unauthorized("Invalid token"))
        return Ok(Principal(identity=identity, role=Role(role)))
