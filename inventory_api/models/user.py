from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UserCreate(_CamelModel):
    first_name: str = Field(..., min_length=2, max_length=50)
    last_name: str = Field(..., min_length=2, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    role: Role = Role.USER


class UserUpdate(UserCreate):
    # the stored hash cannot be re-validated, so a new password is optional
    password: Optional[str] = Field(default=None, min_length=8, max_length=128)


class UserLogin(_CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserInDB(_CamelModel):
    """Public view of a stored user. The password hash is not a field."""

    id: str
    first_name: str
    last_name: str
    email: str
    role: Role = Role.USER
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Token(_CamelModel):
    access_token: str
    token_type: str = "bearer"
