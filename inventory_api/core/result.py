from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from inventory_api.core.errors import ApiError

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err:
    error: ApiError


Result = Union[Ok[T], Err]
