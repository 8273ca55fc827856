"""Declarative payload validation.

Shapes are pydantic models. Every field is checked before anything is
reported, so a single response lists all violations.
"""

from typing import Any, Iterable, List, Mapping, Type, TypeVar

import pydantic

from inventory_api.core.errors import FieldError, ValidationError
from inventory_api.core.result import Err, Ok, Result

M = TypeVar("M", bound=pydantic.BaseModel)

# FastAPI prefixes request errors with where the value came from
_LOCATION_PREFIXES = {"body", "query", "path", "header", "cookie"}


def field_errors(errors: Iterable[Mapping[str, Any]]) -> List[FieldError]:
    """Convert pydantic error dicts into FieldErrors keyed by the wire name."""
    result = []
    for error in errors:
        loc = list(error.get("loc", ()))
        if loc and loc[0] in _LOCATION_PREFIXES:
            loc = loc[1:]
        field = ".".join(str(part) for part in loc) or "body"
        if error.get("type") == "missing":
            message = f"{field} is required"
        else:
            message = f"{field}: {error.get('msg', 'invalid value')}"
        result.append(FieldError(field, message))
    return result


def validate(payload: Any, shape: Type[M]) -> Result[M]:
    if not isinstance(payload, Mapping):
        return Err(ValidationError(errors=[FieldError("body", "Request body must be a JSON object")]))
    try:
        return Ok(shape.model_validate(dict(payload)))
    except pydantic.ValidationError as exc:
        return Err(ValidationError(errors=field_errors(exc.errors())))
