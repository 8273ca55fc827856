"""Error taxonomy shared by every stage of the request pipeline.

Each error carries the HTTP status it maps to. Pipeline stages wrap them in
``Err`` values; transport dependencies may raise them directly.
"""

from dataclasses import dataclass
from typing import Iterable, Optional


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str


class ApiError(Exception):
    status_code = 500
    default_message = "Internal Server Error"

    def __init__(
        self,
        message: Optional[str] = None,
        errors: Optional[Iterable[FieldError]] = None,
        status_code: Optional[int] = None,
        cause: Optional[BaseException] = None,
    ):
        self.message = message or self.default_message
        self.errors = list(errors or [])
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)
        if cause is not None:
            self.__cause__ = cause


class ValidationError(ApiError):
    status_code = 400
    default_message = "Validation Error"

    def __init__(self, message: Optional[str] = None, errors: Optional[Iterable[FieldError]] = None, **kwargs):
        errors = list(errors or [])
        if message is None and errors:
            message = "Validation Error: " + "; ".join(e.message for e in errors)
        super().__init__(message, errors, **kwargs)


class InvalidIdentifier(ValidationError):
    default_message = "Invalid identifier format"

    def __init__(self, field: str = "id"):
        super().__init__(self.default_message, [FieldError(field, self.default_message)])


class Unauthorized(ApiError):
    status_code = 401
    default_message = "Unauthorized"


class Forbidden(ApiError):
    status_code = 403
    default_message = "Forbidden"


class NotFound(ApiError):
    status_code = 404
    default_message = "Not Found"


class Conflict(ApiError):
    status_code = 409
    default_message = "Duplicate field value entered"


class InternalError(ApiError):
    status_code = 500
    default_message = "Internal Server Error"
