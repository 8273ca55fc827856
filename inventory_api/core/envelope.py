"""Response envelope and the single error-to-response translation.

Success bodies look like ``{"success": true, "data": ...}`` (lists add a
``count``). Error bodies look like ``{"success": false, "status": ...,
"statusCode": ..., "message": ..., "errors": [...]}``; in development mode the
traceback of the underlying cause is added as ``stack``.
"""

import traceback
from typing import Any, Dict

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from inventory_api.core.errors import ApiError, InternalError, NotFound, ValidationError
from inventory_api.core.logging import get_logger
from inventory_api.core.result import Err, Result
from inventory_api.validation import field_errors

logger = get_logger(__name__)


def error_body(error: ApiError, debug: bool = False) -> Dict[str, Any]:
    code = error.status_code
    body: Dict[str, Any] = {
        "success": False,
        "status": "fail" if 400 <= code < 500 else "error",
        "statusCode": code,
        "message": error.message,
    }
    if error.errors:
        body["errors"] = [{"field": e.field, "message": e.message} for e in error.errors]
    if debug:
        cause = error.__cause__ or error
        body["stack"] = "".join(traceback.format_exception(type(cause), cause, cause.__traceback__))
    return body


def error_response(error: ApiError, debug: bool = False) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if error.status_code == 401 else None
    return JSONResponse(error_body(error, debug), status_code=error.status_code, headers=headers)


def success_body(data: Any) -> Dict[str, Any]:
    if isinstance(data, list):
        return {"success": True, "count": len(data), "data": data}
    return {"success": True, "data": data}


def _debug(request: Request) -> bool:
    settings = getattr(request.app.state, "settings", None)
    return bool(settings and settings.debug)


def respond(request: Request, result: Result, status_code: int = 200) -> Response:
    if isinstance(result, Err):
        return error_response(result.error, _debug(request))
    if status_code == 204:
        return Response(status_code=204)
    return JSONResponse(success_body(result.value), status_code=status_code)


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return error_response(exc, _debug(request))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response(ValidationError(errors=field_errors(exc.errors())), _debug(request))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404:
        error: ApiError = NotFound("Route Not Found")
    else:
        error = ApiError(str(exc.detail), status_code=exc.status_code)
    return error_response(error, _debug(request))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error", path=request.url.path, method=request.method)
    return error_response(InternalError(cause=exc), _debug(request))


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
