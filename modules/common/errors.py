# modules/common/errors.py
import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

VALIDATION_FAILED = "Validation failed"

# loc prefixes FastAPI adds that mean nothing to the client
_LOC_SOURCES = {"body", "query", "path", "header", "cookie"}


class FieldValidationError(HTTPException):
    """400 with the same per-field body as a pydantic validation failure."""

    def __init__(self, field: str, message: str, errors: Optional[List[Dict[str, str]]] = None):
        errs = errors or [{"field": field, "message": message}]
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=errs)


def not_found(entity: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{entity} not found")


def _field_name(loc) -> str:
    parts = [str(p) for p in loc]
    if parts and parts[0] in _LOC_SOURCES:
        parts = parts[1:]
    return ".".join(parts) or "body"


def _clean_message(msg: str) -> str:
    # pydantic prefixes custom ValueError messages with "Value error, "
    prefix = "Value error, "
    return msg[len(prefix):] if msg.startswith(prefix) else msg


def format_validation_errors(errors) -> List[Dict[str, Any]]:
    return [
        {"field": _field_name(e.get("loc", ())), "message": _clean_message(e.get("msg", ""))}
        for e in errors
    ]


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    headers = getattr(exc, "headers", None)
    if isinstance(exc.detail, list):
        body = {"message": VALIDATION_FAILED, "errors": exc.detail}
    else:
        body = {"message": exc.detail}
    return JSONResponse(body, status_code=exc.status_code, headers=headers)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        {"message": VALIDATION_FAILED, "errors": format_validation_errors(exc.errors())},
        status_code=status.HTTP_400_BAD_REQUEST,
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    # internals stay in the log
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        {"message": "Internal server error"},
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
