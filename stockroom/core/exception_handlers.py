import logging
import uuid
import traceback
from fastapi import FastAPI, Request, HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from tortoise.exceptions import BaseORMException

from stockroom.core.exceptions import (
    InsufficientStockError,
    InventoryError,
    NotFoundError,
    StorageFault,
    ValidationError,
)

log = logging.getLogger("uvicorn")

# Status and error code per inventory error. Storage faults never echo their
# message back to the client.
INVENTORY_ERRORS = {
    ValidationError: (400, "validation_error"),
    NotFoundError: (404, "not_found"),
    InsufficientStockError: (409, "insufficient_stock"),
    StorageFault: (503, "storage_error"),
}

STORAGE_MESSAGE = "The inventory store is unavailable. Please try again."


# Generate a clean request id for every response
def _rid():
    """Generates a unique request ID for tracing."""
    return uuid.uuid4().hex


def _error(status_code: int, code: str, message, **extra) -> JSONResponse:
    body = {
        "success": False,
        "error": {"code": code, "message": message, **extra},
        "request_id": _rid(),
    }
    return JSONResponse(status_code=status_code, content=body)


# ----------- Exception Handlers (called by FastAPI) -----------

def http_exception_handler(request: Request, exc: HTTPException):
    """Handles exceptions raised by HTTPException (e.g., 404, 400)."""
    return _error(exc.status_code, "http_error", exc.detail)


def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handles Pydantic validation errors (422 Unprocessable Entity)."""
    # ctx may hold exception objects that do not serialize
    details = [{key: value for key, value in err.items() if key != "ctx"} for err in exc.errors()]
    return _error(422, "validation_error", "Invalid input data", details=jsonable_encoder(details))


def inventory_exception_handler(request: Request, exc: InventoryError):
    """Maps data layer errors to a status and explains the violated constraint."""
    for error_type, (status_code, code) in INVENTORY_ERRORS.items():
        if isinstance(exc, error_type):
            break
    else:
        status_code, code = 400, "inventory_error"

    if isinstance(exc, StorageFault):
        log.error(f"Storage fault on path {request.url.path}: {exc!r}")
        return _error(status_code, code, STORAGE_MESSAGE)
    return _error(status_code, code, str(exc))


def storage_exception_handler(request: Request, exc: BaseORMException):
    """ORM errors surface as a generic storage failure."""
    log.error(f"Database error on path {request.url.path}: {exc!r}")
    return _error(503, "storage_error", STORAGE_MESSAGE)


def generic_exception_handler(request: Request, exc: Exception):
    """Handles all unhandled exceptions (500 Internal Server Error)."""
    log.error(f"Unhandled exception on path: {request.url.path}")
    log.error(f"Traceback: {traceback.format_exc()}")
    return _error(500, "server_error", "Internal Server Error")


# ----------- Registration Function -----------

def setup_exception_handlers(app: FastAPI):
    """Registers all custom exception handlers with the FastAPI application."""

    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(InventoryError, inventory_exception_handler)
    app.add_exception_handler(BaseORMException, storage_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    return app
