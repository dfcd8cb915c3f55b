"""HTTP mapping of workflow errors.

Protean's own exceptions (ValidationError, ObjectNotFoundError, ...) are
mapped by ``protean.integrations.fastapi.register_exception_handlers``.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from rentals.order.errors import (
    AuthorizationDenied,
    InsufficientStock,
    InvalidSequencing,
    MissingEvidence,
    OrderBusy,
    OrderNotFound,
    StageKeyInvalid,
    WorkflowError,
)

_STATUS_CODES: dict[type[WorkflowError], int] = {
    AuthorizationDenied: 403,
    InvalidSequencing: 409,
    MissingEvidence: 422,
    InsufficientStock: 409,
    OrderBusy: 409,
    OrderNotFound: 404,
    StageKeyInvalid: 404,
}


def _error_body(exc: WorkflowError) -> dict:
    body = {"error": type(exc).__name__, "detail": exc.message}
    if isinstance(exc, AuthorizationDenied):
        body["reason"] = exc.reason
    elif isinstance(exc, MissingEvidence):
        body["field"] = exc.field
    elif isinstance(exc, InsufficientStock):
        body["product_id"] = exc.product_id
    return body


async def workflow_error_handler(request: Request, exc: WorkflowError) -> JSONResponse:
    status_code = _STATUS_CODES.get(type(exc), 400)
    return JSONResponse(status_code=status_code, content=_error_body(exc))


def install_error_handlers(app: FastAPI) -> None:
    """Register Protean and workflow exception handlers on ``app``."""
    register_exception_handlers(app)
    for exc_class in _STATUS_CODES:
        app.add_exception_handler(exc_class, workflow_error_handler)
