"""HTTP mapping for domain errors.

Protean's own handlers are registered first; the handlers below then pin the
response bodies this API promises: ``{"error": ...}`` plus, for a stale
product, the product's identity so the client can drop just that cart line.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.integrations.fastapi import register_exception_handlers

from ordering.errors import ConflictError, ProductUnavailableError

logger = structlog.get_logger(__name__)


def _message(exc: Exception) -> str:
    messages = getattr(exc, "messages", None)
    if isinstance(messages, str):
        return messages
    return exc.args[0] if exc.args else str(exc)


async def validation_error_handler(_request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": exc.messages})


async def request_validation_error_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part != "body"]
        errors.setdefault(".".join(location) or "body", []).append(error.get("msg", "Invalid value"))
    return JSONResponse(status_code=400, content={"error": errors})


async def not_found_handler(_request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": _message(exc)})


async def product_unavailable_handler(_request: Request, exc: ProductUnavailableError) -> JSONResponse:
    logger.info("Order rejected for unavailable product", product_id=exc.product_id)
    return JSONResponse(
        status_code=404,
        content={
            "error": exc.message,
            "productId": exc.product_id,
            "productName": exc.product_name,
        },
    )


async def conflict_handler(_request: Request, exc: ConflictError) -> JSONResponse:
    return JSONResponse(status_code=409, content={"error": exc.message})


def register_error_handlers(app: FastAPI) -> None:
    """Install the domain error mapping on ``app``."""
    register_exception_handlers(app)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(ObjectNotFoundError, not_found_handler)
    app.add_exception_handler(ProductUnavailableError, product_unavailable_handler)
    app.add_exception_handler(ConflictError, conflict_handler)
