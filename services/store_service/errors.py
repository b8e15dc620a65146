"""Store domain errors.

Every business-rule failure is a ``StoreError`` tagged with an ``ErrorCode``;
the HTTP layer maps the tag to a status code in one place instead of
inspecting exception types at each call site.
"""

import enum
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from libs.common.error_handler import error_response
from libs.common.logging import get_logger

logger = get_logger(__name__)


class ErrorCode(str, enum.Enum):
    VALIDATION = "validation_error"
    NOT_FOUND = "not_found"
    INVALID_STATE = "invalid_state"
    INSUFFICIENT_STOCK = "insufficient_stock"
    INTERNAL = "internal_error"


STATUS_BY_CODE = {
    ErrorCode.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.INVALID_STATE: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INSUFFICIENT_STOCK: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class StoreError(Exception):
    code: ErrorCode = ErrorCode.INTERNAL

    def __init__(self, message: str, details: Optional[list[dict[str, Any]]] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    @property
    def status_code(self) -> int:
        return STATUS_BY_CODE[self.code]


class ValidationFailed(StoreError):
    code = ErrorCode.VALIDATION


class NotFound(StoreError):
    code = ErrorCode.NOT_FOUND


class InvalidState(StoreError):
    code = ErrorCode.INVALID_STATE


class InsufficientStock(StoreError):
    code = ErrorCode.INSUFFICIENT_STOCK

    def __init__(self, product_name: str, available: int, requested: int):
        super().__init__(
            f"Insufficient stock for {product_name}. "
            f"Available: {available}, requested: {requested}",
            details=[
                {
                    "product": product_name,
                    "available": available,
                    "requested": requested,
                }
            ],
        )
        self.product_name = product_name
        self.available = available
        self.requested = requested


async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    if exc.code == ErrorCode.INTERNAL:
        logger.error("Store error on %s: %s", request.url.path, exc.message)
    return error_response(
        exc.status_code,
        exc.message,
        error=exc.code.value,
        errors=exc.details,
    )


def add_store_error_handler(app: FastAPI) -> None:
    app.add_exception_handler(StoreError, store_error_handler)
