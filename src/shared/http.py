"""HTTP helpers shared by the context routers.

Every failure leaves the API as ``{"error": ..., "code": ..., "details": ...}``
with the status code carried by the error class.
"""

import json

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from shared.errors import InternalFailure, InvalidInput, StoreError

logger = structlog.get_logger(__name__)

_HTTP_CODES = {
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
}


async def read_json(request: Request) -> dict:
    """Body of a JSON request as a dict; anything else is ``InvalidInput``."""
    body = await request.body()
    if not body:
        return {}
    try:
        payload = json.loads(body)
    except ValueError:
        raise InvalidInput("Request body is not valid JSON") from None
    if not isinstance(payload, dict):
        raise InvalidInput("Request body must be a JSON object")
    return payload


def store_error_response(exc: StoreError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StoreError)
    async def handle_store_error(request: Request, exc: StoreError):
        if exc.status_code >= 500:
            logger.error("Request failed", path=request.url.path, code=exc.code, error=exc.message)
        else:
            logger.info("Request rejected", path=request.url.path, code=exc.code, error=exc.message)
        return store_error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        details = {".".join(str(part) for part in err["loc"]): err["msg"] for err in exc.errors()}
        return store_error_response(InvalidInput("Invalid request", details=details))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        code = _HTTP_CODES.get(exc.status_code, "HTTP_ERROR")
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail), "code": code})

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception("Unhandled error", path=request.url.path)
        return store_error_response(InternalFailure("Internal server error"))
