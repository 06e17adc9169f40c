"""Exception handlers translating failures into the JSON error contract.

Every error body has the shape ``{"error": str, "message"?: str, "details"?: any}``.
"""

import logging
import traceback

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from meetnotes.config import get_settings
from meetnotes.domain.errors import MeetNotesError, ValidationError

logger = logging.getLogger(__name__)

_VALIDATION_LABELS = {
    "path": "Invalid parameters",
    "query": "Invalid query parameters",
}


def validation_error_from_pydantic(
    exc: PydanticValidationError, error: str | None = None
) -> ValidationError:
    """Wrap a pydantic failure as a domain ``ValidationError`` with field detail."""
    return ValidationError(error=error, details=jsonable_encoder(exc.errors(include_url=False)))


async def meetnotes_error_handler(request: Request, exc: MeetNotesError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.error}: {exc.message}")
    else:
        logger.warning(f"{request.method} {request.url.path} rejected: {exc.error}")
    return JSONResponse(exc.to_dict(), status_code=exc.status_code)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    location = errors[0]["loc"][0] if errors and errors[0].get("loc") else "body"
    label = _VALIDATION_LABELS.get(str(location), "Validation failed")
    logger.warning(f"Request validation failed for {request.method} {request.url.path}: {label}")
    return JSONResponse(
        {"error": label, "details": jsonable_encoder(errors)},
        status_code=400,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404 and exc.detail == "Not Found":
        body = {
            "error": "Not found",
            "message": f"The endpoint {request.method} {request.url.path} does not exist",
        }
    else:
        body = {"error": str(exc.detail)}
    return JSONResponse(body, status_code=exc.status_code, headers=getattr(exc, "headers", None))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.method} {request.url}: {exc}", exc_info=exc)

    body: dict[str, str] = {"error": "Internal server error"}
    if get_settings().is_development:
        body["message"] = str(exc)
        body["stack"] = "".join(traceback.format_exception(exc))
    else:
        body["message"] = "Something went wrong"
    return JSONResponse(body, status_code=500)


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all handlers to the application."""
    app.add_exception_handler(MeetNotesError, meetnotes_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
