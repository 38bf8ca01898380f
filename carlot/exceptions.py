import logging
from typing import List, Optional

from fastapi import HTTPException
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class APIError(HTTPException):
    """Base for errors rendered as the ``{"error": ...}`` envelope."""
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(status_code=self.status_code, detail=self.message)


class BadRequestError(APIError):
    status_code = 400
    default_message = "Bad request"


class UnauthorizedError(APIError):
    status_code = 401
    default_message = "Unauthorized"


class ForbiddenError(APIError):
    status_code = 403
    default_message = "Forbidden"


class NotFoundError(APIError):
    status_code = 404
    default_message = "Not found"


class ConflictError(APIError):
    status_code = 409
    default_message = "Conflict"


class BackendError(APIError):
    """The store failed; the cause is logged, never sent to the caller."""
    status_code = 500


class ValidationError(HTTPException):
    def __init__(self, fields: List[dict], message: str = "Validation failed"):
        self.fields = fields
        self.message = message
        super().__init__(status_code=422, detail={"error": message, "fields": fields})


async def api_exception_handler(request, exc: APIError):
    if isinstance(exc, BackendError):
        cause = exc.__cause__ or exc.__context__
        logger.error(
            f"{request.method} {request.url.path} failed: {exc.message}",
            exc_info=(type(cause), cause, cause.__traceback__) if cause else None,
        )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def validation_exception_handler(request, exc: ValidationError):
    return JSONResponse(
        status_code=422,
        content={"error": exc.message, "fields": exc.fields},
    )


async def request_validation_exception_handler(request, exc):
    """Malformed query/path parameters use the same itemized shape."""
    fields = [
        {
            "field": ".".join(str(part) for part in err["loc"][1:]) or "request",
            "message": str(err.get("ctx", {}).get("error") or err["msg"]),
        }
        for err in exc.errors()
    ]
    return JSONResponse(status_code=422, content={"error": "Validation failed", "fields": fields})


async def unhandled_exception_handler(request, exc: Exception):
    logger.exception(f"Unhandled error in {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"error": "Internal server error"})
