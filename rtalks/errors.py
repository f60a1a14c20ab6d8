"""Application error type and the handlers that render it."""
import socket
import traceback
from typing import Any, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse
from loguru import logger
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from starlette.exceptions import HTTPException as StarletteHTTPException


class ApiError(Exception):
    def __init__(self, status_code: int, error: str,
                 message: Optional[str] = None, code: Optional[str] = None,
                 details: Any = None):
        self.status_code = status_code
        self.error = error
        self.message = message
        self.code = code
        self.details = details
        super().__init__(error)

    def body(self) -> dict:
        out = {"error": self.error}
        if self.message is not None:
            out["message"] = self.message
        if self.code is not None:
            out["code"] = self.code
        if self.details is not None:
            out["details"] = self.details
        return out


def unauthorized(error: str) -> ApiError:
    return ApiError(status.HTTP_401_UNAUTHORIZED, error)


def not_found(error: str) -> ApiError:
    return ApiError(status.HTTP_404_NOT_FOUND, error, code="NOT_FOUND")


def db_unavailable() -> ApiError:
    return ApiError(
        status.HTTP_503_SERVICE_UNAVAILABLE,
        "Database connection not available",
        message="The service is temporarily unavailable. "
                "Please try again later.",
        code="DB_CONNECTION_ERROR",
    )


# errors meaning "the store is unreachable", not "the query was wrong";
# the driver raises refused/reset sockets and DNS failures unwrapped
DB_DOWN_ERRORS = (
    OperationalError, InterfaceError, PoolTimeoutError,
    ConnectionError, socket.gaierror,
)


def _field_name(loc) -> str:
    parts = [str(p) for p in loc if p not in ("body", "query", "path")]
    return ".".join(parts) or "body"


def validation_details(errors) -> List[dict]:
    details = []
    for err in errors:
        msg = err["msg"]
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        item = {"field": _field_name(err.get("loc", ())), "msg": msg}
        if "input" in err and isinstance(err["input"], (str, int, float)):
            item["value"] = err["input"]
        details.append(item)
    return details


async def api_error_handler(request: Request, exc: ApiError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path}: {exc.error}")
    return ORJSONResponse(status_code=exc.status_code, content=exc.body())


async def validation_error_handler(
        request: Request, exc: RequestValidationError):
    if any(err.get("type") == "json_invalid" for err in exc.errors()):
        return ORJSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "error": "Invalid JSON",
                "message": "Please check your request format",
                "code": "JSON_PARSE_ERROR",
            },
        )
    details = validation_details(exc.errors())
    logger.info(f"Validation failed on {request.url.path}: {details}")
    return ORJSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "Validation failed",
            "message": "Please check your input data",
            "code": "VALIDATION_ERROR",
            "details": details,
        },
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if (exc.status_code == status.HTTP_404_NOT_FOUND
            and request.url.path.startswith("/api/")):
        return ORJSONResponse(status_code=404, content={
            "error": "API endpoint not found",
            "message": f"The endpoint {request.url.path} does not exist",
            "code": "ENDPOINT_NOT_FOUND",
        })
    return ORJSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


def install_error_handlers(app: FastAPI, *, production: bool) -> None:

    async def db_down_handler(request: Request, exc: Exception):
        logger.error(f"Database unavailable: {exc!r}")
        err = db_unavailable()
        return ORJSONResponse(status_code=err.status_code, content=err.body())

    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.opt(exception=exc).error(
            f"Unhandled error on {request.method} {request.url.path}"
        )
        content = {
            "error": "Internal server error" if production else str(exc),
            "message": "Something went wrong. Please try again later.",
            "code": "INTERNAL_ERROR",
        }
        if not production:
            content["stack"] = "".join(traceback.format_exception(exc))
        return ORJSONResponse(status_code=500, content=content)

    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError,
                              validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    for exc_class in DB_DOWN_ERRORS:
        app.add_exception_handler(exc_class, db_down_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
