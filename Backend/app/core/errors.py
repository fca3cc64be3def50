# app/core/errors.py
# Request-level failures. Each one ends the current request; nothing is retried.
import logging

from fastapi import Request, status
from starlette.exceptions import HTTPException
from fastapi.responses import JSONResponse, Response

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Base class for errors rendered as {"error": message}."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BadRequest(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST


class AccessDenied(ApiError):
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str = "Access denied"):
        super().__init__(message)


class NotFound(ApiError):
    status_code = status.HTTP_404_NOT_FOUND


class FileIOError(ApiError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class RangeNotSatisfiable(ApiError):
    """The requested byte range lies outside the file. Sent with an empty body."""
    status_code = 416

    def __init__(self, total_size: int, message: str = "Range not satisfiable"):
        super().__init__(message)
        self.total_size = total_size

    @property
    def headers(self) -> dict[str, str]:
        return {
            "Content-Range": f"bytes */{self.total_size}",
            "Accept-Ranges": "bytes",
        }


async def api_error_handler(request: Request, exc: ApiError) -> Response:
    if isinstance(exc, RangeNotSatisfiable):
        return Response(status_code=exc.status_code, headers=exc.headers)
    return JSONResponse(status_code=exc.status_code, content={"error": _json_safe(exc.message)})


async def http_exception_handler(request: Request, exc: HTTPException) -> Response:
    # Keep framework errors (unknown API route, wrong method) in the same shape
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> Response:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": _json_safe(str(exc) or exc.__class__.__name__)},
    )


def _json_safe(message: str) -> str:
    # OS messages may echo undecodable file names back as lone surrogates
    return message.encode("utf-8", "replace").decode("utf-8")
