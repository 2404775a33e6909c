import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


class FiledropError(Exception):
    """Base error. ``message`` is what the client sees."""

    status_code = 500
    message = "Server error"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class DuplicateUser(FiledropError):
    status_code = 400
    message = "User already exists"


class UserNotFound(FiledropError):
    status_code = 400
    message = "User doesn't exist"


class InvalidCredentials(FiledropError):
    status_code = 400
    message = "Invalid email or password"


class Unauthorized(FiledropError):
    status_code = 401
    message = "Unauthorized"


class InvalidToken(Unauthorized):
    message = "Invalid token"


class NoFilePresent(FiledropError):
    status_code = 400
    message = "No file uploaded"


class NotFound(FiledropError):
    status_code = 404
    message = "File not found"


class StorageError(FiledropError):
    status_code = 500
    message = "Storage error"


class ServerError(FiledropError):
    pass


class CatchAllExceptionMiddleware(BaseHTTPMiddleware):
    """Turn anything unexpected into a bare 500, logged once, with no detail."""

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            logger.error(
                "%s on %s (500)",
                type(exc).__name__,
                request.url.path,
                exc_info=exc,
                extra={"path": request.url.path},
            )
            return JSONResponse(status_code=500, content={"error": "Server error"})


def install_error_handlers(app: FastAPI) -> None:
    app.add_middleware(CatchAllExceptionMiddleware)

    @app.exception_handler(FiledropError)
    async def _filedrop_error(request: Request, exc: FiledropError):
        if exc.status_code >= 500:
            logger.error(
                "%s on %s (%s): %s",
                type(exc).__name__,
                request.url.path,
                exc.status_code,
                exc.__cause__ or exc,
                extra={"path": request.url.path},
            )
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})
