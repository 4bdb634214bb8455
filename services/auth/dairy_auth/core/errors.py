"""Auth error taxonomy and the handlers that render it as ``{"msg": ...}``."""
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class AuthError(Exception):
    status_code = 500
    default_msg = 'Internal server error'

    def __init__(self, msg: str | None = None):
        self.msg = msg or self.default_msg
        super().__init__(self.msg)


class ConflictError(AuthError):
    status_code = 409
    default_msg = 'Email exists'


class UnauthorizedError(AuthError):
    status_code = 401
    default_msg = 'Unauthorized'


class ForbiddenError(AuthError):
    status_code = 403
    default_msg = 'Forbidden'


class NotFoundError(AuthError):
    status_code = 404
    default_msg = 'Not found'


async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={'msg': exc.msg})


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception('Database error on %s %s', request.method, request.url.path)
    return JSONResponse(status_code=503, content={'msg': 'Service unavailable'})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception('Unhandled error on %s %s', request.method, request.url.path)
    return JSONResponse(status_code=500, content={'msg': 'Internal server error'})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AuthError, auth_error_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
