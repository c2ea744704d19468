import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)

DATABASE_UNAVAILABLE_MESSAGE = 'Database unavailable. Verify DATABASE_URL and database credentials.'


class ErrorResponse(Exception):
    """A failure that ends the request with ``message`` and ``status_code``."""

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def not_found(kind: str, resource_id) -> ErrorResponse:
    return ErrorResponse(f'{kind} not found with id of {resource_id}', status.HTTP_404_NOT_FOUND)


def bad_request(message: str) -> ErrorResponse:
    return ErrorResponse(message, status.HTTP_400_BAD_REQUEST)


def unauthorized(message: str = 'Not authorized to access this route') -> ErrorResponse:
    return ErrorResponse(message, status.HTTP_401_UNAUTHORIZED)


def forbidden(message: str) -> ErrorResponse:
    return ErrorResponse(message, status.HTTP_403_FORBIDDEN)


def error_body(message) -> dict:
    return {'success': False, 'error': message}


def _describe_validation_error(error: dict) -> str:
    location = [str(part) for part in error.get('loc', ()) if part not in ('body', 'query', 'path')]
    message = error.get('msg', 'Invalid value')
    if location:
        return f"{'.'.join(location)}: {message}"
    return message


async def handle_error_response(request: Request, exc: ErrorResponse) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.message))


async def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.detail),
        headers=getattr(exc, 'headers', None),
    )


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = ', '.join(_describe_validation_error(error) for error in exc.errors())
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=error_body(message))


async def handle_integrity_error(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.warning('Integrity error on %s %s: %s', request.method, request.url.path, exc.orig)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body('Duplicate field value entered'),
    )


async def handle_database_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception('Database error on %s %s', request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=error_body(DATABASE_UNAVAILABLE_MESSAGE),
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception('Unhandled error on %s %s', request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body('Server Error'),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ErrorResponse, handle_error_response)
    app.add_exception_handler(HTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(IntegrityError, handle_integrity_error)
    app.add_exception_handler(SQLAlchemyError, handle_database_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
