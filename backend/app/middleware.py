"""
HTTP Middleware
Request logging, CORS handling and top-level error interception.

Registration order in ``app.main`` gives, outermost first:
logging -> CORS -> error handling -> router.
"""

import logging
from typing import Dict, List, Optional

from fastapi import Request, Response, status
from starlette.middleware.base import BaseHTTPMiddleware

from app.api.responses import error_response, validation_error_response
from app.config import settings
from app.errors import DomainError, ErrorKind, RequestValidationFailed
from app.logging_config import ACCESS_LOGGER_NAME

logger = logging.getLogger(__name__)
access_logger = logging.getLogger(ACCESS_LOGGER_NAME)

ALLOW_METHODS = "GET, POST, PUT, PATCH, DELETE, OPTIONS"
ALLOW_HEADERS = "Content-Type, Authorization"
PREFLIGHT_MAX_AGE = "86400"

STATUS_BY_KIND: Dict[ErrorKind, int] = {
    ErrorKind.BAD_REQUEST: status.HTTP_400_BAD_REQUEST,
    ErrorKind.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.VALIDATION: 422,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        access_logger.info(f"{request.method} {request.url.path}")
        return await call_next(request)


def resolve_allowed_origin(origin: Optional[str], allowed_origins: List[str]) -> str:
    """
    Echo the request origin when it is allowed (or "*" when there is none);
    otherwise fall back to the first configured origin.
    """
    if "*" in allowed_origins or (origin and origin in allowed_origins):
        return origin or "*"
    return allowed_origins[0] if allowed_origins else ""


class CORSHeadersMiddleware(BaseHTTPMiddleware):
    """Answers preflight requests directly and stamps CORS headers on every other response."""

    def __init__(self, app, allowed_origins: List[str]):
        super().__init__(app)
        self.allowed_origins = allowed_origins

    def cors_headers(self, request: Request) -> Dict[str, str]:
        return {
            "Access-Control-Allow-Origin": resolve_allowed_origin(
                request.headers.get("origin"), self.allowed_origins
            ),
            "Access-Control-Allow-Methods": ALLOW_METHODS,
            "Access-Control-Allow-Headers": ALLOW_HEADERS,
        }

    async def dispatch(self, request: Request, call_next):
        if request.method == "OPTIONS":
            headers = self.cors_headers(request)
            headers["Access-Control-Max-Age"] = PREFLIGHT_MAX_AGE
            return Response(status_code=status.HTTP_204_NO_CONTENT, headers=headers)

        response = await call_next(request)
        response.headers.update(self.cors_headers(request))
        return response


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Converts anything raised below it into an error envelope, exactly once."""

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except DomainError as exc:
            return domain_error_response(exc)
        except Exception as exc:
            logger.exception(f"Unhandled error on {request.method} {request.url.path}")
            message = "Internal server error" if settings.is_production else str(exc)
            return error_response(message, status.HTTP_500_INTERNAL_SERVER_ERROR)


def domain_error_response(exc: DomainError) -> Response:
    status_code = STATUS_BY_KIND[exc.kind]
    if isinstance(exc, RequestValidationFailed):
        return validation_error_response(exc.errors)
    if exc.kind is ErrorKind.INTERNAL:
        logger.error(f"Internal domain error: {exc.message}")
        if settings.is_production:
            return error_response("Internal server error", status_code)
    else:
        logger.info(f"{exc.kind.value}: {exc.message}")
    return error_response(exc.message, status_code)
