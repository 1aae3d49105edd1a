"""
Centralized error handling and logging
Every failure leaves the API as a small JSON object: {"error": "<message>"}
"""

import json
import logging
import traceback
import uuid
from datetime import datetime
from typing import Any, Dict, Optional, Union
from contextvars import ContextVar

from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

# Context variables for request tracing
request_id_var: ContextVar[str] = ContextVar('request_id', default='')
endpoint_context_var: ContextVar[str] = ContextVar('endpoint_context', default='')

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"
INVALID_JSON_MESSAGE = "Invalid JSON body"


class ErrorHandlingConfig:
    """Centralized configuration for error handling behavior"""

    SANITIZE_SENSITIVE_FIELDS = True
    SENSITIVE_FIELD_PATTERNS = [
        'password', 'token', 'secret', 'authorization', 'credential', 'api_key'
    ]

    LOG_REQUEST_BODIES = True
    MAX_BODY_LOG_SIZE = 5000  # Truncate large bodies

    @classmethod
    def is_sensitive_field(cls, field_name: str) -> bool:
        """Check if a field contains sensitive data"""
        field_lower = field_name.lower()
        return any(pattern in field_lower for pattern in cls.SENSITIVE_FIELD_PATTERNS)

    @classmethod
    def sanitize_data(cls, data: Union[Dict, str, Any]) -> Any:
        """Recursively sanitize sensitive data from logs"""
        if not cls.SANITIZE_SENSITIVE_FIELDS:
            return data

        if isinstance(data, dict):
            return {
                key: "***REDACTED***" if cls.is_sensitive_field(str(key)) else cls.sanitize_data(value)
                for key, value in data.items()
            }
        elif isinstance(data, list):
            return [cls.sanitize_data(item) for item in data]
        elif isinstance(data, str) and len(data) > cls.MAX_BODY_LOG_SIZE:
            return data[:cls.MAX_BODY_LOG_SIZE] + "...[TRUNCATED]"
        else:
            return data

    @classmethod
    def sanitize_body(cls, body: Optional[bytes]) -> Any:
        """Decode a captured request body and redact sensitive fields"""
        if not body:
            return None
        try:
            return cls.sanitize_data(json.loads(body))
        except (UnicodeDecodeError, ValueError):
            # Unparseable bodies can't be field-redacted, so only note their size
            return f"<{len(body)} bytes, not JSON>"


class StructuredLogger:
    """Structured logging with consistent format and context"""

    @staticmethod
    def log_error(
        error_type: str,
        message: str,
        request: Optional[Request] = None,
        exception: Optional[Exception] = None,
        extra_context: Optional[Dict] = None,
        include_traceback: bool = True
    ) -> str:
        """Log structured error with full context, returning its trace id"""
        trace_id = request_id_var.get('') or str(uuid.uuid4())[:8]

        log_entry = {
            "timestamp": datetime.utcnow().isoformat(),
            "trace_id": trace_id,
            "error_type": error_type,
            "message": message,
            "level": "ERROR"
        }

        if request:
            log_entry["request"] = {
                "method": request.method,
                "path": request.url.path,
                "query_params": dict(request.query_params),
                "client_ip": request.client.host if request.client else None,
            }

        if exception:
            log_entry["exception"] = {
                "type": type(exception).__name__,
                "details": str(exception),
            }
            cause = exception.__cause__
            if cause is not None:
                log_entry["exception"]["cause"] = f"{type(cause).__name__}: {cause}"
            if include_traceback:
                log_entry["exception"]["traceback"] = "".join(
                    traceback.format_exception(type(exception), exception, exception.__traceback__)
                )

        if extra_context:
            log_entry["context"] = ErrorHandlingConfig.sanitize_data(extra_context)

        endpoint_context = endpoint_context_var.get('')
        if endpoint_context:
            log_entry["endpoint_context"] = endpoint_context

        logger.error(json.dumps(log_entry, indent=2, default=str))

        return trace_id


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Middleware to capture request context and add request IDs"""

    async def dispatch(self, request: Request, call_next):
        trace_id = str(uuid.uuid4())[:8]
        request_id_var.set(trace_id)
        endpoint_context_var.set('')

        # Keep the body around for error logging
        body = None
        if ErrorHandlingConfig.LOG_REQUEST_BODIES and request.method in ("POST", "PUT", "PATCH"):
            body = await request.body()

        request.state.captured_body = body
        request.state.trace_id = trace_id

        response = await call_next(request)
        # Add trace ID to response headers for client-side debugging
        response.headers["X-Trace-ID"] = trace_id
        return response


def _captured_body(request: Request) -> Any:
    return ErrorHandlingConfig.sanitize_body(getattr(request.state, 'captured_body', None))


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


# Global Exception Handlers
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render HTTP exceptions as {"error": detail}"""
    if exc.status_code >= 500:
        # Routes log the underlying failure before raising
        logger.error(
            f"{request.method} {request.url.path} -> {exc.status_code} "
            f"(trace {request_id_var.get('')}), body: {_captured_body(request)}"
        )
    elif exc.status_code != 404:
        logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.detail}")

    response = error_response(exc.status_code, str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    FastAPI request validation errors.

    Routes take raw JSON bodies, so the only way to get here is a body
    that doesn't parse - reported as a 400 like any other bad payload.
    """
    errors = exc.errors()
    if any(error.get("type") == "json_invalid" for error in errors):
        message = INVALID_JSON_MESSAGE
    else:
        first = errors[0] if errors else {}
        location = " -> ".join(str(loc) for loc in first.get("loc", ()))
        message = f"{location}: {first.get('msg', 'Invalid request')}" if location else INVALID_JSON_MESSAGE

    logger.info(f"{request.method} {request.url.path} -> 400: {message}")
    return error_response(400, message)


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle all other exceptions without exposing internal details"""
    StructuredLogger.log_error(
        "internal_server_error",
        f"Unhandled exception: {str(exc)}",
        request=request,
        exception=exc,
        extra_context={"request_body": _captured_body(request)},
        include_traceback=True
    )
    return error_response(500, INTERNAL_ERROR_MESSAGE)


def setup_error_handling(app):
    """Setup error handling for FastAPI app"""

    app.add_middleware(RequestContextMiddleware)

    # Most specific first
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    logger.info("Centralized error handling initialized")


def set_endpoint_context(context: str):
    """Set context for current endpoint (call at start of endpoint functions)"""
    endpoint_context_var.set(context)


def log_business_error(error_type: str, message: str, request: Optional[Request] = None,
                       exception: Optional[Exception] = None, context: Dict = None) -> str:
    """Log a failure caught at the route boundary"""
    return StructuredLogger.log_error(
        f"business_error_{error_type}",
        message,
        request=request,
        exception=exception,
        extra_context=context,
        include_traceback=exception is not None
    )
