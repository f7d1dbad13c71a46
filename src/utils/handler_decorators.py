"""
Handler decorators for reducing boilerplate code in Lambda handlers.

These decorators take care of authentication, error handling and request
logging so route handlers can focus on the import itself.
"""

import logging
import traceback
from datetime import datetime, timezone
from functools import wraps
from typing import Dict, Any, Callable

from pydantic import ValidationError

from utils.auth import get_user_from_event, NotFound
from utils.import_errors import ImportPipelineError, InvalidStateTransition
from utils.lambda_utils import create_response, handle_error

logger = logging.getLogger(__name__)


def standard_error_handling(func: Callable) -> Callable:
    """
    Decorator that provides standard error handling for Lambda handlers.

    Maps common exceptions to appropriate HTTP status codes:
    - ValidationError, ValueError, KeyError -> 400 Bad Request
    - NotFound -> 404 Not Found
    - InvalidStateTransition -> 409 Conflict
    - ImportPipelineError -> 422 Unprocessable Entity
    - Exception -> 500 Internal Server Error

    Handlers decorated with this can focus on business logic and return raw data.
    The decorator will wrap the result in a proper API Gateway response.
    """
    @wraps(func)
    def wrapper(*args, **kwargs) -> Dict[str, Any]:
        try:
            result = func(*args, **kwargs)

            # If handler returns a dict with statusCode, it's already a response
            if isinstance(result, dict) and "statusCode" in result:
                return result

            # Otherwise, wrap in success response
            return create_response(200, result)

        except (ValidationError, ValueError, KeyError) as e:
            logger.error(f"Validation error in {func.__name__}: {str(e)}")
            return handle_error(400, str(e))

        except NotFound as e:
            logger.warning(f"Resource not found in {func.__name__}: {str(e)}")
            return handle_error(404, str(e))

        except InvalidStateTransition as e:
            logger.warning(f"Invalid import state in {func.__name__}: {str(e)}")
            return handle_error(409, str(e))

        except ImportPipelineError as e:
            logger.warning(f"Import rejected in {func.__name__}: {str(e)}")
            return handle_error(422, str(e))

        except Exception as e:
            logger.error(f"Unexpected error in {func.__name__}: {str(e)}")
            logger.error(f"Stacktrace: {traceback.format_exc()}")
            return handle_error(500, f"Error in {func.__name__.replace('_handler', '')}")

    return wrapper


def log_request_response(func: Callable) -> Callable:
    """
    Decorator that logs request and response details for debugging and monitoring.

    Logs:
    - Request ID, method, route
    - Request duration
    - Response status code
    - Error details if any
    """
    @wraps(func)
    def wrapper(event: Dict[str, Any], *args, **kwargs) -> Dict[str, Any]:
        request_context = event.get("requestContext", {})
        request_id = request_context.get("requestId", "unknown")
        method = request_context.get("http", {}).get("method", "unknown")
        route = event.get("routeKey", "unknown")

        start_time = datetime.now(timezone.utc)
        logger.info(f"[{request_id}] {method} {route} - Request started")

        try:
            result = func(event, *args, **kwargs)

            duration_ms = (datetime.now(timezone.utc) - start_time).total_seconds() * 1000
            status_code = result.get("statusCode", "unknown") if isinstance(result, dict) else "unknown"
            logger.info(f"[{request_id}] {method} {route} - Response {status_code} in {duration_ms:.1f}ms")

            return result

        except Exception as e:
            duration_ms = (datetime.now(timezone.utc) - start_time).total_seconds() * 1000
            logger.error(f"[{request_id}] {method} {route} - Error after {duration_ms:.1f}ms: {str(e)}")
            raise

    return wrapper


def require_authenticated_user(func: Callable) -> Callable:
    """
    Decorator that extracts and validates authenticated user from event.

    The user id is passed as the second parameter to the handler.
    """
    @wraps(func)
    def wrapper(event: Dict[str, Any], context: Any, *args, **kwargs) -> Dict[str, Any]:
        user = get_user_from_event(event)
        if not user:
            logger.warning("Authentication required but no user found in event")
            return handle_error(401, "Unauthorized")

        return func(event, user["id"], *args, **kwargs)

    return wrapper


# Convenience decorator that combines common patterns
def api_handler(
    require_auth: bool = True,
    log_requests: bool = True,
    handle_errors: bool = True
):
    """
    Convenience decorator factory that combines common handler patterns.

    Args:
        require_auth: Whether to require authentication
        log_requests: Whether to log request/response details
        handle_errors: Whether to handle errors automatically

    Example:
        @api_handler()
        def list_templates_handler(event, user_id):
            return {"templates": [...]}
    """
    def decorator(func: Callable) -> Callable:
        decorated_func = func

        # Apply decorators in reverse order (innermost first)
        if handle_errors:
            decorated_func = standard_error_handling(decorated_func)

        if require_auth:
            decorated_func = require_authenticated_user(decorated_func)

        if log_requests:
            decorated_func = log_request_response(decorated_func)

        return decorated_func

    return decorator
