"""
Error hierarchy and error response utilities for the portal handlers.

Logic modules raise the errors defined here; the API resolvers turn them into
HTTP responses through ``register_exception_handlers``. Bodies keep the shape
API consumers already rely on: ``{"error": ..., "message": ...}``, or the
upstream body verbatim when an upstream call is rejected.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from aws_lambda_powertools.event_handler import APIGatewayRestResolver, Response
from aws_lambda_powertools.event_handler.exceptions import NotFoundError
from aws_lambda_powertools.metrics import MetricUnit

from devportal.handlers.utils.observability import logger, metrics, tracer
from devportal.handlers.utils.responses import create_api_response


class ErrorSeverity(str, Enum):
    """Error severity levels for classification."""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class ErrorCategory(str, Enum):
    """Error categories for classification."""
    VALIDATION = "VALIDATION"
    SECURITY = "SECURITY"
    BUSINESS_LOGIC = "BUSINESS_LOGIC"
    EXTERNAL_SERVICE = "EXTERNAL_SERVICE"


class BaseServiceError(Exception):
    """Base exception class for service errors."""

    def __init__(
        self,
        message: str,
        error_code: str,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        category: ErrorCategory = ErrorCategory.BUSINESS_LOGIC,
        user_message: Optional[str] = None,
        detail: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.severity = severity
        self.category = category
        self.user_message = user_message or message
        self.detail = detail
        self.error_id = str(uuid.uuid4())

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for logging."""
        return {
            "error_id": self.error_id,
            "error_code": self.error_code,
            "message": self.message,
            "user_message": self.user_message,
            "severity": self.severity.value,
            "category": self.category.value,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }


class RequestValidationError(BaseServiceError):
    """Raised when an inbound request is malformed."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            severity=ErrorSeverity.LOW,
            category=ErrorCategory.VALIDATION,
        )


class MissingAccessTokenError(BaseServiceError):
    """Raised when an authenticated route is called without a token."""

    def __init__(self):
        super().__init__(
            message="Access token is required",
            error_code="MISSING_ACCESS_TOKEN",
            severity=ErrorSeverity.LOW,
            category=ErrorCategory.SECURITY,
        )


class ResourceNotFoundError(BaseServiceError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            message=f"{resource_type} with ID '{resource_id}' not found",
            error_code="RESOURCE_NOT_FOUND",
            severity=ErrorSeverity.LOW,
            category=ErrorCategory.BUSINESS_LOGIC,
            user_message="Record not found",
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class LimitExceededError(BaseServiceError):
    """Raised when a get_all request would aggregate more records than allowed."""

    def __init__(self, total_count: int, max_total: int):
        detail = (
            f"The total number of records ({total_count}) exceeds the maximum limit of {max_total}. "
            "Please refine your query parameters to return fewer results."
        )
        super().__init__(
            message=f"Total record count {total_count} exceeds ceiling {max_total}",
            error_code="LIMIT_EXCEEDED",
            severity=ErrorSeverity.LOW,
            category=ErrorCategory.VALIDATION,
            user_message="Request exceeds maximum record limit",
            detail=detail,
        )
        self.total_count = total_count
        self.max_total = max_total


class UpstreamCallError(BaseServiceError):
    """Raised when an upstream call fails or answers with a non-2xx status."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Any = None,
        url: Optional[str] = None,
    ):
        super().__init__(
            message=message,
            error_code="UPSTREAM_CALL_FAILED",
            severity=ErrorSeverity.HIGH,
            category=ErrorCategory.EXTERNAL_SERVICE,
            user_message="API request failed",
        )
        self.status_code = status_code
        self.body = body
        self.url = url


class PageFetchError(UpstreamCallError):
    """Raised when one of the additional page fetches of an aggregation fails."""

    def __init__(self, offset: int, cause: UpstreamCallError):
        super().__init__(
            message=f"Fetching page at offset {offset} failed: {cause.message}",
            status_code=cause.status_code,
            url=cause.url,
        )
        self.offset = offset
        self.user_message = "Error fetching additional records"
        self.detail = cause.message


@tracer.capture_method
def log_error_metrics(error: BaseServiceError) -> None:
    """Log error metrics for monitoring and alerting."""

    metrics.add_metric(name="ErrorCount", unit=MetricUnit.Count, value=1)
    metrics.add_metric(name=f"Error{error.category.value}Count", unit=MetricUnit.Count, value=1)

    tracer.put_annotation("error_code", error.error_code)
    tracer.put_annotation("error_category", error.category.value)
    tracer.put_metadata("error_details", error.to_dict())

    logger.error(
        "Service error occurred",
        extra={
            "error_id": error.error_id,
            "error_code": error.error_code,
            "error_severity": error.severity.value,
            "error_category": error.category.value,
            "error_message": error.message,
        }
    )


def format_error_response(error: BaseServiceError) -> Any:
    """Format error for API response."""

    # Upstream rejections are passed through untouched
    if isinstance(error, UpstreamCallError) and not isinstance(error, PageFetchError) and error.body is not None:
        return error.body

    response: Dict[str, Any] = {"error": error.user_message}
    if error.detail:
        response["message"] = error.detail
    return response


def get_http_status_code(error: BaseServiceError) -> int:
    """Get appropriate HTTP status code for error."""

    if isinstance(error, UpstreamCallError):
        return error.status_code or 500

    status_mapping = {
        "VALIDATION_ERROR": 400,
        "MISSING_ACCESS_TOKEN": 401,
        "RESOURCE_NOT_FOUND": 404,
        "LIMIT_EXCEEDED": 413,
    }

    return status_mapping.get(error.error_code, 500)


def register_exception_handlers(app: APIGatewayRestResolver) -> None:
    """Attach the portal error handlers to an API resolver."""

    @app.exception_handler(BaseServiceError)
    def handle_service_error(error: BaseServiceError) -> Response:
        log_error_metrics(error)
        return create_api_response(
            status_code=get_http_status_code(error),
            body=format_error_response(error),
        )

    @app.not_found
    def handle_not_found(error: NotFoundError) -> Response:
        logger.info("No route matched", extra={"path": app.current_event.path})
        return create_api_response(status_code=404, body={"error": "Endpoint not found"})

    @app.exception_handler(Exception)
    def handle_unexpected_error(error: Exception) -> Response:
        logger.exception("Unexpected error in handler", extra={"error": str(error)})
        metrics.add_metric(name="UnexpectedError", unit=MetricUnit.Count, value=1)
        return create_api_response(status_code=500, body={"error": "Internal server error"})
