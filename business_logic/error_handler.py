"""
Error taxonomy and user feedback for the campaign creation workflow.

This module provides the exceptions raised by the builder components and a
centralized handler that turns them into user-facing notifications.
"""

import logging
from typing import Dict, Any, Optional, List
from enum import Enum
from dataclasses import dataclass
from datetime import datetime, timedelta

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


FALLBACK_REMOTE_MESSAGE = "The ads platform rejected the request. Please review your entries and try again."


class CampaignBuilderError(Exception):
    """Base class for every error raised by the builder."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(CampaignBuilderError):
    """A required field is missing or out of range; never reaches the network."""

    def __init__(self, message: str, issues: Optional[List[str]] = None, field: Optional[str] = None):
        super().__init__(message)
        self.issues = issues or [message]
        self.field = field


class SessionExpired(CampaignBuilderError):
    """The platform token expired; the workflow must be aborted."""


class RemoteRejection(CampaignBuilderError):
    """Non-2xx response from a creation endpoint."""

    def __init__(self, message: str, status_code: Optional[int] = None,
                 error_code: Any = None, error_subcode: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.error_code = error_code
        self.error_subcode = error_subcode


class MalformedResponse(CampaignBuilderError):
    """2xx response without a recognizable identifier."""


class TransientNetworkError(CampaignBuilderError):
    """Connection failure or timeout while talking to the backend."""


class ErrorSeverity(Enum):
    """Error severity levels."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories for better classification."""
    VALIDATION_ERROR = "validation_error"
    SESSION_ERROR = "session_error"
    REMOTE_ERROR = "remote_error"
    RESPONSE_ERROR = "response_error"
    NETWORK_ERROR = "network_error"
    SYSTEM_ERROR = "system_error"


@dataclass
class ErrorInfo:
    """Structured error information."""
    category: ErrorCategory
    severity: ErrorSeverity
    message: str
    user_message: str
    technical_details: Optional[str] = None
    suggested_action: Optional[str] = None
    retry_possible: bool = False
    aborts_workflow: bool = False
    timestamp: datetime = None

    def __post_init__(self):
        if self.timestamp is None:
            self.timestamp = datetime.now()


def is_session_expired(status_code: Optional[int], body: Any) -> bool:
    """
    Check whether an error response means the platform token expired.

    Args:
        status_code: HTTP status of the response
        body: Decoded JSON body, if any

    Returns:
        True for a 401 carrying the token-expired markers
    """
    if status_code != 401 or not isinstance(body, dict):
        return False

    if body.get('tokenExpired') is True or body.get('code') == "TOKEN_EXPIRED":
        return True

    for key in ('fb', 'error'):
        platform_error = body.get(key)
        if isinstance(platform_error, dict):
            if platform_error.get('code') == 190 and platform_error.get('error_subcode') == 463:
                return True

    return False


def extract_error_message(body: Any, fallback: str = FALLBACK_REMOTE_MESSAGE) -> str:
    """
    Pick the most specific message out of an error body.

    Platform message first, then the backend's generic message, then fallback.
    """
    if not isinstance(body, dict):
        return fallback

    for key in ('fb', 'error'):
        platform_error = body.get(key)
        if isinstance(platform_error, dict):
            message = platform_error.get('error_user_msg') or platform_error.get('message')
            if message:
                return str(message)

    for key in ('message', 'error'):
        message = body.get(key)
        if isinstance(message, str) and message.strip():
            return message

    return fallback


class ErrorHandler:
    """
    Centralized error handling and user feedback system.

    Classifies builder exceptions, keeps a short history for monitoring
    and prepares notifications for the UI.
    """

    def __init__(self, history_limit: int = 100):
        self.error_history: List[ErrorInfo] = []
        self.history_limit = history_limit

    def handle_validation_error(self, error: ValidationError, context: str = "") -> ErrorInfo:
        """
        Handle local validation errors with specific user guidance.

        Args:
            error: The validation exception
            context: Additional context about the operation

        Returns:
            ErrorInfo object with structured error information
        """
        details = "; ".join(error.issues) if error.issues else None
        return ErrorInfo(
            category=ErrorCategory.VALIDATION_ERROR,
            severity=ErrorSeverity.WARNING,
            message=f"Validation error in {context}: {error.message}",
            user_message=error.message,  # Validation messages are written for users
            technical_details=details,
            suggested_action="Please correct the highlighted fields and submit again.",
            retry_possible=False
        )

    def handle_session_expired(self, error: SessionExpired, context: str = "") -> ErrorInfo:
        return ErrorInfo(
            category=ErrorCategory.SESSION_ERROR,
            severity=ErrorSeverity.CRITICAL,
            message=f"Access token expired during {context}: {error.message}",
            user_message="Your Facebook access token has expired. Please reconnect your account.",
            suggested_action="Reconnect your ad account, then start the campaign again.",
            retry_possible=False,
            aborts_workflow=True
        )

    def handle_remote_error(self, error: CampaignBuilderError, context: str = "") -> ErrorInfo:
        """
        Handle rejections and unusable responses from the ads backend.

        Args:
            error: RemoteRejection or MalformedResponse
            context: Additional context about the operation

        Returns:
            ErrorInfo object with structured error information
        """
        if isinstance(error, MalformedResponse):
            return ErrorInfo(
                category=ErrorCategory.RESPONSE_ERROR,
                severity=ErrorSeverity.ERROR,
                message=f"Malformed response in {context}: {error.message}",
                user_message="Invalid response from server. The resource may not have been created.",
                technical_details=error.message,
                suggested_action="Check the ads manager, then submit this step again if needed.",
                retry_possible=True
            )

        technical = None
        if isinstance(error, RemoteRejection):
            technical = f"status={error.status_code} code={error.error_code} subcode={error.error_subcode}"

        return ErrorInfo(
            category=ErrorCategory.REMOTE_ERROR,
            severity=ErrorSeverity.ERROR,
            message=f"Remote rejection in {context}: {error.message}",
            user_message=error.message or FALLBACK_REMOTE_MESSAGE,
            technical_details=technical,
            suggested_action="Edit the highlighted values and submit this step again.",
            retry_possible=True
        )

    def handle_network_error(self, error: Exception, context: str = "") -> ErrorInfo:
        """
        Handle network-related errors.

        Args:
            error: The network exception
            context: Additional context about the operation

        Returns:
            ErrorInfo object with structured error information
        """
        error_str = str(error).lower()

        if "timeout" in error_str or "timed out" in error_str:
            return ErrorInfo(
                category=ErrorCategory.NETWORK_ERROR,
                severity=ErrorSeverity.WARNING,
                message=f"Network timeout in {context}: {str(error)}",
                user_message="The request timed out. The resource may or may not have been created.",
                suggested_action="Check your internet connection and submit this step again.",
                retry_possible=True
            )

        # Generic network error
        return ErrorInfo(
            category=ErrorCategory.NETWORK_ERROR,
            severity=ErrorSeverity.ERROR,
            message=f"Network error in {context}: {str(error)}",
            user_message="Cannot connect to the ads backend. Please check your internet connection.",
            technical_details=str(error),
            suggested_action="Check your internet connection and try again.",
            retry_possible=True
        )

    def classify_error(self, error: Exception, context: str = "") -> ErrorInfo:
        """
        Classify an error and return appropriate ErrorInfo.

        Args:
            error: The exception to classify
            context: Additional context about the operation

        Returns:
            ErrorInfo object with structured error information
        """
        if isinstance(error, ValidationError):
            return self.handle_validation_error(error, context)

        elif isinstance(error, SessionExpired):
            return self.handle_session_expired(error, context)

        elif isinstance(error, (RemoteRejection, MalformedResponse)):
            return self.handle_remote_error(error, context)

        elif isinstance(error, (TransientNetworkError, ConnectionError, TimeoutError)):
            return self.handle_network_error(error, context)

        # Generic system error
        return ErrorInfo(
            category=ErrorCategory.SYSTEM_ERROR,
            severity=ErrorSeverity.ERROR,
            message=f"Unexpected error in {context}: {str(error)}",
            user_message="An unexpected error occurred. Please try again or contact support.",
            technical_details=str(error),
            suggested_action="Try again. If the problem persists, contact support with the error details.",
            retry_possible=True
        )

    def create_user_notification(self, error_info: ErrorInfo) -> Dict[str, Any]:
        """
        Create a user-friendly notification from error information.

        Args:
            error_info: Structured error information

        Returns:
            Dictionary with notification data for UI display
        """
        # Map severity to UI notification types
        notification_type_map = {
            ErrorSeverity.INFO: "info",
            ErrorSeverity.WARNING: "warning",
            ErrorSeverity.ERROR: "error",
            ErrorSeverity.CRITICAL: "error"
        }

        notification = {
            'type': notification_type_map[error_info.severity],
            'title': self._get_error_title(error_info),
            'message': error_info.user_message,
            'timestamp': error_info.timestamp.isoformat(),
            'dismissible': not error_info.aborts_workflow,
            'retry_possible': error_info.retry_possible,
            'aborts_workflow': error_info.aborts_workflow
        }

        if error_info.suggested_action:
            notification['action'] = error_info.suggested_action

        if error_info.technical_details and error_info.category == ErrorCategory.VALIDATION_ERROR:
            notification['details'] = error_info.technical_details

        return notification

    def _get_error_title(self, error_info: ErrorInfo) -> str:
        """Get appropriate title for error notification."""
        title_map = {
            ErrorCategory.VALIDATION_ERROR: "Please Check Your Entries",
            ErrorCategory.SESSION_ERROR: "Session Expired",
            ErrorCategory.REMOTE_ERROR: "Request Rejected",
            ErrorCategory.RESPONSE_ERROR: "Unexpected Response",
            ErrorCategory.NETWORK_ERROR: "Connection Error",
            ErrorCategory.SYSTEM_ERROR: "System Error"
        }

        return title_map.get(error_info.category, "Error")

    def log_error(self, error_info: ErrorInfo, context: str = ""):
        """
        Log error information for monitoring and debugging.

        Args:
            error_info: Structured error information
            context: Additional context
        """
        self.error_history.append(error_info)

        if len(self.error_history) > self.history_limit:
            self.error_history = self.error_history[-self.history_limit:]

        log_message = f"{context}: {error_info.message}"

        if error_info.severity == ErrorSeverity.CRITICAL:
            logger.critical(log_message)
        elif error_info.severity == ErrorSeverity.ERROR:
            logger.error(log_message)
        elif error_info.severity == ErrorSeverity.WARNING:
            logger.warning(log_message)
        else:
            logger.info(log_message)

    def get_error_statistics(self) -> Dict[str, Any]:
        """
        Get error statistics for monitoring.

        Returns:
            Dictionary with error statistics
        """
        if not self.error_history:
            return {'total_errors': 0}

        category_counts = {}
        severity_counts = {}

        recent_errors = [
            err for err in self.error_history
            if err.timestamp > datetime.now() - timedelta(hours=24)
        ]

        for error in recent_errors:
            category_counts[error.category.value] = category_counts.get(error.category.value, 0) + 1
            severity_counts[error.severity.value] = severity_counts.get(error.severity.value, 0) + 1

        return {
            'total_errors': len(self.error_history),
            'recent_errors_24h': len(recent_errors),
            'category_breakdown': category_counts,
            'severity_breakdown': severity_counts
        }


# Global error handler instance
error_handler = ErrorHandler()
