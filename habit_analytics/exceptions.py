"""
Exception hierarchy for habit-analytics

The analysis functions are total over well-typed input; these exceptions
signal contract violations by the calling layer (bad ranges, bad config).
"""

from datetime import date, datetime, timezone
from typing import Optional, Dict, Any
from uuid import uuid4
import logging

logger = logging.getLogger(__name__)


class HabitAnalyticsError(Exception):
    """
    Base exception for all habit-analytics errors

    Provides:
    - Automatic timestamping
    - Request ID for tracing
    - Structured context
    - Automatic logging

    Example:
        raise HabitAnalyticsError(
            message="Report window is inverted",
            operation="build_periodic_report",
            context={"start_date": "2024-02-01"}
        )
    """

    def __init__(
        self,
        message: str,
        request_id: Optional[str] = None,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.request_id = request_id or str(uuid4())
        self.operation = operation
        self.context = context or {}
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc)

        self._log_error()

    def _log_error(self) -> None:
        """Log error with full context"""
        log_data = {
            "error_type": self.__class__.__name__,
            "error_message": self.message,  # 'message' is reserved by logging
            "request_id": self.request_id,
            "operation": self.operation,
            "error_context": self.context,
            "timestamp": self.timestamp.isoformat()
        }

        if self.cause:
            log_data["cause"] = str(self.cause)
            logger.error(f"{self.__class__.__name__}: {self.message}", extra=log_data, exc_info=self.cause)
        else:
            logger.error(f"{self.__class__.__name__}: {self.message}", extra=log_data)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize exception for the calling layer"""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "operation": self.operation,
            "request_id": self.request_id,
            "timestamp": self.timestamp.isoformat()
        }


# ==========================================
# Validation Errors (caller input)
# ==========================================

class ValidationError(HabitAnalyticsError):
    """
    Raised when an argument violates the call contract

    Example:
        raise ValidationError(
            message="Sensitivity must be positive",
            field="sensitivity",
            value=-1.0
        )
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        **kwargs
    ):
        self.field = field
        self.value = value
        context = kwargs.pop("context", None) or {"field": field, "value": value}
        super().__init__(
            message=message,
            context=context,
            **kwargs
        )


class InvalidRangeError(ValidationError):
    """Report window ends before it starts"""

    def __init__(
        self,
        start_date: date,
        end_date: date,
        message: Optional[str] = None,
        **kwargs
    ):
        self.start_date = start_date
        self.end_date = end_date
        super().__init__(
            message=message or f"end_date {end_date.isoformat()} is before start_date {start_date.isoformat()}",
            field="end_date",
            value=end_date.isoformat(),
            context={
                "start_date": start_date.isoformat(),
                "end_date": end_date.isoformat(),
            },
            **kwargs
        )


# ==========================================
# Configuration Errors
# ==========================================

class ConfigurationError(HabitAnalyticsError):
    """System configuration is invalid or missing"""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        **kwargs
    ):
        self.config_key = config_key
        super().__init__(
            message=message,
            context={"config_key": config_key},
            **kwargs
        )
