"""Uniform result type returned by integration clients."""

from dataclasses import dataclass
from typing import Any, Optional

from infrastructure.operations.status import OperationStatus


@dataclass
class OperationResult:
    """Outcome of a provider call.

    Integration clients return this instead of raising so callers can
    decide how much a failure matters (a failed calendar insert is
    logged, a failed SMS turns into a FAILED notification).

    Attributes:
        status: High-level outcome
        message: Human-friendly message for logs
        data: Optional payload (provider response body, message id, ...)
        error_code: Optional machine error code
        retry_after: Seconds to wait when the provider throttled us
    """

    status: OperationStatus
    message: str
    data: Optional[Any] = None
    error_code: Optional[str] = None
    retry_after: Optional[int] = None

    @property
    def is_success(self) -> bool:
        return self.status == OperationStatus.SUCCESS

    @classmethod
    def success(
        cls, data: Optional[Any] = None, message: str = "ok"
    ) -> "OperationResult":
        return cls(status=OperationStatus.SUCCESS, message=message, data=data)

    @classmethod
    def error(
        cls,
        status: OperationStatus,
        message: str,
        error_code: Optional[str] = None,
        retry_after: Optional[int] = None,
        data: Optional[Any] = None,
    ) -> "OperationResult":
        return cls(
            status=status,
            message=message,
            error_code=error_code,
            retry_after=retry_after,
            data=data,
        )

    @classmethod
    def transient_error(
        cls,
        message: str,
        error_code: Optional[str] = None,
        retry_after: Optional[int] = None,
    ) -> "OperationResult":
        """Failure that may succeed later (timeouts, throttling, 5xx)."""
        return cls.error(
            OperationStatus.TRANSIENT_ERROR, message, error_code, retry_after
        )

    @classmethod
    def permanent_error(
        cls, message: str, error_code: Optional[str] = None, data: Optional[Any] = None
    ) -> "OperationResult":
        """Failure that will not succeed on retry (4xx, bad input, auth)."""
        return cls.error(
            OperationStatus.PERMANENT_ERROR, message, error_code, data=data
        )
