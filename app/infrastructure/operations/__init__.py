"""Operation result types, status enum and provider error classifiers."""

from infrastructure.operations.classifiers import (
    classify_aws_error,
    classify_google_error,
    classify_requests_error,
)
from infrastructure.operations.result import OperationResult
from infrastructure.operations.status import OperationStatus

__all__ = [
    "OperationResult",
    "OperationStatus",
    "classify_aws_error",
    "classify_google_error",
    "classify_requests_error",
]
