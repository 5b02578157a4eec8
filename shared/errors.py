"""
Shared error handling for the Resource Manager client.
"""

from enum import Enum
from typing import Dict, Any, Optional
from pydantic import BaseModel, Field

from opentelemetry import trace


# Status code used for failures that carry no service status at all.
UNKNOWN_CODE = 0


class ErrorKind(str, Enum):
    """Closed set of failure kinds surfaced to callers."""
    PERMISSION_OR_NOT_FOUND = "permission_or_not_found"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    TRANSIENT = "transient"
    MALFORMED_REQUEST = "malformed_request"
    UNCLASSIFIED = "unclassified"


def classify(code: Optional[int]) -> ErrorKind:
    """Map a wire status code onto an error kind."""
    if code is None or code == UNKNOWN_CODE:
        return ErrorKind.UNCLASSIFIED
    if code == 403:
        return ErrorKind.PERMISSION_OR_NOT_FOUND
    if code == 404:
        return ErrorKind.NOT_FOUND
    if code == 409:
        return ErrorKind.CONFLICT
    if 500 <= code <= 599:
        return ErrorKind.TRANSIENT
    if 400 <= code <= 499:
        return ErrorKind.MALFORMED_REQUEST
    return ErrorKind.UNCLASSIFIED


class ErrorResponse(BaseModel):
    """Standard error response format."""

    trace_id: Optional[str] = None
    code: int
    kind: ErrorKind
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)


class ResourceManagerException(Exception):
    """Single client-facing error type for every failed service call.

    ``code`` is the service's numeric status (0 when the failure never
    reached the service), ``cause`` the original exception when this error
    wraps a lower-level failure.
    """

    def __init__(self,
                 code: int,
                 message: str,
                 cause: Optional[BaseException] = None,
                 details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.cause = cause
        self.details = details or {}
        super().__init__(code, message)
        if cause is not None:
            self.__cause__ = cause

    @property
    def kind(self) -> ErrorKind:
        return classify(self.code)

    @classmethod
    def wrap(cls, exc: BaseException) -> "ResourceManagerException":
        """Wrap a failure that carries no status code."""
        return cls(
            UNKNOWN_CODE,
            str(exc) or exc.__class__.__name__,
            cause=exc,
            details={"exception_type": exc.__class__.__name__}
        )

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        trace_id = None
        current_span = trace.get_current_span()
        if current_span and current_span.is_recording():
            span_context = current_span.get_span_context()
            if span_context.trace_id != 0:
                trace_id = f"{span_context.trace_id:032x}"

        return ErrorResponse(
            trace_id=trace_id,
            code=self.code,
            kind=self.kind,
            message=self.message,
            details=self.details
        )

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"
