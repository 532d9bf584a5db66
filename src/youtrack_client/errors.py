from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional, Type


class ErrorKind(str, Enum):
    BAD_REQUEST = "BadRequest"
    UNAUTHORIZED = "Unauthorized"
    FORBIDDEN = "Forbidden"
    NOT_FOUND = "NotFound"
    RATE_LIMITED = "RateLimited"
    SERVER_ERROR = "ServerError"
    UNREACHABLE = "Unreachable"
    MALFORMED_RESPONSE = "MalformedResponse"


class ConfigError(ValueError):
    """Raised when the client is constructed with missing or malformed config."""


class ApiError(Exception):
    """
    Single error shape for every failure leaving the transport.
    - kind: ErrorKind classifying the failure
    - http_status: upstream status code, None for network/parse failures
    - retryable: whether the transport may retry an idempotent call
    """

    kind: ErrorKind = ErrorKind.BAD_REQUEST
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        http_status: Optional[int] = None,
        method: Optional[str] = None,
        url: Optional[str] = None,
        retryable: Optional[bool] = None,
        response_json: Optional[Any] = None,
        response_text: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.http_status = http_status
        self.method = method
        self.url = url
        self.retryable = self.default_retryable if retryable is None else retryable
        self.response_json = response_json
        self.response_text = response_text

    def __str__(self) -> str:
        if self.http_status is not None and self.method and self.url:
            return f"{self.http_status} {self.method} {self.url}: {self.message}"
        return self.message

    def with_context(self, operation: str) -> "ApiError":
        """Copy of this error with the message prefixed by the failing operation."""
        return type(self)(
            f"{operation} failed: {self.message}",
            http_status=self.http_status,
            method=self.method,
            url=self.url,
            retryable=self.retryable,
            response_json=self.response_json,
            response_text=self.response_text,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "http_status": self.http_status,
            "message": self.message,
            "retryable": self.retryable,
        }


class BadRequestError(ApiError):
    kind = ErrorKind.BAD_REQUEST


class UnauthorizedError(ApiError):
    kind = ErrorKind.UNAUTHORIZED


class ForbiddenError(ApiError):
    kind = ErrorKind.FORBIDDEN


class NotFoundError(ApiError):
    kind = ErrorKind.NOT_FOUND


class RateLimitedError(ApiError):
    kind = ErrorKind.RATE_LIMITED
    default_retryable = True


class ServerError(ApiError):
    kind = ErrorKind.SERVER_ERROR
    default_retryable = True


class UnreachableError(ApiError):
    kind = ErrorKind.UNREACHABLE
    default_retryable = True


class MalformedResponseError(ApiError):
    kind = ErrorKind.MALFORMED_RESPONSE


def error_class_for_status(status_code: int) -> Type[ApiError]:
    if status_code == 401:
        return UnauthorizedError
    if status_code == 403:
        return ForbiddenError
    if status_code == 404:
        return NotFoundError
    if status_code == 429:
        return RateLimitedError
    if status_code >= 500:
        return ServerError
    return BadRequestError


__all__ = [
    "ErrorKind",
    "ConfigError",
    "ApiError",
    "BadRequestError",
    "UnauthorizedError",
    "ForbiddenError",
    "NotFoundError",
    "RateLimitedError",
    "ServerError",
    "UnreachableError",
    "MalformedResponseError",
    "error_class_for_status",
]
