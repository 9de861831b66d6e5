from __future__ import annotations

import re
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    TRANSPORT_EXHAUSTED = "TransportExhausted"
    BACKEND_REJECTED = "BackendRejected"
    PARSE_FAILURE = "ParseFailure"
    VALIDATION_ERROR = "ValidationError"
    AI_SERVICE_UNAVAILABLE = "AiServiceUnavailable"
    INTERNAL = "Internal"


class ErrorCode(str, Enum):
    MISSING_CONTENT = "MISSING_CONTENT"
    INVALID_INPUT = "INVALID_INPUT"
    AI_SERVICE_ERROR = "AI_SERVICE_ERROR"
    PARSE_ERROR = "PARSE_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    NOT_FOUND = "NOT_FOUND"
    INVALID_STRUCTURE = "INVALID_STRUCTURE"
    DATABASE_ERROR = "DATABASE_ERROR"
    RATE_LIMITED = "RATE_LIMITED"


class IdeaForgeError(Exception):
    kind: ErrorKind = ErrorKind.INTERNAL
    code: ErrorCode = ErrorCode.INTERNAL_ERROR
    http_status: int = 500
    public_message: str = "Internal server error"

    def __init__(self, message: str | None = None, *, code: ErrorCode | None = None) -> None:
        super().__init__(message or self.public_message)
        if code is not None:
            self.code = code


class TransportExhausted(IdeaForgeError):
    """A backend stayed unreachable or kept answering 5xx after every retry."""

    kind = ErrorKind.TRANSPORT_EXHAUSTED
    code = ErrorCode.AI_SERVICE_ERROR
    http_status = 503
    public_message = "AI service temporarily unavailable"

    def __init__(self, message: str, *, status_code: int | None = None, attempts: int = 0) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.attempts = attempts


class BackendRejected(IdeaForgeError):
    kind = ErrorKind.BACKEND_REJECTED
    code = ErrorCode.AI_SERVICE_ERROR
    http_status = 503
    public_message = "AI service temporarily unavailable"

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ParseFailure(IdeaForgeError):
    kind = ErrorKind.PARSE_FAILURE
    code = ErrorCode.PARSE_ERROR
    http_status = 502
    public_message = "Failed to parse AI response"


class InputValidationError(IdeaForgeError):
    kind = ErrorKind.VALIDATION_ERROR
    code = ErrorCode.INVALID_INPUT
    http_status = 400
    public_message = "Invalid input"


class AiServiceUnavailable(IdeaForgeError):
    kind = ErrorKind.AI_SERVICE_UNAVAILABLE
    code = ErrorCode.AI_SERVICE_ERROR
    http_status = 503
    public_message = "AI service temporarily unavailable"

    def __init__(self, message: str, *, failures: list[str] | None = None) -> None:
        super().__init__(message)
        self.failures = list(failures or [])


class ProjectNotFound(IdeaForgeError):
    code = ErrorCode.NOT_FOUND
    http_status = 404
    public_message = "Project not found"


class StorageFailure(IdeaForgeError):
    code = ErrorCode.DATABASE_ERROR
    public_message = "Database error"


class InvalidProjectStructure(IdeaForgeError):
    kind = ErrorKind.VALIDATION_ERROR
    code = ErrorCode.INVALID_STRUCTURE
    http_status = 400
    public_message = "Invalid project structure - missing ideaTree"


class RateLimitExceeded(IdeaForgeError):
    code = ErrorCode.RATE_LIMITED
    http_status = 429
    public_message = "Too many requests, please try again later."


def _compact_message(message: str, max_len: int = 220) -> str:
    msg = message.lower()
    msg = re.sub(r"\s+", " ", msg)
    return msg.strip()[:max_len]


def compact_error_summary(exc: BaseException, max_len: int = 220) -> str:
    return f"{exc.__class__.__name__}: {_compact_message(str(exc), max_len=max_len)}"


def error_payload(exc: IdeaForgeError, *, production: bool) -> dict[str, Any]:
    if isinstance(exc, (InputValidationError, InvalidProjectStructure, ProjectNotFound)):
        # Caller-facing validation text is safe to echo.
        body: dict[str, Any] = {"error": str(exc), "code": exc.code.value}
    else:
        body = {"error": exc.public_message, "code": exc.code.value}
        if not production and exc.kind is not ErrorKind.INTERNAL:
            body["message"] = str(exc)
    return body