"""Error responses for the LearnSphere API.

Every business-rule failure is a LearnSphereError and renders as
``{"messages": [{"code", "messageType", "text", "timestamp"}]}``.
Infrastructure degradation (cache, notification transport) is handled
below this layer and never produces one of these.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field


class MessageType(str, Enum):
    """Type of message in error response."""

    ERROR = "Error"
    WARNING = "Warning"
    INFO = "Info"
    EXCEPTION = "Exception"


class Message(BaseModel):
    model_config = {"extra": "forbid", "populate_by_name": True}

    code: str
    message_type: MessageType = Field(alias="messageType")
    text: str
    timestamp: str | None = None


class Result(BaseModel):
    model_config = {"extra": "forbid", "populate_by_name": True}

    messages: list[Message]
    retry_after_seconds: int | None = Field(default=None, alias="retryAfterSeconds")


def _message(code: str, text: str, message_type: MessageType = MessageType.ERROR) -> Message:
    return Message(
        code=code,
        messageType=message_type,
        text=text,
        timestamp=datetime.now(UTC).isoformat(),
    )


class LearnSphereError(HTTPException):
    """Base exception for API errors."""

    def __init__(
        self,
        status_code: int,
        code: str,
        text: str,
        message_type: MessageType = MessageType.ERROR,
        headers: dict[str, str] | None = None,
    ):
        self.code = code
        self.text = text
        self.message_type = message_type
        super().__init__(status_code=status_code, detail=text, headers=headers)

    def to_result(self) -> Result:
        return Result(messages=[_message(self.code, self.text, self.message_type)])


class BadRequestError(LearnSphereError):
    """Missing or malformed input (400)."""

    def __init__(self, text: str):
        super().__init__(status_code=400, code="BadRequest", text=text)


class UnauthorizedError(LearnSphereError):
    """Missing or bad credentials (401)."""

    def __init__(self, text: str = "Not authorized"):
        super().__init__(
            status_code=401,
            code="Unauthorized",
            text=text,
            headers={"WWW-Authenticate": "Bearer"},
        )


class ForbiddenError(LearnSphereError):
    """Authenticated but not allowed (403)."""

    def __init__(self, text: str = "Not authorized as an admin"):
        super().__init__(status_code=403, code="Forbidden", text=text)


class NotFoundError(LearnSphereError):
    """Resource not found (404)."""

    def __init__(self, resource_type: str, identifier: str):
        super().__init__(
            status_code=404,
            code="NotFound",
            text=f"{resource_type} '{identifier}' not found",
        )


class ConflictError(LearnSphereError):
    """Duplicate unique key (409)."""

    def __init__(self, text: str):
        super().__init__(status_code=409, code="Conflict", text=text)


class LockedOutError(LearnSphereError):
    """Identity locked after failed logins (429)."""

    def __init__(self, retry_after_seconds: int):
        self.retry_after_seconds = retry_after_seconds
        minutes = -(-retry_after_seconds // 60)
        super().__init__(
            status_code=429,
            code="TooManyRequests",
            text=(
                "Account locked due to too many failed attempts. "
                f"Try again in {minutes} minutes."
            ),
            headers={"Retry-After": str(retry_after_seconds)},
        )

    def to_result(self) -> Result:
        result = super().to_result()
        result.retry_after_seconds = self.retry_after_seconds
        return result


class InternalServerError(LearnSphereError):
    def __init__(self, text: str = "An unexpected error occurred"):
        super().__init__(
            status_code=500,
            code="InternalServerError",
            text=text,
            message_type=MessageType.EXCEPTION,
        )


async def learnsphere_exception_handler(request: Request, exc: LearnSphereError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_result().model_dump(by_alias=True, exclude_none=True),
        headers=exc.headers,
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Translate request validation failures into 400 responses."""
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        text = f"{location}: {error.get('msg')}" if location else str(error.get("msg"))
        messages.append(_message("BadRequest", text))
    return JSONResponse(
        status_code=400,
        content=Result(messages=messages).model_dump(by_alias=True, exclude_none=True),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content=InternalServerError().to_result().model_dump(by_alias=True, exclude_none=True),
    )
