"""Structured result returned across the engine boundary."""

from dataclasses import dataclass
from typing import Any

from contentgov.domain.exceptions import ContentGovError


@dataclass(frozen=True)
class ErrorInfo:
    """Failure code and message."""

    code: str
    message: str

    @classmethod
    def from_exception(cls, exc: ContentGovError) -> "ErrorInfo":
        return cls(code=exc.code, message=str(exc))

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}


@dataclass(frozen=True)
class OperationResult:
    """Success payload or failure description of one engine operation."""

    ok: bool
    operation: str
    data: dict[str, Any] | None = None
    error: ErrorInfo | None = None

    @classmethod
    def success(cls, operation: str, data: dict[str, Any]) -> "OperationResult":
        return cls(ok=True, operation=operation, data=data)

    @classmethod
    def failure(cls, operation: str, exc: ContentGovError) -> "OperationResult":
        return cls(ok=False, operation=operation, error=ErrorInfo.from_exception(exc))

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"ok": self.ok, "operation": self.operation}
        if self.data is not None:
            result["data"] = self.data
        if self.error is not None:
            result["error"] = self.error.to_dict()
        return result
