"""Result<T> pattern: operations return this instead of raising for bad input or unresolvable resources."""
from __future__ import annotations
from enum import Enum
from typing import TypeVar, Generic, Optional

T = TypeVar("T")


class FailureReason(str, Enum):
    BAD_REQUEST = "bad_request"
    NOT_FOUND = "not_found"


class Result(Generic[T]):
    def __init__(
        self,
        is_success: bool,
        value: Optional[T] = None,
        error: Optional[str] = None,
        reason: Optional[FailureReason] = None,
    ):
        self.is_success = is_success
        self.value = value
        self.error = error
        self.reason = reason

    @classmethod
    def ok(cls, value: T) -> "Result[T]":
        return cls(is_success=True, value=value)

    @classmethod
    def fail(cls, error: str, reason: FailureReason = FailureReason.BAD_REQUEST) -> "Result[T]":
        return cls(is_success=False, error=error, reason=reason)

    @classmethod
    def bad_request(cls, error: str) -> "Result[T]":
        return cls.fail(error, FailureReason.BAD_REQUEST)

    @classmethod
    def not_found(cls, error: str) -> "Result[T]":
        return cls.fail(error, FailureReason.NOT_FOUND)

    @property
    def is_not_found(self) -> bool:
        return self.reason is FailureReason.NOT_FOUND

    def __repr__(self) -> str:
        if self.is_success:
            return f"Result.ok({self.value!r})"
        return f"Result.fail({self.error!r}, {self.reason.value if self.reason else None})"
