"""
Result Types for Application Operations

Mutation entry points report their outcome through CommandResult rather
than raising, so callers on the UI side can branch on status without
catching transport exceptions.
"""
from dataclasses import dataclass, field
from typing import Optional, List, TypeVar, Generic
from enum import Enum


class ResultStatus(Enum):
    """Status of an operation"""
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"


class ErrorCode(Enum):
    """Machine-readable failure category attached to error results"""
    NOT_FOUND = "not_found"
    REMOTE_FAILURE = "remote_failure"
    INVALID_ARGUMENT = "invalid_argument"
    SHUT_DOWN = "shut_down"


T = TypeVar('T')


@dataclass
class CommandResult(Generic[T]):
    """
    Structured result from application operations.

    - status: Success, error, or warning
    - message: Human-readable result message
    - data: Payload (new document id, number of entries removed, ...)
    - errors: Detailed error messages
    - error_code: Failure category for error results

    Error results may still carry data: a bulk delete that stops part way
    reports how many entries it removed before failing.
    """
    status: ResultStatus
    message: str
    data: Optional[T] = None
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    error_code: Optional[ErrorCode] = None

    @property
    def success(self) -> bool:
        """Check if the operation succeeded"""
        return self.status == ResultStatus.SUCCESS

    @property
    def failed(self) -> bool:
        """Check if the operation failed"""
        return self.status == ResultStatus.ERROR

    @property
    def is_not_found(self) -> bool:
        return self.error_code == ErrorCode.NOT_FOUND

    @classmethod
    def success_result(cls, message: str, data: T = None) -> 'CommandResult[T]':
        """
        Create a success result.

        Args:
            message: Human-readable success message
            data: Result payload

        Returns:
            CommandResult[T] with SUCCESS status
        """
        return cls(
            status=ResultStatus.SUCCESS,
            message=message,
            data=data
        )

    @classmethod
    def error_result(
        cls,
        message: str,
        errors: List[str] = None,
        data: T = None,
        error_code: Optional[ErrorCode] = None,
    ) -> 'CommandResult[T]':
        """
        Create an error result.

        Args:
            message: Human-readable error message
            errors: List of detailed error messages
            data: Partial payload, if any
            error_code: Failure category

        Returns:
            CommandResult[T] with ERROR status
        """
        return cls(
            status=ResultStatus.ERROR,
            message=message,
            data=data,
            errors=errors or [],
            error_code=error_code,
        )

    @classmethod
    def warning_result(cls, message: str, data: T = None, warnings: List[str] = None) -> 'CommandResult[T]':
        return cls(
            status=ResultStatus.WARNING,
            message=message,
            data=data,
            warnings=warnings or []
        )
