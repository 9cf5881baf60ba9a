"""
Application API types shared by the mutation entry points.
"""
from .result_types import CommandResult, ErrorCode, ResultStatus

__all__ = [
    "CommandResult",
    "ErrorCode",
    "ResultStatus",
]
