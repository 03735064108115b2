"""
Request and response models for the execution API.
"""

from autograder.api.models.requests import (
    ExecuteRequest,
    LaunchClaimsRequest,
)
from autograder.api.models.responses import (
    ErrorResponse,
    ExecuteResponse,
    ExecutionResultResponse,
    LaunchContextResponse,
    PassbackRecordResponse,
    PassbackResponse,
)


__all__ = [
    "ExecuteRequest",
    "LaunchClaimsRequest",
    "ErrorResponse",
    "ExecuteResponse",
    "ExecutionResultResponse",
    "LaunchContextResponse",
    "PassbackRecordResponse",
    "PassbackResponse",
]
