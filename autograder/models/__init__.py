from autograder.models.database import (
    Base,
    GradePassback,
)
from autograder.models.results import (
    ExecutionOutcome,
    ExecutionRequest,
    ExecutionVerdict,
    GradePassbackRecord,
    Language,
    LaunchContext,
    SubmissionHandle,
    VerdictStatus,
)

__all__ = [
    "Base",
    "ExecutionOutcome",
    "ExecutionRequest",
    "ExecutionVerdict",
    "GradePassback",
    "GradePassbackRecord",
    "Language",
    "LaunchContext",
    "SubmissionHandle",
    "VerdictStatus",
]
