from autograder.managers import (
    ClientCredentialsTokenProvider,
    LaunchContextResolver,
    PassbackManager,
    PollingManager,
    ScoringManager,
    SubmissionManager,
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

from autograder.orchestrator import ExecutionOrchestrator

__all__ = [
    # Results
    "ExecutionOutcome",
    "ExecutionRequest",
    "ExecutionVerdict",
    "GradePassbackRecord",
    "Language",
    "LaunchContext",
    "SubmissionHandle",
    "VerdictStatus",
    # Managers
    "ClientCredentialsTokenProvider",
    "LaunchContextResolver",
    "PassbackManager",
    "PollingManager",
    "ScoringManager",
    "SubmissionManager",
    "ExecutionOrchestrator",
]
