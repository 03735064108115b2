"""
Pydantic response models for the execution API.

These models define the JSON bodies returned to the tool's editor, with
field documentation for OpenAPI schema generation.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from autograder.models.results import ExecutionOutcome, ExecutionVerdict, LaunchContext


class ExecutionResultResponse(BaseModel):
    """Raw execution details reported by the engine."""

    verdict: str = Field(
        ...,
        description="Accepted, WrongAnswer, CompileError, RuntimeError, TimeLimitExceeded or InternalError",
        examples=["Accepted"],
    )
    status_description: Optional[str] = Field(
        None,
        description="Engine's own description of the status",
        examples=["Accepted"],
    )
    stdout: Optional[str] = Field(None, examples=["1\n"])
    stderr: Optional[str] = Field(None)
    compile_output: Optional[str] = Field(None)
    exit_code: Optional[int] = Field(None, examples=[0])
    time: Optional[float] = Field(
        None,
        description="CPU time in seconds",
        examples=[0.012],
    )
    memory: Optional[int] = Field(
        None,
        description="Memory used in KB",
        examples=[3264],
    )

    @classmethod
    def from_verdict(cls, verdict: ExecutionVerdict) -> "ExecutionResultResponse":
        return cls(
            verdict=verdict.status.value,
            status_description=verdict.status_description or None,
            stdout=verdict.stdout,
            stderr=verdict.stderr,
            compile_output=verdict.compile_output,
            exit_code=verdict.exit_code,
            time=verdict.time_ms / 1000 if verdict.time_ms is not None else None,
            memory=verdict.memory_kb,
        )


class PassbackResponse(BaseModel):
    status: str = Field(
        ...,
        description="skipped, published, duplicate or failed",
        examples=["published"],
    )
    error: Optional[str] = Field(
        None,
        description="Why the grade could not be sent back; the execution result is unaffected",
        examples=["passback_error: Platform refused the grade credentials (status 401)"],
    )


class ExecuteResponse(BaseModel):
    """
    Result of one execution cycle.

    `success` is true once the engine produced a terminal verdict, even when
    the program itself failed (score 0). Grade passback is reported separately
    in `passback` and never changes `success`.
    """

    success: bool = Field(..., examples=[True])
    result: Optional[ExecutionResultResponse] = None
    score: Optional[float] = Field(None, examples=[100])
    accepted: Optional[bool] = Field(
        None,
        description="True when the verdict is Accepted",
        examples=[True],
    )
    error: Optional[str] = Field(
        None,
        description="Caller-safe error message prefixed with its error code",
        examples=["unsupported_language: Language 'cobol' is not supported"],
    )
    passback: Optional[PassbackResponse] = None

    @classmethod
    def from_outcome(cls, outcome: ExecutionOutcome) -> "ExecuteResponse":
        if not outcome.success:
            return cls(success=False, error=outcome.error)
        return cls(
            success=True,
            result=ExecutionResultResponse.from_verdict(outcome.verdict) if outcome.verdict else None,
            score=outcome.score,
            accepted=outcome.accepted,
            passback=PassbackResponse(status=outcome.passback_status, error=outcome.passback_error),
        )


class LaunchContextResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id_token: str
    user: str = Field(..., examples=["2"])
    context: str = Field(..., examples=["2"])
    lineitem: Optional[str] = Field(None)
    gradeable: bool = Field(
        ...,
        description="Whether scores from this launch are sent back to the gradebook",
    )

    @classmethod
    def from_context(cls, context: LaunchContext) -> "LaunchContextResponse":
        return cls(
            id_token=context.identity_token,
            user=context.user_id,
            context=context.context_id,
            lineitem=context.grade_target_ref,
            gradeable=context.gradeable,
        )


class ErrorResponse(BaseModel):
    success: bool = Field(False)
    error: str


class PassbackRecordResponse(BaseModel):
    """A grade the platform acknowledged for one submission."""

    model_config = ConfigDict(from_attributes=True)

    submission_token: str = Field(
        ...,
        description="Execution engine submission token (idempotency key)",
        examples=["d85cd024-1548-4165-96c7-7bc88673f194"],
    )
    grade_target_ref: str = Field(..., description="Line item the score was written to")
    user_id: str = Field(..., examples=["2"])
    score: float = Field(..., examples=[100])
    max_score: float = Field(..., examples=[100])
    published_at: datetime = Field(
        ...,
        description="When the platform acknowledged the score (ISO 8601 timestamp)",
        examples=["2025-01-09T10:30:00Z"],
    )
