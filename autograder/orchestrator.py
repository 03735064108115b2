"""
Execution orchestration: one request/response cycle from launch parameters to
an ExecutionOutcome.

    resolve context -> validate request -> submit -> poll -> score -> passback

Submission and polling share one deadline. Anything that fails before a
terminal verdict short-circuits the cycle with success=False. Passback is
attempted only once a terminal verdict exists and the launch carries a line
item; its failure is reported next to the outcome and never changes it.
"""
import asyncio
from typing import Any, Mapping, Optional, Tuple

from loguru import logger

from config import config
from autograder.exceptions import (
    AutograderError,
    ExecutionTimeoutError,
    GradePassbackError,
    ValidationError,
)
from autograder.managers.launch_manager import LaunchContextResolver
from autograder.managers.passback_manager import PassbackManager
from autograder.managers.polling_manager import PollingManager
from autograder.managers.scoring_manager import ScoringManager
from autograder.managers.submission_manager import SubmissionManager
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
from autograder.security.source_validator import SourceValidator

INTERNAL_ERROR_MESSAGE = "internal_error: Unexpected error while executing code"


class ExecutionOrchestrator:
    def __init__(
        self,
        resolver: LaunchContextResolver,
        submission_manager: SubmissionManager,
        polling_manager: PollingManager,
        scoring_manager: ScoringManager,
        passback_manager: PassbackManager,
        source_validator: Optional[SourceValidator] = None,
        deadline_seconds: Optional[float] = None,
    ):
        self.resolver = resolver
        self.submission_manager = submission_manager
        self.polling_manager = polling_manager
        self.scoring_manager = scoring_manager
        self.passback_manager = passback_manager
        self.source_validator = source_validator or SourceValidator()
        self.deadline_seconds = (
            deadline_seconds if deadline_seconds is not None else config.execution_deadline_seconds
        )

    def build_request(self, raw_request: Mapping[str, Any], context: LaunchContext) -> ExecutionRequest:
        if not isinstance(raw_request, Mapping):
            raise ValidationError("Request body must be an object")

        code = raw_request.get("code")
        violations = self.source_validator.validate(code)
        if violations:
            raise ValidationError(violations[0]["message"])

        language = Language.parse(raw_request.get("language"))

        max_score = raw_request.get("max_score")
        if isinstance(max_score, bool) or not isinstance(max_score, (int, float)):
            raise ValidationError("max_score must be a number")
        if not max_score > 0 or max_score == float("inf"):
            raise ValidationError("max_score must be greater than 0")

        return ExecutionRequest(
            source_code=code,
            language=language,
            max_score=float(max_score),
            context=context,
        )

    async def execute(self, request: ExecutionRequest) -> Tuple[ExecutionVerdict, SubmissionHandle]:
        """Submit and poll under one shared deadline."""
        loop = asyncio.get_running_loop()
        expires_at = loop.time() + self.deadline_seconds

        try:
            handle: SubmissionHandle = await asyncio.wait_for(
                self.submission_manager.submit(request),
                timeout=self.deadline_seconds,
            )
        except asyncio.TimeoutError as e:
            if isinstance(e, ExecutionTimeoutError):
                raise
            raise ExecutionTimeoutError(
                f"Execution did not finish within {self.deadline_seconds:g} seconds"
            ) from e

        remaining = max(expires_at - loop.time(), 0.0)
        verdict = await self.polling_manager.wait_for_completion(handle, remaining)
        return verdict, handle

    async def run(self, raw_params: Mapping[str, Any], raw_request: Mapping[str, Any]) -> ExecutionOutcome:
        try:
            context = self.resolver.resolve(raw_params)
            request = self.build_request(raw_request, context)
            verdict, handle = await self.execute(request)
        except AutograderError as e:
            logger.warning("execution_failed", error_code=e.code, error=e.message)
            return ExecutionOutcome(success=False, error=e.to_caller_message(), error_code=e.code)
        except Exception as e:
            logger.error("execution_error", error_type=type(e).__name__, error=str(e))
            return ExecutionOutcome(success=False, error=INTERNAL_ERROR_MESSAGE, error_code="internal_error")

        score = self.scoring_manager.evaluate(verdict, request.max_score)
        outcome = ExecutionOutcome(
            success=True,
            verdict=verdict,
            score=score,
            accepted=verdict.status is VerdictStatus.ACCEPTED,
        )

        if context.gradeable:
            await self._publish(outcome, context, request, handle)

        logger.info(
            "execution_orchestrated",
            token=handle.token,
            user_id=context.user_id,
            status=verdict.status.value,
            score=score,
            passback=outcome.passback_status,
        )
        return outcome

    async def _publish(
        self,
        outcome: ExecutionOutcome,
        context: LaunchContext,
        request: ExecutionRequest,
        handle: SubmissionHandle,
    ) -> None:
        record = GradePassbackRecord(
            grade_target_ref=context.grade_target_ref,
            user_id=context.user_id,
            score=outcome.score,
            max_score=request.max_score,
            submission_token=handle.token,
        )
        try:
            published = await self.passback_manager.publish(record)
        except GradePassbackError as e:
            outcome.passback_status = "failed"
            outcome.passback_error = e.to_caller_message()
            return
        except Exception as e:
            logger.error("passback_error", token=handle.token, error_type=type(e).__name__, error=str(e))
            outcome.passback_status = "failed"
            outcome.passback_error = "passback_error: Unexpected error while publishing the grade"
            return

        outcome.passback_status = "published" if published else "duplicate"
