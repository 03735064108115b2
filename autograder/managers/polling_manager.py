"""
Completion polling for submitted executions.

Polls the execution engine sequentially for one submission token until the
engine reports a terminal status or the deadline elapses. A pending verdict is
never returned to the caller.

Engine status ids:
    1 In Queue, 2 Processing                -> pending
    3 Accepted                              -> Accepted
    4 Wrong Answer                          -> WrongAnswer
    5 Time Limit Exceeded                   -> TimeLimitExceeded
    6 Compilation Error                     -> CompileError
    7-12 Runtime Error (SIGSEGV ... Other)  -> RuntimeError
    13 Internal Error, 14 Exec Format Error -> InternalError
"""
import asyncio
from typing import Any, Optional

import httpx
from loguru import logger

from config import config
from autograder.exceptions import ExecutionTimeoutError, SubmissionError
from autograder.managers.submission_manager import engine_headers
from autograder.models.results import ExecutionVerdict, SubmissionHandle, VerdictStatus

STATUS_QUEUED = 1
STATUS_PROCESSING = 2

STATUS_MAP = {
    STATUS_QUEUED: VerdictStatus.PENDING,
    STATUS_PROCESSING: VerdictStatus.PENDING,
    3: VerdictStatus.ACCEPTED,
    4: VerdictStatus.WRONG_ANSWER,
    5: VerdictStatus.TIME_LIMIT_EXCEEDED,
    6: VerdictStatus.COMPILE_ERROR,
    7: VerdictStatus.RUNTIME_ERROR,
    8: VerdictStatus.RUNTIME_ERROR,
    9: VerdictStatus.RUNTIME_ERROR,
    10: VerdictStatus.RUNTIME_ERROR,
    11: VerdictStatus.RUNTIME_ERROR,
    12: VerdictStatus.RUNTIME_ERROR,
    13: VerdictStatus.INTERNAL_ERROR,
    14: VerdictStatus.INTERNAL_ERROR,
}


class PollFailure(Exception):
    pass


def _to_int(value: Any) -> Optional[int]:
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def _to_text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (dict, list)):
        return None
    return str(value)


def _seconds_to_ms(value: Any) -> Optional[float]:
    try:
        return round(float(value) * 1000, 3) if value is not None else None
    except (TypeError, ValueError):
        return None


def parse_verdict(body: dict) -> ExecutionVerdict:
    status = body.get("status") or {}
    status_id = _to_int(status.get("id")) if isinstance(status, dict) else None
    description = _to_text(status.get("description")) if isinstance(status, dict) else ""

    verdict_status = STATUS_MAP.get(status_id)
    if verdict_status is None:
        logger.warning("unknown_engine_status", status_id=status_id, description=description)
        verdict_status = VerdictStatus.INTERNAL_ERROR

    return ExecutionVerdict(
        status=verdict_status,
        status_id=status_id,
        status_description=description or "",
        stdout=_to_text(body.get("stdout")),
        stderr=_to_text(body.get("stderr")),
        compile_output=_to_text(body.get("compile_output")),
        exit_code=_to_int(body.get("exit_code")),
        time_ms=_seconds_to_ms(body.get("time")),
        memory_kb=_to_int(body.get("memory")),
    )


class PollingManager:
    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: Optional[str] = None,
        auth_token: Optional[str] = None,
        interval_seconds: Optional[float] = None,
        backoff_factor: Optional[float] = None,
        max_interval_seconds: Optional[float] = None,
        max_consecutive_failures: Optional[int] = None,
    ):
        self.client = client
        self.base_url = (base_url or config.judge0_url).rstrip("/")
        self.auth_token = auth_token if auth_token is not None else config.judge0_auth_token
        self.interval_seconds = (
            interval_seconds if interval_seconds is not None else config.poll_interval_seconds
        )
        self.backoff_factor = backoff_factor or config.poll_backoff_factor
        self.max_interval_seconds = (
            max_interval_seconds if max_interval_seconds is not None else config.poll_max_interval_seconds
        )
        self.max_consecutive_failures = max_consecutive_failures or config.poll_max_consecutive_failures

    async def fetch_status(self, token: str) -> ExecutionVerdict:
        try:
            response = await self.client.get(
                f"{self.base_url}/submissions/{token}",
                params={"base64_encoded": "false"},
                headers=engine_headers(self.auth_token),
            )
        except httpx.TransportError as e:
            raise PollFailure(type(e).__name__) from e

        if response.status_code != 200:
            raise PollFailure(f"status_{response.status_code}")

        try:
            body = response.json()
        except ValueError as e:
            raise PollFailure("invalid_json") from e
        if not isinstance(body, dict):
            raise PollFailure("invalid_body")

        return parse_verdict(body)

    async def wait_for_completion(self, handle: SubmissionHandle, deadline_seconds: float) -> ExecutionVerdict:
        loop = asyncio.get_running_loop()
        expires_at = loop.time() + deadline_seconds
        interval = self.interval_seconds
        failures = 0
        state = "Created"

        while True:
            remaining = expires_at - loop.time()
            if remaining <= 0:
                break

            try:
                verdict = await asyncio.wait_for(self.fetch_status(handle.token), timeout=remaining)
            except asyncio.TimeoutError:
                break
            except PollFailure as e:
                failures += 1
                logger.warning(
                    "poll_failed",
                    token=handle.token,
                    consecutive_failures=failures,
                    reason=str(e),
                )
                if failures >= self.max_consecutive_failures:
                    raise SubmissionError("Lost contact with the execution engine while waiting for results") from e
            else:
                failures = 0
                if verdict.status.is_terminal:
                    logger.info(
                        "execution_completed",
                        token=handle.token,
                        status=verdict.status.value,
                        time_ms=verdict.time_ms,
                    )
                    return verdict

                next_state = "Queued" if verdict.status_id == STATUS_QUEUED else "Processing"
                if next_state != state:
                    logger.debug("execution_state_changed", token=handle.token, state=next_state)
                    state = next_state

            remaining = expires_at - loop.time()
            if remaining <= 0:
                break
            await asyncio.sleep(min(interval, remaining))
            interval = min(interval * self.backoff_factor, self.max_interval_seconds)

        logger.warning("execution_timeout", token=handle.token, deadline_seconds=deadline_seconds)
        raise ExecutionTimeoutError(f"Execution did not finish within {deadline_seconds:g} seconds")
