import asyncio
import random
from datetime import datetime, timezone
from typing import Dict, Optional

import httpx
from loguru import logger

from config import config
from autograder.exceptions import SubmissionError
from autograder.models.results import ExecutionRequest, Language, SubmissionHandle

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


def engine_headers(auth_token: Optional[str]) -> Dict[str, str]:
    headers = {"Content-Type": "application/json"}
    if auth_token:
        headers["X-Auth-Token"] = auth_token
    return headers


class SubmissionManager:
    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: Optional[str] = None,
        auth_token: Optional[str] = None,
        max_attempts: Optional[int] = None,
        backoff_seconds: Optional[float] = None,
    ):
        self.client = client
        self.base_url = (base_url or config.judge0_url).rstrip("/")
        self.auth_token = auth_token if auth_token is not None else config.judge0_auth_token
        self.max_attempts = max(1, max_attempts or config.submission_max_attempts)
        self.backoff_seconds = (
            backoff_seconds if backoff_seconds is not None else config.submission_backoff_seconds
        )

    def build_payload(self, request: ExecutionRequest) -> dict:
        return {
            "source_code": request.source_code,
            "language_id": request.language.engine_id,
            "cpu_time_limit": config.execution_cpu_time_limit_seconds,
            "wall_time_limit": config.execution_wall_time_limit_seconds,
            "memory_limit": config.execution_memory_limit_kb,
        }

    async def submit(self, request: ExecutionRequest) -> SubmissionHandle:
        # Re-checked here so no caller can reach the engine with a bad language.
        language = Language.parse(request.language)
        if language is not request.language:
            request = ExecutionRequest(
                source_code=request.source_code,
                language=language,
                max_score=request.max_score,
                context=request.context,
            )

        payload = self.build_payload(request)
        url = f"{self.base_url}/submissions"

        for attempt in range(1, self.max_attempts + 1):
            try:
                response = await self.client.post(
                    url,
                    params={"base64_encoded": "false", "wait": "false"},
                    json=payload,
                    headers=engine_headers(self.auth_token),
                )
            except httpx.TransportError as e:
                logger.warning(
                    "submission_transport_error",
                    attempt=attempt,
                    error_type=type(e).__name__,
                )
                if attempt < self.max_attempts:
                    await self._backoff(attempt)
                    continue
                raise SubmissionError("Execution engine is unreachable") from e

            if response.status_code in RETRYABLE_STATUS_CODES and attempt < self.max_attempts:
                logger.warning("submission_retry", attempt=attempt, status_code=response.status_code)
                await self._backoff(attempt)
                continue

            return self._parse_acknowledgment(response, language)

        raise SubmissionError("Execution engine did not accept the submission")

    def _parse_acknowledgment(self, response: httpx.Response, language: Language) -> SubmissionHandle:
        if response.status_code < 200 or response.status_code >= 300:
            logger.warning("submission_rejected", status_code=response.status_code)
            raise SubmissionError(f"Execution engine rejected the submission (status {response.status_code})")

        try:
            body = response.json()
        except ValueError as e:
            raise SubmissionError("Execution engine returned an unreadable acknowledgment") from e

        token = body.get("token") if isinstance(body, dict) else None
        if not token:
            raise SubmissionError("Execution engine did not return a submission token")

        handle = SubmissionHandle(token=str(token), submitted_at=datetime.now(timezone.utc))
        logger.info("submission_created", token=handle.token, language=language.value)
        return handle

    async def _backoff(self, attempt: int) -> None:
        delay = self.backoff_seconds * (2 ** (attempt - 1))
        delay += random.uniform(0, self.backoff_seconds)
        await asyncio.sleep(delay)
