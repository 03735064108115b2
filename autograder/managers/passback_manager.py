"""
Grade passback to the launching platform's gradebook (LTI Assignment and
Grade Services).

A score is written at most once per submission token. Within a process the
write is serialized by a short-lived per-token lock; across processes the token
is claimed in the passback ledger before the platform is written to.
"""
import asyncio
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Dict, Optional, Protocol, TypeVar

import httpx
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from config import config
from autograder.db import get_session
from autograder.exceptions import GradePassbackError
from autograder.models.results import GradePassbackRecord
from autograder.repositories.passback_repository import PassbackRepository

SCORE_CONTENT_TYPE = "application/vnd.ims.lis.v1.score+json"
TOKEN_EXPIRY_MARGIN_SECONDS = 30

T = TypeVar("T")


class TokenProvider(Protocol):
    async def get_token(self) -> str:
        ...

    def invalidate(self) -> None:
        ...


class ClientCredentialsTokenProvider:
    """OAuth2 client-credentials exchange against the platform token endpoint."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        token_url: Optional[str] = None,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        scope: Optional[str] = None,
    ):
        self.client = client
        self.token_url = token_url or config.platform_token_url
        self.client_id = client_id if client_id is not None else config.lti_client_id
        self.client_secret = client_secret if client_secret is not None else config.lti_client_secret
        self.scope = scope or config.ags_scope
        self._access_token: Optional[str] = None
        self._expires_at = 0.0
        self._lock = asyncio.Lock()

    async def get_token(self) -> str:
        async with self._lock:
            if self._access_token and time.monotonic() < self._expires_at:
                return self._access_token

            try:
                response = await self.client.post(
                    self.token_url,
                    data={
                        "grant_type": "client_credentials",
                        "client_id": self.client_id,
                        "client_secret": self.client_secret,
                        "scope": self.scope,
                    },
                )
            except httpx.TransportError as e:
                logger.warning("platform_token_transport_error", error_type=type(e).__name__)
                raise GradePassbackError("Could not reach the platform token endpoint") from e

            if response.status_code != 200:
                logger.warning("platform_token_rejected", status_code=response.status_code)
                raise GradePassbackError(f"Platform authentication failed (status {response.status_code})")

            try:
                body = response.json()
            except ValueError as e:
                raise GradePassbackError("Platform returned an unreadable token response") from e

            access_token = body.get("access_token") if isinstance(body, dict) else None
            if not access_token:
                raise GradePassbackError("Platform did not issue an access token")

            expires_in = body.get("expires_in") or 3600
            try:
                lifetime = float(expires_in)
            except (TypeError, ValueError):
                lifetime = 3600.0
            self._access_token = access_token
            self._expires_at = time.monotonic() + max(lifetime - TOKEN_EXPIRY_MARGIN_SECONDS, 0.0)
            logger.debug("platform_token_issued", expires_in=lifetime)
            return access_token

    def invalidate(self) -> None:
        self._access_token = None
        self._expires_at = 0.0


class _TokenLock:
    def __init__(self):
        self.lock = asyncio.Lock()
        self.holders = 0


def scores_url(grade_target_ref: str) -> str:
    """Line item URL -> its /scores endpoint, keeping any query string."""
    url = httpx.URL(grade_target_ref)
    return str(url.copy_with(path=url.path.rstrip("/") + "/scores"))


class PassbackManager:
    def __init__(
        self,
        client: httpx.AsyncClient,
        token_provider: TokenProvider,
        session_factory: Callable[[], Session] = get_session,
    ):
        self.client = client
        self.token_provider = token_provider
        self.session_factory = session_factory
        self._locks: Dict[str, _TokenLock] = {}

    @asynccontextmanager
    async def _token_guard(self, submission_token: str) -> AsyncIterator[None]:
        entry = self._locks.get(submission_token)
        if entry is None:
            entry = self._locks[submission_token] = _TokenLock()
        entry.holders += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.holders -= 1
            if entry.holders == 0:
                self._locks.pop(submission_token, None)

    def build_score_payload(self, record: GradePassbackRecord) -> dict:
        timestamp = record.published_at.isoformat()
        return {
            "userId": record.user_id,
            "scoreGiven": record.score,
            "scoreMaximum": record.max_score,
            "timestamp": timestamp,
            "activityProgress": "Completed",
            "gradingProgress": "FullyGraded",
            "comment": f"Auto-graded at {timestamp}",
        }

    async def publish(self, record: GradePassbackRecord) -> bool:
        """
        Write one score to the platform.

        The submission token is claimed in the ledger before the write, so a
        score reaches the platform at most once even when confirming the claim
        fails afterwards. Returns True when the score was written, False when
        the token was already claimed. Raises GradePassbackError when the
        platform cannot be authenticated against or rejects the score.
        """
        token = record.submission_token
        async with self._token_guard(token):
            try:
                claimed = await self._ledger(PassbackRepository.reserve, record)
            except SQLAlchemyError as e:
                logger.error("passback_claim_failed", submission_token=token, error_type=type(e).__name__)
                raise GradePassbackError("Could not record the grade before sending it") from e
            if not claimed:
                logger.info("passback_duplicate", submission_token=token)
                return False

            try:
                access_token = await self.token_provider.get_token()
                await self._write_score(record, access_token)
            except Exception:
                await self._release(token)
                raise

            try:
                await self._ledger(PassbackRepository.mark_published, token)
            except SQLAlchemyError as e:
                # The platform has the score; the pending claim still blocks a rewrite.
                logger.warning("passback_confirm_failed", submission_token=token, error_type=type(e).__name__)

            logger.info(
                "passback_published",
                submission_token=token,
                user_id=record.user_id,
                score=record.score,
                max_score=record.max_score,
            )
            return True

    async def _ledger(self, operation: Callable[..., T], *args) -> T:
        """Run one repository call on a worker thread with its own session."""
        return await asyncio.to_thread(self._run_ledger, operation, *args)

    def _run_ledger(self, operation: Callable[..., T], *args) -> T:
        session = self.session_factory()
        try:
            return operation(PassbackRepository(session), *args)
        finally:
            session.close()

    async def _release(self, submission_token: str) -> None:
        try:
            await self._ledger(PassbackRepository.release, submission_token)
        except SQLAlchemyError as e:
            logger.warning("passback_release_failed", submission_token=submission_token, error_type=type(e).__name__)

    async def _write_score(self, record: GradePassbackRecord, access_token: str) -> None:
        try:
            response = await self.client.post(
                scores_url(record.grade_target_ref),
                json=self.build_score_payload(record),
                headers={
                    "Content-Type": SCORE_CONTENT_TYPE,
                    "Authorization": f"Bearer {access_token}",
                },
            )
        except httpx.TransportError as e:
            logger.warning(
                "passback_transport_error",
                submission_token=record.submission_token,
                error_type=type(e).__name__,
            )
            raise GradePassbackError("Could not reach the platform gradebook") from e
        except httpx.InvalidURL as e:
            raise GradePassbackError("Line item reference is not a valid URL") from e

        if response.status_code in (401, 403):
            self.token_provider.invalidate()
            logger.warning(
                "passback_unauthorized",
                submission_token=record.submission_token,
                status_code=response.status_code,
            )
            raise GradePassbackError(f"Platform refused the grade credentials (status {response.status_code})")

        if response.status_code < 200 or response.status_code >= 300:
            logger.warning(
                "passback_rejected",
                submission_token=record.submission_token,
                status_code=response.status_code,
            )
            raise GradePassbackError(f"Platform rejected the grade (status {response.status_code})")
