from typing import Iterator

import httpx
from fastapi import Request
from sqlalchemy.orm import Session

from autograder.db import get_session
from autograder.managers import (
    ClientCredentialsTokenProvider,
    LaunchContextResolver,
    PassbackManager,
    PollingManager,
    ScoringManager,
    SubmissionManager,
)
from autograder.orchestrator import ExecutionOrchestrator


def build_orchestrator(client: httpx.AsyncClient) -> ExecutionOrchestrator:
    return ExecutionOrchestrator(
        resolver=LaunchContextResolver(),
        submission_manager=SubmissionManager(client),
        polling_manager=PollingManager(client),
        scoring_manager=ScoringManager(),
        passback_manager=PassbackManager(
            client,
            token_provider=ClientCredentialsTokenProvider(client),
            session_factory=get_session,
        ),
    )


def get_db() -> Iterator[Session]:
    session = get_session()
    try:
        yield session
    finally:
        session.close()


def get_orchestrator(request: Request) -> ExecutionOrchestrator:
    return request.app.state.orchestrator


def get_resolver() -> LaunchContextResolver:
    return LaunchContextResolver()
