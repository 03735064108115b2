from typing import List, Optional

import httpx
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from autograder.managers import (
    ClientCredentialsTokenProvider,
    LaunchContextResolver,
    PassbackManager,
    PollingManager,
    ScoringManager,
    SubmissionManager,
)
from autograder.models.database import Base
from autograder.orchestrator import ExecutionOrchestrator

ENGINE_URL = "http://judge0.test"
TOKEN_URL = "http://platform.test/mod/lti/token.php"
LINEITEM = "http://platform.test/mod/lti/services.php/2/lineitems/7/lineitem?type_id=1"


def judge0_body(status_id: int, description: str = "", **fields) -> dict:
    body = {
        "status": {"id": status_id, "description": description},
        "stdout": None,
        "stderr": None,
        "compile_output": None,
        "exit_code": None,
        "time": None,
        "memory": None,
    }
    body.update(fields)
    return body


class FakeServices:
    """
    Stands in for the execution engine and the platform.

    Queued entries are consumed in order; the last one repeats. An entry is
    either (status_code, json_body) or an httpx exception class to raise.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.submit_responses: list = [(201, {"token": "tok-1"})]
        self.poll_responses: list = [(200, judge0_body(3, "Accepted", stdout="1\n", time="0.012", memory=3264))]
        self.token_responses: list = [(200, {"access_token": "platform-at", "expires_in": 3600})]
        self.score_responses: list = [(200, {})]

    @staticmethod
    def _next(queue: list):
        return queue.pop(0) if len(queue) > 1 else queue[0]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if request.url.host == "judge0.test":
            if request.method == "POST" and path == "/submissions":
                entry = self._next(self.submit_responses)
            else:
                entry = self._next(self.poll_responses)
        elif path.endswith("/token.php"):
            entry = self._next(self.token_responses)
        elif path.endswith("/scores"):
            entry = self._next(self.score_responses)
        else:
            return httpx.Response(404)

        if isinstance(entry, type) and issubclass(entry, Exception):
            raise entry("simulated failure", request=request)
        status_code, body = entry
        return httpx.Response(status_code, json=body)

    def calls(self, host: Optional[str] = None, path_suffix: str = "") -> List[httpx.Request]:
        return [
            r for r in self.requests
            if (host is None or r.url.host == host) and r.url.path.endswith(path_suffix)
        ]

    @property
    def engine_calls(self) -> List[httpx.Request]:
        return self.calls(host="judge0.test")

    @property
    def platform_calls(self) -> List[httpx.Request]:
        return self.calls(host="platform.test")


@pytest.fixture
def fake_services():
    return FakeServices()


@pytest.fixture
def http_client(fake_services):
    return httpx.AsyncClient(transport=httpx.MockTransport(fake_services.handler))


@pytest.fixture
def session_factory(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'passbacks.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield factory
    engine.dispose()


@pytest.fixture
def submission_manager(http_client):
    return SubmissionManager(http_client, base_url=ENGINE_URL, auth_token="", backoff_seconds=0)


@pytest.fixture
def polling_manager(http_client):
    return PollingManager(
        http_client,
        base_url=ENGINE_URL,
        auth_token="",
        interval_seconds=0.01,
        backoff_factor=1.0,
        max_interval_seconds=0.01,
        max_consecutive_failures=3,
    )


@pytest.fixture
def token_provider(http_client):
    return ClientCredentialsTokenProvider(
        http_client,
        token_url=TOKEN_URL,
        client_id="tool-client",
        client_secret="tool-secret",
    )


@pytest.fixture
def passback_manager(http_client, token_provider, session_factory):
    return PassbackManager(http_client, token_provider=token_provider, session_factory=session_factory)


@pytest.fixture
def orchestrator(submission_manager, polling_manager, passback_manager):
    return ExecutionOrchestrator(
        resolver=LaunchContextResolver(),
        submission_manager=submission_manager,
        polling_manager=polling_manager,
        scoring_manager=ScoringManager(),
        passback_manager=passback_manager,
        deadline_seconds=5,
    )


@pytest.fixture
def launch_params():
    return {"id_token": "eyJ.launch.token", "user": "2", "context": "course-7", "lineitem": LINEITEM}


@pytest.fixture
def execute_body():
    return {"code": "print(1)", "language": "python", "max_score": 100}
